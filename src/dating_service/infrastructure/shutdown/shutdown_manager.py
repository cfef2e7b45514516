"""
Graceful shutdown manager.

Handles:
- Signal registration (SIGINT, SIGTERM, SIGHUP)
- Shutdown state tracking
- Second-signal policy during shutdown
- Shutdown deadline creation
"""

import asyncio
import signal
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Tuple

from dating_service.infrastructure.monitoring import get_logger
from dating_service.infrastructure.shutdown.deadline import (
    ShutdownDeadline,
    force_exit,
)

logger = get_logger(__name__)

# SIGHUP does not exist on Windows
TERMINATION_SIGNALS: Tuple[signal.Signals, ...] = tuple(
    sig
    for sig in (
        signal.SIGINT,
        signal.SIGTERM,
        getattr(signal, "SIGHUP", None),
    )
    if sig is not None
)


class ShutdownState(Enum):
    """Shutdown state enum."""

    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    SHUTDOWN = "shutdown"


class ShutdownManager:
    """
    Manages graceful shutdown of the Dating Service.

    Coordinates shutdown sequence:
    1. Catch the first termination signal
    2. Set shutdown flag and wake the lifecycle controller
    3. Hand out the deadline that bounds the shutdown sequence
    4. Force exit on a repeated signal (if enabled)

    Attributes:
        state: Current shutdown state
        shutdown_timeout: Max seconds for the whole shutdown sequence
        shutdown_started_at: Timestamp when shutdown initiated
        shutdown_reason: Signal name (or "manual") that started shutdown
    """

    def __init__(
        self,
        shutdown_timeout: float = 10.0,
        force_exit_on_second_signal: bool = True,
        force_exit: Callable[[], None] = force_exit,
        signals: Tuple[signal.Signals, ...] = TERMINATION_SIGNALS,
    ):
        """
        Initialize shutdown manager.

        Args:
            shutdown_timeout: Maximum seconds to wait for complete shutdown
            force_exit_on_second_signal: Exit immediately when a signal
                arrives while already shutting down
            force_exit: Called to terminate the process (deadline expiry,
                repeated signal)
            signals: Signals treated as termination requests
        """
        self.shutdown_timeout = shutdown_timeout
        self.force_exit_on_second_signal = force_exit_on_second_signal
        self.force_exit = force_exit
        self.signals = signals

        self.state = ShutdownState.RUNNING
        self.shutdown_started_at: Optional[datetime] = None
        self.shutdown_reason: Optional[str] = None
        self._shutdown_event = asyncio.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._installed_signals: list = []
        self._original_handlers: dict = {}

    def is_shutting_down(self) -> bool:
        """
        Check if shutdown is in progress.

        Returns:
            True if shutting down, False otherwise
        """
        return self.state in (ShutdownState.SHUTTING_DOWN, ShutdownState.SHUTDOWN)

    def is_running(self) -> bool:
        """
        Check if service is running normally.

        Returns:
            True if running, False if shutting down
        """
        return self.state == ShutdownState.RUNNING

    def setup_signal_handlers(self) -> None:
        """
        Register termination signal handlers on the running event loop.

        Must be called from inside the loop (main thread). Falls back to
        signal.signal() where the loop does not support signal handlers.
        """
        self._loop = asyncio.get_running_loop()

        for sig in self.signals:
            try:
                self._loop.add_signal_handler(sig, self._handle_signal, sig)
            except NotImplementedError:
                # Windows event loops
                self._original_handlers[sig] = signal.signal(
                    sig, self._handle_signal_threadsafe
                )
            self._installed_signals.append(sig)

        names = ", ".join(signal.Signals(sig).name for sig in self.signals)
        logger.debug(f"Signal handlers registered: {names}")

    def restore_signal_handlers(self) -> None:
        """Remove the handlers installed by setup_signal_handlers()."""
        for sig in self._installed_signals:
            if sig in self._original_handlers:
                signal.signal(sig, self._original_handlers.pop(sig))
            elif self._loop is not None and not self._loop.is_closed():
                self._loop.remove_signal_handler(sig)

        self._installed_signals.clear()

    def _handle_signal_threadsafe(self, signum: int, frame) -> None:
        self._loop.call_soon_threadsafe(self._handle_signal, signum)

    def _handle_signal(self, signum: int) -> None:
        """
        Handle termination signal.

        Args:
            signum: Signal number
        """
        sig_name = signal.Signals(signum).name

        if self.initiate_shutdown(sig_name):
            return

        if self.force_exit_on_second_signal:
            logger.critical(
                f"Signal {sig_name} received during shutdown, force exit"
            )
            self.force_exit()
        else:
            logger.warning(
                f"Signal {sig_name} ignored, shutdown already in progress"
            )

    def initiate_shutdown(self, reason: str = "manual") -> bool:
        """
        Start shutdown and wake wait_for_signal().

        Args:
            reason: Reason for shutdown (signal name, manual, etc.)

        Returns:
            True if this call started shutdown, False if already started
        """
        if self.state != ShutdownState.RUNNING:
            return False

        self.state = ShutdownState.SHUTTING_DOWN
        self.shutdown_started_at = datetime.now(timezone.utc)
        self.shutdown_reason = reason
        self._shutdown_event.set()
        return True

    async def wait_for_signal(self) -> str:
        """
        Block until shutdown is initiated.

        Returns:
            Reason passed to initiate_shutdown (signal name)
        """
        await self._shutdown_event.wait()
        return self.shutdown_reason

    def deadline(self) -> ShutdownDeadline:
        """
        Create the deadline guarding the shutdown sequence.

        Returns:
            Unarmed ShutdownDeadline bound to shutdown_timeout
        """
        return ShutdownDeadline(self.shutdown_timeout, on_expire=self.force_exit)

    def mark_shutdown_complete(self) -> None:
        """
        Mark shutdown as complete.

        Called after all cleanup is done.
        """
        self.state = ShutdownState.SHUTDOWN

    def get_shutdown_info(self) -> dict:
        """
        Get shutdown status information.

        Returns:
            Dictionary with shutdown status details
        """
        return {
            "state": self.state.value,
            "is_shutting_down": self.is_shutting_down(),
            "shutdown_started_at": (
                self.shutdown_started_at.isoformat()
                if self.shutdown_started_at
                else None
            ),
            "shutdown_reason": self.shutdown_reason,
            "shutdown_timeout": self.shutdown_timeout,
        }
