"""
Shutdown deadline guard.

A one-shot timer armed for the duration of the shutdown sequence. It runs
on its own daemon thread so it still fires when the event loop is stuck
inside a shutdown step.
"""

import os
import threading
from typing import Callable, Optional

from dating_service.infrastructure.monitoring import flush_logging, get_logger

logger = get_logger(__name__)

FORCE_EXIT_CODE = 1


def force_exit(code: int = FORCE_EXIT_CODE) -> None:
    """
    Terminate the process immediately.

    Skips atexit handlers, finally blocks and pending cleanup. Log handlers
    are flushed first so the reason is not lost.

    Args:
        code: Process exit code
    """
    flush_logging()
    os._exit(code)


class ShutdownDeadline:
    """
    Context manager that force-exits if its block outlives the timeout.

    The guarded operation is not cancelled: when the timer fires the
    process is terminated from the timer thread.

    Example:
        >>> with ShutdownDeadline(10.0):
        ...     await server.shutdown()
        ...     await database.disconnect()

    Attributes:
        timeout: Seconds before the deadline fires
        fired: True once the deadline has expired
    """

    def __init__(
        self,
        timeout: float,
        on_expire: Optional[Callable[[], None]] = None,
    ):
        """
        Initialize deadline.

        Args:
            timeout: Seconds before forcing exit
            on_expire: Called on the timer thread when the deadline fires
                (default: force_exit)
        """
        self.timeout = timeout
        self.on_expire = on_expire or force_exit
        self.fired = False
        self._timer: Optional[threading.Timer] = None

    @property
    def armed(self) -> bool:
        """True while the timer is pending."""
        return self._timer is not None and self._timer.is_alive()

    def arm(self) -> None:
        """Start the timer. Re-arming an armed deadline is a no-op."""
        if self.armed:
            return

        self._timer = threading.Timer(self.timeout, self._expire)
        self._timer.daemon = True
        self._timer.name = "ShutdownDeadline"
        self._timer.start()

    def disarm(self) -> None:
        """Cancel the timer if it has not fired yet."""
        if self._timer:
            self._timer.cancel()
            self._timer = None

    def _expire(self) -> None:
        self.fired = True
        logger.critical(f"timeout {self.timeout:g}s has been elapsed, force exit")
        self.on_expire()

    def __enter__(self) -> "ShutdownDeadline":
        self.arm()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.disarm()
        return False
