"""
HTTP server lifecycle on top of uvicorn.

listen() runs the accept loop until shutdown() asks it to stop. Signal
handling is left to ShutdownManager, so uvicorn's own capture is disabled.
"""

import asyncio
import contextlib
from typing import Generator, Optional

import uvicorn
from fastapi import FastAPI

from dating_service.domain.exceptions import ListenError, ServerShutdownError
from dating_service.infrastructure.monitoring import get_logger

logger = get_logger(__name__)


class _ManagedServer(uvicorn.Server):
    """uvicorn.Server that leaves OS signals alone."""

    @contextlib.contextmanager
    def capture_signals(self) -> Generator[None, None, None]:
        yield


class HttpServer:
    """
    Graceful-stop capable HTTP server.

    Attributes:
        host: Bind host
        port: Bind port
        config: Underlying uvicorn configuration
    """

    def __init__(
        self,
        app: FastAPI,
        host: str = "0.0.0.0",
        port: int = 5004,
        log_level: str = "info",
        graceful_timeout: Optional[float] = None,
    ):
        """
        Initialize HTTP server.

        Args:
            app: ASGI application to serve
            host: Bind host
            port: Bind port
            log_level: uvicorn log level
            graceful_timeout: Seconds uvicorn waits for open connections on
                stop (None waits until they finish)
        """
        self.host = host
        self.port = port
        self.config = uvicorn.Config(
            app,
            host=host,
            port=port,
            log_level=log_level,
            timeout_graceful_shutdown=graceful_timeout,
        )
        self._server = _ManagedServer(self.config)
        self._listening = False
        self._stop_requested = False
        self._stopped = asyncio.Event()
        self._error: Optional[BaseException] = None

    @property
    def address(self) -> str:
        """Bind address (host:port)."""
        return f"{self.host}:{self.port}"

    @property
    def started(self) -> bool:
        """True once the socket is bound and accepting."""
        return self._server.started

    async def listen(self) -> None:
        """
        Serve requests until shutdown() is called.

        Raises:
            ListenError: If the socket cannot be bound, the app fails to
                start, or the server stops without a shutdown request
        """
        self._listening = True
        logger.info(f"Listening on {self.address}")

        try:
            await self._server.serve()
        except SystemExit as e:
            # uvicorn exits on bind errors instead of raising
            self._error = e
            raise ListenError(
                self.address, "could not bind (address in use or not permitted)"
            ) from e
        except Exception as e:
            self._error = e
            raise ListenError(self.address, str(e) or type(e).__name__) from e
        finally:
            self._stopped.set()

        if not self._stop_requested:
            if not self._server.started:
                raise ListenError(self.address, "server failed to start")
            raise ListenError(self.address, "server stopped unexpectedly")

    async def shutdown(self) -> None:
        """
        Stop accepting connections and wait for in-flight requests.

        Blocks until the listener has fully stopped. No-op if listen() was
        never called.

        Raises:
            ServerShutdownError: If the listener failed while stopping
        """
        if not self._listening:
            return

        self._stop_requested = True
        self._server.should_exit = True

        await self._stopped.wait()

        if self._error is not None:
            raise ServerShutdownError(
                str(self._error) or type(self._error).__name__
            ) from self._error
