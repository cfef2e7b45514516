"""
Dating Service - process entry point.

Bootstraps the service (configuration, database, HTTP listener), waits
for a termination signal and shuts everything down within a bounded time
budget. Every infrastructure failure is fatal: it is logged and turned
into a non-zero exit code for the external supervisor to act on.
"""

import asyncio
import sys
from typing import List, Optional

import yaml
from fastapi import FastAPI
from pydantic import ValidationError

from dating_service.config.settings import Settings, load_config
from dating_service.di import Container
from dating_service.domain.exceptions import (
    ConfigurationError,
    DatingServiceError,
    ListenError,
)
from dating_service.infrastructure.monitoring import get_logger, setup_logging
from dating_service.presentation.api.routes import health_router

logger = get_logger(__name__)

EXIT_OK = 0


class DatingServiceApp:
    """
    Dating Service lifecycle controller.

    Thin coordination layer that owns the database handle and the HTTP
    server for the lifetime of the process.

    Lifecycle:
        1. initialize() - open the database
        2. listen on a background task
        3. wait for SIGINT / SIGTERM / SIGHUP
        4. shutdown() - stop server, close database, under a deadline
    """

    def __init__(self, settings: Settings, container: Optional[Container] = None):
        """
        Initialize Dating Service application.

        Args:
            settings: Application settings
            container: Optional pre-built container (for testing)
        """
        self.settings = settings
        self.container = container or Container(settings)

        self.app = self._create_app()

        self.database = self.container.database
        self.shutdown_manager = self.container.shutdown_manager
        self.server = self.container.create_http_server(self.app)

        self._serve_task: Optional[asyncio.Task] = None

    def _create_app(self) -> FastAPI:
        """
        Create FastAPI application.

        Returns:
            Configured FastAPI application
        """
        app = FastAPI(
            title=self.settings.APP_NAME,
            version=self.settings.APP_VERSION,
        )
        app.state.container = self.container

        app.include_router(health_router)

        @app.get("/", tags=["root"])
        async def root():
            """Root endpoint."""
            return {
                "service": self.settings.APP_NAME,
                "status": "running",
                "version": self.settings.APP_VERSION,
            }

        return app

    async def initialize(self) -> None:
        """
        Open the database.

        Raises:
            DatabaseConnectionError: If the database cannot be reached
        """
        logger.info(f"Starting {self.settings.APP_NAME} (ENV={self.settings.ENV})")
        await self.database.connect()

    async def run(self) -> None:
        """
        Run the full lifecycle until shutdown completes.

        Raises:
            StartupError: If initialization fails (server never started)
            ListenError: If the listener fails before a signal arrives
            ShutdownError: If server stop or database close fails
        """
        await self.initialize()

        self.shutdown_manager.setup_signal_handlers()
        try:
            self._serve_task = asyncio.create_task(
                self.server.listen(), name="http-listen"
            )
            await self._wait_for_signal()
            await self.shutdown()
        finally:
            self.shutdown_manager.restore_signal_handlers()
            self._reap_serve_task()

    async def _wait_for_signal(self) -> None:
        """
        Block until a termination signal arrives or the listener dies.

        Raises:
            ListenError: If the listener task finishes first
        """
        signal_task = asyncio.create_task(
            self.shutdown_manager.wait_for_signal(), name="signal-wait"
        )

        done, _ = await asyncio.wait(
            {self._serve_task, signal_task},
            return_when=asyncio.FIRST_COMPLETED,
        )

        if self._serve_task in done:
            signal_task.cancel()
            error = self._serve_task.exception()
            if error is None:
                raise ListenError(self.server.address, "server stopped unexpectedly")
            raise error

        logger.debug(f"Received {signal_task.result()}")

    async def shutdown(self) -> None:
        """
        Shut down server then database under the shutdown deadline.

        If the deadline fires the process exits from the timer thread and
        the database is never closed.

        Raises:
            ServerShutdownError: If the server fails to stop
            DatabaseCloseError: If the database fails to close
        """
        logger.info("Shutdown signal received, shutting down server...")

        with self.shutdown_manager.deadline():
            await self.server.shutdown()
            logger.info("Server shutdown completed")

            await self.database.disconnect()
            logger.info("Database connection closed")

        self.shutdown_manager.mark_shutdown_complete()
        logger.info("Server exited gracefully")

    def _reap_serve_task(self) -> None:
        """Retrieve a failed listener's exception so asyncio does not warn."""
        task = self._serve_task
        if task is not None and task.done() and not task.cancelled():
            task.exception()

    def start(self) -> int:
        """
        Run the service to completion.

        Blocks until the service has shut down.

        Returns:
            Process exit code (0 on graceful shutdown)
        """
        try:
            asyncio.run(self.run())
        except DatingServiceError as e:
            logger.critical(e.message)
            return e.exit_code

        return EXIT_OK


def load_settings(argv: Optional[List[str]] = None) -> Settings:
    """
    Load settings, applying an optional port override from the command line.

    Args:
        argv: Command line arguments after the program name

    Returns:
        Settings instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    try:
        settings = load_config()
    except (ValidationError, ValueError, yaml.YAMLError, OSError) as e:
        raise ConfigurationError(str(e)) from e

    if argv:
        try:
            port = int(argv[0])
        except ValueError as e:
            raise ConfigurationError(f"Invalid port: {argv[0]}") from e
        if not 1 <= port <= 65535:
            raise ConfigurationError(f"Invalid port: {port}")
        settings = settings.model_copy(update={"API_PORT": port})

    return settings


def main():
    """
    Main entry point for the Dating Service.

    Usage:
        dating-service [port]
    """
    setup_logging()

    try:
        settings = load_settings(sys.argv[1:])
    except ConfigurationError as e:
        logger.critical(e.message)
        sys.exit(e.exit_code)

    setup_logging(level=settings.LOG_LEVEL, json_logs=settings.ENV == "production")

    app = DatingServiceApp(settings)

    try:
        exit_code = app.start()
    except KeyboardInterrupt:
        logger.warning("Interrupted during startup")
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
