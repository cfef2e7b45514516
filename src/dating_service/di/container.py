"""
Dependency Injection container for the Dating Service.

Manages creation of the infrastructure the lifecycle controller owns.
"""

from typing import Optional

from fastapi import FastAPI

from dating_service.config.settings import Settings
from dating_service.infrastructure.http import HttpServer
from dating_service.infrastructure.persistence import Database
from dating_service.infrastructure.shutdown import ShutdownManager


class Container:
    """
    Dependency Injection container.

    Creates and manages all application dependencies.
    Implements singleton pattern for shared resources.
    """

    def __init__(self, settings: Settings):
        """
        Initialize container with settings.

        Args:
            settings: Application settings
        """
        self.settings = settings

        self._database: Optional[Database] = None
        self._shutdown_manager: Optional[ShutdownManager] = None

    @property
    def database(self) -> Database:
        """
        Get Database singleton (not yet connected).

        Returns:
            Database instance
        """
        if self._database is None:
            self._database = Database.from_settings(self.settings)
        return self._database

    @property
    def shutdown_manager(self) -> ShutdownManager:
        """
        Get ShutdownManager singleton.

        Returns:
            ShutdownManager instance
        """
        if self._shutdown_manager is None:
            self._shutdown_manager = ShutdownManager(
                shutdown_timeout=self.settings.SHUTDOWN_TIMEOUT,
                force_exit_on_second_signal=self.settings.FORCE_EXIT_ON_SECOND_SIGNAL,
            )
        return self._shutdown_manager

    def create_http_server(self, app: FastAPI) -> HttpServer:
        """
        Build the HTTP server for an application.

        Args:
            app: FastAPI application to serve

        Returns:
            HttpServer bound to API_HOST:API_PORT
        """
        return HttpServer(
            app,
            host=self.settings.API_HOST,
            port=self.settings.API_PORT,
            log_level=self.settings.uvicorn_log_level,
        )
