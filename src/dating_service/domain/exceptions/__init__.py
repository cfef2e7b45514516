"""
Domain exceptions for the Dating Service.
"""

from dating_service.domain.exceptions.lifecycle_exceptions import (
    ConfigurationError,
    DatabaseCloseError,
    DatabaseConnectionError,
    DatingServiceError,
    ListenError,
    ServerShutdownError,
    ShutdownError,
    StartupError,
)

__all__ = [
    "DatingServiceError",
    "StartupError",
    "ConfigurationError",
    "DatabaseConnectionError",
    "ListenError",
    "ShutdownError",
    "ServerShutdownError",
    "DatabaseCloseError",
]
