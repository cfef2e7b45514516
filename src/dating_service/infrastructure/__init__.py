"""
Infrastructure layer.

Provides concrete implementations backed by external frameworks and
libraries: uvicorn for HTTP, SQLAlchemy for the database, OS signals for
shutdown.
"""

from dating_service.infrastructure.http import HttpServer
from dating_service.infrastructure.persistence import Database
from dating_service.infrastructure.shutdown import (
    ShutdownDeadline,
    ShutdownManager,
)

__all__ = [
    "HttpServer",
    "Database",
    "ShutdownDeadline",
    "ShutdownManager",
]
