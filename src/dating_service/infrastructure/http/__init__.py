"""
HTTP server infrastructure.
"""

from dating_service.infrastructure.http.server import HttpServer

__all__ = ["HttpServer"]
