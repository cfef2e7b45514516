"""
Dating Service

Process bootstrap and graceful shutdown for the dating HTTP service.
"""

from dating_service.main import DatingServiceApp, main

__version__ = "0.1.0"
__all__ = ["DatingServiceApp", "main"]
