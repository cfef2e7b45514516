"""
API route registrations.
"""

from dating_service.presentation.api.routes.health import router as health_router

__all__ = ["health_router"]
