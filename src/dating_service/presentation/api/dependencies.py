"""
FastAPI dependencies for the Dating Service API.
"""

from fastapi import Request

from dating_service.di import Container


def get_container(request: Request) -> Container:
    """
    Get DI container attached to the application.

    Returns:
        Container instance

    Raises:
        RuntimeError: If container not attached to app.state
    """
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("Container not initialized")
    return container
