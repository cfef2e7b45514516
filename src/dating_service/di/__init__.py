"""
Dependency injection.
"""

from dating_service.di.container import Container

__all__ = ["Container"]
