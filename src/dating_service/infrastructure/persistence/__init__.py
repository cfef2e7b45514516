"""
Persistence infrastructure.
"""

from dating_service.infrastructure.persistence.database import Database

__all__ = ["Database"]
