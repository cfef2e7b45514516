"""
Graceful shutdown infrastructure.
"""

from dating_service.infrastructure.shutdown.deadline import (
    FORCE_EXIT_CODE,
    ShutdownDeadline,
    force_exit,
)
from dating_service.infrastructure.shutdown.shutdown_manager import (
    TERMINATION_SIGNALS,
    ShutdownManager,
    ShutdownState,
)

__all__ = [
    "FORCE_EXIT_CODE",
    "ShutdownDeadline",
    "force_exit",
    "TERMINATION_SIGNALS",
    "ShutdownManager",
    "ShutdownState",
]
