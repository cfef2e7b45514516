"""
Monitoring infrastructure: logging setup.
"""

from dating_service.infrastructure.monitoring.logger import (
    JSONFormatter,
    flush_logging,
    get_logger,
    setup_logging,
)

__all__ = [
    "JSONFormatter",
    "setup_logging",
    "get_logger",
    "flush_logging",
]
