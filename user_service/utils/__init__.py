"""
Utilities package for the user seed service.

Exports shared helpers for logging and profiling. Keep this package free of
domain-specific logic.
"""

from user_service.utils.logging import configure_logging, get_logger
from user_service.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
