"""
Operations package for the user seed service.

Re-exports the result contracts and the two operations so callers can import
from `user_service.operations` directly.
"""

from user_service.operations.abstract import Operation, ResetResult, SeedResult
from user_service.operations.flag_resetter import FlagResetter
from user_service.operations.seeder import Seeder, validate_total

__all__ = [
    # Contracts
    "Operation",
    "ResetResult",
    "SeedResult",
    # Operations
    "FlagResetter",
    "Seeder",
    "validate_total",
]
