"""
User seed service - bulk seeding and problems-flag reset over PostgreSQL.

The package provides two operations against a `users` table:

- Seeding a large number of synthetic users in batches, written concurrently
  over a bounded connection pool
- Resetting the `has_problems` flag atomically while reporting how many users
  had it set

Both are reachable from the CLI (`user-service`) and from the HTTP API
(`POST /user/seed`, `POST /user/reset-problems`).
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from user_service.config import Settings, get_settings
from user_service.errors import (
    BatchWriteError,
    SeedCancelledError,
    StoreConnectionError,
    StoreError,
    TransactionConflictError,
    UserServiceError,
    ValidationError,
)
from user_service.operations import FlagResetter, ResetResult, Seeder, SeedResult
from user_service.orchestrator import reset_problems, seed_users
from user_service.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Operations
    "FlagResetter",
    "Seeder",
    "ResetResult",
    "SeedResult",
    "reset_problems",
    "seed_users",
    # Errors
    "UserServiceError",
    "ValidationError",
    "StoreError",
    "StoreConnectionError",
    "TransactionConflictError",
    "BatchWriteError",
    "SeedCancelledError",
    # Logging
    "configure_logging",
    "get_logger",
]
