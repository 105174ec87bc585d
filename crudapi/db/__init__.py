"""
Storage module.

This module provides the in-memory user store and the single-connection SQL
client used by the demo apps.
"""

from crudapi.db.memory_store import EmailInUseError, MemoryUserStore
from crudapi.db.sql_client import (
    ConstraintViolationError,
    DatabaseError,
    SQLClient,
    TaskRepository,
    UserRepository,
)

__all__ = [
    "EmailInUseError",
    "MemoryUserStore",
    "ConstraintViolationError",
    "DatabaseError",
    "SQLClient",
    "TaskRepository",
    "UserRepository",
]
