"""Storage layer for the worktime service."""

from .repository import (
    DatabaseConnectionError,
    DatabaseError,
    DuplicateKeyError,
    WorktimeDatabase,
)

__all__ = [
    "DatabaseConnectionError",
    "DatabaseError",
    "DuplicateKeyError",
    "WorktimeDatabase",
]
