"""
Integrity error taxonomy for the ledger data store.

Every violation is surfaced directly to the caller; these are integrity
errors, not transient faults, so nothing here is retried.
"""

import re
import sqlite3
from typing import Any, Dict, Optional


class LedgerError(Exception):
    """Base exception for ledger integrity errors"""

    def __init__(self, message: str, field: str = None, value: Any = None):
        super().__init__(message)
        self.field = field
        self.value = value
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to a response dictionary."""
        return {
            "success": False,
            "type": type(self).__name__,
            "message": self.message,
            "field": self.field,
            "value": self.value,
        }


class UniqueViolation(LedgerError):
    """Duplicate username, or duplicate (user, name) pair."""


class ForeignKeyViolation(LedgerError):
    """Reference to a nonexistent or foreign row."""


class NotFound(ForeignKeyViolation):
    """Row does not exist or is owned by another user."""


class ArchivedReference(ForeignKeyViolation):
    """Reference to an archived row where an active one is required."""


class RestrictViolation(LedgerError):
    """Attempted delete of a row that is still referenced."""


class NullConstraintViolation(LedgerError):
    """Required field is missing."""


class CheckViolation(LedgerError):
    """Value outside its allowed domain (enum value, rate, amount)."""


_COLUMN_PATTERN = re.compile(r"constraint failed: (?P<columns>[\w., ]+)")


def _failed_column(message: str) -> Optional[str]:
    match = _COLUMN_PATTERN.search(message)
    if not match:
        return None
    return match.group("columns").strip()


def from_integrity_error(
    exc: sqlite3.IntegrityError, table: str, deleting: bool = False
) -> LedgerError:
    """
    Translate a sqlite3.IntegrityError into the ledger taxonomy.

    Args:
        exc: Error raised by sqlite3
        table: Table the statement targeted
        deleting: Whether the failing statement was a DELETE

    Returns:
        The matching LedgerError subclass instance
    """
    message = str(exc)
    column = _failed_column(message)

    if message.startswith("UNIQUE"):
        return UniqueViolation(f"Duplicate value in {table}: {column}", column)
    if message.startswith("NOT NULL"):
        return NullConstraintViolation(f"Missing required value: {column}", column)
    if message.startswith("CHECK"):
        return CheckViolation(f"Invalid value in {table}", column)
    if message.startswith("FOREIGN KEY"):
        if deleting:
            return RestrictViolation(f"Row in {table} is still referenced")
        return ForeignKeyViolation(f"Reference from {table} does not resolve")
    return LedgerError(f"Integrity error in {table}: {message}")
