"""
Validation functions for ledger input

Each validator returns the normalized value or raises a ledger error naming
the offending field.
"""

import math
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, Union

from ..exceptions import CheckViolation, NullConstraintViolation
from ..models.base import NAME_MAX_LENGTH
from ..models.entry import EntryType

# bcrypt only considers the first 72 bytes of a password
PASSWORD_MAX_BYTES = 72


def require(value: Any, field: str) -> Any:
    """Reject a missing required value."""
    if value is None:
        raise NullConstraintViolation(f"{field} is required", field, value)
    return value


def validate_name(value: Any, field: str = "name") -> str:
    """
    Validate a username or per-user entity name

    Returns:
        The name with surrounding whitespace removed

    Raises:
        NullConstraintViolation: If the name is missing
        CheckViolation: If the name is blank, too long or not a string
    """
    require(value, field)
    if not isinstance(value, str):
        raise CheckViolation(f"{field} must be a string", field, value)

    name = value.strip()
    if not name:
        raise CheckViolation(f"{field} cannot be blank", field, value)
    if len(name) > NAME_MAX_LENGTH:
        raise CheckViolation(
            f"{field} must be at most {NAME_MAX_LENGTH} characters", field, value
        )
    return name


def _to_float(value: Any, field: str) -> float:
    require(value, field)
    if isinstance(value, bool):
        raise CheckViolation(f"Invalid {field} format", field, value)

    try:
        if isinstance(value, str):
            cleaned = value.replace(',', '').strip()
            number = float(Decimal(cleaned))
        else:
            number = float(value)
    except (ValueError, TypeError, InvalidOperation):
        raise CheckViolation(f"Invalid {field} format", field, value)

    if not math.isfinite(number):
        raise CheckViolation(f"{field} must be a finite number", field, value)
    return number


def validate_rate(value: Union[int, float, str, Decimal], field: str = "rate_to_fixed") -> float:
    """
    Validate a conversion rate

    Raises:
        NullConstraintViolation: If the rate is missing
        CheckViolation: If the rate is not a finite number greater than zero
    """
    rate = _to_float(value, field)
    if rate <= 0:
        raise CheckViolation(f"{field} must be greater than zero", field, value)
    return rate


def validate_amount(
    value: Union[int, float, str, Decimal],
    field: str = "amount",
    positive: bool = True,
) -> float:
    """
    Validate a monetary amount

    Args:
        value: Amount to validate
        field: Field name reported on failure
        positive: Require a value greater than zero (entry amounts); balances
            may be zero or negative

    Raises:
        NullConstraintViolation: If the amount is missing
        CheckViolation: If the amount is malformed, infinite, or not positive
    """
    amount = _to_float(value, field)
    if positive and amount <= 0:
        raise CheckViolation(f"{field} must be greater than zero", field, value)
    return amount


def validate_entry_type(value: Any) -> EntryType:
    """Map a value onto the closed set of entry types."""
    require(value, "entry_type")
    try:
        return EntryType(value)
    except ValueError:
        raise CheckViolation(
            f"entry_type must be one of: {', '.join(EntryType.values())}",
            "entry_type",
            value,
        )


def validate_datetime(value: Any, field: str = "date") -> datetime:
    """Accept a datetime, a date (midnight) or an ISO-8601 string."""
    require(value, field)
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            raise CheckViolation(f"Invalid {field} format", field, value)
    raise CheckViolation(f"Invalid {field} format", field, value)


def validate_password(value: Any) -> str:
    """Check a plain text password before hashing."""
    require(value, "password")
    if not isinstance(value, str) or not value:
        raise CheckViolation("password cannot be empty", "password")
    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise CheckViolation(
            f"password must be at most {PASSWORD_MAX_BYTES} bytes", "password"
        )
    return value
