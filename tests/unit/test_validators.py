"""
Unit tests for input validators
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from moneyledger.exceptions import CheckViolation, NullConstraintViolation
from moneyledger.models import EntryType
from moneyledger.services.validators import (
    PASSWORD_MAX_BYTES,
    require,
    validate_amount,
    validate_datetime,
    validate_entry_type,
    validate_name,
    validate_password,
    validate_rate,
)


@pytest.mark.unit
class TestNameValidation:
    """Test name validation"""

    def test_valid_name_is_stripped(self):
        assert validate_name("  Cash  ") == "Cash"

    def test_missing_name(self):
        with pytest.raises(NullConstraintViolation) as exc_info:
            validate_name(None)
        assert exc_info.value.field == "name"

    @pytest.mark.parametrize("value", ["", "   ", "x" * 1024, 42])
    def test_invalid_names(self, value):
        with pytest.raises(CheckViolation):
            validate_name(value)

    def test_field_name_reported(self):
        with pytest.raises(CheckViolation) as exc_info:
            validate_name("", "username")
        assert exc_info.value.field == "username"


@pytest.mark.unit
class TestNumberValidation:
    """Test rate and amount validation"""

    @pytest.mark.parametrize("value,expected", [
        (1, 1.0),
        (0.5, 0.5),
        ("1,250.75", 1250.75),
        (Decimal("2.5"), 2.5),
    ])
    def test_valid_rates(self, value, expected):
        assert validate_rate(value) == expected

    @pytest.mark.parametrize("value", [0, -1, float("inf"), float("nan"), "abc", True])
    def test_invalid_rates(self, value):
        with pytest.raises(CheckViolation):
            validate_rate(value)

    def test_missing_rate(self):
        with pytest.raises(NullConstraintViolation):
            validate_rate(None, "conversion_rate")

    def test_entry_amount_must_be_positive(self):
        with pytest.raises(CheckViolation):
            validate_amount(0)
        with pytest.raises(CheckViolation):
            validate_amount(-5)

    def test_balance_may_be_zero_or_negative(self):
        assert validate_amount(0, positive=False) == 0.0
        assert validate_amount(-12.5, positive=False) == -12.5

    def test_balance_must_be_finite(self):
        with pytest.raises(CheckViolation):
            validate_amount(float("-inf"), positive=False)


@pytest.mark.unit
class TestEntryFieldValidation:
    """Test entry type and date validation"""

    def test_entry_type_from_string(self):
        assert validate_entry_type("lend") is EntryType.LEND
        assert validate_entry_type(EntryType.CONVERT) is EntryType.CONVERT

    def test_unknown_entry_type(self):
        with pytest.raises(CheckViolation, match="spend, income, lend, borrow, convert"):
            validate_entry_type("gift")

    def test_missing_entry_type(self):
        with pytest.raises(NullConstraintViolation):
            validate_entry_type(None)

    def test_date_is_promoted_to_midnight(self):
        assert validate_datetime(date(2024, 1, 25)) == datetime(2024, 1, 25, 0, 0)

    def test_iso_string(self):
        assert validate_datetime("2024-01-25T09:30:00") == datetime(2024, 1, 25, 9, 30)

    @pytest.mark.parametrize("value", ["yesterday", 20240125])
    def test_invalid_dates(self, value):
        with pytest.raises(CheckViolation):
            validate_datetime(value)


@pytest.mark.unit
class TestPasswordValidation:
    """Test password validation"""

    def test_valid_password(self):
        assert validate_password("correct horse") == "correct horse"

    def test_empty_password(self):
        with pytest.raises(CheckViolation):
            validate_password("")

    def test_password_over_bcrypt_limit(self):
        with pytest.raises(CheckViolation) as exc_info:
            validate_password("x" * (PASSWORD_MAX_BYTES + 1))
        assert exc_info.value.value is None

    def test_multibyte_password_counted_in_bytes(self):
        with pytest.raises(CheckViolation):
            validate_password("é" * 40)


@pytest.mark.unit
def test_require_passes_falsy_values_through():
    assert require(0, "amount") == 0
    assert require("", "description") == ""
