"""
Unit tests for Pydantic models
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from moneyledger.models import (
    Category,
    Currency,
    Entry,
    EntryCreate,
    EntryType,
    Source,
    User,
)


@pytest.mark.unit
class TestUserModel:
    """Test User model validation and password handling"""

    def test_create_hashes_password(self):
        """Test that create stores a bcrypt hash, never the plain password"""
        user = User.create(username="alice", password="correct horse", rounds=4)

        assert user.password_hash != "correct horse"
        assert user.password_hash.startswith("$2")
        assert user.enabled is False
        assert user.fixed_currency_id is None

    def test_verify_password(self):
        user = User.create(username="alice", password="correct horse", rounds=4)

        assert user.verify_password("correct horse")
        assert not user.verify_password("wrong horse")

    def test_verify_password_with_malformed_hash(self):
        """Test that a stored value that is not a bcrypt hash never matches"""
        user = User(username="alice", password_hash="not-a-hash")

        assert user.verify_password("not-a-hash") is False

    def test_password_hash_excluded_from_dump(self):
        user = User.create(username="alice", password="correct horse", rounds=4)

        assert "password_hash" not in user.model_dump()
        assert "password_hash" not in user.to_public_dict()

    def test_username_whitespace_stripped(self):
        user = User(username="  alice  ", password_hash="x")
        assert user.username == "alice"

    def test_username_required(self):
        with pytest.raises(ValidationError):
            User(password_hash="x")


@pytest.mark.unit
class TestCatalogModels:
    """Test currency, category and source models"""

    def test_currency_valid(self):
        currency = Currency(user_id=1, name="EUR", rate_to_fixed=1.1)

        assert currency.name == "EUR"
        assert currency.archived is False

    @pytest.mark.parametrize("rate", [0, -1.5, float("inf"), float("nan")])
    def test_currency_rejects_bad_rate(self, rate):
        with pytest.raises(ValidationError):
            Currency(user_id=1, name="EUR", rate_to_fixed=rate)

    def test_name_length_limits(self):
        Category(user_id=1, name="x" * 1023)

        with pytest.raises(ValidationError):
            Category(user_id=1, name="x" * 1024)
        with pytest.raises(ValidationError):
            Category(user_id=1, name="   ")

    def test_source_defaults_to_zero_balance(self):
        source = Source(user_id=1, name="Cash", currency_id=1)
        assert source.amount == 0.0

    def test_from_row(self):
        row = {"id": 3, "user_id": 1, "name": "Food", "archived": 1}

        category = Category.from_row(row)

        assert category.id == 3
        assert category.archived is True
        assert Category.from_row(None) is None

    def test_source_allows_negative_balance(self):
        source = Source(user_id=1, name="Card", currency_id=1, amount=-20.5)
        assert source.amount == -20.5


@pytest.mark.unit
class TestEntryModel:
    """Test Entry model and EntryType"""

    def test_entry_type_values(self):
        assert EntryType.values() == ("spend", "income", "lend", "borrow", "convert")

    @pytest.mark.parametrize("entry_type,sign", [
        (EntryType.INCOME, 1),
        (EntryType.BORROW, 1),
        (EntryType.SPEND, -1),
        (EntryType.LEND, -1),
        (EntryType.CONVERT, -1),
    ])
    def test_entry_type_sign(self, entry_type, sign):
        assert entry_type.sign == sign

    def test_only_convert_is_transfer(self):
        assert [t for t in EntryType if t.is_transfer] == [EntryType.CONVERT]

    def test_entry_rejects_unknown_type(self):
        with pytest.raises(ValidationError):
            Entry(
                user_id=1,
                description="x",
                category_id=1,
                amount=1.0,
                date=datetime(2024, 1, 1),
                currency_id=1,
                entry_type="gift",
                source_id=1,
                conversion_rate_to_fixed=1.0,
            )

    def test_fixed_amount(self):
        entry = Entry(
            user_id=1,
            description="Dinner",
            category_id=1,
            amount=20.0,
            date=datetime(2024, 1, 1),
            currency_id=2,
            entry_type=EntryType.SPEND,
            source_id=1,
            conversion_rate_to_fixed=1.5,
        )
        assert entry.fixed_amount == pytest.approx(30.0)

    def test_entry_create_is_permissive(self):
        """Test that missing fields are left to the entry service to reject"""
        data = EntryCreate(description="Lunch")

        assert data.amount is None
        assert data.entry_type is None

    def test_entry_create_keeps_formatted_numbers(self):
        """Test that thousands separators reach the entry service untouched"""
        data = EntryCreate(amount="1,250.50", conversion_rate="1,000", conversion_rate_to_fixed=0.9)

        assert data.amount == "1,250.50"
        assert data.conversion_rate == "1,000"
        assert data.conversion_rate_to_fixed == 0.9

