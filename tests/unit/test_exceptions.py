"""
Unit tests for the ledger error taxonomy
"""

import sqlite3

import pytest

from moneyledger.exceptions import (
    ArchivedReference,
    CheckViolation,
    ForeignKeyViolation,
    LedgerError,
    NotFound,
    NullConstraintViolation,
    RestrictViolation,
    UniqueViolation,
    from_integrity_error,
)


@pytest.mark.unit
class TestLedgerError:
    """Test error hierarchy and serialization"""

    def test_to_dict(self):
        error = UniqueViolation("Duplicate name", "name", "USD")

        assert error.to_dict() == {
            "success": False,
            "type": "UniqueViolation",
            "message": "Duplicate name",
            "field": "name",
            "value": "USD",
        }

    def test_not_found_is_foreign_key_violation(self):
        assert issubclass(NotFound, ForeignKeyViolation)
        assert issubclass(ArchivedReference, ForeignKeyViolation)

    @pytest.mark.parametrize("error_class", [
        UniqueViolation,
        ForeignKeyViolation,
        RestrictViolation,
        NullConstraintViolation,
        CheckViolation,
    ])
    def test_all_errors_are_ledger_errors(self, error_class):
        assert issubclass(error_class, LedgerError)


@pytest.mark.unit
class TestIntegrityErrorTranslation:
    """Test translation of sqlite3 integrity errors"""

    @pytest.mark.parametrize("message,expected", [
        ("UNIQUE constraint failed: currencies.user_id, currencies.name", UniqueViolation),
        ("NOT NULL constraint failed: entries.description", NullConstraintViolation),
        ("CHECK constraint failed: entry_type IN ('spend')", CheckViolation),
        ("FOREIGN KEY constraint failed", ForeignKeyViolation),
    ])
    def test_message_mapping(self, message, expected):
        error = from_integrity_error(sqlite3.IntegrityError(message), "entries")
        assert type(error) is expected

    def test_foreign_key_failure_while_deleting_is_restrict(self):
        error = from_integrity_error(
            sqlite3.IntegrityError("FOREIGN KEY constraint failed"), "currencies", deleting=True
        )
        assert isinstance(error, RestrictViolation)

    def test_failed_column_reported(self):
        error = from_integrity_error(
            sqlite3.IntegrityError("NOT NULL constraint failed: entries.description"), "entries"
        )
        assert error.field == "entries.description"

    def test_real_sqlite_error(self):
        """Test translation of an error raised by sqlite itself"""
        conn = sqlite3.connect(":memory:")
        conn.execute("CREATE TABLE t (name TEXT UNIQUE)")
        conn.execute("INSERT INTO t VALUES ('a')")

        with pytest.raises(sqlite3.IntegrityError) as exc_info:
            conn.execute("INSERT INTO t VALUES ('a')")
        conn.close()

        assert isinstance(from_integrity_error(exc_info.value, "t"), UniqueViolation)

    def test_unknown_message_falls_back_to_base(self):
        error = from_integrity_error(sqlite3.IntegrityError("something else"), "users")
        assert type(error) is LedgerError
