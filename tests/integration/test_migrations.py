"""
Integration tests for the migration runner and the resulting schema
"""

import sqlite3
from contextlib import closing

import pytest
from pydantic import ValidationError

from moneyledger.container import Container
from moneyledger.migrations import migrate as runner
from moneyledger.migrations.migrate import (
    get_available_migrations,
    main,
    migrate_down,
    migrate_up,
    migration_status,
)

EXPECTED_TABLES = {"users", "currencies", "categories", "sources", "entries", "migrations"}


def tables(db_path):
    with closing(sqlite3.connect(db_path)) as conn:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
    return {row[0] for row in rows if not row[0].startswith("sqlite_")}


def columns(db_path, table):
    with closing(sqlite3.connect(db_path)) as conn:
        return [row[1] for row in conn.execute(f"PRAGMA table_info({table})")]


def indices(db_path):
    with closing(sqlite3.connect(db_path)) as conn:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'index'").fetchall()
    return {row[0] for row in rows}


@pytest.mark.integration
class TestMigrationRunner:
    """Test applying and rolling back migrations"""

    def test_available_migrations_are_ordered(self):
        assert get_available_migrations() == ["001_create_tables", "002_add_indices"]

    def test_migrate_up_creates_schema(self, tmp_path):
        db_path = str(tmp_path / "ledger.db")

        applied = migrate_up(db_path)

        assert applied == ["001_create_tables", "002_add_indices"]
        assert tables(db_path) == EXPECTED_TABLES
        assert "target" in columns(db_path, "entries")
        assert {"idx_entries_target", "idx_entries_date", "idx_users_enabled"} <= indices(db_path)

    def test_migrate_up_is_idempotent(self, db_path):
        assert migrate_up(db_path) == []
        assert migration_status(db_path) == [
            ("001_create_tables", True),
            ("002_add_indices", True),
        ]

    def test_migrate_down_last(self, db_path):
        assert migrate_down(db_path) == "002_add_indices"

        assert "target" not in columns(db_path, "entries")
        assert "idx_entries_date" not in indices(db_path)
        assert migration_status(db_path)[1] == ("002_add_indices", False)

        assert migrate_down(db_path) == "001_create_tables"
        assert tables(db_path) == {"migrations"}
        assert migrate_down(db_path) is None

    def test_migrate_down_unknown(self, db_path):
        with pytest.raises(ValueError):
            migrate_down(db_path, "999_missing")

    def test_round_trip(self, db_path):
        migrate_down(db_path)
        migrate_down(db_path)

        assert migrate_up(db_path) == ["001_create_tables", "002_add_indices"]
        assert tables(db_path) == EXPECTED_TABLES

    def test_failed_migration_rolls_back(self, db_path, monkeypatch):
        migrate_down(db_path)
        real_loader = runner.load_migration_module

        def broken_loader(name):
            module = real_loader(name)

            def upgrade(conn):
                conn.execute("ALTER TABLE entries ADD COLUMN target TEXT NULL")
                raise RuntimeError("boom")

            module.upgrade = upgrade
            return module

        monkeypatch.setattr(runner, "load_migration_module", broken_loader)

        with pytest.raises(RuntimeError):
            migrate_up(db_path)

        assert "target" not in columns(db_path, "entries")
        assert migration_status(db_path)[1] == ("002_add_indices", False)


@pytest.mark.integration
class TestSchemaConstraints:
    """Test constraints enforced by the schema itself"""

    def test_entry_type_check(self, db_path):
        with closing(sqlite3.connect(db_path)) as conn:
            conn.execute("PRAGMA foreign_keys = ON")
            conn.execute("INSERT INTO users (username, password) VALUES ('alice', 'x')")
            conn.execute("INSERT INTO currencies (user_id, name, rate_to_fixed) VALUES (1, 'USD', 1)")
            conn.execute("INSERT INTO categories (user_id, name) VALUES (1, 'Salary')")
            conn.execute("INSERT INTO sources (user_id, name, currency_id, amount) VALUES (1, 'Cash', 1, 0)")

            with pytest.raises(sqlite3.IntegrityError, match="CHECK"):
                conn.execute(
                    "INSERT INTO entries (user_id, description, category_id, amount, date, "
                    "currency_id, entry_type, source_id, conversion_rate_to_fixed) "
                    "VALUES (1, 'x', 1, 1, '2024-01-01', 1, 'gift', 1, 1)"
                )

    def test_fixed_currency_set_null_on_delete(self, db_path):
        with closing(sqlite3.connect(db_path)) as conn:
            conn.execute("PRAGMA foreign_keys = ON")
            conn.execute("INSERT INTO users (username, password) VALUES ('alice', 'x')")
            conn.execute("INSERT INTO currencies (user_id, name, rate_to_fixed) VALUES (1, 'USD', 1)")
            conn.execute("UPDATE users SET fixed_currency_id = 1 WHERE id = 1")

            conn.execute("DELETE FROM currencies WHERE id = 1")

            row = conn.execute("SELECT fixed_currency_id, enabled FROM users").fetchone()
            assert row == (None, 0)


@pytest.mark.integration
class TestMigrationCli:
    """Test the moneyledger-migrate entry point"""

    def test_usage(self, capsys):
        assert main([]) == 1
        assert "Usage" in capsys.readouterr().out

    def test_up_and_status(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("DB_PATH", str(tmp_path / "cli.db"))

        assert main(["up"]) == 0
        assert "Applied 001_create_tables" in capsys.readouterr().out

        assert main(["status"]) == 0
        output = capsys.readouterr().out
        assert "002_add_indices" in output
        assert "0 pending" in output

    def test_down(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("DB_PATH", str(tmp_path / "cli.db"))
        main(["up"])
        capsys.readouterr()

        assert main(["down", "002_add_indices"]) == 0
        assert "Rolled back 002_add_indices" in capsys.readouterr().out

    def test_unknown_command(self, capsys):
        assert main(["sideways"]) == 1
        assert "Unknown command" in capsys.readouterr().out


@pytest.mark.integration
class TestContainer:
    """Test wiring from settings"""

    def test_configure_migrates_and_wires_services(self, test_settings):
        container = Container()
        container.configure(test_settings)
        try:
            users = container.get_user_service()
            user = users.register_user("alice", "correct horse", currency_name="USD")

            assert container.get_currency_service().list_currencies(user.id)[0].name == "USD"
            assert container.get_user_repository().find_by_username("alice").id == user.id
            assert users.bcrypt_rounds == 4
        finally:
            container.cleanup()

    def test_auto_migrate_disabled(self, test_settings):
        test_settings.database.auto_migrate = False
        container = Container()
        container.configure(test_settings)
        try:
            assert tables(test_settings.database.path) == set()
        finally:
            container.cleanup()

    def test_in_memory_database_rejected(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("DB_PATH", ":memory:")

        with pytest.raises(ValidationError):
            Container().configure()

        assert not (tmp_path / ":memory:").exists()
