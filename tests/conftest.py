"""
Pytest configuration and fixtures for the ledger test suite
"""

from datetime import datetime

import pytest

from moneyledger.config.settings import Settings, DatabaseConfig, SecurityConfig, AppConfig
from moneyledger.migrations.migrate import migrate_up
from moneyledger.repositories.base import DatabaseConnection
from moneyledger.services import (
    CategoryService,
    CurrencyService,
    EntryService,
    SourceService,
    UserService,
)


@pytest.fixture
def test_settings(tmp_path):
    """Create test settings configuration"""
    return Settings(
        database=DatabaseConfig(
            path=str(tmp_path / "ledger.db"),
            connection_timeout=5.0
        ),
        security=SecurityConfig(
            bcrypt_rounds=4  # Faster for tests
        ),
        app=AppConfig(environment="testing", log_level="DEBUG")
    )


@pytest.fixture
def db_path(tmp_path):
    """Migrated temporary database file"""
    path = str(tmp_path / "ledger.db")
    migrate_up(path)
    return path


@pytest.fixture
def db(db_path):
    connection = DatabaseConnection(db_path, timeout=5.0)
    yield connection
    connection.close_all_connections()


@pytest.fixture
def user_service(db):
    return UserService(db, bcrypt_rounds=4)


@pytest.fixture
def currency_service(db):
    return CurrencyService(db)


@pytest.fixture
def category_service(db):
    return CategoryService(db)


@pytest.fixture
def source_service(db):
    return SourceService(db)


@pytest.fixture
def entry_service(db):
    return EntryService(db)


@pytest.fixture
def ledger(user_service, currency_service, category_service, source_service):
    """A user with a USD currency, a Salary category and a Cash source"""
    user = user_service.create_user("alice", "correct horse")
    usd = currency_service.create_currency(user.id, "USD", 1.0)
    user_service.set_fixed_currency(user.id, usd.id)
    salary = category_service.create_category(user.id, "Salary")
    cash = source_service.create_source(user.id, "Cash", usd.id)
    return {
        "user": user,
        "usd": usd,
        "salary": salary,
        "cash": cash,
    }


@pytest.fixture
def entry_fields(ledger):
    """Field values for a valid income entry on the Cash source"""

    def build(**overrides):
        fields = {
            "description": "Salary",
            "category_id": ledger["salary"].id,
            "amount": 100.0,
            "date": datetime(2024, 1, 25, 9, 0),
            "currency_id": ledger["usd"].id,
            "entry_type": "income",
            "source_id": ledger["cash"].id,
        }
        fields.update(overrides)
        return fields

    return build


# Test configuration
def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
