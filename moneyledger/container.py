"""
Dependency Injection Container

Builds the ledger object graph (connection, repositories, services) from
settings, applying pending migrations first when configured to.
"""

from typing import Any, Dict, Optional

from .config.settings import Settings
from .migrations.migrate import migrate_up
from .repositories.base import DatabaseConnection
from .repositories.user_repository import UserRepository
from .repositories.currency_repository import (
    CategoryRepository,
    CurrencyRepository,
    SourceRepository,
)
from .repositories.entry_repository import EntryRepository
from .services.user_service import UserService
from .services.currency_service import CurrencyService
from .services.category_service import CategoryService
from .services.source_service import SourceService
from .services.entry_service import EntryService
from .utils.secure_logging import configure_logging, get_logger

logger = get_logger(__name__)


class Container:
    """Dependency injection container for the ledger services."""

    def __init__(self):
        self._singletons: Dict[str, Any] = {}
        self._settings: Optional[Settings] = None
        self._db_connection: Optional[DatabaseConnection] = None

    def configure(self, settings: Optional[Settings] = None) -> None:
        """Configure the container with settings."""
        self._settings = settings or Settings()
        configure_logging(self._settings.app.log_level, self._settings.app.log_json)

        database = self._settings.database
        if database.auto_migrate:
            migrate_up(database.path)

        self._db_connection = DatabaseConnection(
            database.path,
            timeout=database.connection_timeout,
            enable_foreign_keys=database.enable_foreign_keys,
        )

        self._register_repositories()
        self._register_services()
        logger.info(
            "Container configured",
            db_path=database.path,
            environment=self._settings.app.environment.value,
        )

    def get_settings(self) -> Settings:
        """Get application settings."""
        if not self._settings:
            self._settings = Settings()
        return self._settings

    def get_db_connection(self) -> DatabaseConnection:
        """Get database connection."""
        if not self._db_connection:
            database = self.get_settings().database
            self._db_connection = DatabaseConnection(
                database.path,
                timeout=database.connection_timeout,
                enable_foreign_keys=database.enable_foreign_keys,
            )
        return self._db_connection

    def _register_repositories(self) -> None:
        db = self.get_db_connection()

        self._singletons['user_repository'] = UserRepository(db)
        self._singletons['currency_repository'] = CurrencyRepository(db)
        self._singletons['category_repository'] = CategoryRepository(db)
        self._singletons['source_repository'] = SourceRepository(db)
        self._singletons['entry_repository'] = EntryRepository(db)

    def _register_services(self) -> None:
        db = self.get_db_connection()
        settings = self.get_settings()

        self._singletons['user_service'] = UserService(db, settings.security.bcrypt_rounds)
        self._singletons['currency_service'] = CurrencyService(db)
        self._singletons['category_service'] = CategoryService(db)
        self._singletons['source_service'] = SourceService(db)
        self._singletons['entry_service'] = EntryService(db)

    def get_user_service(self) -> UserService:
        return self._singletons['user_service']

    def get_currency_service(self) -> CurrencyService:
        return self._singletons['currency_service']

    def get_category_service(self) -> CategoryService:
        return self._singletons['category_service']

    def get_source_service(self) -> SourceService:
        return self._singletons['source_service']

    def get_entry_service(self) -> EntryService:
        return self._singletons['entry_service']

    def get_user_repository(self) -> UserRepository:
        return self._singletons['user_repository']

    def get_currency_repository(self) -> CurrencyRepository:
        return self._singletons['currency_repository']

    def get_category_repository(self) -> CategoryRepository:
        return self._singletons['category_repository']

    def get_source_repository(self) -> SourceRepository:
        return self._singletons['source_repository']

    def get_entry_repository(self) -> EntryRepository:
        return self._singletons['entry_repository']

    def cleanup(self) -> None:
        """Cleanup container resources."""
        if self._db_connection:
            self._db_connection.close_all_connections()
        self._singletons.clear()


# Global container instance
_container: Optional[Container] = None


def get_container() -> Container:
    """Get the global container instance."""
    global _container
    if _container is None:
        _container = Container()
        _container.configure()
    return _container


def configure_container(settings: Optional[Settings] = None) -> Container:
    """Configure and return the global container."""
    global _container
    if _container is not None:
        _container.cleanup()
    _container = Container()
    _container.configure(settings)
    return _container


def cleanup_container() -> None:
    """Cleanup the global container."""
    global _container
    if _container:
        _container.cleanup()
        _container = None
