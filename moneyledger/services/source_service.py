"""
Source service: accounts, wallets and other balance holders.
"""

from typing import List, Optional

from ..models.currency import Source
from ..repositories.base import DatabaseConnection
from ..repositories.currency_repository import CurrencyRepository, SourceRepository
from ..utils.secure_logging import get_logger
from .base import CatalogService, load_owned, logged_operation
from .validators import validate_amount, validate_name

logger = get_logger(__name__)


class SourceService(CatalogService[Source]):
    """Service for sources and their running balances."""

    entity_name = "source"

    def __init__(self, db_connection: DatabaseConnection):
        super().__init__(db_connection, SourceRepository(db_connection))
        self.currencies = CurrencyRepository(db_connection)

    @logged_operation("create_source")
    def create_source(
        self, user_id: int, name: str, currency_id: int, amount: float = 0.0
    ) -> Source:
        """Create a source denominated in one of the user's active currencies.

        Args:
            user_id: Owning user
            name: Name, unique per user
            currency_id: Currency of the balance
            amount: Opening balance, may be zero or negative
        """
        name = validate_name(name)
        amount = validate_amount(amount, positive=False)

        with self.db.transaction():
            self._require_user(user_id)
            load_owned(self.currencies, user_id, currency_id, "currency_id", allow_archived=False)
            self._ensure_unique_name(user_id, name)
            source = self.repository.insert(
                Source(user_id=user_id, name=name, currency_id=currency_id, amount=amount)
            )

        logger.info(
            "Source created",
            user_id=user_id,
            source_id=source.id,
            currency_id=currency_id,
            amount=amount,
        )
        return source

    @logged_operation("rename_source")
    def rename_source(self, user_id: int, source_id: int, name: str) -> Source:
        name = validate_name(name)

        with self.db.transaction():
            self._get(user_id, source_id)
            self._ensure_unique_name(user_id, name, exclude_id=source_id)
            self.repository.update_fields(source_id, name=name)
            source = self.repository.find_by_id(source_id)

        logger.info("Source renamed", user_id=user_id, source_id=source_id, name=name)
        return source

    def get_source(self, user_id: int, source_id: int) -> Source:
        return self._get(user_id, source_id)

    def get_source_by_name(self, user_id: int, name: str) -> Optional[Source]:
        return self.repository.find_by_name(user_id, name)

    def list_sources(self, user_id: int, include_archived: bool = False) -> List[Source]:
        return self._list(user_id, include_archived)

    @logged_operation("archive_source")
    def archive_source(self, user_id: int, source_id: int) -> Source:
        """Hide a source; outstanding balances are not checked."""
        return self._set_archived(user_id, source_id, True)

    @logged_operation("restore_source")
    def restore_source(self, user_id: int, source_id: int) -> Source:
        return self._set_archived(user_id, source_id, False)

    @logged_operation("delete_source")
    def delete_source(self, user_id: int, source_id: int) -> None:
        """Delete a source no entry uses as primary or secondary source."""
        self._delete(user_id, source_id)
