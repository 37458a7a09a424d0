"""
Currency service for per-user currencies and their rates to the fixed currency.
"""

from typing import List, Optional

from ..models.currency import Currency
from ..repositories.base import DatabaseConnection
from ..repositories.currency_repository import CurrencyRepository
from ..utils.secure_logging import get_logger
from .base import CatalogService, logged_operation
from .validators import validate_name, validate_rate

logger = get_logger(__name__)


class CurrencyService(CatalogService[Currency]):
    """Service for currency management operations."""

    entity_name = "currency"

    def __init__(self, db_connection: DatabaseConnection):
        super().__init__(db_connection, CurrencyRepository(db_connection))

    @logged_operation("create_currency")
    def create_currency(self, user_id: int, name: str, rate_to_fixed: float) -> Currency:
        """Create a currency for a user.

        Raises:
            CheckViolation: If the rate is not a finite number greater than zero
            UniqueViolation: If the user already has a currency with this name
            NotFound: If the user does not exist
        """
        name = validate_name(name)
        rate = validate_rate(rate_to_fixed)

        with self.db.transaction():
            self._require_user(user_id)
            self._ensure_unique_name(user_id, name)
            currency = self.repository.insert(
                Currency(user_id=user_id, name=name, rate_to_fixed=rate)
            )

        logger.info("Currency created", user_id=user_id, currency_id=currency.id, name=name)
        return currency

    @logged_operation("update_currency")
    def update_currency(
        self,
        user_id: int,
        currency_id: int,
        name: Optional[str] = None,
        rate_to_fixed: Optional[float] = None,
    ) -> Currency:
        """Rename a currency and/or change its rate.

        Stored entries keep the rate snapshot they were created with.
        """
        changes = {}
        if name is not None:
            changes["name"] = validate_name(name)
        if rate_to_fixed is not None:
            changes["rate_to_fixed"] = validate_rate(rate_to_fixed)

        with self.db.transaction():
            self._get(user_id, currency_id)
            if "name" in changes:
                self._ensure_unique_name(user_id, changes["name"], exclude_id=currency_id)
            self.repository.update_fields(currency_id, **changes)
            currency = self.repository.find_by_id(currency_id)

        if changes:
            logger.info("Currency updated", user_id=user_id, currency_id=currency_id, **changes)
        return currency

    def get_currency(self, user_id: int, currency_id: int) -> Currency:
        return self._get(user_id, currency_id)

    def get_currency_by_name(self, user_id: int, name: str) -> Optional[Currency]:
        return self.repository.find_by_name(user_id, name)

    def list_currencies(self, user_id: int, include_archived: bool = False) -> List[Currency]:
        return self._list(user_id, include_archived)

    @logged_operation("archive_currency")
    def archive_currency(self, user_id: int, currency_id: int) -> Currency:
        """Hide a currency from active use; historical rows are untouched."""
        return self._set_archived(user_id, currency_id, True)

    @logged_operation("restore_currency")
    def restore_currency(self, user_id: int, currency_id: int) -> Currency:
        return self._set_archived(user_id, currency_id, False)

    @logged_operation("delete_currency")
    def delete_currency(self, user_id: int, currency_id: int) -> None:
        """Delete a currency no source or entry references.

        Raises:
            RestrictViolation: If any source or entry still uses the currency
        """
        self._delete(user_id, currency_id)

    def _before_delete(self, entity_id: int) -> None:
        # Fixed-currency references are cleared, not cascaded
        cleared = self.users.clear_fixed_currency(entity_id)
        if cleared:
            logger.info("Fixed currency cleared", currency_id=entity_id, users=cleared)
