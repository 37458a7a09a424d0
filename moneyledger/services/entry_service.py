"""
Entry service.

Creating, archiving, restoring and deleting entries keeps the running
``amount`` of the affected sources in step with the active entries. Every
balance change happens in the same transaction as the entry write and is
applied as an atomic SQL increment.
"""

from datetime import datetime
from typing import Any, List, Optional, Tuple, Union

from pydantic import ValidationError

from ..exceptions import CheckViolation, NullConstraintViolation
from ..models.currency import Source
from ..models.entry import Entry, EntryCreate, EntryType
from ..repositories.base import DatabaseConnection
from ..repositories.currency_repository import (
    CategoryRepository,
    CurrencyRepository,
    SourceRepository,
)
from ..repositories.entry_repository import EntryRepository
from ..utils.secure_logging import get_logger
from .base import load_owned, logged_operation
from .validators import (
    require,
    validate_amount,
    validate_datetime,
    validate_entry_type,
    validate_rate,
)

logger = get_logger(__name__)

BalanceDelta = Tuple[int, float]


def balance_effects(entry: Entry, primary: Source) -> List[BalanceDelta]:
    """
    Compute the (source_id, delta) pairs an active entry contributes.

    Args:
        entry: The entry
        primary: The entry's primary source, used for its currency

    Returns:
        One pair per affected source
    """
    if entry.entry_type.is_transfer:
        return [
            (entry.source_id, -entry.amount),
            (entry.secondary_source_id, entry.amount * entry.conversion_rate),
        ]

    value = entry.amount
    if entry.currency_id != primary.currency_id:
        value = entry.amount * entry.conversion_rate
    return [(entry.source_id, entry.entry_type.sign * value)]


class EntryService:
    """Service for ledger entries and their effect on source balances."""

    def __init__(self, db_connection: DatabaseConnection):
        self.db = db_connection
        self.repository = EntryRepository(db_connection)
        self.sources = SourceRepository(db_connection)
        self.currencies = CurrencyRepository(db_connection)
        self.categories = CategoryRepository(db_connection)

    @staticmethod
    def _coerce_input(data: Optional[EntryCreate], fields: dict) -> EntryCreate:
        if data is not None:
            return data.model_copy(update=fields) if fields else data
        try:
            return EntryCreate(**fields)
        except ValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(part) for part in error["loc"]) or None
            raise CheckViolation(f"Invalid {field}: {error['msg']}", field, error.get("input"))

    def _apply(self, deltas: List[BalanceDelta], direction: int = 1) -> None:
        for source_id, delta in deltas:
            self.sources.apply_delta(source_id, direction * delta)

    def _effects_of(self, entry: Entry) -> List[BalanceDelta]:
        primary = self.sources.find_by_id(entry.source_id)
        return balance_effects(entry, primary)

    @logged_operation("create_entry")
    def create_entry(
        self, user_id: int, data: Optional[EntryCreate] = None, **fields: Any
    ) -> Entry:
        """
        Record an entry and update the balances it touches.

        Args:
            user_id: Owning user
            data: Entry input; keyword fields may be given instead, or to
                override individual values of ``data``

        Returns:
            The stored entry

        Raises:
            NullConstraintViolation: If a required field is missing
            CheckViolation: If a value is outside its domain
            NotFound: If a referenced row is missing or owned by another user
            ArchivedReference: If a referenced row is archived
        """
        data = self._coerce_input(data, fields)

        entry_type = validate_entry_type(data.entry_type)
        description = require(data.description, "description")
        require(data.category_id, "category_id")
        require(data.source_id, "source_id")
        require(data.currency_id, "currency_id")
        amount = validate_amount(data.amount)
        entry_date = validate_datetime(data.date)

        conversion_rate = None
        if data.conversion_rate is not None:
            conversion_rate = validate_rate(data.conversion_rate, "conversion_rate")

        if entry_type.is_transfer:
            require(data.secondary_source_id, "secondary_source_id")
            require(conversion_rate, "conversion_rate")
            if data.secondary_source_id == data.source_id:
                raise CheckViolation(
                    "secondary_source_id must differ from source_id",
                    "secondary_source_id",
                    data.secondary_source_id,
                )

        with self.db.transaction():
            category = load_owned(
                self.categories, user_id, data.category_id, "category_id", allow_archived=False
            )
            currency = load_owned(
                self.currencies, user_id, data.currency_id, "currency_id", allow_archived=False
            )
            primary = load_owned(
                self.sources, user_id, data.source_id, "source_id", allow_archived=False
            )
            if data.secondary_source_id is not None:
                load_owned(
                    self.sources,
                    user_id,
                    data.secondary_source_id,
                    "secondary_source_id",
                    allow_archived=False,
                )

            if currency.id != primary.currency_id:
                if entry_type.is_transfer:
                    raise CheckViolation(
                        "convert entries must use the currency of their source",
                        "currency_id",
                        currency.id,
                    )
                if conversion_rate is None:
                    raise NullConstraintViolation(
                        "conversion_rate is required when the entry currency "
                        "differs from the source currency",
                        "conversion_rate",
                    )

            if data.conversion_rate_to_fixed is not None:
                rate_to_fixed = validate_rate(
                    data.conversion_rate_to_fixed, "conversion_rate_to_fixed"
                )
            else:
                rate_to_fixed = currency.rate_to_fixed

            entry = self.repository.insert(
                Entry(
                    user_id=user_id,
                    description=description,
                    target=data.target or None,
                    category_id=category.id,
                    amount=amount,
                    date=entry_date,
                    currency_id=currency.id,
                    entry_type=entry_type,
                    source_id=primary.id,
                    secondary_source_id=data.secondary_source_id,
                    conversion_rate=conversion_rate,
                    conversion_rate_to_fixed=rate_to_fixed,
                )
            )
            deltas = balance_effects(entry, primary)
            self._apply(deltas)

        logger.info(
            "Entry created",
            user_id=user_id,
            entry_id=entry.id,
            entry_type=entry_type.value,
            balance_changes=dict(deltas),
        )
        return entry

    def get_entry(self, user_id: int, entry_id: int) -> Entry:
        return load_owned(self.repository, user_id, entry_id, "entry_id")

    def list_entries(
        self,
        user_id: int,
        include_archived: bool = False,
        start: Optional[Union[datetime, str]] = None,
        end: Optional[Union[datetime, str]] = None,
        entry_type: Optional[Union[EntryType, str]] = None,
        source_id: Optional[int] = None,
        target: Optional[str] = None,
    ) -> List[Entry]:
        """List a user's entries newest first; ``end`` is exclusive."""
        return self.repository.find_filtered(
            user_id,
            include_archived=include_archived,
            start=validate_datetime(start, "start") if start is not None else None,
            end=validate_datetime(end, "end") if end is not None else None,
            entry_type=validate_entry_type(entry_type) if entry_type is not None else None,
            source_id=source_id,
            target=target,
        )

    @logged_operation("archive_entry")
    def archive_entry(self, user_id: int, entry_id: int) -> Entry:
        """Soft-delete an entry and take its amount back out of the balances."""
        with self.db.transaction():
            entry = self.get_entry(user_id, entry_id)
            if entry.archived:
                return entry
            self.repository.set_archived(entry_id, True)
            self._apply(self._effects_of(entry), direction=-1)
            entry = self.repository.find_by_id(entry_id)

        logger.info("Entry archived", user_id=user_id, entry_id=entry_id)
        return entry

    @logged_operation("restore_entry")
    def restore_entry(self, user_id: int, entry_id: int) -> Entry:
        """Reactivate an archived entry and re-apply its balance effect."""
        with self.db.transaction():
            entry = self.get_entry(user_id, entry_id)
            if not entry.archived:
                return entry
            self.repository.set_archived(entry_id, False)
            self._apply(self._effects_of(entry))
            entry = self.repository.find_by_id(entry_id)

        logger.info("Entry restored", user_id=user_id, entry_id=entry_id)
        return entry

    @logged_operation("delete_entry")
    def delete_entry(self, user_id: int, entry_id: int) -> None:
        """Remove an entry; an active entry's balance effect is reversed first."""
        with self.db.transaction():
            entry = self.get_entry(user_id, entry_id)
            if not entry.archived:
                self._apply(self._effects_of(entry), direction=-1)
            self.repository.delete(entry_id)

        logger.info("Entry deleted", user_id=user_id, entry_id=entry_id)
