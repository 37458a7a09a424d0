"""
Currency, category and source repositories.
"""

import sys
from typing import Dict, Type

from ..exceptions import CheckViolation
from ..models.currency import Currency, Category, Source
from .base import NamedRepository


class CurrencyRepository(NamedRepository[Currency]):
    """Repository for Currency entities."""

    def _get_table_name(self) -> str:
        return "currencies"

    def _get_model_class(self) -> Type[Currency]:
        return Currency

    def _row_to_model(self, row: dict) -> Currency:
        """Convert database row to Currency model."""
        return Currency(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            rate_to_fixed=row["rate_to_fixed"],
            archived=bool(row["archived"]),
        )

    def _model_to_dict(self, model: Currency) -> dict:
        """Convert Currency model to dictionary."""
        return {
            "id": model.id,
            "user_id": model.user_id,
            "name": model.name,
            "rate_to_fixed": model.rate_to_fixed,
            "archived": int(model.archived),
        }

    def count_references(self, currency_id: int) -> Dict[str, int]:
        """Count sources and entries denominated in a currency."""
        row = self._fetch_one(
            """
            SELECT
                (SELECT COUNT(*) FROM sources WHERE currency_id = ?) AS sources,
                (SELECT COUNT(*) FROM entries WHERE currency_id = ?) AS entries
            """,
            (currency_id, currency_id),
        )
        return {"sources": row["sources"], "entries": row["entries"]}


class CategoryRepository(NamedRepository[Category]):
    """Repository for Category entities."""

    def _get_table_name(self) -> str:
        return "categories"

    def _get_model_class(self) -> Type[Category]:
        return Category

    def _row_to_model(self, row: dict) -> Category:
        return Category(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            archived=bool(row["archived"]),
        )

    def _model_to_dict(self, model: Category) -> dict:
        return {
            "id": model.id,
            "user_id": model.user_id,
            "name": model.name,
            "archived": int(model.archived),
        }

    def count_references(self, category_id: int) -> Dict[str, int]:
        """Count entries filed under a category."""
        row = self._fetch_one(
            "SELECT COUNT(*) AS entries FROM entries WHERE category_id = ?",
            (category_id,),
        )
        return {"entries": row["entries"]}


class SourceRepository(NamedRepository[Source]):
    """Repository for Source entities."""

    def _get_table_name(self) -> str:
        return "sources"

    def _get_model_class(self) -> Type[Source]:
        return Source

    def _row_to_model(self, row: dict) -> Source:
        return Source(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            currency_id=row["currency_id"],
            amount=row["amount"],
            archived=bool(row["archived"]),
        )

    def _model_to_dict(self, model: Source) -> dict:
        return {
            "id": model.id,
            "user_id": model.user_id,
            "name": model.name,
            "currency_id": model.currency_id,
            "amount": model.amount,
            "archived": int(model.archived),
        }

    def apply_delta(self, source_id: int, delta: float) -> bool:
        """Shift a running balance in place, without a read-modify-write.

        Returns:
            False if the source does not exist

        Raises:
            CheckViolation: If the new balance would not be a finite number
        """
        cursor = self._write(
            f"UPDATE {self._table_name} SET amount = amount + ? "
            "WHERE id = ? AND abs(amount + ?) <= ?",
            (delta, source_id, delta, sys.float_info.max),
        )
        if cursor.rowcount:
            return True
        if self.find_by_id(source_id) is None:
            return False
        raise CheckViolation(
            f"Balance of source {source_id} would overflow", "amount", delta
        )

    def count_references(self, source_id: int) -> Dict[str, int]:
        """Count entries using a source as primary or secondary source."""
        row = self._fetch_one(
            "SELECT COUNT(*) AS entries FROM entries WHERE source_id = ? OR secondary_source_id = ?",
            (source_id, source_id),
        )
        return {"entries": row["entries"]}
