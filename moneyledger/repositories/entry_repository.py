"""
Entry repository.
"""

from datetime import datetime
from typing import Optional, List, Type

from ..models.entry import Entry, EntryType
from .base import OwnedRepository


class EntryRepository(OwnedRepository[Entry]):
    """Repository for Entry entities."""

    def _get_table_name(self) -> str:
        return "entries"

    def _get_model_class(self) -> Type[Entry]:
        return Entry

    def _row_to_model(self, row: dict) -> Entry:
        """Convert database row to Entry model."""
        return Entry(
            id=row["id"],
            user_id=row["user_id"],
            description=row["description"],
            target=row["target"],
            category_id=row["category_id"],
            amount=row["amount"],
            date=datetime.fromisoformat(row["date"]),
            created_at=datetime.fromisoformat(row["created_at"]) if row["created_at"] else None,
            currency_id=row["currency_id"],
            entry_type=EntryType(row["entry_type"]),
            source_id=row["source_id"],
            secondary_source_id=row["secondary_source_id"],
            conversion_rate=row["conversion_rate"],
            conversion_rate_to_fixed=row["conversion_rate_to_fixed"],
            archived=bool(row["archived"]),
        )

    def _model_to_dict(self, model: Entry) -> dict:
        """Convert Entry model to dictionary.

        ``created_at`` is left to the column default unless already set.
        """
        data = {
            "id": model.id,
            "user_id": model.user_id,
            "description": model.description,
            "target": model.target,
            "category_id": model.category_id,
            "amount": model.amount,
            "date": model.date.isoformat(),
            "currency_id": model.currency_id,
            "entry_type": model.entry_type.value,
            "source_id": model.source_id,
            "secondary_source_id": model.secondary_source_id,
            "conversion_rate": model.conversion_rate,
            "conversion_rate_to_fixed": model.conversion_rate_to_fixed,
            "archived": int(model.archived),
        }
        if model.created_at:
            data["created_at"] = model.created_at.isoformat()
        return data

    def find_filtered(
        self,
        user_id: int,
        include_archived: bool = False,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        entry_type: Optional[EntryType] = None,
        source_id: Optional[int] = None,
        target: Optional[str] = None,
    ) -> List[Entry]:
        """Find a user's entries, newest first.

        Args:
            user_id: Owning user
            include_archived: Include soft-deleted entries
            start: Inclusive lower bound on ``date``
            end: Exclusive upper bound on ``date``
            entry_type: Only entries of this type
            source_id: Only entries touching this source (primary or secondary)
            target: Only entries with this target label
        """
        query = f"SELECT * FROM {self._table_name} WHERE user_id = ?"
        params: list = [user_id]

        if not include_archived:
            query += " AND archived = 0"
        if start is not None:
            query += " AND date >= ?"
            params.append(start.isoformat())
        if end is not None:
            query += " AND date < ?"
            params.append(end.isoformat())
        if entry_type is not None:
            query += " AND entry_type = ?"
            params.append(EntryType(entry_type).value)
        if source_id is not None:
            query += " AND (source_id = ? OR secondary_source_id = ?)"
            params.extend([source_id, source_id])
        if target is not None:
            query += " AND target = ?"
            params.append(target)

        rows = self._fetch_all(query + " ORDER BY date DESC, id DESC", tuple(params))
        return [self._row_to_model(row) for row in rows]
