"""
User repository for database operations.
"""

from typing import Optional, List, Type

from ..models.user import User
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User entities."""

    def _get_table_name(self) -> str:
        return "users"

    def _get_model_class(self) -> Type[User]:
        return User

    def _row_to_model(self, row: dict) -> User:
        """Convert database row to User model."""
        return User(
            id=row['id'],
            username=row['username'],
            password_hash=row['password'],
            fixed_currency_id=row['fixed_currency_id'],
            enabled=bool(row['enabled'])
        )

    def _model_to_dict(self, model: User) -> dict:
        """Convert User model to dictionary."""
        return {
            'id': model.id,
            'username': model.username,
            'password': model.password_hash,
            'fixed_currency_id': model.fixed_currency_id,
            'enabled': int(model.enabled)
        }

    def find_by_username(self, username: str) -> Optional[User]:
        """Find user by username.

        Args:
            username: The username to search for

        Returns:
            User object if found, None otherwise
        """
        row = self._fetch_one(
            f"SELECT * FROM {self._table_name} WHERE username = ?",
            (username.strip(),)
        )
        return self._row_to_model(row) if row else None

    def find_enabled_users(self) -> List[User]:
        """Find all enabled users."""
        rows = self._fetch_all(f"SELECT * FROM {self._table_name} WHERE enabled = 1 ORDER BY id")
        return [self._row_to_model(row) for row in rows]

    def set_enabled(self, user_id: int, enabled: bool) -> bool:
        """Enable or disable a user account."""
        return self.update_fields(user_id, enabled=int(enabled))

    def update_password(self, user_id: int, password_hash: str) -> bool:
        """Replace the stored password hash."""
        return self.update_fields(user_id, password=password_hash)

    def set_fixed_currency(self, user_id: int, currency_id: Optional[int]) -> bool:
        """Point the user at a reporting currency, or clear it with None."""
        return self.update_fields(user_id, fixed_currency_id=currency_id)

    def clear_fixed_currency(self, currency_id: int) -> int:
        """Drop references to a currency that is about to be deleted."""
        cursor = self._write(
            f"UPDATE {self._table_name} SET fixed_currency_id = NULL WHERE fixed_currency_id = ?",
            (currency_id,)
        )
        return cursor.rowcount
