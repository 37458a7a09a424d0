"""
User service for account management and ordered user deletion.
"""

from typing import Dict, Optional

from ..exceptions import NotFound, UniqueViolation
from ..models.currency import Currency
from ..models.user import User
from ..repositories.base import DatabaseConnection
from ..repositories.currency_repository import (
    CategoryRepository,
    CurrencyRepository,
    SourceRepository,
)
from ..repositories.entry_repository import EntryRepository
from ..repositories.user_repository import UserRepository
from ..utils.secure_logging import get_logger
from .base import load_owned, logged_operation
from .validators import validate_name, validate_password

logger = get_logger(__name__)


class UserService:
    """Service for user management operations."""

    def __init__(self, db_connection: DatabaseConnection, bcrypt_rounds: int = 12):
        self.db = db_connection
        self.bcrypt_rounds = bcrypt_rounds
        self.repository = UserRepository(db_connection)
        self.currencies = CurrencyRepository(db_connection)
        self.categories = CategoryRepository(db_connection)
        self.sources = SourceRepository(db_connection)
        self.entries = EntryRepository(db_connection)

    def _require(self, user_id: int) -> User:
        user = self.repository.find_by_id(user_id)
        if user is None:
            raise NotFound(f"User {user_id} not found", "user_id", user_id)
        return user

    def _new_user(self, username: str, password: str) -> User:
        username = validate_name(username, "username")
        password = validate_password(password)
        return User.create(username=username, password=password, rounds=self.bcrypt_rounds)

    def _insert_user(self, user: User) -> User:
        if self.repository.find_by_username(user.username) is not None:
            raise UniqueViolation(
                f"Username '{user.username}' already exists", "username", user.username
            )
        return self.repository.insert(user)

    @logged_operation("create_user")
    def create_user(self, username: str, password: str) -> User:
        """
        Create a new user.

        New accounts start disabled and without a fixed currency.

        Raises:
            UniqueViolation: If the username is taken
            CheckViolation: If the username or password is invalid
        """
        # Hash before taking the write lock
        user = self._new_user(username, password)

        with self.db.transaction():
            user = self._insert_user(user)

        logger.info("User created", user_id=user.id, username=user.username)
        return user

    @logged_operation("register_user")
    def register_user(
        self, username: str, password: str, currency_name: Optional[str] = None
    ) -> User:
        """
        Create a user together with an initial fixed currency.

        Args:
            username: Login name
            password: Plain text password
            currency_name: Name of the first currency; it gets a rate of 1.0
                and becomes the user's fixed currency
        """
        user = self._new_user(username, password)
        if currency_name is not None:
            currency_name = validate_name(currency_name)

        with self.db.transaction():
            user = self._insert_user(user)
            if currency_name is not None:
                currency = self.currencies.insert(
                    Currency(user_id=user.id, name=currency_name, rate_to_fixed=1.0)
                )
                self.repository.set_fixed_currency(user.id, currency.id)
                user = self.repository.find_by_id(user.id)

        logger.info(
            "User registered",
            user_id=user.id,
            username=user.username,
            fixed_currency_id=user.fixed_currency_id,
        )
        return user

    def get_user(self, user_id: int) -> Optional[User]:
        return self.repository.find_by_id(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.repository.find_by_username(username)

    def verify_credentials(self, username: str, password: str) -> Optional[User]:
        """Return the user when the password matches its stored hash."""
        user = self.repository.find_by_username(username) if username else None
        if user is None or not password:
            return None
        if not user.verify_password(password):
            logger.warning("Credential check failed", username=user.username)
            return None
        return user

    @logged_operation("change_password")
    def change_password(self, user_id: int, old_password: str, new_password: str) -> bool:
        """
        Replace a user's password.

        Returns:
            False if the old password does not match, True otherwise
        """
        new_password = validate_password(new_password)
        user = self._require(user_id)
        if not old_password or not user.verify_password(old_password):
            logger.warning("Password change refused", user_id=user_id)
            return False

        password_hash = User.hash_password(new_password, self.bcrypt_rounds)
        with self.db.transaction():
            self.repository.update_password(user_id, password_hash)

        logger.info("Password changed", user_id=user_id)
        return True

    @logged_operation("set_enabled")
    def set_enabled(self, user_id: int, enabled: bool) -> User:
        with self.db.transaction():
            self._require(user_id)
            self.repository.set_enabled(user_id, enabled)
            user = self.repository.find_by_id(user_id)

        logger.info("User enabled" if enabled else "User disabled", user_id=user_id)
        return user

    @logged_operation("set_fixed_currency")
    def set_fixed_currency(self, user_id: int, currency_id: Optional[int]) -> User:
        """
        Select the reporting currency, or clear it with None.

        Raises:
            NotFound: If the user or currency does not exist, or the currency
                belongs to another user
            ArchivedReference: If the currency is archived
        """
        with self.db.transaction():
            self._require(user_id)
            if currency_id is not None:
                load_owned(
                    self.currencies, user_id, currency_id, "currency_id", allow_archived=False
                )
            self.repository.set_fixed_currency(user_id, currency_id)
            user = self.repository.find_by_id(user_id)

        logger.info("Fixed currency set", user_id=user_id, currency_id=currency_id)
        return user

    @logged_operation("delete_user")
    def delete_user(self, user_id: int) -> Dict[str, int]:
        """
        Delete a user and everything they own.

        Children go first so no restrict constraint fires: entries, sources,
        categories, the fixed-currency reference, currencies, then the user.

        Returns:
            Number of removed rows per table
        """
        with self.db.transaction():
            self._require(user_id)
            counts = {
                "entries": self.entries.delete_by_user(user_id),
                "sources": self.sources.delete_by_user(user_id),
                "categories": self.categories.delete_by_user(user_id),
            }
            self.repository.set_fixed_currency(user_id, None)
            counts["currencies"] = self.currencies.delete_by_user(user_id)
            counts["users"] = int(self.repository.delete(user_id))

        logger.info("User deleted", user_id=user_id, **counts)
        return counts
