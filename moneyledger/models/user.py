"""
User domain model and related entities.
"""

from typing import Optional, ClassVar, Dict, Any

import bcrypt
from pydantic import Field

from .base import BaseModel, NAME_MAX_LENGTH


class User(BaseModel):
    """Ledger owner.

    Attributes:
        id: Unique identifier
        username: Login name (unique)
        password_hash: bcrypt hash of the password
        fixed_currency_id: Reporting currency, one of the user's own currencies
        enabled: Whether the account is enabled (new accounts are not)
    """

    model_config = BaseModel.model_config.copy()
    model_config.update(
        json_schema_extra={
            "example": {
                "id": 1,
                "username": "alice",
                "fixed_currency_id": 3,
                "enabled": True
            }
        }
    )

    username: str = Field(
        ...,
        min_length=1,
        max_length=NAME_MAX_LENGTH,
        description="Unique username"
    )
    password_hash: str = Field(
        ...,
        exclude=True,
        max_length=NAME_MAX_LENGTH,
        description="Hashed password (bcrypt)",
        json_schema_extra={"example": "$2b$12$EixZaYVK1fsbw1ZfbX3OXePaWxn96p36WQoeG6Lruj3vjPGga31lW"}
    )
    fixed_currency_id: Optional[int] = Field(
        default=None,
        description="Currency used for reporting"
    )
    enabled: bool = Field(
        default=False,
        description="Whether the user account is enabled"
    )

    # Class-level configuration
    _bcrypt_rounds: ClassVar[int] = 12

    @staticmethod
    def hash_password(password: str, rounds: Optional[int] = None) -> str:
        """Hash a plain text password with bcrypt."""
        salt = bcrypt.gensalt(rounds=rounds or User._bcrypt_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    @classmethod
    def create(
        cls,
        username: str,
        password: str,
        rounds: Optional[int] = None,
        **kwargs
    ) -> "User":
        """Create a new, disabled user with hashed password.

        Args:
            username: Login name
            password: Plain text password (will be hashed)
            rounds: bcrypt work factor, defaults to the class setting
            **kwargs: Additional user attributes

        Returns:
            New User instance with hashed password
        """
        return cls(
            username=username,
            password_hash=cls.hash_password(password, rounds),
            **kwargs
        )

    def verify_password(self, password: str) -> bool:
        """Verify the provided password against the stored hash.

        Args:
            password: Plain text password to verify

        Returns:
            bool: True if password matches, False otherwise
        """
        try:
            return bcrypt.checkpw(password.encode("utf-8"), self.password_hash.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt hash
            return False

    def to_public_dict(self) -> Dict[str, Any]:
        """Convert user to public dictionary, excluding the password hash."""
        return self.model_dump(exclude={"password_hash"})
