"""
Base models and utilities for Pydantic v2.
"""
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel as PydanticBaseModel, ConfigDict, Field

# Type variable for generic model type
ModelType = TypeVar("ModelType", bound="BaseModel")

# Column width shared by usernames, passwords and entity names
NAME_MAX_LENGTH = 1023


class BaseModel(PydanticBaseModel):
    """Base model with common configuration and methods."""

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        validate_assignment=True,
        extra="ignore"
    )

    id: Optional[int] = Field(
        default=None,
        description="Row identifier assigned by the store",
        json_schema_extra={"example": 1}
    )

    @classmethod
    def from_row(cls: Type[ModelType], row: Optional[Dict[str, Any]]) -> Optional[ModelType]:
        """Build a model from a database row dictionary."""
        if not row:
            return None
        return cls.model_validate(row)


class OwnedModel(BaseModel):
    """Row owned by exactly one user, soft-deletable via ``archived``."""

    user_id: int = Field(..., description="Owning user")
    archived: bool = Field(default=False, description="Hidden from active use")


# Common field configurations
class FieldConfig:
    """Common field configurations for models."""

    @staticmethod
    def name(**kwargs) -> Any:
        """Name field configuration (unique per user)."""
        return Field(
            ...,
            min_length=1,
            max_length=NAME_MAX_LENGTH,
            description="Name, unique per user",
            **kwargs
        )

    @staticmethod
    def rate(**kwargs) -> Any:
        """Positive conversion rate configuration."""
        return Field(
            ...,
            gt=0,
            allow_inf_nan=False,
            description="Conversion factor",
            json_schema_extra={"example": 1.0},
            **kwargs
        )

