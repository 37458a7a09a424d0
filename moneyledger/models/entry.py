"""
Entry domain model: one categorized movement of money.
"""

from datetime import date as calendar_date, datetime
from enum import Enum
from typing import Optional, Union

from pydantic import Field

from .base import BaseModel, OwnedModel


class EntryType(str, Enum):
    """Entry type enumeration, closed set mirrored by the schema check"""

    SPEND = "spend"
    INCOME = "income"
    LEND = "lend"
    BORROW = "borrow"
    CONVERT = "convert"

    @property
    def sign(self) -> int:
        """Direction of the effect on the primary source balance"""
        inflows = {EntryType.INCOME, EntryType.BORROW}
        return 1 if self in inflows else -1

    @property
    def is_transfer(self) -> bool:
        """Whether the entry moves money into a secondary source"""
        return self == EntryType.CONVERT

    @classmethod
    def values(cls) -> tuple:
        return tuple(member.value for member in cls)


class Entry(OwnedModel):
    """Stored entry.

    An entry is an immutable snapshot of its conversion context:
    ``conversion_rate_to_fixed`` is captured at creation and never re-derived.
    """

    model_config = OwnedModel.model_config.copy()
    model_config.update(
        json_schema_extra={
            "example": {
                "id": 1,
                "user_id": 1,
                "description": "Salary",
                "target": "ACME Corp",
                "category_id": 2,
                "amount": 100.0,
                "date": "2024-01-25T09:00:00",
                "currency_id": 1,
                "entry_type": "income",
                "source_id": 1,
                "conversion_rate_to_fixed": 1.0,
                "archived": False
            }
        }
    )

    description: str = Field(..., description="Free-text description")
    target: Optional[str] = Field(default=None, description="Counterparty label")
    category_id: int
    amount: float = Field(..., allow_inf_nan=False)
    date: datetime = Field(..., description="Transaction date")
    created_at: Optional[datetime] = Field(default=None, description="Set by the store")
    currency_id: int
    entry_type: EntryType
    source_id: int
    secondary_source_id: Optional[int] = None
    conversion_rate: Optional[float] = Field(default=None, allow_inf_nan=False)
    conversion_rate_to_fixed: float = Field(..., allow_inf_nan=False)

    @property
    def fixed_amount(self) -> float:
        """Amount expressed in the owner's fixed currency at entry time."""
        return self.amount * self.conversion_rate_to_fixed


class EntryCreate(BaseModel):
    """Input for a new entry.

    Only shape is checked here; ownership, convert rules and value domains
    are validated by the entry service so they surface as ledger errors.
    """

    description: Optional[str] = None
    target: Optional[str] = None
    category_id: Optional[int] = None
    amount: Optional[Union[float, str]] = None
    date: Optional[Union[datetime, calendar_date]] = None
    currency_id: Optional[int] = None
    entry_type: Optional[str] = None
    source_id: Optional[int] = None
    secondary_source_id: Optional[int] = None
    conversion_rate: Optional[Union[float, str]] = None
    conversion_rate_to_fixed: Optional[Union[float, str]] = None
