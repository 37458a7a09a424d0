"""
Currency, category and source models.
"""

from pydantic import Field

from .base import OwnedModel, FieldConfig


class Currency(OwnedModel):
    """Currency owned by a user, with its factor to the user's fixed currency."""

    model_config = OwnedModel.model_config.copy()
    model_config.update(
        json_schema_extra={
            "example": {
                "id": 1,
                "user_id": 1,
                "name": "USD",
                "rate_to_fixed": 1.0,
                "archived": False
            }
        }
    )

    name: str = FieldConfig.name()
    rate_to_fixed: float = FieldConfig.rate()


class Category(OwnedModel):
    """Entry classification owned by a user."""

    name: str = FieldConfig.name()


class Source(OwnedModel):
    """Money holder (account, wallet, cash) denominated in one currency.

    ``amount`` is the running balance, updated with every entry write.
    """

    model_config = OwnedModel.model_config.copy()
    model_config.update(
        json_schema_extra={
            "example": {
                "id": 1,
                "user_id": 1,
                "name": "Cash",
                "currency_id": 1,
                "amount": 100.0,
                "archived": False
            }
        }
    )

    name: str = FieldConfig.name()
    currency_id: int = Field(..., description="Currency the balance is held in")
    amount: float = Field(default=0.0, allow_inf_nan=False, description="Running balance")
