"""
Domain Models

This module contains the row models of the ledger data store.
"""

from .base import BaseModel, OwnedModel, FieldConfig, NAME_MAX_LENGTH
from .user import User
from .currency import Currency, Category, Source
from .entry import Entry, EntryCreate, EntryType

__all__ = [
    "BaseModel",
    "OwnedModel",
    "FieldConfig",
    "NAME_MAX_LENGTH",
    "User",
    "Currency",
    "Category",
    "Source",
    "Entry",
    "EntryCreate",
    "EntryType",
]
