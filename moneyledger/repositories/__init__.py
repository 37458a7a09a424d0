"""
Repository Layer

This module provides data access abstractions and database operations
following the Repository pattern for clean separation of concerns.
"""

from .base import BaseRepository, OwnedRepository, NamedRepository, DatabaseConnection
from .user_repository import UserRepository
from .currency_repository import CurrencyRepository, CategoryRepository, SourceRepository
from .entry_repository import EntryRepository

__all__ = [
    "BaseRepository",
    "OwnedRepository",
    "NamedRepository",
    "DatabaseConnection",
    "UserRepository",
    "CurrencyRepository",
    "CategoryRepository",
    "SourceRepository",
    "EntryRepository"
]
