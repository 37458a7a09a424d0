"""
Service Layer

Operations on the ledger, each run as one transaction with every
application-level invariant checked before anything is written.
"""

from .user_service import UserService
from .currency_service import CurrencyService
from .category_service import CategoryService
from .source_service import SourceService
from .entry_service import EntryService, balance_effects

__all__ = [
    "UserService",
    "CurrencyService",
    "CategoryService",
    "SourceService",
    "EntryService",
    "balance_effects"
]
