"""
Utility helpers shared across the ledger package.
"""

from .secure_logging import configure_logging, get_logger, get_structured_logger

__all__ = ["configure_logging", "get_logger", "get_structured_logger"]
