"""
Configuration Management

This module provides centralized configuration management
for the ledger data store.
"""

from .settings import Settings, DatabaseConfig, SecurityConfig, AppConfig, Environment

__all__ = [
    "Settings",
    "DatabaseConfig",
    "SecurityConfig",
    "AppConfig",
    "Environment"
]
