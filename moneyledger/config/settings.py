"""
Application settings and configuration management using Pydantic BaseSettings.
"""

from pathlib import Path
from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Environment enumeration"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class DatabaseConfig(BaseSettings):
    """Database configuration settings."""
    path: str = Field(default="ledger.db")
    connection_timeout: float = Field(default=30.0, gt=0)
    enable_foreign_keys: bool = Field(default=True)
    auto_migrate: bool = Field(default=True)

    model_config = SettingsConfigDict(env_prefix="DB_", validate_assignment=True)

    @field_validator('path')
    @classmethod
    def validate_path(cls, v):
        # Each thread opens its own connection, so the store must be a file
        if not v.strip() or v.strip() == ":memory:":
            raise ValueError('Database path must name a file; in-memory databases are not supported')
        return v

    @property
    def absolute_path(self) -> str:
        """Get absolute path to the ledger database."""
        return str(Path(self.path).resolve())


class SecurityConfig(BaseSettings):
    """Security configuration settings."""
    bcrypt_rounds: int = Field(default=12, ge=4, le=15)

    model_config = SettingsConfigDict(env_prefix="SECURITY_")


class AppConfig(BaseSettings):
    """Application configuration settings."""
    environment: Environment = Field(default=Environment.DEVELOPMENT)
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)

    model_config = SettingsConfigDict(env_prefix="APP_")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Log level must be one of: {valid_levels}')
        return v.upper()

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT


class Settings(BaseSettings):
    """Centralized application settings manager using Pydantic BaseSettings."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    app: AppConfig = Field(default_factory=AppConfig)

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
    )

    def __init__(self, **kwargs):
        self._load_env_file()
        super().__init__(**kwargs)

    @staticmethod
    def _load_env_file() -> None:
        """Load environment variables from .env file so nested configs see them."""
        env_file = Path('.env')
        if env_file.exists():
            from dotenv import load_dotenv
            load_dotenv(env_file)

    def update_database_path(self, path: str) -> None:
        """Update database path."""
        self.database.path = path
