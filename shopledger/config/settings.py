"""
Configuration Management for Shop Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The core (store, session, aggregates) only needs StorageSettings.
Gemini and Google Sheets settings belong to optional peripheral
collaborators and may be left unconfigured.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Durable local key-value store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SHOPLEDGER_STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".shopledger",
        description="Directory holding one file per storage key"
    )
    state_key: str = Field(
        default="biashara_master_v1",
        min_length=1,
        description="Key of the primary state blob"
    )
    snapshots_key: str = Field(
        default="biashara_boutique_snapshots",
        min_length=1,
        description="Key of the rolling snapshot log"
    )
    max_snapshots: int = Field(
        default=10,
        ge=1,
        le=100,
        description="How many snapshots are kept before the oldest is evicted"
    )

    @field_validator('snapshots_key')
    @classmethod
    def validate_distinct_keys(cls, v: str, info: ValidationInfo) -> str:
        """The snapshot log must never overwrite the state blob."""
        if v == info.data.get("state_key"):
            raise ValueError("snapshots_key must differ from state_key")
        return v


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration for the business advisor."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    # Optional: the advisor degrades to a message when no key is set
    api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=1024,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Model temperature"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets cloud backup configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the spreadsheet that receives backups"
    )
    backup_sheet_name: str = Field(
        default="Backups",
        description="Name of the worksheet for backup rows"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Cloud backup will fail until it exists."
            )
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    debug_mode: bool = Field(
        default=False,
        description="Log at DEBUG level (applied by LedgerSession.from_settings)"
    )
    currency: str = Field(
        default="KES",
        min_length=1,
        max_length=5,
        description="Currency code used when formatting amounts"
    )

    def format_amount(self, amount: float) -> str:
        """Format an amount the way the shop displays it (rounded, grouped)."""
        return f"{self.currency} {round(amount):,}"


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so a partially configured
    # environment still yields a working core.

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the ones that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "gemini", "google_sheets", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
