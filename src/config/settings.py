"""
Configuration Management for SubTrack

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The recurrence engine itself takes every value as an explicit argument;
only the tracker reads these settings and passes them down.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TrackerSettings(BaseSettings):
    """
    Subscription tracker settings.

    Loads configuration from SUBTRACK_* environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="SUBTRACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Calendar reminders
    reminder_hour: int = Field(
        default=9,
        ge=0,
        le=23,
        description="Local hour at which reminder events start"
    )
    reminder_minute: int = Field(
        default=0,
        ge=0,
        le=59,
        description="Local minute at which reminder events start"
    )
    reminder_lead_days: int = Field(
        default=1,
        ge=1,
        le=30,
        description="How many days before the due date the alarm fires"
    )
    calendar_product_id: str = Field(
        default="-//SubTrack//Subscription Reminder//EN",
        description="PRODID written into generated calendar files"
    )

    # Form defaults
    default_currency: str = Field(
        default="$",
        description="Currency preselected for new subscriptions"
    )
    default_category: str = Field(
        default="Other",
        description="Category used when none is given"
    )

    # Validation thresholds
    max_amount: Decimal = Field(
        default=Decimal("100000"),
        gt=0,
        description="Amounts above this are flagged for review (warning only)"
    )

    # Export
    export_prefix: str = Field(
        default="subtrack",
        min_length=1,
        description="Prefix for exported CSV file names"
    )

    @field_validator('calendar_product_id')
    @classmethod
    def validate_product_id(cls, v: str) -> str:
        """PRODID is written verbatim, so it must stay on one line."""
        if "\n" in v or "\r" in v:
            raise ValueError("calendar_product_id must be a single line")
        return v


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

    @property
    def tracker(self) -> TrackerSettings:
        return TrackerSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()
