"""Configuration package."""

from src.config.settings import (
    Settings,
    TrackerSettings,
    get_settings,
)

__all__ = [
    "Settings",
    "TrackerSettings",
    "get_settings",
]
