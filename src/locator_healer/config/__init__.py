"""Configuration for locator-healer."""

from .settings import HealerSettings, get_settings, reset_settings

__all__ = ["HealerSettings", "get_settings", "reset_settings"]
