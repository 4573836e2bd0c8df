"""Healing wrappers over UI drivers (Android, iOS, Web)."""

from .driver_protocol import Driver, Element
from .healing_driver import (
    AndroidHealingDriver,
    HealingDriver,
    IOSHealingDriver,
    WebHealingDriver,
)

__all__ = [
    "Driver",
    "Element",
    "HealingDriver",
    "AndroidHealingDriver",
    "IOSHealingDriver",
    "WebHealingDriver",
]
