"""Typed locators and the strategy alias table.

Example:
    >>> from locator_healer.locators import LocatorDescriptor, LocatorStrategy
    >>>
    >>> login = LocatorDescriptor(LocatorStrategy.ID, "login_btn")
    >>> str(login)
    'id=login_btn'
    >>> LocatorDescriptor.parse("css=form > button").strategy
    <LocatorStrategy.CSS_SELECTOR: 'css selector'>
"""

from .locator_types import (
    STRATEGY_ALIASES,
    LocatorDescriptor,
    LocatorStrategy,
    as_descriptor,
    resolve_strategy,
)

__all__ = [
    "LocatorDescriptor",
    "LocatorStrategy",
    "STRATEGY_ALIASES",
    "as_descriptor",
    "resolve_strategy",
]
