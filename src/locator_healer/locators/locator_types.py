"""Typed locator descriptors.

A locator is a (strategy, value) pair. Strategies form a closed set whose
values are the W3C WebDriver / Appium wire names, so a descriptor can be
handed straight to ``driver.find_element(*descriptor.as_tuple())``.
"""

from dataclasses import dataclass
from enum import Enum

from ..healing_exceptions import UnsupportedStrategy


class LocatorStrategy(Enum):
    """Supported locator strategies."""

    ID = "id"
    NAME = "name"
    CSS_SELECTOR = "css selector"
    XPATH = "xpath"
    CLASS_NAME = "class name"
    LINK_TEXT = "link text"
    PARTIAL_LINK_TEXT = "partial link text"
    TAG_NAME = "tag name"

    # Mobile
    ACCESSIBILITY_ID = "accessibility id"

    # iOS
    IOS_CLASS_CHAIN = "-ios class chain"
    IOS_PREDICATE_STRING = "-ios predicate string"

    # Android
    ANDROID_UIAUTOMATOR = "-android uiautomator"
    ANDROID_VIEWTAG = "-android viewtag"


STRATEGY_ALIASES: dict[str, LocatorStrategy] = {
    # Mobile
    "accessibility id": LocatorStrategy.ACCESSIBILITY_ID,
    "accessibility": LocatorStrategy.ACCESSIBILITY_ID,
    # iOS
    "-ios class chain": LocatorStrategy.IOS_CLASS_CHAIN,
    "ios class chain": LocatorStrategy.IOS_CLASS_CHAIN,
    "class chain": LocatorStrategy.IOS_CLASS_CHAIN,
    "chain": LocatorStrategy.IOS_CLASS_CHAIN,
    "-ios predicate string": LocatorStrategy.IOS_PREDICATE_STRING,
    "ios predicate string": LocatorStrategy.IOS_PREDICATE_STRING,
    "predicate string": LocatorStrategy.IOS_PREDICATE_STRING,
    "predicate": LocatorStrategy.IOS_PREDICATE_STRING,
    # Android
    "-android uiautomator": LocatorStrategy.ANDROID_UIAUTOMATOR,
    "android uiautomator": LocatorStrategy.ANDROID_UIAUTOMATOR,
    "uiautomator": LocatorStrategy.ANDROID_UIAUTOMATOR,
    "-android viewtag": LocatorStrategy.ANDROID_VIEWTAG,
    "android viewtag": LocatorStrategy.ANDROID_VIEWTAG,
    "viewtag": LocatorStrategy.ANDROID_VIEWTAG,
    "resource-id": LocatorStrategy.ID,
    "resource id": LocatorStrategy.ID,
    # General
    "id": LocatorStrategy.ID,
    "name": LocatorStrategy.NAME,
    "css selector": LocatorStrategy.CSS_SELECTOR,
    "css": LocatorStrategy.CSS_SELECTOR,
    "xpath": LocatorStrategy.XPATH,
    "class name": LocatorStrategy.CLASS_NAME,
    "classname": LocatorStrategy.CLASS_NAME,
    "class": LocatorStrategy.CLASS_NAME,
    "link text": LocatorStrategy.LINK_TEXT,
    "link": LocatorStrategy.LINK_TEXT,
    "partial link text": LocatorStrategy.PARTIAL_LINK_TEXT,
    "partial link": LocatorStrategy.PARTIAL_LINK_TEXT,
    "tag name": LocatorStrategy.TAG_NAME,
    "tag": LocatorStrategy.TAG_NAME,
}


def resolve_strategy(name: str) -> LocatorStrategy:
    """Map a strategy name or alias to a LocatorStrategy.

    Matching is case-insensitive and ignores surrounding whitespace.

    Args:
        name: Strategy name, e.g. "css", "Accessibility ID", "-ios class chain".

    Returns:
        The matching LocatorStrategy.

    Raises:
        UnsupportedStrategy: If the name is not in the alias table.
    """
    strategy = STRATEGY_ALIASES.get(name.strip().lower())
    if strategy is None:
        raise UnsupportedStrategy(name)
    return strategy


@dataclass(frozen=True)
class LocatorDescriptor:
    """Immutable (strategy, value) locator.

    Attributes:
        strategy: Locator strategy. Strings are resolved through the alias table.
        value: Locator value for the strategy.
    """

    strategy: LocatorStrategy
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.strategy, LocatorStrategy):
            if not isinstance(self.strategy, str):
                raise UnsupportedStrategy(repr(self.strategy))
            object.__setattr__(self, "strategy", resolve_strategy(self.strategy))
        if not isinstance(self.value, str) or not self.value:
            raise ValueError("Locator value must be a non-empty string")

    def __str__(self) -> str:
        return self.fingerprint

    @property
    def fingerprint(self) -> str:
        """Canonical string form, used as the cache key."""
        return f"{self.strategy.value}={self.value}"

    def as_tuple(self) -> tuple[str, str]:
        """Return (wire strategy name, value) for WebDriver-style lookups."""
        return self.strategy.value, self.value

    @classmethod
    def parse(cls, text: str) -> "LocatorDescriptor":
        """Parse the canonical "<strategy>=<value>" form.

        The strategy part may be any alias; the value is everything after
        the first "=".

        Raises:
            ValueError: If there is no "=" separator.
            UnsupportedStrategy: If the strategy part is unknown.
        """
        strategy, sep, value = text.partition("=")
        if not sep:
            raise ValueError(f"Expected '<strategy>=<value>', got {text!r}")
        return cls(resolve_strategy(strategy), value)


def as_descriptor(locator: "LocatorDescriptor | str") -> LocatorDescriptor:
    """Accept a descriptor or its canonical string form."""
    if isinstance(locator, LocatorDescriptor):
        return locator
    return LocatorDescriptor.parse(locator)
