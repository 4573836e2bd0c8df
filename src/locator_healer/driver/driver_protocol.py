"""Driver capability the healing wrappers are built on.

Any object with these methods works: a thin adapter over Selenium's
WebDriverWait, an Appium session, or a test double. Failures must surface
as exceptions; the orchestrator catches them and heals.
"""

from typing import Protocol, runtime_checkable

from ..locators import LocatorDescriptor


@runtime_checkable
class Element(Protocol):
    """UI element handle."""

    def click(self) -> None: ...

    def clear(self) -> None: ...

    def send_keys(self, text: str) -> None: ...


@runtime_checkable
class Driver(Protocol):
    """Find and wait primitives of a UI driver.

    Every wait raises when the condition is not met within ``timeout``
    seconds.
    """

    @property
    def page_source(self) -> str:
        """Current page source / view hierarchy dump."""
        ...

    def wait_for_present(self, locator: LocatorDescriptor, timeout: float) -> Element: ...

    def wait_for_visible(self, locator: LocatorDescriptor, timeout: float) -> Element: ...

    def wait_for_clickable(self, locator: LocatorDescriptor, timeout: float) -> Element: ...

    def wait_for_invisible(self, locator: LocatorDescriptor, timeout: float) -> bool: ...

    def find_all_present(self, locator: LocatorDescriptor, timeout: float) -> list[Element]: ...
