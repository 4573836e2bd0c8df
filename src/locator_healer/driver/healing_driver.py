"""Driver wrappers that heal broken locators.

Each public method builds a retryable action closure over the wrapped
driver and runs it through the orchestrator, so a broken locator is
recovered transparently (or reported as HealingError).

Example:
    >>> healer = WebHealingDriver(SeleniumAdapter(webdriver), orchestrator)
    >>> healer.click_on("id=login_btn", ui_label="Log in")
    >>> healer.type_on("name=username", "alice", ui_label="Username")
"""

from collections.abc import Callable
from typing import TypeVar

from ..healing import HealingOrchestrator, Platform
from ..locators import LocatorDescriptor, as_descriptor
from .driver_protocol import Driver, Element

T = TypeVar("T")


class HealingDriver:
    """Healing wrapper over a Driver for one platform.

    Attributes:
        driver: Wrapped driver.
        orchestrator: Orchestrator running the heal protocol.
        platform: Platform used for prompts.
        default_timeout: Wait used when a call gives none, in seconds.
    """

    def __init__(
        self,
        driver: Driver,
        orchestrator: HealingOrchestrator,
        platform: Platform,
        default_timeout: float | None = None,
    ) -> None:
        self.driver = driver
        self.orchestrator = orchestrator
        self.platform = platform
        self.default_timeout = (
            default_timeout
            if default_timeout is not None
            else orchestrator.config.find_timeout_seconds
        )

    def click_on(
        self,
        locator: LocatorDescriptor | str,
        ui_label: str = "",
        index: int | None = None,
        timeout: float | None = None,
    ) -> None:
        """Click an element.

        Args:
            locator: Element locator.
            ui_label: Text expected on the element, helps the model.
            index: Pick the n-th match instead of waiting for a clickable one.
            timeout: Wait in seconds.

        Raises:
            HealingError: If the element could not be clicked even after healing.
        """
        wait = self._timeout(timeout)

        def action(loc: LocatorDescriptor) -> None:
            self._element(loc, index, wait, self.driver.wait_for_clickable).click()

        self._run(action, locator, ui_label)

    def type_on(
        self,
        locator: LocatorDescriptor | str,
        text: str,
        ui_label: str = "",
        index: int | None = None,
        timeout: float | None = None,
    ) -> None:
        """Clear an input and type text into it.

        Raises:
            HealingError: If the element could not be typed on even after healing.
        """
        wait = self._timeout(timeout)

        def action(loc: LocatorDescriptor) -> None:
            element = self._element(loc, index, wait, self.driver.wait_for_visible)
            element.clear()
            element.send_keys(text)

        self._run(action, locator, ui_label)

    def is_present(
        self,
        locator: LocatorDescriptor | str,
        ui_label: str = "",
        timeout: float | None = None,
    ) -> bool:
        """Return True once the element is present.

        Raises:
            HealingError: If the element is absent even after healing.
        """
        wait = self._timeout(timeout)

        def action(loc: LocatorDescriptor) -> bool:
            self.driver.wait_for_present(loc, wait)
            return True

        return self._run(action, locator, ui_label)

    def wait_until_present(
        self, locator: LocatorDescriptor | str, ui_label: str = "", timeout: float | None = None
    ) -> Element:
        wait = self._timeout(timeout)
        return self._run(lambda loc: self.driver.wait_for_present(loc, wait), locator, ui_label)

    def wait_until_visible(
        self, locator: LocatorDescriptor | str, ui_label: str = "", timeout: float | None = None
    ) -> Element:
        wait = self._timeout(timeout)
        return self._run(lambda loc: self.driver.wait_for_visible(loc, wait), locator, ui_label)

    def wait_until_clickable(
        self, locator: LocatorDescriptor | str, ui_label: str = "", timeout: float | None = None
    ) -> Element:
        wait = self._timeout(timeout)
        return self._run(lambda loc: self.driver.wait_for_clickable(loc, wait), locator, ui_label)

    def wait_until_invisible(
        self, locator: LocatorDescriptor | str, timeout: float | None = None
    ) -> bool:
        """Wait for an element to disappear.

        No healing: a locator that matches nothing is already invisible.
        """
        return self.driver.wait_for_invisible(as_descriptor(locator), self._timeout(timeout))

    def find_all(
        self, locator: LocatorDescriptor | str, ui_label: str = "", timeout: float | None = None
    ) -> list[Element]:
        """Return every element matching the locator (at least one)."""
        wait = self._timeout(timeout)

        def action(loc: LocatorDescriptor) -> list[Element]:
            elements = self.driver.find_all_present(loc, wait)
            if not elements:
                raise LookupError(f"No elements found for {loc}")
            return elements

        return self._run(action, locator, ui_label)

    def _run(
        self,
        action: Callable[[LocatorDescriptor], T],
        locator: LocatorDescriptor | str,
        ui_label: str,
    ) -> T:
        return self.orchestrator.perform_with_healing(
            action,
            as_descriptor(locator),
            platform=self.platform,
            page_source=lambda: self.driver.page_source,
            ui_label=ui_label,
        )

    def _element(
        self,
        locator: LocatorDescriptor,
        index: int | None,
        timeout: float,
        wait: Callable[[LocatorDescriptor, float], Element],
    ) -> Element:
        if index is None:
            return wait(locator, timeout)
        # IndexError counts as an action failure and triggers healing
        return self.driver.find_all_present(locator, timeout)[index]

    def _timeout(self, timeout: float | None) -> float:
        return self.default_timeout if timeout is None else timeout


class AndroidHealingDriver(HealingDriver):
    """Healing wrapper for Android (Appium / UiAutomator2) sessions."""

    def __init__(
        self, driver: Driver, orchestrator: HealingOrchestrator, default_timeout: float | None = None
    ) -> None:
        super().__init__(driver, orchestrator, Platform.ANDROID, default_timeout)


class IOSHealingDriver(HealingDriver):
    """Healing wrapper for iOS (Appium / XCUITest) sessions."""

    def __init__(
        self, driver: Driver, orchestrator: HealingOrchestrator, default_timeout: float | None = None
    ) -> None:
        super().__init__(driver, orchestrator, Platform.IOS, default_timeout)


class WebHealingDriver(HealingDriver):
    """Healing wrapper for web (Selenium / WebDriver) sessions."""

    def __init__(
        self, driver: Driver, orchestrator: HealingOrchestrator, default_timeout: float | None = None
    ) -> None:
        super().__init__(driver, orchestrator, Platform.WEB, default_timeout)
