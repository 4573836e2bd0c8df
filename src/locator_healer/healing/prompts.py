"""Prompt builders for locator healing, one per platform.

Every prompt ends with the same JSON answer contract, which is what
LocatorCodec expects to decode.
"""

from abc import ABC, abstractmethod

from .healing_types import Platform

RESPONSE_CONTRACT = """OUTPUT
- Answer with ONLY one JSON object in a single code block fenced with ```json. No other text.
- The object must have exactly these keys:
  {{
    "failedElement": "<string: the failed locator, as given>",
    "newValidElementType": "<string: {types}> or null",
    "newValidElement": "<string> or null",
    "reason": "<string: why the original failed and why the new locator is stable>",
    "suggestion": "<string: one recommendation to make this element easier to locate>"
  }}
- If no robust, unique locator exists, set newValidElementType and newValidElement to null
  and explain why in reason."""


class PromptBuilder(ABC):
    """Builds the healing prompt for one platform."""

    platform: Platform

    #: Strategy names the model may answer with, in order of preference.
    locator_types: tuple[str, ...] = ()

    @abstractmethod
    def heuristics(self) -> str:
        """Platform-specific guidance on choosing a replacement locator."""
        pass

    @abstractmethod
    def role(self) -> str:
        """Opening role statement."""
        pass

    def build_prompt(
        self,
        page_source: str,
        failed_locator: str,
        error_message: str,
        ui_label: str,
    ) -> str:
        """Build the prompt sent to the model.

        Args:
            page_source: Current page source / view hierarchy dump.
            failed_locator: Canonical string of the locator that failed.
            error_message: Error raised by the driver.
            ui_label: Text the user sees or expects on the element (may be empty).

        Returns:
            Prompt text.
        """
        contract = RESPONSE_CONTRACT.format(types="|".join(self.locator_types))
        return f"""ROLE
{self.role()} You act as a self-healing locator engine: when a locator fails, \
analyze the page source, the driver error and the optional UI label to find the \
most stable replacement locator for the same element.

SELECTION STRATEGY
{self.heuristics()}

{contract}

INPUT
- failedElement: {failed_locator}
- errorMessage: {error_message}
- uiLabel: {ui_label or "(none)"}
- pageSource:
{page_source}
"""


class AndroidPromptBuilder(PromptBuilder):
    """Prompt for Android (Appium / UiAutomator2) view hierarchies."""

    platform = Platform.ANDROID
    locator_types = ("id", "accessibility id", "uiautomator", "class name", "xpath")

    def role(self) -> str:
        return "You are an expert mobile test automation engineer for Android (Appium / UiAutomator2)."

    def heuristics(self) -> str:
        return """1) Prefer developer-assigned identifiers: resource-id (answer with type "id"),
   then content-desc (answer with type "accessibility id").
2) Otherwise use a concise UiAutomator UiSelector matching resource-id, description,
   text or class (type "uiautomator").
3) Use XPath only as a last resort; keep it shallow and attribute based, no indexes.
4) Cross-check candidates against uiLabel (text / content-desc) and make sure the
   element is interactable when the failed one was (clickable, enabled).
5) Avoid volatile values such as generated ids, timestamps or positional indexes."""


class IOSPromptBuilder(PromptBuilder):
    """Prompt for iOS (Appium / XCUITest) view hierarchies."""

    platform = Platform.IOS
    locator_types = (
        "accessibility id",
        "id",
        "name",
        "class chain",
        "predicate string",
        "xpath",
    )

    def role(self) -> str:
        return "You are an expert mobile test automation engineer for iOS (Appium / XCUITest)."

    def heuristics(self) -> str:
        return """1) Prefer human-assigned identifiers: accessibility id (accessibilityIdentifier),
   then id, then name when it clearly belongs to the intended control.
2) Otherwise use a short class chain, or a predicate string with exact attribute equality.
3) Use XPath only as a last resort; keep it shallow, no indexes.
4) Consider name, label, value, type, enabled and visible; cross-check against uiLabel.
5) Prefer selectors that are unique in the page source; avoid transient values."""


class WebPromptBuilder(PromptBuilder):
    """Prompt for web pages (Selenium / WebDriver) HTML."""

    platform = Platform.WEB
    locator_types = (
        "id",
        "name",
        "css selector",
        "link text",
        "partial link text",
        "class name",
        "tag name",
        "xpath",
    )

    def role(self) -> str:
        return "You are an expert web test automation engineer (Selenium WebDriver)."

    def heuristics(self) -> str:
        return """1) Prefer stable attributes: id, name, data-testid / data-test / aria-label
   (via a css selector such as [data-testid='login']).
2) For links, link text or partial link text when the text is stable and unique.
3) Otherwise a short css selector anchored on a stable attribute; avoid nth-child chains
   and generated class names (hashes, framework prefixes).
4) Use XPath only as a last resort; keep it shallow and attribute or text based.
5) Cross-check candidates against uiLabel (visible text, label, placeholder, title)
   and make sure the element is interactable when the failed one was."""


_BUILDERS: dict[Platform, PromptBuilder] = {
    Platform.ANDROID: AndroidPromptBuilder(),
    Platform.IOS: IOSPromptBuilder(),
    Platform.WEB: WebPromptBuilder(),
}


def get_prompt_builder(platform: Platform) -> PromptBuilder:
    """Return the prompt builder for a platform."""
    return _BUILDERS[platform]
