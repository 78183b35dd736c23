"""Service interface definitions."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

from selenium.webdriver.remote.webdriver import WebDriver

from linkedin_apply.model.types import AppliedJobRecord


class AutomationError(Exception):
    """A browser interaction failed (selector missing, timeout, stale element)."""


class ElementNotFoundError(AutomationError):
    """Raised when an awaited element never appears."""

    def __init__(self, selector: str, reason: str = "not found"):
        self.selector = selector
        super().__init__(f"Element '{selector}' {reason}")


class IAutomationDriver(ABC):
    """Asynchronous view of one authenticated browser session.

    Every method is a suspension point; implementations raise
    ``AutomationError`` (or ``ElementNotFoundError``) on failure.
    """

    @abstractmethod
    async def navigate(self, url: str) -> None:
        pass

    @abstractmethod
    async def wait_for_element(self, selector: str) -> Any:
        """Wait until ``selector`` is present and return its handle."""
        pass

    @abstractmethod
    async def click(self, target: Union[str, Any]) -> None:
        """Click a CSS selector or a previously obtained handle."""
        pass

    @abstractmethod
    async def scroll_to_end(self, container: Any) -> None:
        pass

    @abstractmethod
    async def extract_fields(
        self, handle: Any, field_selectors: Dict[str, str]
    ) -> Dict[str, str]:
        """Read the normalized text of each field selector below ``handle``.

        Missing fields come back as empty strings.
        """
        pass

    @abstractmethod
    async def read_numeric_attribute(self, handle: Any, attribute: str) -> int:
        pass

    @abstractmethod
    async def find_optional(self, selector: str) -> Optional[Any]:
        pass

    @abstractmethod
    async def find_all(self, selector: str) -> List[Any]:
        pass


class IBrowserManager(ABC):
    """Interface for browser management services."""

    @abstractmethod
    def start_browser(self) -> WebDriver:
        pass

    @abstractmethod
    def get_driver(self) -> WebDriver:
        """Get the current WebDriver instance."""
        pass

    @abstractmethod
    def close_browser(self) -> None:
        """Clean up browser resources."""
        pass


class ILedgerStore(ABC):
    """Durable backing store for the applied-jobs ledger."""

    @abstractmethod
    def load(self) -> List[AppliedJobRecord]:
        """Return the persisted records in order, or [] when nothing is stored yet."""
        pass

    @abstractmethod
    def save(self, records: List[AppliedJobRecord]) -> None:
        """Persist the complete ordered list, replacing what was stored."""
        pass
