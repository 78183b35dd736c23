"""Selenium implementation of the asynchronous automation driver."""

import asyncio
import re
import time
from typing import Any, Callable, Dict, List, Optional, Union

from selenium.common.exceptions import (
    ElementClickInterceptedException,
    NoSuchElementException,
    StaleElementReferenceException,
    TimeoutException,
    WebDriverException,
)
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from linkedin_apply.interfaces.services import (
    AutomationError,
    ElementNotFoundError,
    IAutomationDriver,
)

_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: Optional[str]) -> str:
    """Collapse runs of whitespace and trim."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


class SeleniumAutomationDriver(IAutomationDriver):
    """Runs blocking WebDriver calls off the event loop, one at a time."""

    def __init__(self, driver: WebDriver, timeout: float = 10.0, slow_mo: float = 0.0):
        self.driver = driver
        self.timeout = timeout
        self.slow_mo = slow_mo
        self._lock = asyncio.Lock()

    async def _call(self, func: Callable, *args) -> Any:
        async with self._lock:
            return await asyncio.to_thread(func, *args)

    # --- IAutomationDriver ---

    async def navigate(self, url: str) -> None:
        await self._call(self._navigate, url)

    async def wait_for_element(self, selector: str) -> WebElement:
        return await self._call(self._wait_for_element, selector)

    async def click(self, target: Union[str, WebElement]) -> None:
        await self._call(self._click, target)

    async def scroll_to_end(self, container: WebElement) -> None:
        await self._call(self._scroll_to_end, container)

    async def extract_fields(
        self, handle: WebElement, field_selectors: Dict[str, str]
    ) -> Dict[str, str]:
        return await self._call(self._extract_fields, handle, field_selectors)

    async def read_numeric_attribute(self, handle: WebElement, attribute: str) -> int:
        return await self._call(self._read_numeric_attribute, handle, attribute)

    async def find_optional(self, selector: str) -> Optional[WebElement]:
        return await self._call(self._find_optional, selector)

    async def find_all(self, selector: str) -> List[WebElement]:
        return await self._call(self._find_all, selector)

    # --- Blocking implementations ---

    def _navigate(self, url: str) -> None:
        try:
            self.driver.get(url)
        except WebDriverException as e:
            raise AutomationError(f"Failed to open {url}: {e.msg}") from e

    def _wait_for_element(self, selector: str) -> WebElement:
        try:
            return WebDriverWait(self.driver, self.timeout).until(
                EC.presence_of_element_located((By.CSS_SELECTOR, selector))
            )
        except TimeoutException as e:
            raise ElementNotFoundError(selector, "did not appear in time") from e
        except WebDriverException as e:
            raise AutomationError(f"Failed waiting for '{selector}': {e.msg}") from e

    def _click(self, target: Union[str, WebElement]) -> None:
        try:
            if isinstance(target, str):
                element = WebDriverWait(self.driver, self.timeout).until(
                    EC.element_to_be_clickable((By.CSS_SELECTOR, target))
                )
            else:
                element = target

            try:
                element.click()
            except ElementClickInterceptedException:
                # Overlays (toasts, sticky headers) intercept native clicks
                self.driver.execute_script("arguments[0].click();", element)
        except TimeoutException as e:
            raise ElementNotFoundError(str(target), "is not clickable") from e
        except StaleElementReferenceException as e:
            raise AutomationError("Clicked element is no longer attached") from e
        except WebDriverException as e:
            raise AutomationError(f"Click failed: {e.msg}") from e

        if self.slow_mo:
            time.sleep(self.slow_mo)

    def _scroll_to_end(self, container: WebElement) -> None:
        try:
            self.driver.execute_script(
                "arguments[0].scrollTo({top: arguments[0].scrollHeight, behavior: 'smooth'});",
                container,
            )
        except WebDriverException as e:
            raise AutomationError(f"Scroll failed: {e.msg}") from e

    def _extract_fields(
        self, handle: WebElement, field_selectors: Dict[str, str]
    ) -> Dict[str, str]:
        fields = {}
        for name, selector in field_selectors.items():
            try:
                element = handle.find_element(By.CSS_SELECTOR, selector)
                text = element.get_attribute("textContent")
            except NoSuchElementException:
                text = ""
            except WebDriverException as e:
                raise AutomationError(f"Failed to read '{selector}': {e.msg}") from e
            fields[name] = normalize_text(text)
        return fields

    def _read_numeric_attribute(self, handle: WebElement, attribute: str) -> int:
        try:
            value = handle.get_attribute(attribute)
        except WebDriverException as e:
            raise AutomationError(f"Failed to read attribute '{attribute}': {e.msg}") from e

        try:
            return int(float(value))
        except (TypeError, ValueError) as e:
            raise AutomationError(
                f"Attribute '{attribute}' is not numeric: {value!r}"
            ) from e

    def _find_optional(self, selector: str) -> Optional[WebElement]:
        try:
            return self.driver.find_element(By.CSS_SELECTOR, selector)
        except NoSuchElementException:
            return None
        except WebDriverException as e:
            raise AutomationError(f"Lookup of '{selector}' failed: {e.msg}") from e

    def _find_all(self, selector: str) -> List[WebElement]:
        try:
            return self.driver.find_elements(By.CSS_SELECTOR, selector)
        except WebDriverException as e:
            raise AutomationError(f"Lookup of '{selector}' failed: {e.msg}") from e
