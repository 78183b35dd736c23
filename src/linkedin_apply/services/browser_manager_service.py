import atexit
import weakref
from typing import Optional

import undetected_chromedriver as uc
from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.firefox.options import Options as FirefoxOptions
from selenium.webdriver.firefox.service import Service as FirefoxService
from webdriver_manager.chrome import ChromeDriverManager
from webdriver_manager.core.os_manager import ChromeType
from webdriver_manager.firefox import GeckoDriverManager

from linkedin_apply.interfaces.services import IBrowserManager
from linkedin_apply.utils.logging_config import get_logger

DEFAULT_WIDTH = 1366
DEFAULT_HEIGHT = 768


class BrowserManagerService(IBrowserManager):
    """Manages the browser session the runner drives."""

    # Track all live instances via weak references for cleanup on exit
    _instances: list = []

    def __init__(
        self,
        headless: bool = False,
        use_undetected: bool = True,
        browser_type: str = "chrome",
        chrome_version: Optional[int] = None,
        chrome_binary_path: Optional[str] = None,
    ):
        self.headless = headless
        self.use_undetected = use_undetected
        self.browser_type = browser_type.lower()
        self.chrome_version = chrome_version
        self.chrome_binary_path = chrome_binary_path
        self.driver: Optional[webdriver.Remote] = None
        self.logger = get_logger("browser")
        BrowserManagerService._instances.append(weakref.ref(self))

    def _get_chrome_options(self) -> Options:
        """Configure Chrome options for LinkedIn automation."""
        options = Options()
        options.page_load_strategy = "eager"

        if self.headless:
            options.add_argument("--headless=new")
        else:
            options.add_argument("--start-maximized")

        options.add_argument(f"--window-size={DEFAULT_WIDTH},{DEFAULT_HEIGHT}")
        options.add_argument("--lang=en-GB")
        options.add_argument("--no-sandbox")
        options.add_argument("--disable-setuid-sandbox")
        options.add_argument("--disable-dev-shm-usage")
        options.add_argument("--disable-gpu")
        options.add_argument("--disable-blink-features=AutomationControlled")
        options.add_argument("--disable-notifications")
        options.add_argument("--mute-audio")

        if self.chrome_binary_path:
            options.binary_location = self.chrome_binary_path

        return options

    def _start_chrome(self) -> webdriver.Remote:
        options = self._get_chrome_options()
        if self.use_undetected:
            return uc.Chrome(options=options, version_main=self.chrome_version)
        service = Service(ChromeDriverManager().install())
        return webdriver.Chrome(service=service, options=options)

    def _start_chromium(self) -> webdriver.Remote:
        # undetected-chromedriver does not support Chromium builds
        service = Service(ChromeDriverManager(chrome_type=ChromeType.CHROMIUM).install())
        return webdriver.Chrome(service=service, options=self._get_chrome_options())

    def _start_firefox(self) -> webdriver.Remote:
        options = FirefoxOptions()
        options.page_load_strategy = "eager"
        if self.headless:
            options.add_argument("--headless")
        options.set_preference("intl.accept_languages", "en-GB")
        options.set_preference("dom.webnotifications.enabled", False)

        service = FirefoxService(GeckoDriverManager().install())
        return webdriver.Firefox(service=service, options=options)

    def start_browser(self) -> webdriver.Remote:
        """Start the configured browser, falling back to Chrome when it fails."""
        starters = {
            "chrome": self._start_chrome,
            "chromium": self._start_chromium,
            "firefox": self._start_firefox,
        }
        starter = starters.get(self.browser_type, self._start_chrome)

        self.logger.info("Starting browser", browser_type=self.browser_type)
        try:
            self.driver = starter()
        except Exception as e:
            if starter is self._start_chrome:
                raise
            self.logger.warning("Browser failed, trying Chrome as fallback", error=str(e))
            self.driver = self._start_chrome()

        # Remove webdriver property
        self.driver.execute_script(
            "Object.defineProperty(navigator, 'webdriver', {get: () => undefined})"
        )
        self.logger.info("Browser started")
        return self.driver

    def close_browser(self) -> None:
        """Close the browser and cleanup resources."""
        if self.driver:
            try:
                self.driver.quit()
            except WebDriverException as e:
                self.logger.warning("Browser did not quit cleanly", error=e.msg)
            self.driver = None

    @classmethod
    def cleanup_all(cls) -> None:
        """Cleanup all browser instances. Called on process exit."""
        for ref in cls._instances:
            instance = ref()
            if instance is not None:
                instance.close_browser()
        cls._instances.clear()

    def get_driver(self) -> webdriver.Remote:
        """Get the current WebDriver instance."""
        if not self.driver:
            self.start_browser()
        return self.driver


atexit.register(BrowserManagerService.cleanup_all)
