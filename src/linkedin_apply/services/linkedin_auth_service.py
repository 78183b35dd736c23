import json
from pathlib import Path
from typing import Optional

import typer
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.remote.webdriver import WebDriver

from linkedin_apply.graphs.linkedin_auth_graph import LinkedInAuthGraph
from linkedin_apply.utils.logging_config import get_logger

LINKEDIN_HOME_URL = "https://www.linkedin.com"
SESSION_COOKIE_NAME = "li_at"
_SELENIUM_COOKIE_KEYS = ("name", "value", "domain", "path", "secure", "httpOnly", "expiry")


class AuthenticationError(Exception):
    """Raised when no authenticated LinkedIn session could be established."""


class LinkedInAuthService:
    """Establishes a LinkedIn session from a saved li_at cookie or credentials."""

    def __init__(
        self,
        cookie_path: str,
        email: str = "",
        password: str = "",
        timeout: float = 10.0,
        trace_id: Optional[str] = None,
    ):
        self.cookie_path = Path(cookie_path)
        self.email = email
        self.password = password
        self.timeout = timeout
        self.auth_graph = LinkedInAuthGraph()
        self.logger = get_logger(trace_id)

    def authenticate(self, driver: WebDriver) -> None:
        """
        Authenticate the browser session.

        A saved cookie is tried first. When it is missing or no longer accepted,
        the credential login runs and the fresh cookie is saved for the next run.

        Raises:
            AuthenticationError: if neither method yields a session
        """
        if self.cookie_path.exists():
            if self._authenticate_by_cookie(driver):
                self.logger.info("Authenticated by cookie")
                return
            self.logger.warning("Saved cookie was rejected, logging in with credentials")

        self._authenticate_by_credentials(driver)
        self.logger.info("Authenticated by credentials")

    def is_authenticated(self, driver: WebDriver) -> bool:
        try:
            current_url = driver.current_url
        except WebDriverException:
            return False
        return (
            "linkedin.com" in current_url
            and "/login" not in current_url
            and "/authwall" not in current_url
            and "/checkpoint" not in current_url
        )

    def _authenticate_by_cookie(self, driver: WebDriver) -> bool:
        cookie = self.load_cookie()
        if cookie is None:
            return False

        try:
            driver.get(LINKEDIN_HOME_URL)
            driver.add_cookie(cookie)
            driver.get(f"{LINKEDIN_HOME_URL}/feed/")
        except WebDriverException as e:
            raise AuthenticationError(f"Could not apply saved cookie: {e.msg}") from e

        return self.is_authenticated(driver)

    def _authenticate_by_credentials(self, driver: WebDriver) -> None:
        email, password = self._get_credentials()
        result = self.auth_graph.execute(email, password, driver, timeout=self.timeout)
        if not result["authenticated"]:
            raise AuthenticationError(result["error"] or "LinkedIn login failed")

        self.save_cookie(driver)

    def _get_credentials(self):
        email = self.email or typer.prompt("LinkedIn email")
        password = self.password or typer.prompt("LinkedIn password", hide_input=True)
        return email, password

    def load_cookie(self) -> Optional[dict]:
        """Read the saved li_at cookie, or None when the file is unusable."""
        path = str(self.cookie_path)
        try:
            with open(self.cookie_path, "r", encoding="utf-8") as f:
                cookie = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.warning("Could not read saved cookie", path=path, error=str(e))
            return None

        if (
            not isinstance(cookie, dict)
            or cookie.get("name") != SESSION_COOKIE_NAME
            or not cookie.get("value")
        ):
            self.logger.warning("Saved cookie file has no li_at cookie", path=path)
            return None

        # Selenium rejects a float expiry and sameSite values it does not know
        cookie = {k: v for k, v in cookie.items() if k in _SELENIUM_COOKIE_KEYS}
        if "expiry" in cookie:
            cookie["expiry"] = int(cookie["expiry"])
        return cookie

    def save_cookie(self, driver: WebDriver) -> None:
        cookie = driver.get_cookie(SESSION_COOKIE_NAME)
        if not cookie:
            raise AuthenticationError("Login succeeded but no li_at cookie was set")

        path = str(self.cookie_path)
        self.cookie_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(self.cookie_path, "w", encoding="utf-8") as f:
                json.dump(cookie, f)
        except OSError as e:
            self.logger.warning("Could not save li_at cookie", path=path, error=str(e))
            return
        self.logger.info("Saved li_at cookie", path=path)
