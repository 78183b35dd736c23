from typing import Any, TypedDict

import typer
from langgraph.graph import END, StateGraph
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.common.by import By
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from linkedin_apply.utils.logging_config import get_logger

LOGIN_URL = "https://www.linkedin.com/login"


class AuthState(TypedDict):
    email: str
    password: str
    driver: Any
    timeout: float
    authenticated: bool
    captcha_detected: bool
    captcha_solved: bool
    error: str


class LinkedInAuthGraph:
    """LangGraph workflow for LinkedIn credential login."""

    def __init__(self):
        self.logger = get_logger("auth")
        self.graph = self._create_graph()

    def _create_graph(self) -> StateGraph:
        """Create the authentication workflow graph."""
        workflow = StateGraph(AuthState)

        workflow.add_node("navigate_to_login", self._navigate_to_login)
        workflow.add_node("fill_credentials", self._fill_credentials)
        workflow.add_node("submit_login", self._submit_login)
        workflow.add_node("verify_authentication", self._verify_authentication)
        workflow.add_node("handle_captcha", self._handle_captcha)

        workflow.set_entry_point("navigate_to_login")
        workflow.add_conditional_edges(
            "navigate_to_login",
            self._continue_unless_failed,
            {"continue": "fill_credentials", "failed": END},
        )
        workflow.add_conditional_edges(
            "fill_credentials",
            self._continue_unless_failed,
            {"continue": "submit_login", "failed": END},
        )
        workflow.add_conditional_edges(
            "submit_login",
            self._continue_unless_failed,
            {"continue": "verify_authentication", "failed": END},
        )

        workflow.add_conditional_edges(
            "verify_authentication",
            self._should_handle_captcha,
            {"captcha": "handle_captcha", "complete": END},
        )

        # After handling CAPTCHA, go back to verify authentication
        workflow.add_edge("handle_captcha", "verify_authentication")

        return workflow.compile()

    def _navigate_to_login(self, state: AuthState) -> AuthState:
        try:
            state["driver"].get(LOGIN_URL)
        except WebDriverException as e:
            return {**state, "error": f"Failed to navigate to LinkedIn: {e.msg}"}
        return state

    def _fill_credentials(self, state: AuthState) -> AuthState:
        """Fill email and password fields."""
        wait = WebDriverWait(state["driver"], state["timeout"])
        try:
            email_field = wait.until(EC.presence_of_element_located((By.ID, "username")))
            email_field.clear()
            email_field.send_keys(state["email"])

            password_field = wait.until(EC.presence_of_element_located((By.ID, "password")))
            password_field.clear()
            password_field.send_keys(state["password"])
        except TimeoutException:
            return {**state, "error": "Login form not found - page structure may have changed"}
        except WebDriverException as e:
            return {**state, "error": f"Failed to fill credentials: {e.msg}"}
        return state

    def _submit_login(self, state: AuthState) -> AuthState:
        """Click the Sign In button and wait for the redirect."""
        driver = state["driver"]
        wait = WebDriverWait(driver, state["timeout"])
        try:
            sign_in = wait.until(
                EC.element_to_be_clickable((By.CSS_SELECTOR, "button[type=submit]"))
            )
            sign_in.click()
            wait.until(lambda d: "/login" not in d.current_url)
        except TimeoutException:
            return {**state, "error": "Login did not leave the sign-in page"}
        except WebDriverException as e:
            return {**state, "error": f"Failed to submit login: {e.msg}"}
        return state

    def _verify_authentication(self, state: AuthState) -> AuthState:
        """Verify that authentication was successful or detect CAPTCHA."""
        try:
            current_url = state["driver"].current_url
        except WebDriverException as e:
            return {
                **state,
                "authenticated": False,
                "captcha_detected": False,
                "error": f"Authentication verification error: {e.msg}",
            }

        if "/checkpoint/challenge" in current_url:
            self.logger.warning("CAPTCHA challenge detected", url=current_url)
            return {**state, "authenticated": False, "captcha_detected": True}

        if "linkedin.com" in current_url and "/login" not in current_url:
            return {**state, "authenticated": True, "captcha_detected": False, "error": ""}

        return {
            **state,
            "authenticated": False,
            "captcha_detected": False,
            "error": "Login failed - still on login page",
        }

    def _continue_unless_failed(self, state: AuthState) -> str:
        return "failed" if state["error"] else "continue"

    def _should_handle_captcha(self, state: AuthState) -> str:
        """Determine if CAPTCHA handling is needed."""
        if state["captcha_detected"] and not state["captcha_solved"]:
            return "captcha"
        return "complete"

    def _handle_captcha(self, state: AuthState) -> AuthState:
        """Wait for the user to solve the challenge in the browser window."""
        typer.echo("LinkedIn is showing a security challenge in the browser window.")
        typer.prompt(
            "Solve it, then press ENTER to continue",
            default="",
            show_default=False,
        )
        return {**state, "captcha_solved": True, "captcha_detected": False}

    def execute(self, email: str, password: str, driver: Any, timeout: float = 10.0) -> AuthState:
        """Execute the authentication workflow."""
        initial_state = AuthState(
            email=email,
            password=password,
            driver=driver,
            timeout=timeout,
            authenticated=False,
            captcha_detected=False,
            captcha_solved=False,
            error="",
        )
        return self.graph.invoke(initial_state)
