import asyncio
import uuid
from typing import List, Optional

from linkedin_apply.config.config_loader import AppConfig, load_config, load_queries
from linkedin_apply.model.types import Query, QueryOutcome
from linkedin_apply.services.applied_job_ledger import AppliedJobLedger, create_ledger_store
from linkedin_apply.services.browser_manager_service import BrowserManagerService
from linkedin_apply.services.linkedin_auth_service import LinkedInAuthService
from linkedin_apply.services.query_runner import QueryRunner
from linkedin_apply.services.selenium_driver import SeleniumAutomationDriver
from linkedin_apply.utils.logging_config import configure_logging, get_logger


class JobApplicationService:
    """Wires config, browser, authentication and the query runner together."""

    def __init__(self, config: Optional[AppConfig] = None, config_path: Optional[str] = None):
        self.config = config or load_config(config_path)
        self.trace_id = str(uuid.uuid4())
        self.logger = get_logger(self.trace_id)

        self.browser_manager = BrowserManagerService(
            headless=self.config.browser.headless,
            use_undetected=self.config.browser.use_undetected,
            browser_type=self.config.browser.browser_type,
            chrome_version=self.config.browser.chrome_version,
            chrome_binary_path=self.config.browser.chrome_binary_path,
        )
        self.auth_service = LinkedInAuthService(
            cookie_path=self.config.linkedin.cookie_path,
            email=self.config.linkedin.email,
            password=self.config.linkedin.password,
            timeout=self.config.browser.wait_timeout,
            trace_id=self.trace_id,
        )

    def create_ledger(self) -> AppliedJobLedger:
        ledger_config = self.config.ledger
        store = create_ledger_store(ledger_config.backend, ledger_config.path, ledger_config.db_url)
        return AppliedJobLedger(store, trace_id=self.trace_id)

    def run(self, queries: Optional[List[Query]] = None) -> List[QueryOutcome]:
        """
        Run every query in a fresh authenticated browser session.

        Args:
            queries: Queries to run; defaults to the configured queries file

        Returns:
            One QueryOutcome per query, in order

        Raises:
            ConfigError, AuthenticationError, LedgerPersistenceError
        """
        configure_logging(
            log_level=self.config.observability.log_level,
            log_file=self.config.observability.log_file,
            default_trace_id=self.trace_id,
        )
        if queries is None:
            queries = load_queries(self.config.queries_path)

        self.logger.info("Starting run", queries=len(queries))
        ledger = self.create_ledger()

        try:
            web_driver = self.browser_manager.start_browser()
            self.auth_service.authenticate(web_driver)

            driver = SeleniumAutomationDriver(
                web_driver,
                timeout=self.config.browser.wait_timeout,
                slow_mo=self.config.browser.slow_mo,
            )
            runner = QueryRunner(
                driver=driver,
                ledger=ledger,
                max_pages=self.config.runner.max_pages_per_query,
                max_wizard_steps=self.config.runner.max_wizard_steps,
                record_board_applied=self.config.ledger.record_board_applied,
                recursion_limit=self.config.runner.recursion_limit,
                trace_id=self.trace_id,
            )
            return asyncio.run(runner.run(queries))
        finally:
            self.browser_manager.close_browser()
            self.logger.info("Browser closed")
