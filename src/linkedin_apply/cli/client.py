"""Main CLI client for the LinkedIn Easy Apply runner."""

import sys
from typing import Optional

import typer
from loguru import logger

from linkedin_apply.cli.ui import TerminalUI
from linkedin_apply.config.config_loader import ConfigError, load_config, load_queries
from linkedin_apply.services.applied_job_ledger import LedgerPersistenceError, create_ledger_store


class JobApplyCLI:
    """Command-line interface for the LinkedIn Easy Apply runner."""

    def __init__(self):
        self.app = typer.Typer(
            name="linkedin-apply",
            help="Search LinkedIn jobs and submit Easy Apply applications unattended",
            no_args_is_help=True,
            rich_markup_mode=None,
        )
        self.ui = TerminalUI()

        self._register_commands()

    def _register_commands(self):
        """Register all CLI commands."""

        @self.app.command("run")
        def run(
            config_file: Optional[str] = typer.Option(
                None, "--config", "-c", help="Path to applier.yaml"
            ),
            queries_file: Optional[str] = typer.Option(
                None, "--queries", "-q", help="Path to queries.yaml (overrides config)"
            ),
            headless: Optional[bool] = typer.Option(
                None, "--headless/--no-headless", help="Run the browser without a window"
            ),
            record_board_applied: Optional[bool] = typer.Option(
                None,
                "--record-board-applied/--no-record-board-applied",
                help="Also record listings LinkedIn already marks as applied",
            ),
        ):
            """Run every configured query and apply to matching listings."""
            self._run_command(config_file, queries_file, headless, record_board_applied)

        @self.app.command("history")
        def history(
            config_file: Optional[str] = typer.Option(None, "--config", "-c"),
            output_format: str = typer.Option("rich", "--format", "-f", help="rich or json"),
        ):
            """Show the applied-jobs ledger."""
            self._history_command(config_file, output_format)

        @self.app.command("queries")
        def queries(
            config_file: Optional[str] = typer.Option(None, "--config", "-c"),
            queries_file: Optional[str] = typer.Option(None, "--queries", "-q"),
            output_format: str = typer.Option("rich", "--format", "-f", help="rich or json"),
        ):
            """Validate and list the configured queries after location expansion."""
            self._queries_command(config_file, queries_file, output_format)

    def _run_command(self, config_file, queries_file, headless, record_board_applied):
        # Deferred so that history/queries work without a browser stack
        from linkedin_apply.services.job_application_service import JobApplicationService
        from linkedin_apply.services.linkedin_auth_service import AuthenticationError

        try:
            config = load_config(config_file)
            if queries_file:
                config.queries_path = queries_file
            if headless is not None:
                config.browser.headless = headless
            if record_board_applied is not None:
                config.ledger.record_board_applied = record_board_applied

            queries = load_queries(config.queries_path)
            self.ui.print_header()
            self.ui.print_queries(queries)

            outcomes = JobApplicationService(config=config).run(queries)
            self.ui.print_run_summary(outcomes)

        except KeyboardInterrupt:
            self.ui.print_failure("\nRun interrupted by user")
            sys.exit(1)
        except (ConfigError, AuthenticationError, LedgerPersistenceError) as e:
            self.ui.print_failure(f"Run failed: {e}")
            logger.error("Run failed", error=str(e))
            sys.exit(1)

    def _history_command(self, config_file, output_format):
        self.ui.output_format = output_format
        try:
            config = load_config(config_file)
            store = create_ledger_store(config.ledger.backend, config.ledger.path, config.ledger.db_url)
            records = store.load()
        except (ConfigError, LedgerPersistenceError) as e:
            self.ui.print_failure(f"Could not read ledger: {e}")
            sys.exit(1)

        self.ui.print_history(records)

    def _queries_command(self, config_file, queries_file, output_format):
        self.ui.output_format = output_format
        try:
            config = load_config(config_file)
            queries = load_queries(queries_file or config.queries_path)
        except ConfigError as e:
            self.ui.print_failure(str(e))
            sys.exit(1)

        self.ui.print_queries(queries, show_urls=True)

    def run(self):
        """Run the CLI application."""
        self.app()


def main():
    JobApplyCLI().run()


if __name__ == "__main__":
    main()
