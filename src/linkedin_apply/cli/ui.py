"""Rich terminal UI components for the CLI."""

import json
from typing import List

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from linkedin_apply.model.types import (
    AppliedJobRecord,
    Query,
    QueryOutcome,
    count_applied,
    count_failed,
    count_skipped,
)
from linkedin_apply.utils.search_url import build_search_url


class TerminalUI:
    """Rich terminal UI for Easy Apply runs."""

    def __init__(self, output_format: str = "rich"):
        self.console = Console()
        self.output_format = output_format

    def print_header(self):
        if self.output_format != "rich":
            return

        panel = Panel(
            Text("LinkedIn Easy Apply", style="bold blue"),
            subtitle="Unattended Easy Apply submissions",
            border_style="blue",
        )
        self.console.print(panel)
        self.console.print()

    def print_queries(self, queries: List[Query], show_urls: bool = False):
        """Print the configured queries, one row per expanded location."""
        if self.output_format == "json":
            payload = []
            for query in queries:
                entry = query.model_dump(mode="json", by_alias=True)
                if show_urls:
                    entry["searchUrl"] = build_search_url(query)
                payload.append(entry)
            print(json.dumps(payload, indent=2))
            return

        table = Table(title=f"Queries ({len(queries)})", show_header=True, header_style="bold magenta")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Keywords", style="cyan")
        table.add_column("Location", style="green")
        table.add_column("Filters")
        table.add_column("Blacklist", style="red")
        if show_urls:
            table.add_column("Search URL", style="dim", overflow="fold")

        for i, query in enumerate(queries, 1):
            filters = query.options.filters
            parts = []
            if filters.relevance:
                parts.append(f"sort={filters.relevance.name}")
            if filters.time_filter:
                parts.append(f"posted={filters.time_filter.name}")
            workplaces = filters.on_site_or_remote
            if workplaces:
                if not isinstance(workplaces, list):
                    workplaces = [workplaces]
                parts.append("workplace=" + ",".join(w.name for w in workplaces))
            if filters.description_keywords:
                parts.append("keywords=" + ",".join(filters.description_keywords))
            row = [
                str(i),
                query.keywords or "-",
                query.options.location or "-",
                " ".join(parts) or "-",
                ", ".join(query.options.blacklist_companies) or "-",
            ]
            if show_urls:
                row.append(build_search_url(query))
            table.add_row(*row)
        self.console.print(table)

    def print_history(self, records: List[AppliedJobRecord]):
        if self.output_format == "json":
            print(json.dumps([r.model_dump(by_alias=True) for r in records], indent=2))
            return

        table = Table(title=f"Applied jobs ({len(records)})", show_header=True, header_style="bold magenta")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Title", style="cyan")
        table.add_column("Company", style="green")
        table.add_column("Submitted")

        for i, record in enumerate(records, 1):
            submitted = Text("yes", style="green") if record.applied_successfully else Text("no", style="red")
            table.add_row(str(i), record.title, record.company, submitted)

        submitted_count = sum(1 for r in records if r.applied_successfully)
        table.caption = f"{submitted_count} submitted, {len(records) - submitted_count} not submitted"
        self.console.print(table)

    def print_run_summary(self, outcomes: List[QueryOutcome]):
        """Print one row per query with applied/skipped/failed counts."""
        if self.output_format == "json":
            print(json.dumps([self._outcome_summary(o) for o in outcomes], indent=2))
            return

        table = Table(title="Run summary", show_header=True, header_style="bold magenta")
        table.add_column("Query", style="cyan")
        table.add_column("Pages", justify="right")
        table.add_column("Listings", justify="right")
        table.add_column("Applied", justify="right", style="green")
        table.add_column("Skipped", justify="right", style="yellow")
        table.add_column("Failed", justify="right", style="red")
        table.add_column("Status")

        for outcome in outcomes:
            summary = self._outcome_summary(outcome)
            table.add_row(
                summary["query"],
                str(summary["pages"]),
                str(summary["listings"]),
                str(summary["applied"]),
                str(summary["skipped"]),
                str(summary["failed"]),
                Text("aborted", style="red") if summary["aborted"] else Text("done", style="green"),
            )
        self.console.print(table)

        errors = [error for outcome in outcomes for error in outcome["errors"]]
        self.print_errors(errors)

    def print_errors(self, errors: List[str]):
        if not errors or self.output_format == "json":
            return

        self.console.print("\nErrors encountered:", style="bold red")
        for i, error in enumerate(errors, 1):
            self.console.print(f"  {i}. {error}", style="red")

    def print_failure(self, message: str):
        self.console.print(message, style="bold red")

    @staticmethod
    def _outcome_summary(outcome: QueryOutcome) -> dict:
        return {
            "query": outcome["query"].label,
            "pages": outcome["pages_processed"],
            "listings": len(outcome["listings"]),
            "applied": count_applied(outcome),
            "skipped": count_skipped(outcome),
            "failed": count_failed(outcome),
            "aborted": outcome["aborted"],
        }
