"""Shared fixtures: an in-memory automation driver scripted with result pages."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest

from linkedin_apply.interfaces.services import (
    AutomationError,
    ElementNotFoundError,
    IAutomationDriver,
)
from linkedin_apply.services.applied_job_ledger import (
    AppliedJobLedger,
    JsonLedgerStore,
    LedgerPersistenceError,
)
from linkedin_apply.utils.linkedin_selectors import LinkedInJobSelectors as S


@dataclass(eq=False)
class FakeListing:
    """One job card plus how its Easy Apply modal behaves."""

    title: str
    company: str
    description: str = "Node and AWS backend role"
    progress: List[int] = field(default_factory=lambda: [50, 100])
    board_applied: bool = False
    has_resume: bool = True
    fail_on_open: bool = False
    # 1-based progress read on which the progress bar is gone
    progress_vanishes_at: Optional[int] = None
    # Details reads that still show the previously opened listing
    stale_detail_reads: int = 0


class FakeDriver(IAutomationDriver):
    """Scripted stand-in for a browser session.

    ``pages`` holds the listings of each results page in order. The progress
    bar of an open modal returns the listing's ``progress`` values one per
    read, repeating the last value once the sequence is exhausted.
    """

    def __init__(
        self,
        pages: Optional[List[List[FakeListing]]] = None,
        navigation_failures: int = 0,
        fail_pagination_lookup: bool = False,
    ):
        self.pages = pages if pages is not None else [[]]
        self.navigation_failures = navigation_failures
        self.fail_pagination_lookup = fail_pagination_lookup

        self.page_index = 0
        self.active: Optional[FakeListing] = None
        self.previous_active: Optional[FakeListing] = None
        self._stale_left = 0
        self.modal_open = False
        self.confirm_pending = False
        self.last_progress: Optional[int] = None
        self._reads = 0

        self.visited_urls: List[str] = []
        self.clicks: List[Any] = []
        self.submitted: List[str] = []
        self.discarded: List[str] = []
        self.pages_seen: List[int] = []

    # --- IAutomationDriver ---

    async def navigate(self, url: str) -> None:
        self.visited_urls.append(url)
        if self.navigation_failures > 0:
            self.navigation_failures -= 1
            raise AutomationError(f"Failed to open {url}: net::ERR_CONNECTION_RESET")
        self.page_index = 0

    async def wait_for_element(self, selector: str) -> Any:
        if selector == S.CONTAINER:
            if not self.pages_seen or self.pages_seen[-1] != self.page_index:
                self.pages_seen.append(self.page_index)
            return "results-container"
        if selector == S.DETAILS and self.active is not None:
            return self.active
        if (
            selector == S.PROGRESS_BAR
            and self.modal_open
            and self._reads + 1 == self.active.progress_vanishes_at
        ):
            raise ElementNotFoundError(selector, "did not appear in time")
        if selector in (S.PRIMARY_BUTTON, S.PROGRESS_BAR, S.MODAL_DISMISS) and self.modal_open:
            return selector
        if selector == S.RESUME_ITEM and self.modal_open and self.active.has_resume:
            return selector
        if selector == S.CONFIRM_DISCARD and self.confirm_pending:
            return selector
        raise ElementNotFoundError(selector, "did not appear in time")

    async def click(self, target: Any) -> None:
        self.clicks.append(target)

        if isinstance(target, FakeListing):
            if target.fail_on_open:
                raise AutomationError("Clicked element is no longer attached")
            self.previous_active = self.active
            self.active = target
            self._stale_left = target.stale_detail_reads
            return

        if target == S.APPLY_BUTTON:
            if self.active is None or self.active.board_applied:
                raise ElementNotFoundError(target, "is not clickable")
            self.modal_open = True
            self.last_progress = None
            self._reads = 0
            return

        if target == S.PRIMARY_BUTTON and self.modal_open:
            if self.last_progress == 100:
                self.submitted.append(self.active.title)
            return

        if target == S.RESUME_ITEM_BUTTON and self.modal_open and self.active.has_resume:
            return

        if target == S.MODAL_DISMISS and self.modal_open:
            self.modal_open = False
            self.confirm_pending = self.active.title not in self.submitted
            return

        if target == S.CONFIRM_DISCARD and self.confirm_pending:
            self.confirm_pending = False
            self.discarded.append(self.active.title)
            return

        if target == S.PAGINATION_NEXT and self._has_next_page():
            self.page_index += 1
            self.active = None
            return

        raise ElementNotFoundError(str(target), "is not clickable")

    async def scroll_to_end(self, container: Any) -> None:
        pass

    async def extract_fields(self, handle: Any, field_selectors: Dict[str, str]) -> Dict[str, str]:
        if self._stale_left > 0 and self.previous_active is not None:
            self._stale_left -= 1
            handle = self.previous_active
        values = {
            "title": handle.title,
            "company": handle.company,
            "description": handle.description,
        }
        return {name: values.get(name, "") for name in field_selectors}

    async def read_numeric_attribute(self, handle: Any, attribute: str) -> int:
        sequence = self.active.progress
        value = sequence[min(self._reads, len(sequence) - 1)]
        self._reads += 1
        self.last_progress = value
        return value

    async def find_optional(self, selector: str) -> Optional[Any]:
        if selector == S.PAGINATION_NEXT:
            if self.fail_pagination_lookup:
                raise AutomationError("Lookup of pagination failed")
            return "next-page" if self._has_next_page() else None
        return None

    async def find_all(self, selector: str) -> List[Any]:
        if selector == S.JOB_CARDS:
            return list(self.pages[self.page_index])
        return []

    def _has_next_page(self) -> bool:
        return self.page_index + 1 < len(self.pages)


class FailingStore(JsonLedgerStore):
    """JSON store whose writes always fail."""

    def save(self, records) -> None:
        raise LedgerPersistenceError("Cannot write ledger: disk full")


@pytest.fixture
def ledger_path(tmp_path):
    return tmp_path / "applied_jobs.json"


@pytest.fixture
def ledger(ledger_path):
    """A loaded, empty JSON-backed ledger."""
    ledger = AppliedJobLedger(JsonLedgerStore(str(ledger_path)))
    ledger.load()
    return ledger
