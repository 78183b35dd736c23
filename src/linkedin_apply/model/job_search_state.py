from typing import Any, List, Optional, TypedDict

from linkedin_apply.model.types import (
    JobDetails,
    ListingOutcome,
    Query,
    StuckReason,
    WizardOutcome,
)

MAX_PAGES_PER_QUERY = 5


class JobSearchState(TypedDict):
    query: Query
    search_url: Optional[str]
    current_page: int
    pages_processed: int
    listings: List[Any]
    listing_index: int
    listing_outcomes: List[ListingOutcome]
    has_next_page: bool
    aborted: bool
    errors: List[str]
    trace_id: str


class EasyApplyState(TypedDict):
    listing: Any
    details: JobDetails
    current_step: str
    outcome: Optional[WizardOutcome]
    stuck_reason: Optional[StuckReason]
    progress: int
    last_progress: int
    steps: int
    trace_id: str
