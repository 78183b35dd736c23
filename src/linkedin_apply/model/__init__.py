from linkedin_apply.model.job_search_state import EasyApplyState, JobSearchState
from linkedin_apply.model.types import (
    AppliedJobRecord,
    JobDetails,
    ListingOutcome,
    OnSiteOrRemoteFilter,
    Query,
    QueryFilters,
    QueryOptions,
    QueryOutcome,
    RelevanceFilter,
    SkipReason,
    StuckReason,
    TimeFilter,
    WizardOutcome,
    WizardResult,
)

__all__ = [
    "AppliedJobRecord",
    "EasyApplyState",
    "JobDetails",
    "JobSearchState",
    "ListingOutcome",
    "OnSiteOrRemoteFilter",
    "Query",
    "QueryFilters",
    "QueryOptions",
    "QueryOutcome",
    "RelevanceFilter",
    "SkipReason",
    "StuckReason",
    "TimeFilter",
    "WizardOutcome",
    "WizardResult",
]
