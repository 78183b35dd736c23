from enum import Enum
from typing import Any, List, Optional, TypedDict, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RelevanceFilter(str, Enum):
    RECENT = "DD"
    RELEVANT = "R"


class TimeFilter(str, Enum):
    DAY = "r86400"
    WEEK = "r604800"
    MONTH = "r2592000"


class OnSiteOrRemoteFilter(str, Enum):
    ON_SITE = "1"
    REMOTE = "2"
    HYBRID = "3"


class QueryFilters(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    relevance: Optional[RelevanceFilter] = None
    on_site_or_remote: Optional[
        Union[OnSiteOrRemoteFilter, List[OnSiteOrRemoteFilter]]
    ] = Field(default=None, alias="onSiteOrRemote")
    time_filter: Optional[TimeFilter] = Field(default=None, alias="timeFilter")
    simplified_job: bool = Field(default=False, alias="simplifiedJob")
    description_keywords: List[str] = Field(
        default_factory=list, alias="descriptionKeywords"
    )

    # Query files may name enum members ("REMOTE") instead of their values ("2")
    @field_validator("relevance", mode="before")
    @classmethod
    def _relevance_by_name(cls, v):
        return _member_by_name(RelevanceFilter, v)

    @field_validator("time_filter", mode="before")
    @classmethod
    def _time_filter_by_name(cls, v):
        return _member_by_name(TimeFilter, v)

    @field_validator("on_site_or_remote", mode="before")
    @classmethod
    def _on_site_or_remote_by_name(cls, v):
        if isinstance(v, (list, tuple)):
            return [_member_by_name(OnSiteOrRemoteFilter, item) for item in v]
        return _member_by_name(OnSiteOrRemoteFilter, v)


def _member_by_name(enum_cls, value):
    if isinstance(value, str) and value.upper() in enum_cls.__members__:
        return enum_cls[value.upper()]
    return value


class QueryOptions(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    location: Optional[str] = None
    filters: QueryFilters = Field(default_factory=QueryFilters)
    blacklist_companies: List[str] = Field(
        default_factory=list, alias="blacklistCompanies"
    )


class Query(BaseModel):
    """A search request plus the screening options applied to its listings."""

    model_config = ConfigDict(frozen=True)

    keywords: Optional[str] = None
    options: QueryOptions = Field(default_factory=QueryOptions)

    def with_location(self, location: str) -> "Query":
        """Clone this query for a single target location."""
        options = self.options.model_copy(update={"location": location})
        return self.model_copy(update={"options": options})

    @property
    def label(self) -> str:
        location = self.options.location or "anywhere"
        return f"{self.keywords or '*'} @ {location}"


class AppliedJobRecord(BaseModel):
    """One ledger entry. Serialized with the camelCase key used by older ledgers."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    company: str
    applied_successfully: bool = Field(alias="appliedSuccessfully")

    @field_validator("title", "company")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title and company must not be blank")
        return v

    @property
    def key(self) -> tuple:
        return (self.title, self.company)


class JobDetails(TypedDict):
    title: str
    company: str
    description: str


class SkipReason(str, Enum):
    INCOMPLETE_DETAILS = "incomplete-details"
    ALREADY_APPLIED = "already-applied"
    BLACKLISTED = "blacklisted"
    KEYWORD_MISMATCH = "keyword-mismatch"


class WizardOutcome(str, Enum):
    COMPLETED = "completed"
    STUCK = "stuck"
    NO_RESUME_AVAILABLE = "no-resume-available"
    ALREADY_APPLIED = "already-applied"


class StuckReason(str, Enum):
    ZERO_PROGRESS = "zero-progress"
    NO_PROGRESS = "no-progress"
    STEP_LIMIT = "step-limit"


class WizardResult(TypedDict):
    outcome: WizardOutcome
    record: Optional[AppliedJobRecord]
    stuck_reason: Optional[StuckReason]
    last_progress: int
    steps: int


class ListingOutcome(TypedDict):
    position: int
    title: Optional[str]
    company: Optional[str]
    skip_reason: Optional[SkipReason]
    wizard_outcome: Optional[WizardOutcome]
    error: Optional[str]


class QueryOutcome(TypedDict):
    query: Query
    search_url: Optional[str]
    pages_processed: int
    listings: List[ListingOutcome]
    aborted: bool
    errors: List[str]


def count_applied(outcome: QueryOutcome) -> int:
    return sum(
        1
        for listing in outcome["listings"]
        if listing["wizard_outcome"] == WizardOutcome.COMPLETED
    )


def count_skipped(outcome: QueryOutcome) -> int:
    return sum(1 for listing in outcome["listings"] if listing["skip_reason"])


def count_failed(outcome: QueryOutcome) -> int:
    return sum(
        1
        for listing in outcome["listings"]
        if listing["error"]
        or listing["wizard_outcome"]
        in (WizardOutcome.STUCK, WizardOutcome.NO_RESUME_AVAILABLE)
    )


JobListingHandle = Any
