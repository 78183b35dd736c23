from dataclasses import dataclass
from typing import Optional

from linkedin_apply.model.types import JobDetails, QueryOptions, SkipReason
from linkedin_apply.services.applied_job_ledger import AppliedJobLedger


@dataclass(frozen=True)
class FilterDecision:
    """Accept, or Skip with a reason."""

    skip_reason: Optional[SkipReason] = None

    @property
    def accepted(self) -> bool:
        return self.skip_reason is None

    @classmethod
    def accept(cls) -> "FilterDecision":
        return cls()

    @classmethod
    def skip(cls, reason: SkipReason) -> "FilterDecision":
        return cls(skip_reason=reason)


class ApplicationFilter:
    """Screens a listing's details before any attempt to apply.

    Rules are checked in a fixed order and the first match wins. Evaluation
    never touches the ledger beyond reading it.
    """

    def should_apply(
        self,
        details: Optional[JobDetails],
        ledger: AppliedJobLedger,
        options: Optional[QueryOptions] = None,
    ) -> FilterDecision:
        options = options or QueryOptions()

        title = (details or {}).get("title") or ""
        company = (details or {}).get("company") or ""
        description = (details or {}).get("description") or ""

        if not title or not company or not description:
            return FilterDecision.skip(SkipReason.INCOMPLETE_DETAILS)

        # A previous attempt is never retried, whatever its outcome
        if ledger.contains(title, company):
            return FilterDecision.skip(SkipReason.ALREADY_APPLIED)

        if company in options.blacklist_companies:
            return FilterDecision.skip(SkipReason.BLACKLISTED)

        keywords = options.filters.description_keywords
        if keywords and not matches_any_keyword(description, keywords):
            return FilterDecision.skip(SkipReason.KEYWORD_MISMATCH)

        return FilterDecision.accept()


def matches_any_keyword(description: str, keywords) -> bool:
    lowered = description.lower()
    return any(keyword.lower() in lowered for keyword in keywords)
