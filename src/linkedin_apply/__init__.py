# LinkedIn Easy Apply runner - main exports
# Browser and CLI modules are imported directly by the code that needs them

from linkedin_apply.model.types import (
    AppliedJobRecord,
    Query,
    QueryFilters,
    QueryOptions,
    QueryOutcome,
)

__all__ = [
    "AppliedJobRecord",
    "Query",
    "QueryFilters",
    "QueryOptions",
    "QueryOutcome",
]
