from typing import List, Tuple
from urllib.parse import urlencode

from linkedin_apply.model.types import Query

JOB_SEARCH_BASE_URL = "https://www.linkedin.com/jobs/search/"


def build_search_params(query: Query) -> List[Tuple[str, str]]:
    """Map a query onto LinkedIn job search parameters, in a fixed order."""
    options = query.options
    filters = options.filters
    params: List[Tuple[str, str]] = []

    if query.keywords:
        params.append(("keywords", query.keywords))

    if options.location:
        params.append(("location", options.location))

    if filters.relevance:
        params.append(("sortBy", filters.relevance.value))

    if filters.time_filter:
        params.append(("f_TPR", filters.time_filter.value))

    if filters.on_site_or_remote:
        work_types = filters.on_site_or_remote
        if isinstance(work_types, list):
            value = ",".join(work_type.value for work_type in work_types)
        else:
            value = work_types.value
        if value:
            params.append(("f_WT", value))

    if filters.simplified_job:
        params.append(("f_AL", "true"))

    return params


def build_search_url(query: Query, base_url: str = JOB_SEARCH_BASE_URL) -> str:
    params = build_search_params(query)
    if not params:
        return base_url
    return f"{base_url}?{urlencode(params)}"
