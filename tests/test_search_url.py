"""Tests for mapping queries onto LinkedIn job search URLs."""

from linkedin_apply.model.types import (
    OnSiteOrRemoteFilter,
    Query,
    QueryFilters,
    QueryOptions,
    RelevanceFilter,
    TimeFilter,
)
from linkedin_apply.utils.search_url import (
    JOB_SEARCH_BASE_URL,
    build_search_params,
    build_search_url,
)


def test_full_query_emits_parameters_in_fixed_order():
    query = Query(
        keywords="Node",
        options=QueryOptions(
            location="Toronto",
            filters=QueryFilters(
                relevance=RelevanceFilter.RECENT,
                time_filter=TimeFilter.WEEK,
                on_site_or_remote=OnSiteOrRemoteFilter.REMOTE,
                simplified_job=True,
            ),
        ),
    )

    assert build_search_params(query) == [
        ("keywords", "Node"),
        ("location", "Toronto"),
        ("sortBy", "DD"),
        ("f_TPR", "r604800"),
        ("f_WT", "2"),
        ("f_AL", "true"),
    ]
    assert build_search_url(query) == (
        "https://www.linkedin.com/jobs/search/"
        "?keywords=Node&location=Toronto&sortBy=DD&f_TPR=r604800&f_WT=2&f_AL=true"
    )


def test_multiple_workplace_types_are_comma_joined():
    query = Query(
        keywords="Python",
        options=QueryOptions(
            filters=QueryFilters(
                on_site_or_remote=[OnSiteOrRemoteFilter.ON_SITE, OnSiteOrRemoteFilter.HYBRID]
            )
        ),
    )

    assert ("f_WT", "1,3") in build_search_params(query)
    assert build_search_url(query).endswith("f_WT=1%2C3")


def test_values_are_url_encoded():
    query = Query(keywords="Senior Engineer", options=QueryOptions(location="São Paulo, Brasil"))

    url = build_search_url(query)

    assert "keywords=Senior+Engineer" in url
    assert "location=S%C3%A3o+Paulo%2C+Brasil" in url


def test_simplified_job_false_and_missing_fields_are_omitted():
    query = Query(keywords="Go", options=QueryOptions(filters=QueryFilters(simplified_job=False)))

    assert build_search_params(query) == [("keywords", "Go")]


def test_empty_query_is_the_bare_search_page():
    assert build_search_url(Query()) == JOB_SEARCH_BASE_URL


def test_enum_names_are_accepted_from_query_files():
    filters = QueryFilters.model_validate(
        {"relevance": "RECENT", "timeFilter": "day", "onSiteOrRemote": ["REMOTE", "3"]}
    )

    assert filters.relevance is RelevanceFilter.RECENT
    assert filters.time_filter is TimeFilter.DAY
    assert filters.on_site_or_remote == [OnSiteOrRemoteFilter.REMOTE, OnSiteOrRemoteFilter.HYBRID]
