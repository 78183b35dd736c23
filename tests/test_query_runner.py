"""Tests for running queries across result pages."""

import asyncio
import json

import pytest

from linkedin_apply.model.job_search_state import MAX_PAGES_PER_QUERY
from linkedin_apply.model.types import (
    AppliedJobRecord,
    Query,
    QueryFilters,
    QueryOptions,
    SkipReason,
    WizardOutcome,
    count_applied,
    count_failed,
    count_skipped,
)
from linkedin_apply.services.applied_job_ledger import (
    AppliedJobLedger,
    JsonLedgerStore,
    LedgerPersistenceError,
)
from linkedin_apply.services.query_runner import QueryRunner
from linkedin_apply.utils.linkedin_selectors import LinkedInJobSelectors as S

from conftest import FailingStore, FakeDriver, FakeListing


def node_query(**option_overrides) -> Query:
    return Query(keywords="Node", options=QueryOptions(**option_overrides))


def run(driver, ledger, queries, **kwargs):
    runner = QueryRunner(driver, ledger, trace_id="test", **kwargs)
    runner.search_graph.details_refresh_interval = 0
    return asyncio.run(runner.run(queries))


class TestPagination:
    def test_never_more_than_five_pages(self, ledger):
        pages = [[FakeListing(f"Job {i}", f"Company {i}")] for i in range(8)]
        driver = FakeDriver(pages=pages)

        [outcome] = run(driver, ledger, node_query())

        assert outcome["pages_processed"] == MAX_PAGES_PER_QUERY
        assert driver.pages_seen == [0, 1, 2, 3, 4]
        assert len(outcome["listings"]) == 5
        assert not outcome["aborted"]

    def test_configured_page_limit_is_honored(self, ledger):
        pages = [[FakeListing(f"Job {i}", f"Company {i}")] for i in range(8)]

        [outcome] = run(FakeDriver(pages=pages), ledger, node_query(), max_pages=2)

        assert outcome["pages_processed"] == 2

    def test_stops_when_no_next_page(self, ledger):
        pages = [[FakeListing(f"Job {i}", f"Company {i}")] for i in range(3)]

        [outcome] = run(FakeDriver(pages=pages), ledger, node_query())

        assert outcome["pages_processed"] == 3
        assert not outcome["aborted"]
        assert outcome["errors"] == []

    def test_pagination_lookup_error_means_no_more_pages(self, ledger):
        pages = [[FakeListing("Job 0", "Company 0")], [FakeListing("Job 1", "Company 1")]]
        driver = FakeDriver(pages=pages, fail_pagination_lookup=True)

        [outcome] = run(driver, ledger, node_query())

        assert outcome["pages_processed"] == 1
        assert not outcome["aborted"]

    def test_empty_page_still_checks_for_next_page(self, ledger):
        pages = [[], [FakeListing("Job 1", "Company 1")]]

        [outcome] = run(FakeDriver(pages=pages), ledger, node_query())

        assert outcome["pages_processed"] == 2
        assert count_applied(outcome) == 1

    def test_next_page_is_clicked_not_renavigated(self, ledger):
        pages = [[FakeListing("Job 0", "Company 0")], [FakeListing("Job 1", "Company 1")]]
        driver = FakeDriver(pages=pages)

        run(driver, ledger, node_query())

        assert len(driver.visited_urls) == 1


class TestQueryIsolation:
    def test_navigation_failure_aborts_only_that_query(self, ledger):
        driver = FakeDriver(pages=[[FakeListing("API Dev", "Acme")]], navigation_failures=1)

        first, second = run(driver, ledger, [node_query(location="Lisbon"), node_query()])

        assert first["aborted"]
        assert first["pages_processed"] == 0
        assert first["listings"] == []
        assert "Failed to navigate to search" in first["errors"][0]
        assert not second["aborted"]
        assert count_applied(second) == 1

    def test_queries_run_in_order(self, ledger):
        driver = FakeDriver(pages=[[]])

        run(driver, ledger, [node_query(location="Lisbon"), node_query(location="Porto")])

        assert "Lisbon" in driver.visited_urls[0]
        assert "Porto" in driver.visited_urls[1]

    def test_failing_listing_does_not_stop_the_page(self, ledger):
        broken = FakeListing("Broken", "Acme", fail_on_open=True)
        healthy = FakeListing("API Dev", "Acme")

        [outcome] = run(FakeDriver(pages=[[broken, healthy]]), ledger, node_query())

        first, second = outcome["listings"]
        assert first["error"]
        assert first["wizard_outcome"] is None
        assert second["wizard_outcome"] is WizardOutcome.COMPLETED
        assert count_failed(outcome) == 1
        assert [r.title for r in ledger] == ["API Dev"]

    def test_error_inside_open_wizard_discards_it_and_records_nothing(self, ledger):
        vanishing = FakeListing(
            "API Dev", "Acme", progress=[10, 40, 70, 100], progress_vanishes_at=3
        )
        driver = FakeDriver(pages=[[vanishing, FakeListing("Ops", "Initech")]])

        [outcome] = run(driver, ledger, node_query())

        first, second = outcome["listings"]
        assert first["error"]
        assert first["wizard_outcome"] is None
        assert driver.discarded == ["API Dev"]
        assert S.CONFIRM_DISCARD in driver.clicks
        assert ledger.find("API Dev", "Acme") is None
        assert second["wizard_outcome"] is WizardOutcome.COMPLETED
        assert driver.submitted == ["Ops"]
        assert [r.title for r in ledger] == ["Ops"]

    def test_details_pane_is_reread_until_it_shows_the_clicked_listing(self, ledger):
        lagging = FakeListing("Ops", "Initech", stale_detail_reads=2)
        driver = FakeDriver(pages=[[FakeListing("API Dev", "Acme"), lagging]])

        [outcome] = run(driver, ledger, node_query())

        first, second = outcome["listings"]
        assert (second["title"], second["company"]) == ("Ops", "Initech")
        assert second["skip_reason"] is None
        assert driver.submitted == ["API Dev", "Ops"]
        assert [r.title for r in ledger] == ["API Dev", "Ops"]

    def test_ledger_persistence_error_is_fatal(self, ledger_path):
        ledger = AppliedJobLedger(FailingStore(str(ledger_path)))
        driver = FakeDriver(pages=[[FakeListing("API Dev", "Acme"), FakeListing("Ops", "Acme")]])

        with pytest.raises(LedgerPersistenceError):
            run(driver, ledger, node_query())

        assert driver.submitted == ["API Dev"]


class TestRecording:
    def test_previously_applied_jobs_are_skipped(self, ledger_path):
        JsonLedgerStore(str(ledger_path)).save(
            [AppliedJobRecord(title="API Dev", company="Acme", applied_successfully=False)]
        )
        ledger = AppliedJobLedger(JsonLedgerStore(str(ledger_path)))
        driver = FakeDriver(pages=[[FakeListing("API Dev", "Acme")]])

        [outcome] = run(driver, ledger, node_query())

        assert outcome["listings"][0]["skip_reason"] is SkipReason.ALREADY_APPLIED
        assert driver.submitted == []
        assert len(ledger) == 1

    def test_stuck_wizard_is_recorded_as_failure(self, ledger):
        driver = FakeDriver(pages=[[FakeListing("API Dev", "Acme", progress=[20, 55, 55])]])

        run(driver, ledger, node_query())

        assert ledger.find("API Dev", "Acme").applied_successfully is False

    def test_board_applied_is_not_recorded_by_default(self, ledger):
        driver = FakeDriver(pages=[[FakeListing("API Dev", "Acme", board_applied=True)]])

        [outcome] = run(driver, ledger, node_query())

        assert outcome["listings"][0]["wizard_outcome"] is WizardOutcome.ALREADY_APPLIED
        assert len(ledger) == 0

    def test_board_applied_can_be_recorded(self, ledger):
        driver = FakeDriver(pages=[[FakeListing("API Dev", "Acme", board_applied=True)]])

        run(driver, ledger, node_query(), record_board_applied=True)

        assert ledger.find("API Dev", "Acme").applied_successfully is False

    def test_duplicate_listing_on_later_page_is_applied_once(self, ledger):
        pages = [[FakeListing("API Dev", "Acme")], [FakeListing("API Dev", "Acme")]]
        driver = FakeDriver(pages=pages)

        [outcome] = run(driver, ledger, node_query())

        assert driver.submitted == ["API Dev"]
        assert outcome["listings"][1]["skip_reason"] is SkipReason.ALREADY_APPLIED
        assert len(ledger) == 1


def test_end_to_end_blacklist_and_apply(ledger, ledger_path):
    query = Query(
        keywords="Node",
        options=QueryOptions(
            blacklist_companies=["Toro"],
            filters=QueryFilters(description_keywords=["Node", "AWS"]),
        ),
    )
    page = [
        FakeListing("Backend Eng", "Toro", description="Node backend"),
        FakeListing("API Dev", "Acme", description="Node/AWS role", progress=[0, 50, 100]),
    ]
    driver = FakeDriver(pages=[page])

    [outcome] = run(driver, ledger, query)

    toro, acme = outcome["listings"]
    assert toro["skip_reason"] is SkipReason.BLACKLISTED
    assert acme["wizard_outcome"] is WizardOutcome.COMPLETED
    assert count_skipped(outcome) == 1
    assert count_applied(outcome) == 1
    assert json.loads(ledger_path.read_text()) == [
        {"title": "API Dev", "company": "Acme", "appliedSuccessfully": True}
    ]
