"""Tests for the Easy Apply wizard state machine."""

import asyncio

import pytest

from linkedin_apply.graphs.easy_apply_graph import ApplicationWizardDriver
from linkedin_apply.model.types import JobDetails, StuckReason, WizardOutcome
from linkedin_apply.utils.linkedin_selectors import LinkedInJobSelectors as S

from conftest import FakeDriver, FakeListing


def run_wizard(listing: FakeListing, max_steps: int = 25):
    driver = FakeDriver(pages=[[listing]])
    driver.active = listing
    wizard = ApplicationWizardDriver(driver, max_steps=max_steps)
    details = JobDetails(
        title=listing.title, company=listing.company, description=listing.description
    )
    result = asyncio.run(wizard.run(listing, details, trace_id="test"))
    return result, driver


class TestProgressMonitoring:
    def test_progress_that_stays_at_zero_is_stuck(self):
        result, driver = run_wizard(FakeListing("API Dev", "Acme", progress=[0]))

        assert result["outcome"] is WizardOutcome.STUCK
        assert result["stuck_reason"] is StuckReason.ZERO_PROGRESS
        assert result["record"].applied_successfully is False
        assert driver.discarded == ["API Dev"]
        assert driver.submitted == []

    def test_rising_progress_completes(self):
        result, driver = run_wizard(FakeListing("API Dev", "Acme", progress=[10, 40, 70, 100]))

        assert result["outcome"] is WizardOutcome.COMPLETED
        assert result["record"].applied_successfully is True
        assert result["last_progress"] == 100
        assert driver.submitted == ["API Dev"]
        # The post-submit dialog is closed without a discard confirmation
        assert driver.discarded == []
        assert S.CONFIRM_DISCARD not in driver.clicks

    def test_repeated_reading_is_stuck(self):
        result, driver = run_wizard(FakeListing("API Dev", "Acme", progress=[20, 55, 55]))

        assert result["outcome"] is WizardOutcome.STUCK
        assert result["stuck_reason"] is StuckReason.NO_PROGRESS
        assert result["last_progress"] == 55
        assert result["record"].applied_successfully is False
        assert driver.discarded == ["API Dev"]

    def test_zero_then_progress_continues(self):
        result, driver = run_wizard(FakeListing("API Dev", "Acme", progress=[0, 50, 100]))

        assert result["outcome"] is WizardOutcome.COMPLETED
        assert driver.submitted == ["API Dev"]

    def test_step_limit_bounds_a_wizard_that_never_repeats(self):
        listing = FakeListing("API Dev", "Acme", progress=list(range(1, 99)))

        result, driver = run_wizard(listing, max_steps=3)

        assert result["outcome"] is WizardOutcome.STUCK
        assert result["stuck_reason"] is StuckReason.STEP_LIMIT
        assert result["steps"] == 3
        assert result["record"].applied_successfully is False
        assert driver.discarded == ["API Dev"]


class TestTerminalOutcomes:
    def test_missing_apply_button_means_already_applied(self):
        result, driver = run_wizard(FakeListing("API Dev", "Acme", board_applied=True))

        assert result["outcome"] is WizardOutcome.ALREADY_APPLIED
        assert result["record"] is None
        assert S.PRIMARY_BUTTON not in driver.clicks

    def test_no_resume_is_recorded_as_failure(self):
        result, driver = run_wizard(FakeListing("API Dev", "Acme", has_resume=False))

        assert result["outcome"] is WizardOutcome.NO_RESUME_AVAILABLE
        assert result["record"].applied_successfully is False
        assert driver.discarded == ["API Dev"]

    def test_record_carries_listing_identity(self):
        result, _ = run_wizard(FakeListing("Backend Eng", "Initech", progress=[100]))

        assert result["record"].key == ("Backend Eng", "Initech")

    def test_incomplete_details_are_refused(self):
        listing = FakeListing("API Dev", "Acme")
        driver = FakeDriver(pages=[[listing]])
        driver.active = listing
        wizard = ApplicationWizardDriver(driver)

        with pytest.raises(ValueError):
            asyncio.run(
                wizard.run(listing, JobDetails(title="API Dev", company="", description="x"))
            )

        assert driver.clicks == []
