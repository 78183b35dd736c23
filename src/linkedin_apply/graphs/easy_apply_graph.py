import uuid
from typing import Any, Dict, Optional

from langgraph.graph import END, StateGraph

from linkedin_apply.interfaces.services import AutomationError, IAutomationDriver
from linkedin_apply.model.job_search_state import EasyApplyState
from linkedin_apply.model.types import (
    AppliedJobRecord,
    JobDetails,
    StuckReason,
    WizardOutcome,
    WizardResult,
)
from linkedin_apply.utils.linkedin_selectors import LinkedInJobSelectors
from linkedin_apply.utils.logging_config import get_logger

DEFAULT_MAX_WIZARD_STEPS = 25


class ApplicationWizardDriver:
    """LangGraph state machine that drives one listing's Easy Apply modal.

    Opened -> ApplyInitiated -> Stepping -> one of Completed, Stuck,
    NoResumeAvailable or AlreadyApplied. Every terminal state except
    AlreadyApplied yields exactly one ledger record; the caller appends it.
    """

    def __init__(
        self,
        driver: IAutomationDriver,
        max_steps: int = DEFAULT_MAX_WIZARD_STEPS,
        selectors: type = LinkedInJobSelectors,
    ):
        self.driver = driver
        self.max_steps = max_steps
        self.selectors = selectors
        self.graph = self._create_graph()

    def _create_graph(self) -> StateGraph:
        """Create the Easy Apply workflow graph."""
        workflow = StateGraph(EasyApplyState)

        workflow.add_node("open_listing", self._open_listing)
        workflow.add_node("initiate_apply", self._initiate_apply)
        workflow.add_node("enter_wizard", self._enter_wizard)
        workflow.add_node("select_resume", self._select_resume)
        workflow.add_node("check_progress", self._check_progress)
        workflow.add_node("advance_step", self._advance_step)
        workflow.add_node("submit_application", self._submit_application)
        workflow.add_node("discard_application", self._discard_application)
        workflow.add_node("dismiss_confirmation", self._dismiss_confirmation)

        workflow.set_entry_point("open_listing")
        workflow.add_edge("open_listing", "initiate_apply")

        workflow.add_conditional_edges(
            "initiate_apply",
            self._route_after_initiate,
            {"wizard": "enter_wizard", "finish": END},
        )
        workflow.add_conditional_edges(
            "enter_wizard",
            self._route_terminal_or,
            {"continue": "select_resume", "discard": "discard_application"},
        )
        workflow.add_conditional_edges(
            "select_resume",
            self._route_terminal_or,
            {"continue": "check_progress", "discard": "discard_application"},
        )
        workflow.add_conditional_edges(
            "check_progress",
            self._route_after_progress,
            {
                "advance": "advance_step",
                "submit": "submit_application",
                "discard": "discard_application",
            },
        )
        workflow.add_edge("advance_step", "check_progress")
        workflow.add_edge("submit_application", "dismiss_confirmation")
        workflow.add_edge("dismiss_confirmation", END)
        workflow.add_edge("discard_application", END)

        return workflow.compile()

    # --- Nodes ---

    async def _open_listing(self, state: EasyApplyState) -> Dict[str, Any]:
        """Confirm the listing's details pane is showing before applying."""
        details = state["details"]
        if not all(details.get(field) for field in ("title", "company", "description")):
            raise ValueError("Cannot apply without complete job details")

        await self.driver.wait_for_element(self.selectors.DETAILS)
        return {**state, "current_step": "opened"}

    async def _initiate_apply(self, state: EasyApplyState) -> Dict[str, Any]:
        """Click the Easy Apply button; its absence means the board shows it as applied."""
        logger = get_logger(state["trace_id"])
        try:
            await self.driver.click(self.selectors.APPLY_BUTTON)
        except AutomationError as e:
            logger.warning(
                "Apply button unavailable, job already applied on the board",
                title=state["details"]["title"],
                error=str(e),
            )
            return {
                **state,
                "current_step": "apply_unavailable",
                "outcome": WizardOutcome.ALREADY_APPLIED,
            }

        logger.info("Applying for job", title=state["details"]["title"])
        return {**state, "current_step": "apply_initiated"}

    async def _enter_wizard(self, state: EasyApplyState) -> Dict[str, Any]:
        """Press the first primary action and take the initial progress reading."""
        logger = get_logger(state["trace_id"])
        await self._click_primary()

        progress = await self._read_progress()
        if progress == 0:
            # Re-read once; a modal that stays at 0% never really started
            progress = await self._read_progress()

        if progress == 0:
            logger.warning("Progress bar stays at 0%, job not applied")
            return {
                **state,
                "current_step": "zero_progress",
                "progress": 0,
                "outcome": WizardOutcome.STUCK,
                "stuck_reason": StuckReason.ZERO_PROGRESS,
            }

        return {**state, "current_step": "wizard_entered", "progress": progress}

    async def _select_resume(self, state: EasyApplyState) -> Dict[str, Any]:
        """Pick the first stored resume and continue."""
        logger = get_logger(state["trace_id"])
        try:
            await self.driver.wait_for_element(self.selectors.RESUME_ITEM)
            await self.driver.click(self.selectors.RESUME_ITEM_BUTTON)
            await self._click_primary()
        except AutomationError as e:
            logger.warning("No resume found", error=str(e))
            return {
                **state,
                "current_step": "no_resume",
                "outcome": WizardOutcome.NO_RESUME_AVAILABLE,
            }

        logger.debug("Resume selected")
        return {**state, "current_step": "resume_selected"}

    async def _check_progress(self, state: EasyApplyState) -> Dict[str, Any]:
        """Read progress and decide whether the wizard is stuck, done or advancing."""
        logger = get_logger(state["trace_id"])
        progress = await self._read_progress()
        logger.debug("Wizard progress", progress=progress, previous=state["last_progress"])

        if progress != 0 and progress == state["last_progress"]:
            logger.error(
                "Progress is stuck, failed to apply for job",
                title=state["details"]["title"],
                progress=progress,
            )
            return {
                **state,
                "current_step": "stuck",
                "progress": progress,
                "outcome": WizardOutcome.STUCK,
                "stuck_reason": StuckReason.NO_PROGRESS,
            }

        if progress != 100 and state["steps"] >= self.max_steps:
            logger.error(
                "Wizard step limit reached without completing",
                title=state["details"]["title"],
                steps=state["steps"],
                progress=progress,
            )
            return {
                **state,
                "current_step": "step_limit",
                "progress": progress,
                "last_progress": progress,
                "outcome": WizardOutcome.STUCK,
                "stuck_reason": StuckReason.STEP_LIMIT,
            }

        return {
            **state,
            "current_step": "progress_checked",
            "progress": progress,
            "last_progress": progress,
        }

    async def _advance_step(self, state: EasyApplyState) -> Dict[str, Any]:
        await self._click_primary()
        return {**state, "current_step": "advanced", "steps": state["steps"] + 1}

    async def _submit_application(self, state: EasyApplyState) -> Dict[str, Any]:
        """At 100% the primary action submits the application."""
        logger = get_logger(state["trace_id"])
        await self._click_primary()
        logger.info(
            "Applied for job",
            title=state["details"]["title"],
            company=state["details"]["company"],
        )
        return {
            **state,
            "current_step": "submitted",
            "outcome": WizardOutcome.COMPLETED,
        }

    async def _discard_application(self, state: EasyApplyState) -> Dict[str, Any]:
        """Close the modal and confirm discarding the unfinished application."""
        await self._close_quietly(state, confirm=True)
        return {**state, "current_step": "discarded"}

    async def _dismiss_confirmation(self, state: EasyApplyState) -> Dict[str, Any]:
        """Close the post-submit dialog; nothing needs discarding."""
        await self._close_quietly(state, confirm=False)
        return {**state, "current_step": "closed"}

    # --- Routing ---

    def _route_after_initiate(self, state: EasyApplyState) -> str:
        if state["outcome"] == WizardOutcome.ALREADY_APPLIED:
            return "finish"
        return "wizard"

    def _route_terminal_or(self, state: EasyApplyState) -> str:
        if state["outcome"] is not None:
            return "discard"
        return "continue"

    def _route_after_progress(self, state: EasyApplyState) -> str:
        if state["outcome"] is not None:
            return "discard"
        if state["progress"] == 100:
            return "submit"
        return "advance"

    # --- Helpers ---

    async def _click_primary(self) -> None:
        await self.driver.wait_for_element(self.selectors.PRIMARY_BUTTON)
        await self.driver.click(self.selectors.PRIMARY_BUTTON)

    async def _read_progress(self) -> int:
        progress_bar = await self.driver.wait_for_element(self.selectors.PROGRESS_BAR)
        return int(
            await self.driver.read_numeric_attribute(
                progress_bar, self.selectors.PROGRESS_ATTRIBUTE
            )
        )

    async def _close_quietly(self, state: EasyApplyState, confirm: bool) -> None:
        # The outcome is already decided; a failed close must not lose its record
        try:
            await close_application(self.driver, confirm=confirm, selectors=self.selectors)
        except AutomationError as e:
            get_logger(state["trace_id"]).warning(
                "Could not close application dialog", confirm=confirm, error=str(e)
            )

    # --- Entry point ---

    async def run(
        self, listing: Any, details: JobDetails, trace_id: Optional[str] = None
    ) -> WizardResult:
        """Drive the wizard for one listing to a terminal outcome."""
        trace_id = trace_id or str(uuid.uuid4())

        initial_state = EasyApplyState(
            listing=listing,
            details=details,
            current_step="starting",
            outcome=None,
            stuck_reason=None,
            progress=0,
            last_progress=0,
            steps=0,
            trace_id=trace_id,
        )

        final_state = await self.graph.ainvoke(
            initial_state, config={"recursion_limit": 2 * self.max_steps + 20}
        )

        outcome = final_state["outcome"]
        record = None
        if outcome != WizardOutcome.ALREADY_APPLIED:
            record = AppliedJobRecord(
                title=details["title"],
                company=details["company"],
                applied_successfully=outcome == WizardOutcome.COMPLETED,
            )

        get_logger(trace_id).info(
            "Wizard finished",
            outcome=outcome.value,
            stuck_reason=final_state["stuck_reason"].value
            if final_state["stuck_reason"]
            else None,
            steps=final_state["steps"],
        )

        return WizardResult(
            outcome=outcome,
            record=record,
            stuck_reason=final_state["stuck_reason"],
            last_progress=final_state["progress"],
            steps=final_state["steps"],
        )


async def close_application(
    driver: IAutomationDriver,
    confirm: bool = False,
    selectors: type = LinkedInJobSelectors,
) -> None:
    """Dismiss the Easy Apply modal, confirming the discard prompt when asked."""
    await driver.wait_for_element(selectors.MODAL_DISMISS)
    await driver.click(selectors.MODAL_DISMISS)

    if confirm:
        await driver.wait_for_element(selectors.CONFIRM_DISCARD)
        await driver.click(selectors.CONFIRM_DISCARD)
