import asyncio
import uuid
from typing import Any, Dict, Optional, Tuple

from langgraph.graph import END, StateGraph

from linkedin_apply.graphs.easy_apply_graph import (
    ApplicationWizardDriver,
    close_application,
)
from linkedin_apply.interfaces.services import IAutomationDriver
from linkedin_apply.model.job_search_state import MAX_PAGES_PER_QUERY, JobSearchState
from linkedin_apply.model.types import (
    AppliedJobRecord,
    JobDetails,
    ListingOutcome,
    Query,
    QueryOutcome,
)
from linkedin_apply.services.application_filter import ApplicationFilter
from linkedin_apply.services.applied_job_ledger import (
    AppliedJobLedger,
    LedgerPersistenceError,
)
from linkedin_apply.services.job_list_loader import JobListLoader
from linkedin_apply.utils.linkedin_selectors import LinkedInJobSelectors
from linkedin_apply.utils.logging_config import get_logger
from linkedin_apply.utils.search_url import build_search_url

# Re-reads of the details pane while it still shows the previous listing
DETAILS_REFRESH_ATTEMPTS = 5


class JobSearchGraph:
    """LangGraph workflow for one query: search, page through results, apply per listing."""

    def __init__(
        self,
        driver: IAutomationDriver,
        ledger: AppliedJobLedger,
        wizard: Optional[ApplicationWizardDriver] = None,
        application_filter: Optional[ApplicationFilter] = None,
        job_list_loader: Optional[JobListLoader] = None,
        max_pages: int = MAX_PAGES_PER_QUERY,
        record_board_applied: bool = False,
        recursion_limit: int = 1000,
        details_refresh_interval: float = 0.5,
        selectors: type = LinkedInJobSelectors,
    ):
        self.driver = driver
        self.ledger = ledger
        self.selectors = selectors
        self.wizard = wizard or ApplicationWizardDriver(driver, selectors=selectors)
        self.application_filter = application_filter or ApplicationFilter()
        self.job_list_loader = job_list_loader or JobListLoader(
            driver, selectors.JOB_CARDS
        )
        self.max_pages = min(max_pages, MAX_PAGES_PER_QUERY)
        self.record_board_applied = record_board_applied
        self.recursion_limit = recursion_limit
        self.details_refresh_interval = details_refresh_interval
        self._previous_details: Optional[Tuple[str, str]] = None
        self.graph = self._create_graph()

    def _create_graph(self) -> StateGraph:
        """Create the search and pagination workflow graph."""
        workflow = StateGraph(JobSearchState)

        workflow.add_node("build_search_url", self._build_search_url)
        workflow.add_node("navigate_to_search", self._navigate_to_search)
        workflow.add_node("load_listings", self._load_listings)
        workflow.add_node("process_listing", self._process_listing)
        workflow.add_node("check_pagination", self._check_pagination)
        workflow.add_node("navigate_next_page", self._navigate_next_page)

        workflow.set_entry_point("build_search_url")
        workflow.add_edge("build_search_url", "navigate_to_search")

        workflow.add_conditional_edges(
            "navigate_to_search",
            self._route_unless_aborted,
            {"continue": "load_listings", "finish": END},
        )
        workflow.add_conditional_edges(
            "load_listings",
            self._route_after_load,
            {
                "process": "process_listing",
                "paginate": "check_pagination",
                "finish": END,
            },
        )
        workflow.add_conditional_edges(
            "process_listing",
            self._route_after_listing,
            {"process": "process_listing", "paginate": "check_pagination"},
        )
        workflow.add_conditional_edges(
            "check_pagination",
            self._should_continue_pagination,
            {"continue": "navigate_next_page", "finish": END},
        )
        workflow.add_conditional_edges(
            "navigate_next_page",
            self._should_continue_pagination,
            {"continue": "load_listings", "finish": END},
        )

        return workflow.compile()

    # --- Nodes ---

    def _build_search_url(self, state: JobSearchState) -> Dict[str, Any]:
        """Build the LinkedIn job search URL with filters."""
        return {
            **state,
            "search_url": build_search_url(state["query"]),
            "current_page": 1,
        }

    async def _navigate_to_search(self, state: JobSearchState) -> Dict[str, Any]:
        """Open the search results; failure abandons this query only."""
        logger = get_logger(state["trace_id"])
        logger.info("Opening search", url=state["search_url"])
        try:
            await self.driver.navigate(state["search_url"])
            await self.driver.wait_for_element(self.selectors.CONTAINER)
            return state
        except Exception as e:
            logger.error("Search page failed to load, skipping query", error=str(e))
            return {
                **state,
                "aborted": True,
                "errors": state["errors"] + [f"Failed to navigate to search: {str(e)}"],
            }

    async def _load_listings(self, state: JobSearchState) -> Dict[str, Any]:
        """Scroll the results list to its end and collect the rendered listings."""
        logger = get_logger(state["trace_id"])
        try:
            container = await self.driver.wait_for_element(self.selectors.CONTAINER)
            await self.driver.scroll_to_end(container)
            listings = await self.job_list_loader.load()
        except Exception as e:
            logger.error(
                "Results page failed to load, skipping query",
                page=state["current_page"],
                error=str(e),
            )
            return {
                **state,
                "aborted": True,
                "errors": state["errors"] + [f"Failed to load listings: {str(e)}"],
            }

        if not listings:
            logger.warning("No jobs found", page=state["current_page"])

        return {
            **state,
            "listings": listings,
            "listing_index": 0,
            "pages_processed": state["pages_processed"] + 1,
        }

    async def _process_listing(self, state: JobSearchState) -> Dict[str, Any]:
        """Screen one listing and, when accepted, drive its application wizard."""
        index = state["listing_index"]
        outcome = await self._apply_to_listing(state, index, state["listings"][index])
        return {
            **state,
            "listing_index": index + 1,
            "listing_outcomes": state["listing_outcomes"] + [outcome],
        }

    async def _check_pagination(self, state: JobSearchState) -> Dict[str, Any]:
        """Look for a next page control while under the page limit."""
        logger = get_logger(state["trace_id"])

        if state["current_page"] >= self.max_pages:
            logger.info("Page limit reached", page=state["current_page"])
            return {**state, "has_next_page": False}

        try:
            logger.info("Trying to go to next page")
            next_button = await self.driver.find_optional(self.selectors.PAGINATION_NEXT)
        except Exception as e:
            logger.error("Error while looking for next page", error=str(e))
            return {**state, "has_next_page": False}

        if next_button is None:
            logger.info("No next page", page=state["current_page"])
        return {**state, "has_next_page": next_button is not None}

    async def _navigate_next_page(self, state: JobSearchState) -> Dict[str, Any]:
        """Click through to the next results page within the same search."""
        logger = get_logger(state["trace_id"])
        next_page = state["current_page"] + 1
        try:
            logger.info("Going to next page", page=next_page)
            await self.driver.click(self.selectors.PAGINATION_NEXT)
            await self.driver.wait_for_element(self.selectors.CONTAINER)
        except Exception as e:
            logger.error("Error while going to next page", error=str(e))
            return {**state, "has_next_page": False}

        return {**state, "current_page": next_page, "has_next_page": True}

    # --- Routing ---

    def _route_unless_aborted(self, state: JobSearchState) -> str:
        return "finish" if state["aborted"] else "continue"

    def _route_after_load(self, state: JobSearchState) -> str:
        if state["aborted"]:
            return "finish"
        if state["listings"]:
            return "process"
        return "paginate"

    def _route_after_listing(self, state: JobSearchState) -> str:
        if state["listing_index"] < len(state["listings"]):
            return "process"
        return "paginate"

    def _should_continue_pagination(self, state: JobSearchState) -> str:
        return "continue" if state["has_next_page"] else "finish"

    # --- Listing subroutine ---

    async def _apply_to_listing(
        self, state: JobSearchState, position: int, listing: Any
    ) -> ListingOutcome:
        logger = get_logger(state["trace_id"])
        outcome = ListingOutcome(
            position=position,
            title=None,
            company=None,
            skip_reason=None,
            wizard_outcome=None,
            error=None,
        )

        try:
            details = await self._open_listing(listing)
            outcome["title"] = details["title"] or None
            outcome["company"] = details["company"] or None
            logger.debug("Job details loaded", position=position, **details)

            decision = self.application_filter.should_apply(
                details, self.ledger, state["query"].options
            )
            if not decision.accepted:
                logger.warning(
                    "Skipping job",
                    reason=decision.skip_reason.value,
                    title=details["title"],
                    company=details["company"],
                )
                outcome["skip_reason"] = decision.skip_reason
                return outcome

            result = await self.wizard.run(listing, details, trace_id=state["trace_id"])
            outcome["wizard_outcome"] = result["outcome"]

            record = result["record"]
            if record is None and self.record_board_applied:
                record = AppliedJobRecord(
                    title=details["title"],
                    company=details["company"],
                    applied_successfully=False,
                )
            if record is not None:
                self.ledger.append(record)

            return outcome

        except LedgerPersistenceError:
            raise
        except Exception as e:
            logger.error(
                "Error on apply for job",
                position=position,
                error=str(e),
                error_type=type(e).__name__,
            )
            outcome["error"] = str(e)
            await self._force_close(state)
            return outcome

    async def _open_listing(self, listing: Any) -> JobDetails:
        """Activate a listing and extract its details pane.

        The pane stays mounted between clicks, so it is re-read until it no
        longer shows the previously opened listing. A listing that really
        repeats the previous one is returned once the attempts run out.
        """
        await self.driver.click(listing)
        details = await self._read_details()

        attempts = 0
        while (
            self._details_key(details) == self._previous_details
            and attempts < DETAILS_REFRESH_ATTEMPTS
        ):
            await asyncio.sleep(self.details_refresh_interval)
            details = await self._read_details()
            attempts += 1

        self._previous_details = self._details_key(details)
        return details

    async def _read_details(self) -> JobDetails:
        details_pane = await self.driver.wait_for_element(self.selectors.DETAILS)
        fields = await self.driver.extract_fields(
            details_pane, self.selectors.detail_fields()
        )
        return JobDetails(
            title=fields.get("title", ""),
            company=fields.get("company", ""),
            description=fields.get("description", ""),
        )

    @staticmethod
    def _details_key(details: JobDetails) -> Tuple[str, str]:
        return details["title"], details["company"]

    async def _force_close(self, state: JobSearchState) -> None:
        """Leave the UI clean after a failed listing: discard any open application."""
        try:
            await close_application(self.driver, confirm=True, selectors=self.selectors)
        except Exception as e:
            get_logger(state["trace_id"]).debug(
                "No application dialog to close", error=str(e)
            )

    # --- Entry point ---

    async def execute(self, query: Query, trace_id: Optional[str] = None) -> QueryOutcome:
        """Run one query through every page it yields, up to the page limit."""
        trace_id = trace_id or str(uuid.uuid4())
        self._previous_details = None

        initial_state = JobSearchState(
            query=query,
            search_url=None,
            current_page=1,
            pages_processed=0,
            listings=[],
            listing_index=0,
            listing_outcomes=[],
            has_next_page=False,
            aborted=False,
            errors=[],
            trace_id=trace_id,
        )

        result = await self.graph.ainvoke(
            initial_state, config={"recursion_limit": self.recursion_limit}
        )

        return QueryOutcome(
            query=query,
            search_url=result["search_url"],
            pages_processed=result["pages_processed"],
            listings=result["listing_outcomes"],
            aborted=result["aborted"],
            errors=result["errors"],
        )

