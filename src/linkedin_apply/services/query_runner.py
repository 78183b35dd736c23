import uuid
from typing import List, Optional, Sequence, Union

from linkedin_apply.graphs.easy_apply_graph import (
    DEFAULT_MAX_WIZARD_STEPS,
    ApplicationWizardDriver,
)
from linkedin_apply.graphs.job_search_graph import JobSearchGraph
from linkedin_apply.interfaces.services import IAutomationDriver
from linkedin_apply.model.job_search_state import MAX_PAGES_PER_QUERY
from linkedin_apply.model.types import (
    Query,
    QueryOutcome,
    count_applied,
    count_failed,
    count_skipped,
)
from linkedin_apply.services.applied_job_ledger import AppliedJobLedger
from linkedin_apply.services.job_list_loader import JobListLoader
from linkedin_apply.utils.logging_config import get_logger


class QueryRunner:
    """Runs queries one after another against a single authenticated session.

    The ledger is loaded once, before the first query. Queries, pages and
    listings are never processed concurrently: the Easy Apply modal is global
    to the page.
    """

    def __init__(
        self,
        driver: IAutomationDriver,
        ledger: AppliedJobLedger,
        max_pages: int = MAX_PAGES_PER_QUERY,
        max_wizard_steps: int = DEFAULT_MAX_WIZARD_STEPS,
        record_board_applied: bool = False,
        recursion_limit: int = 1000,
        trace_id: Optional[str] = None,
    ):
        self.driver = driver
        self.ledger = ledger
        self.trace_id = trace_id or str(uuid.uuid4())
        self.logger = get_logger(self.trace_id)
        self.search_graph = JobSearchGraph(
            driver=driver,
            ledger=ledger,
            wizard=ApplicationWizardDriver(driver, max_steps=max_wizard_steps),
            job_list_loader=JobListLoader(driver, trace_id=self.trace_id),
            max_pages=max_pages,
            record_board_applied=record_board_applied,
            recursion_limit=recursion_limit,
        )

    async def run(self, queries: Union[Query, Sequence[Query]]) -> List[QueryOutcome]:
        """Process every query in order and return one outcome per query.

        Raises:
            LedgerPersistenceError: when an outcome cannot be recorded; the run stops.
        """
        if isinstance(queries, Query):
            queries = [queries]

        self.ledger.load()

        self.logger.info("Opening queries", count=len(queries))
        outcomes: List[QueryOutcome] = []
        for index, query in enumerate(queries, start=1):
            self.logger.info(
                "Running query",
                index=index,
                keywords=query.keywords,
                location=query.options.location,
            )
            outcome = await self.search_graph.execute(query, trace_id=self.trace_id)
            outcomes.append(outcome)

            self.logger.info(
                "Query finished",
                index=index,
                pages=outcome["pages_processed"],
                listings=len(outcome["listings"]),
                applied=count_applied(outcome),
                skipped=count_skipped(outcome),
                failed=count_failed(outcome),
                aborted=outcome["aborted"],
            )

        return outcomes
