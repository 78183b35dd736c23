from typing import Any, List, Optional

from linkedin_apply.interfaces.services import IAutomationDriver
from linkedin_apply.utils.linkedin_selectors import LinkedInJobSelectors
from linkedin_apply.utils.logging_config import get_logger


class JobListLoader:
    """Enumerates the job cards currently rendered on a results page."""

    def __init__(
        self,
        driver: IAutomationDriver,
        selector: str = LinkedInJobSelectors.JOB_CARDS,
        trace_id: Optional[str] = None,
    ):
        self.driver = driver
        self.selector = selector
        self.logger = get_logger(trace_id)

    async def load(self) -> List[Any]:
        """Return listing handles in presentation order; [] when there are none."""
        listings = await self.driver.find_all(self.selector)
        self.logger.info("Job listings found", count=len(listings))
        return list(listings)
