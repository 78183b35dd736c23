from linkedin_apply.graphs.easy_apply_graph import ApplicationWizardDriver, close_application
from linkedin_apply.graphs.job_search_graph import JobSearchGraph
from linkedin_apply.graphs.linkedin_auth_graph import AuthState, LinkedInAuthGraph

__all__ = [
    "ApplicationWizardDriver",
    "close_application",
    "JobSearchGraph",
    "LinkedInAuthGraph",
    "AuthState",
]
