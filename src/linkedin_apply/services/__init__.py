# QueryRunner, the browser and auth services import the graphs package;
# import them from their modules directly.
from linkedin_apply.services.application_filter import ApplicationFilter, FilterDecision
from linkedin_apply.services.applied_job_ledger import (
    AppliedJobLedger,
    JsonLedgerStore,
    LedgerPersistenceError,
    SqlLedgerStore,
    create_ledger_store,
)
from linkedin_apply.services.job_list_loader import JobListLoader

__all__ = [
    "ApplicationFilter",
    "FilterDecision",
    "AppliedJobLedger",
    "JsonLedgerStore",
    "SqlLedgerStore",
    "LedgerPersistenceError",
    "create_ledger_store",
    "JobListLoader",
]
