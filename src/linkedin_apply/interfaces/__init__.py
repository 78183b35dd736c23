from linkedin_apply.interfaces.services import (
    AutomationError,
    ElementNotFoundError,
    IAutomationDriver,
    IBrowserManager,
    ILedgerStore,
)

__all__ = [
    "AutomationError",
    "ElementNotFoundError",
    "IAutomationDriver",
    "IBrowserManager",
    "ILedgerStore",
]
