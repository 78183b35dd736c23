"""Terminal client for the LinkedIn Easy Apply runner"""

from linkedin_apply.cli.client import JobApplyCLI, main
from linkedin_apply.cli.ui import TerminalUI

__all__ = ["JobApplyCLI", "TerminalUI", "main"]
