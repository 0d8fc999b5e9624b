"""Game lending module.

Provides functionality for:
- Registering games and members
- Lending games with a due date
- Returning games and charging late fines
"""

from .ledger import FinePreview, LedgerSnapshot, LendingLedger, ReturnReceipt
from .models import Game, Loan, Member

__all__ = [
    "LendingLedger",
    "LedgerSnapshot",
    "ReturnReceipt",
    "FinePreview",
    "Game",
    "Member",
    "Loan",
]
