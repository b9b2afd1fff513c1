"""Domain errors

Business outcomes (insufficient balance, exhausted codes, ...) are returned
as ``Result`` errors by the use cases. The exceptions here mark states that
must never happen and are allowed to propagate to the API layer.
"""

from decimal import Decimal
from typing import Optional


class LedgerInvariantViolation(Exception):
    """A ledger write produced a state that breaks a hard invariant"""

    def __init__(self, account_id: str, message: str, balance: Optional[Decimal] = None):
        self.account_id = account_id
        self.balance = balance
        super().__init__(f"Ledger invariant violated for account {account_id}: {message}")
