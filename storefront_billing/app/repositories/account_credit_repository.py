"""Account Credit Repository Interface

Defines the contract for account credit persistence. Balance mutations are
single conditional statements so concurrent requests cannot overdraw or
double-reset an account.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional
from storefront_billing.domain.account_credit import AccountCredit


class AccountCreditRepository(ABC):
    """Repository interface for AccountCredit persistence"""

    @abstractmethod
    async def get_by_account_id(self, account_id: str, for_update: bool = False) -> Optional[AccountCredit]:
        """
        Retrieve the credit record of an account

        Always reloads column values from the database, so a record read after
        a conditional update reflects that update.

        Args:
            account_id: Account identifier
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            AccountCredit if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_all(self) -> list[AccountCredit]:
        """
        Retrieve every credit record (reconciliation)

        Returns:
            List of AccountCredit entities
        """
        pass

    @abstractmethod
    async def get_account_ids_reset_before(self, cutoff: datetime) -> list[str]:
        """
        List accounts whose last monthly reset happened before cutoff

        Args:
            cutoff: Naive UTC start of the current month

        Returns:
            Account ids due for a monthly reset
        """
        pass

    @abstractmethod
    async def create(self, account: AccountCredit) -> AccountCredit:
        """
        Create a new credit record

        Raises:
            IntegrityError: If a record for the account already exists
        """
        pass

    @abstractmethod
    async def deduct_if_sufficient(self, account_id: str, amount: Decimal, now: datetime) -> bool:
        """
        Atomically spend credits when the balance covers them

        Decrements balance and increments monthly_used and lifetime_spent
        in one statement guarded by ``balance >= amount``.

        Args:
            account_id: Account identifier
            amount: Credits to spend (> 0)
            now: Timestamp stored as updated_at

        Returns:
            True if the row was updated, False if the balance was insufficient
        """
        pass

    @abstractmethod
    async def increment_balance(self, account_id: str, amount: Decimal, now: datetime) -> bool:
        """
        Atomically add credits to balance and lifetime_granted

        Returns:
            True if the account exists and was updated
        """
        pass

    @abstractmethod
    async def reset_monthly_if_unchanged(
        self,
        account_id: str,
        expected_reset_at: datetime,
        expected_balance: Decimal,
        allocation: Decimal,
        now: datetime,
    ) -> bool:
        """
        Overwrite the balance with the monthly allocation (compare-and-set)

        The row is only updated when last_monthly_reset_at and balance still
        hold the values the caller observed, so two concurrent readers
        reset an account once.

        Returns:
            True if this call performed the reset
        """
        pass
