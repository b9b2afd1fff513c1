"""Credit Transaction Repository Interface

Defines the contract for credit transaction persistence operations.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional
from storefront_billing.domain.credit_transaction import CreditTransaction, CreditTransactionKind


class CreditTransactionRepository(ABC):
    """
    Repository interface for CreditTransaction persistence

    Transactions are immutable and append-only.
    Idempotency is enforced via unique idempotency_key.
    """

    @abstractmethod
    async def create(self, transaction: CreditTransaction) -> CreditTransaction:
        """
        Append a credit transaction

        Args:
            transaction: CreditTransaction entity to persist

        Returns:
            Created CreditTransaction with generated ID

        Raises:
            IntegrityError: If idempotency_key already exists
        """
        pass

    @abstractmethod
    async def get_by_idempotency_key(self, idempotency_key: str) -> Optional[CreditTransaction]:
        """
        Retrieve transaction by idempotency key

        Args:
            idempotency_key: Unique idempotency key

        Returns:
            CreditTransaction if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_account_id(
        self,
        account_id: str,
        limit: int = 20,
        offset: int = 0,
        kind: Optional[CreditTransactionKind] = None,
    ) -> tuple[list[CreditTransaction], int]:
        """
        Page through an account's transactions, newest first

        Args:
            account_id: Account identifier
            limit: Maximum rows to return
            offset: Rows to skip
            kind: Optional filter on transaction kind

        Returns:
            Tuple of (transactions, total matching rows)
        """
        pass

    @abstractmethod
    async def get_sum_by_account_id(self, account_id: str) -> Decimal:
        """
        Sum of signed amounts for an account (0 when it has no rows)

        Replaying the log from zero must equal the stored balance.
        """
        pass
