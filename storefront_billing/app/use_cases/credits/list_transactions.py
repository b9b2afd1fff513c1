"""
List Transactions Use Case

Retrieves credit transaction history for an account with pagination.
"""
from typing import Optional
from libs.result import Result, Return
from storefront_billing.app.repositories.credit_transaction_repository import CreditTransactionRepository
from storefront_billing.domain.credit_transaction import CreditTransactionKind
from .dtos import ListTransactionsResponseDTO
from .mappers import to_transaction_dto


class ListTransactions:
    """
    Use case: View Credit Transactions

    Transactions are ordered by created_at DESC (most recent first).
    """

    def __init__(self, transaction_repo: CreditTransactionRepository):
        self.transaction_repo = transaction_repo

    async def execute(
        self,
        account_id: str,
        limit: int = 20,
        offset: int = 0,
        kind: Optional[CreditTransactionKind] = None,
    ) -> Result[ListTransactionsResponseDTO]:
        """
        List transactions for an account with pagination.

        Args:
            account_id: Account identifier
            limit: Maximum number of transactions to return (default 20)
            offset: Number of transactions to skip (default 0)
            kind: Optional transaction kind filter

        Returns:
            Result[ListTransactionsResponseDTO]: Paginated transaction list
        """
        transactions, total = await self.transaction_repo.get_by_account_id(
            account_id=account_id,
            limit=limit,
            offset=offset,
            kind=kind,
        )

        return Return.ok(
            ListTransactionsResponseDTO(
                transactions=[to_transaction_dto(txn) for txn in transactions],
                total=total,
                limit=limit,
                offset=offset,
            )
        )
