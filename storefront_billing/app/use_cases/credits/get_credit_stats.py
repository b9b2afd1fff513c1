"""GetCreditStats Use Case"""

from libs.result import Result, Return, Error
from storefront_billing.app.repositories.credit_transaction_repository import CreditTransactionRepository
from storefront_billing.domain.errors import LedgerInvariantViolation
from .dtos import CreditStatsDTO
from .get_or_init_account import GetOrInitAccount
from .mappers import to_transaction_dto


class GetCreditStats:
    """
    Use case: Credit overview shown on the account page

    Balance, remaining welcome credits, lifetime totals and the most recent
    transactions.
    """

    RECENT_TRANSACTIONS = 10

    def __init__(self, accounts: GetOrInitAccount, transaction_repo: CreditTransactionRepository):
        self.accounts = accounts
        self.transaction_repo = transaction_repo

    async def execute(self, account_id: str) -> Result[CreditStatsDTO]:
        try:
            account = await self.accounts.load(account_id)
            recent, _ = await self.transaction_repo.get_by_account_id(
                account_id, limit=self.RECENT_TRANSACTIONS, offset=0
            )
        except LedgerInvariantViolation:
            raise
        except Exception as e:
            return Return.err(
                Error(code="CREDIT_STATS_FAILED", message="Failed to load credit stats", reason=str(e))
            )

        return Return.ok(
            CreditStatsDTO(
                account_id=account.account_id,
                balance=account.balance,
                monthly_allocation=account.monthly_allocation,
                monthly_used=account.monthly_used,
                welcome_credits_remaining=account.welcome_remaining,
                lifetime_granted=account.lifetime_granted,
                lifetime_spent=account.lifetime_spent,
                last_monthly_reset_at=account.last_monthly_reset_at,
                recent_transactions=[to_transaction_dto(t) for t in recent],
            )
        )
