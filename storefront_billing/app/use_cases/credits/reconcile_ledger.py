"""ReconcileLedger Use Case

Replays each account's transaction log and compares it with the stored
balance. Read-only: discrepancies are reported, never repaired.
"""

import logging
import time
from libs.result import Result, Return, Error
from storefront_billing.app.repositories.account_credit_repository import AccountCreditRepository
from storefront_billing.app.repositories.credit_transaction_repository import CreditTransactionRepository
from storefront_billing.app.services.clock import Clock
from .dtos import LedgerDiscrepancyDTO, ReconciliationResultDTO

logger = logging.getLogger(__name__)


class ReconcileLedger:
    """
    Use Case: Reconcile account balances against the transaction log

    Business Rules:
    1. For every account, SUM(amount) over its transactions must equal balance
    2. Mismatches are collected and logged
    3. No data is modified
    """

    def __init__(
        self,
        account_repo: AccountCreditRepository,
        transaction_repo: CreditTransactionRepository,
        clock: Clock,
    ):
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo
        self.clock = clock

    async def execute(self) -> Result[ReconciliationResultDTO]:
        start_time = time.time()
        reconciliation_time = self.clock.now()

        try:
            logger.info("Starting credit ledger reconciliation")

            # Step 1: Get all accounts
            accounts = await self.account_repo.get_all()

            # Step 2: Replay each account's log
            discrepancies: list[LedgerDiscrepancyDTO] = []

            for account in accounts:
                replayed = await self.transaction_repo.get_sum_by_account_id(account.account_id)

                if account.balance != replayed:
                    discrepancy = LedgerDiscrepancyDTO(
                        account_id=account.account_id,
                        stored_balance=account.balance,
                        replayed_balance=replayed,
                        discrepancy=account.balance - replayed,
                    )
                    discrepancies.append(discrepancy)
                    logger.warning(
                        f"Discrepancy for account {account.account_id}: "
                        f"stored={account.balance}, replayed={replayed}, diff={discrepancy.discrepancy}"
                    )

            # Step 3: Build response
            execution_time_ms = int((time.time() - start_time) * 1000)

            if discrepancies:
                logger.warning(
                    f"Reconciliation complete. Found {len(discrepancies)} discrepancies "
                    f"out of {len(accounts)} accounts in {execution_time_ms}ms"
                )
            else:
                logger.info(
                    f"Reconciliation complete. All {len(accounts)} accounts balanced in {execution_time_ms}ms"
                )

            return Return.ok(
                ReconciliationResultDTO(
                    total_accounts_checked=len(accounts),
                    discrepancies_found=len(discrepancies),
                    discrepancies=discrepancies,
                    reconciliation_time=reconciliation_time,
                    execution_time_ms=execution_time_ms,
                )
            )

        except Exception as e:
            logger.error(f"Ledger reconciliation failed: {e}")
            return Return.err(
                Error(
                    code="RECONCILIATION_FAILED",
                    message="Failed to reconcile credit ledger",
                    reason=str(e),
                )
            )
