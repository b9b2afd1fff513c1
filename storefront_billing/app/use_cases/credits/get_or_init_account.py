"""GetOrInitAccount Use Case

Returns an account's credit record, creating it on first access and
applying the lazy monthly reset when a new calendar month has started.
"""

import logging
from decimal import Decimal
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from storefront_billing.app.billing_settings import BillingSettings
from storefront_billing.app.repositories.account_credit_repository import AccountCreditRepository
from storefront_billing.app.repositories.credit_transaction_repository import CreditTransactionRepository
from storefront_billing.app.services.clock import Clock
from storefront_billing.app.services.unit_of_work import UnitOfWork
from storefront_billing.domain.account_credit import AccountCredit
from storefront_billing.domain.credit_transaction import CreditTransaction, CreditTransactionKind
from storefront_billing.domain.errors import LedgerInvariantViolation
from .dtos import AccountCreditDTO
from .mappers import to_account_dto

logger = logging.getLogger(__name__)


class GetOrInitAccount:
    """
    Use Case: Get or initialize an account credit record

    Business Rules:
    1. A missing record is created with balance = monthly allocation and one
       MONTHLY_RESET transaction for the initial grant
    2. The welcome pool is recorded on the account but not added to the balance
    3. When the current month (in the configured timezone) differs from the
       month of the last reset, the balance is overwritten with the allocation
    4. Both creation and reset are idempotent under concurrent callers

    Other credit use cases call ``load`` directly so they share this logic.
    """

    MAX_RESET_ATTEMPTS = 3

    def __init__(
        self,
        uow: UnitOfWork,
        account_repo: AccountCreditRepository,
        transaction_repo: CreditTransactionRepository,
        settings: BillingSettings,
        clock: Clock,
    ):
        self.uow = uow
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo
        self.settings = settings
        self.clock = clock

    async def execute(self, account_id: str) -> Result[AccountCreditDTO]:
        try:
            account = await self.load(account_id)
            return Return.ok(to_account_dto(account))
        except LedgerInvariantViolation:
            await self.uow.rollback()
            raise
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="ACCOUNT_INIT_FAILED",
                    message=f"Failed to load credits for account {account_id}",
                    reason=str(e),
                )
            )

    async def load(self, account_id: str) -> AccountCredit:
        """
        Load (creating or resetting as needed) the record of an account

        Commits its own writes. Raises on unexpected database errors.
        """
        account = await self.account_repo.get_by_account_id(account_id)

        if account is None:
            account = await self._create(account_id)

        if not self.clock.same_month(account.last_monthly_reset_at, self.clock.now()):
            account = await self._apply_monthly_reset(account)

        return account

    async def _create(self, account_id: str) -> AccountCredit:
        now = self.clock.now()
        allocation = self.settings.monthly_credits

        try:
            account = await self.account_repo.create(
                AccountCredit(
                    account_id=account_id,
                    balance=allocation,
                    monthly_allocation=allocation,
                    monthly_used=Decimal("0"),
                    last_monthly_reset_at=now,
                    welcome_allocation=self.settings.welcome_credits,
                    welcome_used=Decimal("0"),
                    lifetime_granted=allocation,
                    lifetime_spent=Decimal("0"),
                    created_at=now,
                    updated_at=now,
                )
            )
            await self.transaction_repo.create(
                CreditTransaction(
                    account_id=account_id,
                    kind=CreditTransactionKind.MONTHLY_RESET,
                    amount=allocation,
                    balance_after=allocation,
                    reason="Initial monthly credit allocation",
                    idempotency_key=f"initial_grant:{account_id}",
                    created_at=now,
                )
            )
            await self.uow.commit()
        except IntegrityError:
            # Lost the creation race; the winner's record is the one to use
            await self.uow.rollback()
            existing = await self.account_repo.get_by_account_id(account_id)
            if existing is None:
                raise
            return existing

        logger.info(f"Initialized credits for account {account_id} with {allocation} monthly credits")
        return account

    async def _apply_monthly_reset(self, account: AccountCredit) -> AccountCredit:
        account_id = account.account_id

        for _ in range(self.MAX_RESET_ATTEMPTS):
            now = self.clock.now()
            allocation = self.settings.monthly_credits
            previous_balance = account.balance

            reset = await self.account_repo.reset_monthly_if_unchanged(
                account_id,
                expected_reset_at=account.last_monthly_reset_at,
                expected_balance=previous_balance,
                allocation=allocation,
                now=now,
            )

            if reset:
                # Amount is the delta so that replaying the log still equals the balance
                await self.transaction_repo.create(
                    CreditTransaction(
                        account_id=account_id,
                        kind=CreditTransactionKind.MONTHLY_RESET,
                        amount=allocation - previous_balance,
                        balance_after=allocation,
                        reason=f"Monthly credit reset for {self.clock.month_key(now)}",
                        metadata_json=CreditTransaction.dump_metadata(
                            {
                                "allocation": str(allocation),
                                "forfeited_balance": str(previous_balance),
                            }
                        ),
                        idempotency_key=f"monthly_reset:{account_id}:{self.clock.month_key(now)}",
                        created_at=now,
                    )
                )
                await self.uow.commit()
                logger.info(
                    f"Monthly reset for account {account_id}: balance {previous_balance} -> {allocation}"
                )
                return await self.account_repo.get_by_account_id(account_id)

            # Someone else changed the row between our read and the reset
            await self.uow.rollback()
            account = await self.account_repo.get_by_account_id(account_id)
            if account is None:
                raise LedgerInvariantViolation(account_id, "credit record disappeared during monthly reset")
            if self.clock.same_month(account.last_monthly_reset_at, now):
                return account

        raise RuntimeError(f"Monthly reset for account {account_id} did not settle after {self.MAX_RESET_ATTEMPTS} attempts")
