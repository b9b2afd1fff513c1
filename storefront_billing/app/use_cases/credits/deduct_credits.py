"""DeductCredits Use Case

Spends credits for one generation. The balance check and the decrement are
a single conditional UPDATE, so concurrent deductions can never overdraw
an account.
"""

import logging
from decimal import Decimal
from typing import Optional
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from storefront_billing.app.billing_settings import BillingSettings
from storefront_billing.app.repositories.account_credit_repository import AccountCreditRepository
from storefront_billing.app.repositories.credit_transaction_repository import CreditTransactionRepository
from storefront_billing.app.services.clock import Clock
from storefront_billing.app.services.unit_of_work import UnitOfWork
from storefront_billing.domain.credit_transaction import CreditTransaction, CreditTransactionKind
from storefront_billing.domain.errors import LedgerInvariantViolation
from .dtos import DeductCommandDTO, DeductResponseDTO
from .get_or_init_account import GetOrInitAccount

logger = logging.getLogger(__name__)


class DeductCredits:
    """
    Use Case: Deduct credits from an account

    Business Rules:
    1. Idempotency: a replayed idempotency_key returns the original spend
    2. Sufficient balance: balance >= cost, checked inside the UPDATE
    3. Atomic updates: balance, counters and transaction row commit together
    4. A negative balance after the update is an invariant violation

    Flow:
    1. Check idempotency (return existing if found)
    2. Load the account (lazy init / monthly reset)
    3. Conditional decrement
    4. Append GENERATION_SPEND transaction
    5. Commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        account_repo: AccountCreditRepository,
        transaction_repo: CreditTransactionRepository,
        accounts: GetOrInitAccount,
        settings: BillingSettings,
        clock: Clock,
    ):
        self.uow = uow
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo
        self.accounts = accounts
        self.settings = settings
        self.clock = clock

    async def execute(self, command: DeductCommandDTO) -> Result[DeductResponseDTO]:
        cost = command.cost if command.cost is not None else self.settings.cost_for(command.action)
        account_id = command.account_id

        try:
            # Step 1: Idempotent replay
            if command.idempotency_key:
                existing = await self.transaction_repo.get_by_idempotency_key(command.idempotency_key)
                if existing:
                    return self._replay(existing, account_id)

            # Step 2: Make sure the account exists and is in the current month
            await self.accounts.load(account_id)

            # Step 3: Conditional decrement
            now = self.clock.now()
            deducted = await self.account_repo.deduct_if_sufficient(account_id, cost, now)

            if not deducted:
                await self.uow.rollback()
                current = await self.account_repo.get_by_account_id(account_id)
                balance = current.balance if current else Decimal("0")
                logger.info(f"Insufficient credits for account {account_id}: required={cost}, available={balance}")
                return Return.err(
                    Error(
                        code="INSUFFICIENT_BALANCE",
                        message=f"Insufficient credits. Required: {cost}, Available: {balance}",
                        reason=f"balance={balance}, required={cost}",
                    )
                )

            updated = await self.account_repo.get_by_account_id(account_id)
            if updated is None or updated.balance < 0:
                raise LedgerInvariantViolation(
                    account_id,
                    "balance is negative after deduction",
                    balance=updated.balance if updated else None,
                )

            # Step 4: Append the spend
            metadata = dict(command.metadata or {})
            if command.action:
                metadata.setdefault("action", command.action)

            transaction = await self.transaction_repo.create(
                CreditTransaction(
                    account_id=account_id,
                    kind=CreditTransactionKind.GENERATION_SPEND,
                    amount=-cost,
                    balance_after=updated.balance,
                    reason=command.reason,
                    metadata_json=CreditTransaction.dump_metadata(metadata),
                    idempotency_key=command.idempotency_key,
                    created_at=now,
                )
            )

            # Step 5: Commit
            await self.uow.commit()

            return Return.ok(
                DeductResponseDTO(
                    ok=True,
                    new_balance=updated.balance,
                    cost=cost,
                    transaction_id=transaction.id,
                )
            )

        except LedgerInvariantViolation:
            await self.uow.rollback()
            raise
        except IntegrityError as e:
            # A concurrent request with the same idempotency key won the insert
            await self.uow.rollback()
            existing = await self._find_existing(command.idempotency_key)
            if existing is not None:
                return self._replay(existing, account_id)
            return Return.err(
                Error(code="DEDUCT_CREDIT_FAILED", message="Failed to deduct credits", reason=str(e))
            )
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code="DEDUCT_CREDIT_FAILED", message="Failed to deduct credits", reason=str(e))
            )

    async def _find_existing(self, idempotency_key: Optional[str]) -> Optional[CreditTransaction]:
        if not idempotency_key:
            return None
        return await self.transaction_repo.get_by_idempotency_key(idempotency_key)

    def _replay(self, existing: CreditTransaction, account_id: str) -> Result[DeductResponseDTO]:
        """Return the original spend, unless the key belongs to another account or another kind"""
        if existing.account_id != account_id or existing.kind != CreditTransactionKind.GENERATION_SPEND:
            logger.warning(
                f"Idempotency key {existing.idempotency_key} reused by account {account_id}, "
                f"originally recorded for account {existing.account_id}"
            )
            return Return.err(
                Error(
                    code="IDEMPOTENCY_KEY_CONFLICT",
                    message="Idempotency key was already used for a different request",
                    reason=f"key={existing.idempotency_key}",
                )
            )
        return Return.ok(self._to_response_dto(existing))

    def _to_response_dto(self, transaction: CreditTransaction) -> DeductResponseDTO:
        return DeductResponseDTO(
            ok=True,
            new_balance=transaction.balance_after,
            cost=-transaction.amount,
            transaction_id=transaction.id,
        )
