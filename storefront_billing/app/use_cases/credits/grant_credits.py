"""GrantCredits Use Case

Adds credits to an account (operator grants, welcome and purchase bonuses).
"""

import logging
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from storefront_billing.app.repositories.account_credit_repository import AccountCreditRepository
from storefront_billing.app.repositories.credit_transaction_repository import CreditTransactionRepository
from storefront_billing.app.services.clock import Clock
from storefront_billing.app.services.unit_of_work import UnitOfWork
from storefront_billing.domain.credit_transaction import CreditTransaction
from storefront_billing.domain.errors import LedgerInvariantViolation
from .dtos import GrantCommandDTO, GrantResponseDTO
from .get_or_init_account import GetOrInitAccount

logger = logging.getLogger(__name__)


class GrantCredits:
    """
    Use Case: Grant credits to an account

    Business Rules:
    1. amount >= 0 (enforced by the command)
    2. balance and lifetime_granted grow in one conditional UPDATE
    3. A replayed idempotency_key returns the original grant
    """

    def __init__(
        self,
        uow: UnitOfWork,
        account_repo: AccountCreditRepository,
        transaction_repo: CreditTransactionRepository,
        accounts: GetOrInitAccount,
        clock: Clock,
    ):
        self.uow = uow
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo
        self.accounts = accounts
        self.clock = clock

    async def execute(self, command: GrantCommandDTO) -> Result[GrantResponseDTO]:
        account_id = command.account_id

        try:
            if command.idempotency_key:
                existing = await self.transaction_repo.get_by_idempotency_key(command.idempotency_key)
                if existing:
                    return self._replay(existing, command)

            await self.accounts.load(account_id)

            now = self.clock.now()
            if not await self.account_repo.increment_balance(account_id, command.amount, now):
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="ACCOUNT_NOT_FOUND",
                        message=f"Credit record not found for account {account_id}",
                    )
                )

            updated = await self.account_repo.get_by_account_id(account_id)
            if updated is None or updated.balance < 0:
                raise LedgerInvariantViolation(account_id, "balance is negative after grant")

            transaction = await self.transaction_repo.create(
                CreditTransaction(
                    account_id=account_id,
                    kind=command.kind,
                    amount=command.amount,
                    balance_after=updated.balance,
                    reason=command.reason,
                    metadata_json=CreditTransaction.dump_metadata(command.metadata),
                    idempotency_key=command.idempotency_key,
                    created_at=now,
                )
            )

            await self.uow.commit()

            logger.info(
                f"Granted {command.amount} credits ({command.kind.value}) to account {account_id}, "
                f"new balance {updated.balance}"
            )
            return Return.ok(GrantResponseDTO(new_balance=updated.balance, transaction_id=transaction.id))

        except LedgerInvariantViolation:
            await self.uow.rollback()
            raise
        except IntegrityError as e:
            await self.uow.rollback()
            if command.idempotency_key:
                existing = await self.transaction_repo.get_by_idempotency_key(command.idempotency_key)
                if existing:
                    return self._replay(existing, command)
            return Return.err(Error(code="GRANT_CREDIT_FAILED", message="Failed to grant credits", reason=str(e)))
        except Exception as e:
            await self.uow.rollback()
            return Return.err(Error(code="GRANT_CREDIT_FAILED", message="Failed to grant credits", reason=str(e)))

    def _replay(self, existing: CreditTransaction, command: GrantCommandDTO) -> Result[GrantResponseDTO]:
        if existing.account_id != command.account_id or existing.kind != command.kind:
            logger.warning(
                f"Idempotency key {existing.idempotency_key} reused for {command.kind.value} on account "
                f"{command.account_id}, originally {existing.kind.value} on account {existing.account_id}"
            )
            return Return.err(
                Error(
                    code="IDEMPOTENCY_KEY_CONFLICT",
                    message="Idempotency key was already used for a different request",
                    reason=f"key={existing.idempotency_key}",
                )
            )
        return Return.ok(self._to_response_dto(existing))

    def _to_response_dto(self, transaction: CreditTransaction) -> GrantResponseDTO:
        return GrantResponseDTO(new_balance=transaction.balance_after, transaction_id=transaction.id)
