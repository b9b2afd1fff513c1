"""SQLAlchemy implementation of CreditTransactionRepository"""

from decimal import Decimal
from typing import Optional
from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from storefront_billing.app.repositories.credit_transaction_repository import CreditTransactionRepository
from storefront_billing.domain.credit_transaction import CreditTransaction, CreditTransactionKind


class SqlAlchemyCreditTransactionRepository(CreditTransactionRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, transaction: CreditTransaction) -> CreditTransaction:
        self.session.add(transaction)
        await self.session.flush()
        await self.session.refresh(transaction)
        return transaction

    async def get_by_idempotency_key(self, idempotency_key: str) -> Optional[CreditTransaction]:
        stmt = select(CreditTransaction).where(CreditTransaction.idempotency_key == idempotency_key)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_account_id(
        self,
        account_id: str,
        limit: int = 20,
        offset: int = 0,
        kind: Optional[CreditTransactionKind] = None,
    ) -> tuple[list[CreditTransaction], int]:
        filters = [CreditTransaction.account_id == account_id]
        if kind is not None:
            filters.append(CreditTransaction.kind == kind)

        count_stmt = select(func.count()).select_from(CreditTransaction).where(*filters)
        total = (await self.session.execute(count_stmt)).scalar_one()

        # id breaks ties between rows written in the same instant
        stmt = (
            select(CreditTransaction)
            .where(*filters)
            .order_by(CreditTransaction.created_at.desc(), CreditTransaction.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), int(total)

    async def get_sum_by_account_id(self, account_id: str) -> Decimal:
        stmt = (
            select(func.coalesce(func.sum(CreditTransaction.amount), 0))
            .where(CreditTransaction.account_id == account_id)
        )
        total = (await self.session.execute(stmt)).scalar_one()
        return Decimal(str(total))
