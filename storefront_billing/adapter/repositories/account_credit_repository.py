"""SQLAlchemy implementation of AccountCreditRepository

Balance changes are issued as single conditional UPDATE statements; the
WHERE clause carries the precondition and rowcount tells whether it held.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from storefront_billing.app.repositories.account_credit_repository import AccountCreditRepository
from storefront_billing.domain.account_credit import AccountCredit


class SqlAlchemyAccountCreditRepository(AccountCreditRepository):
    """
    SQLAlchemy implementation of AccountCreditRepository

    Features:
    - Conditional updates (no read-modify-write on balance)
    - Reads always repopulate identity-map instances
    - Optional SELECT FOR UPDATE on databases that support it
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_account_id(self, account_id: str, for_update: bool = False) -> Optional[AccountCredit]:
        stmt = (
            select(AccountCredit)
            .where(AccountCredit.account_id == account_id)
            .execution_options(populate_existing=True)
        )

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_all(self) -> list[AccountCredit]:
        stmt = select(AccountCredit).order_by(AccountCredit.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_account_ids_reset_before(self, cutoff: datetime) -> list[str]:
        stmt = (
            select(AccountCredit.account_id)
            .where(AccountCredit.last_monthly_reset_at < cutoff)
            .order_by(AccountCredit.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, account: AccountCredit) -> AccountCredit:
        self.session.add(account)
        await self.session.flush()
        await self.session.refresh(account)
        return account

    async def deduct_if_sufficient(self, account_id: str, amount: Decimal, now: datetime) -> bool:
        stmt = (
            update(AccountCredit)
            .where(AccountCredit.account_id == account_id)
            .where(AccountCredit.balance >= amount)
            .values(
                balance=AccountCredit.balance - amount,
                monthly_used=AccountCredit.monthly_used + amount,
                lifetime_spent=AccountCredit.lifetime_spent + amount,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return int(getattr(result, "rowcount", 0) or 0) == 1

    async def increment_balance(self, account_id: str, amount: Decimal, now: datetime) -> bool:
        stmt = (
            update(AccountCredit)
            .where(AccountCredit.account_id == account_id)
            .values(
                balance=AccountCredit.balance + amount,
                lifetime_granted=AccountCredit.lifetime_granted + amount,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return int(getattr(result, "rowcount", 0) or 0) == 1

    async def reset_monthly_if_unchanged(
        self,
        account_id: str,
        expected_reset_at: datetime,
        expected_balance: Decimal,
        allocation: Decimal,
        now: datetime,
    ) -> bool:
        stmt = (
            update(AccountCredit)
            .where(AccountCredit.account_id == account_id)
            .where(AccountCredit.last_monthly_reset_at == expected_reset_at)
            .where(AccountCredit.balance == expected_balance)
            .values(
                balance=allocation,
                monthly_allocation=allocation,
                monthly_used=0,
                lifetime_granted=AccountCredit.lifetime_granted + allocation,
                last_monthly_reset_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return int(getattr(result, "rowcount", 0) or 0) == 1
