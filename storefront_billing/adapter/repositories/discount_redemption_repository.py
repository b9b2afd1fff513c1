"""SQLAlchemy implementation of DiscountRedemptionRepository"""

from typing import Optional
from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from storefront_billing.app.repositories.discount_redemption_repository import DiscountRedemptionRepository
from storefront_billing.domain.discount_redemption import DiscountRedemption


class SqlAlchemyDiscountRedemptionRepository(DiscountRedemptionRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, redemption: DiscountRedemption) -> DiscountRedemption:
        self.session.add(redemption)
        await self.session.flush()
        await self.session.refresh(redemption)
        return redemption

    async def get_by_code_and_order(self, code_id: int, order_id: str) -> Optional[DiscountRedemption]:
        stmt = select(DiscountRedemption).where(
            DiscountRedemption.code_id == code_id,
            DiscountRedemption.order_id == order_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def count_for_account(self, code_id: int, account_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(DiscountRedemption)
            .where(DiscountRedemption.code_id == code_id)
            .where(DiscountRedemption.account_id == account_id)
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one() or 0)
