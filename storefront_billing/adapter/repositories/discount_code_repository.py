"""SQLAlchemy implementation of DiscountCodeRepository"""

from datetime import datetime
from typing import Optional
from sqlalchemy import or_, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from storefront_billing.app.repositories.discount_code_repository import DiscountCodeRepository
from storefront_billing.domain.discount_code import DiscountCode


class SqlAlchemyDiscountCodeRepository(DiscountCodeRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_code(self, code: str) -> Optional[DiscountCode]:
        stmt = (
            select(DiscountCode)
            .where(DiscountCode.code == code)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, code_id: int) -> Optional[DiscountCode]:
        stmt = (
            select(DiscountCode)
            .where(DiscountCode.id == code_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, discount_code: DiscountCode) -> DiscountCode:
        self.session.add(discount_code)
        await self.session.flush()
        await self.session.refresh(discount_code)
        return discount_code

    async def increment_usage_if_available(self, code_id: int, now: datetime) -> bool:
        stmt = (
            update(DiscountCode)
            .where(DiscountCode.id == code_id)
            .where(or_(DiscountCode.max_uses.is_(None), DiscountCode.used_count < DiscountCode.max_uses))
            .values(used_count=DiscountCode.used_count + 1, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return int(getattr(result, "rowcount", 0) or 0) == 1
