"""SQLAlchemy implementation of CreditPackRepository"""

from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from storefront_billing.app.repositories.credit_pack_repository import CreditPackRepository
from storefront_billing.domain.credit_pack import CreditPack


class SqlAlchemyCreditPackRepository(CreditPackRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, pack_id: int) -> Optional[CreditPack]:
        stmt = select(CreditPack).where(CreditPack.id == pack_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_active(self) -> List[CreditPack]:
        stmt = (
            select(CreditPack)
            .where(CreditPack.is_active.is_(True))
            .order_by(CreditPack.display_order, CreditPack.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, pack: CreditPack) -> CreditPack:
        self.session.add(pack)
        await self.session.flush()
        await self.session.refresh(pack)
        return pack
