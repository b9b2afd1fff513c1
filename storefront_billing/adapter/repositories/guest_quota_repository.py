"""SQLAlchemy implementation of GuestQuotaRepository"""

from datetime import datetime
from typing import Optional
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from storefront_billing.app.repositories.guest_quota_repository import GuestQuotaRepository
from storefront_billing.domain.guest_quota import GuestQuota


class SqlAlchemyGuestQuotaRepository(GuestQuotaRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_session_id(self, session_id: str) -> Optional[GuestQuota]:
        stmt = (
            select(GuestQuota)
            .where(GuestQuota.session_id == session_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def increment_within_window(
        self,
        session_id: str,
        window_started_after: datetime,
        limit: int,
        now: datetime,
        ip: Optional[str] = None,
    ) -> bool:
        values = {"count": GuestQuota.count + 1, "last_generation_at": now}
        if ip:
            values["last_ip"] = ip
        stmt = (
            update(GuestQuota)
            .where(GuestQuota.session_id == session_id)
            .where(GuestQuota.window_start_at > window_started_after)
            .where(GuestQuota.count < limit)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return int(getattr(result, "rowcount", 0) or 0) == 1

    async def restart_window(
        self,
        session_id: str,
        window_started_at_or_before: datetime,
        now: datetime,
        ip: Optional[str] = None,
    ) -> bool:
        values = {"count": 1, "window_start_at": now, "last_generation_at": now}
        if ip:
            values["last_ip"] = ip
        stmt = (
            update(GuestQuota)
            .where(GuestQuota.session_id == session_id)
            .where(GuestQuota.window_start_at <= window_started_at_or_before)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return int(getattr(result, "rowcount", 0) or 0) == 1

    async def create(self, quota: GuestQuota) -> GuestQuota:
        self.session.add(quota)
        await self.session.flush()
        await self.session.refresh(quota)
        return quota
