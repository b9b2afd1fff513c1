"""ConsumeGuestQuota Use Case

Counts one generation against a guest session's rolling window, or reports
that the session is blocked until the window ends.
"""

import logging
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from storefront_billing.app.billing_settings import BillingSettings
from storefront_billing.app.repositories.guest_quota_repository import GuestQuotaRepository
from storefront_billing.app.services.clock import Clock
from storefront_billing.app.services.unit_of_work import UnitOfWork
from storefront_billing.domain.guest_quota import GuestQuota
from .dtos import GuestQuotaCommandDTO, GuestQuotaResponseDTO

logger = logging.getLogger(__name__)


class ConsumeGuestQuota:
    """
    Use Case: Check and consume one guest generation

    Business Rules:
    1. At most ``guest_daily_limit`` generations per window
    2. The window lasts ``guest_window_hours`` from window_start_at
    3. An expired window restarts on the next generation with count = 1
    4. A blocked call changes nothing

    Flow:
    1. Increment inside the open window (conditional UPDATE)
    2. Else restart an expired window (conditional UPDATE)
    3. Else create the record; a concurrent insert retries once
    4. Else blocked
    """

    MAX_ATTEMPTS = 2

    def __init__(
        self,
        uow: UnitOfWork,
        quota_repo: GuestQuotaRepository,
        settings: BillingSettings,
        clock: Clock,
    ):
        self.uow = uow
        self.quota_repo = quota_repo
        self.settings = settings
        self.clock = clock

    async def execute(self, command: GuestQuotaCommandDTO) -> Result[GuestQuotaResponseDTO]:
        limit = self.settings.guest_daily_limit
        window = self.settings.guest_window
        session_id = command.session_id

        try:
            for _ in range(self.MAX_ATTEMPTS):
                now = self.clock.now()
                window_cutoff = now - window

                # Step 1: Count inside the open window
                if await self.quota_repo.increment_within_window(
                    session_id, window_started_after=window_cutoff, limit=limit, now=now, ip=command.ip
                ):
                    quota = await self.quota_repo.get_by_session_id(session_id)
                    await self.uow.commit()
                    return Return.ok(
                        GuestQuotaResponseDTO(
                            allowed=True,
                            remaining=max(limit - quota.count, 0),
                            resets_at=quota.window_start_at + window,
                        )
                    )

                # Step 2: Restart an expired window
                if await self.quota_repo.restart_window(
                    session_id, window_started_at_or_before=window_cutoff, now=now, ip=command.ip
                ):
                    await self.uow.commit()
                    return Return.ok(
                        GuestQuotaResponseDTO(allowed=True, remaining=limit - 1, resets_at=now + window)
                    )

                # Step 3: First generation of this session
                quota = await self.quota_repo.get_by_session_id(session_id)
                if quota is None:
                    try:
                        await self.quota_repo.create(
                            GuestQuota(
                                session_id=session_id,
                                count=1,
                                window_start_at=now,
                                last_generation_at=now,
                                last_ip=command.ip,
                                created_at=now,
                            )
                        )
                        await self.uow.commit()
                    except IntegrityError:
                        await self.uow.rollback()
                        continue
                    return Return.ok(
                        GuestQuotaResponseDTO(allowed=True, remaining=limit - 1, resets_at=now + window)
                    )

                # Step 4: Blocked (read the window before rollback expires the instance)
                resets_at = quota.window_start_at + window
                await self.uow.rollback()
                logger.info(f"Guest session {session_id} reached its limit of {limit} generations")
                return Return.ok(GuestQuotaResponseDTO(allowed=False, remaining=0, resets_at=resets_at))

            return Return.err(
                Error(
                    code="GUEST_QUOTA_FAILED",
                    message="Failed to check guest quota",
                    reason="concurrent session creation did not settle",
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code="GUEST_QUOTA_FAILED", message="Failed to check guest quota", reason=str(e))
            )
