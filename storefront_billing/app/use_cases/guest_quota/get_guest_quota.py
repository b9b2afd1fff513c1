"""GetGuestQuota Use Case"""

from libs.result import Result, Return
from storefront_billing.app.billing_settings import BillingSettings
from storefront_billing.app.repositories.guest_quota_repository import GuestQuotaRepository
from storefront_billing.app.services.clock import Clock
from .dtos import GuestQuotaResponseDTO


class GetGuestQuota:
    """
    Use case: Read-only guest quota status for display

    ``remaining`` is the number of generations available right now;
    ``resets_at`` is None when no window is open.
    """

    def __init__(self, quota_repo: GuestQuotaRepository, settings: BillingSettings, clock: Clock):
        self.quota_repo = quota_repo
        self.settings = settings
        self.clock = clock

    async def execute(self, session_id: str) -> Result[GuestQuotaResponseDTO]:
        limit = self.settings.guest_daily_limit
        window = self.settings.guest_window
        quota = await self.quota_repo.get_by_session_id(session_id)

        if quota is None or quota.window_start_at <= self.clock.now() - window:
            return Return.ok(GuestQuotaResponseDTO(allowed=True, remaining=limit, resets_at=None))

        remaining = max(limit - quota.count, 0)
        return Return.ok(
            GuestQuotaResponseDTO(
                allowed=remaining > 0,
                remaining=remaining,
                resets_at=quota.window_start_at + window,
            )
        )
