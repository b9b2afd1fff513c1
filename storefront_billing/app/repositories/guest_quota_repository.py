"""Guest Quota Repository Interface"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from storefront_billing.domain.guest_quota import GuestQuota


class GuestQuotaRepository(ABC):
    """
    Repository interface for GuestQuota persistence

    The consume path is split into two conditional updates and an insert so
    that the window check and the increment are one statement each.
    """

    @abstractmethod
    async def get_by_session_id(self, session_id: str) -> Optional[GuestQuota]:
        pass

    @abstractmethod
    async def increment_within_window(
        self,
        session_id: str,
        window_started_after: datetime,
        limit: int,
        now: datetime,
        ip: Optional[str] = None,
    ) -> bool:
        """
        Count one generation inside the current window

        Matches only when window_start_at > window_started_after and
        count < limit.

        Returns:
            True if the generation was counted
        """
        pass

    @abstractmethod
    async def restart_window(
        self,
        session_id: str,
        window_started_at_or_before: datetime,
        now: datetime,
        ip: Optional[str] = None,
    ) -> bool:
        """
        Open a new window with count = 1 when the current one has expired

        Returns:
            True if the window was restarted
        """
        pass

    @abstractmethod
    async def create(self, quota: GuestQuota) -> GuestQuota:
        """
        Raises:
            IntegrityError: If the session already has a record
        """
        pass
