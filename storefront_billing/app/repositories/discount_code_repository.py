"""Discount Code Repository Interface"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from storefront_billing.domain.discount_code import DiscountCode


class DiscountCodeRepository(ABC):
    """Repository interface for DiscountCode persistence"""

    @abstractmethod
    async def get_by_code(self, code: str) -> Optional[DiscountCode]:
        """
        Retrieve a discount code

        Args:
            code: Normalized (trimmed, uppercase) code

        Returns:
            DiscountCode if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_id(self, code_id: int) -> Optional[DiscountCode]:
        pass

    @abstractmethod
    async def create(self, discount_code: DiscountCode) -> DiscountCode:
        """
        Raises:
            IntegrityError: If the code already exists
        """
        pass

    @abstractmethod
    async def increment_usage_if_available(self, code_id: int, now: datetime) -> bool:
        """
        Atomically take one use of the code

        Guarded by ``max_uses IS NULL OR used_count < max_uses``. On databases
        with row locks the updated row stays locked until commit, which
        serializes concurrent redeemers of the same code.

        Returns:
            True if a use was taken, False if the global cap is reached
        """
        pass
