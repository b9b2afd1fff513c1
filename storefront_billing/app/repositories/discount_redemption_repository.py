"""Discount Redemption Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional
from storefront_billing.domain.discount_redemption import DiscountRedemption


class DiscountRedemptionRepository(ABC):
    """Repository interface for DiscountRedemption persistence"""

    @abstractmethod
    async def create(self, redemption: DiscountRedemption) -> DiscountRedemption:
        """
        Raises:
            IntegrityError: If the (code, order) pair was already redeemed
        """
        pass

    @abstractmethod
    async def get_by_code_and_order(self, code_id: int, order_id: str) -> Optional[DiscountRedemption]:
        pass

    @abstractmethod
    async def count_for_account(self, code_id: int, account_id: str) -> int:
        """
        Number of redemptions of a code by one account

        Args:
            code_id: DiscountCode ID
            account_id: Account identifier

        Returns:
            Redemption count (0 if none)
        """
        pass
