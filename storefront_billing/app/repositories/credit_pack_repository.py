"""Credit Pack Repository Interface"""

from abc import ABC, abstractmethod
from typing import List, Optional
from storefront_billing.domain.credit_pack import CreditPack


class CreditPackRepository(ABC):
    """Repository interface for the credit pack catalog"""

    @abstractmethod
    async def get_by_id(self, pack_id: int) -> Optional[CreditPack]:
        pass

    @abstractmethod
    async def list_active(self) -> List[CreditPack]:
        """
        Active packs in display order

        Returns:
            Packs with is_active set, ordered by display_order then id
        """
        pass

    @abstractmethod
    async def create(self, pack: CreditPack) -> CreditPack:
        """
        Raises:
            IntegrityError: If a pack with the same name exists
        """
        pass
