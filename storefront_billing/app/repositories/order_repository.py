"""Order Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional
from storefront_billing.domain.order import Order


class OrderRepository(ABC):
    """Repository interface for Order persistence"""

    @abstractmethod
    async def create(self, order: Order) -> Order:
        """
        Create a new order

        Args:
            order: Order entity to persist

        Returns:
            Created Order with generated ID
        """
        pass

    @abstractmethod
    async def get_by_id(self, order_id: int, for_update: bool = False) -> Optional[Order]:
        """
        Retrieve order by ID

        Args:
            order_id: Order ID
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            Order if found, None otherwise
        """
        pass

    @abstractmethod
    async def update(self, order: Order) -> Order:
        """
        Persist changes made to an order

        Args:
            order: Order entity with modified fields

        Returns:
            Updated Order
        """
        pass
