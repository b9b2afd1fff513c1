"""Payment Provider Service Interface

Defines the contract for the external payment provider used at checkout.
Both calls carry an idempotency key; repeating a call with the same key must
return the original result instead of creating a second order or link.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


class PaymentProviderError(Exception):
    """The provider rejected a call, timed out, or answered with an unusable payload"""


class PaymentLineItem(BaseModel):
    name: str
    quantity: int = Field(..., ge=1)
    unit_price: Decimal = Field(..., ge=0)
    sku: Optional[str] = None


class PaymentDiscount(BaseModel):
    code: str
    amount: Decimal = Field(..., ge=0)


class ExternalOrder(BaseModel):
    external_order_id: str


class PaymentLinkRequest(BaseModel):
    order_id: int
    external_order_id: str
    amount: Decimal
    currency: str
    buyer_email: Optional[str] = None
    redirect_url: Optional[str] = None


class PaymentLink(BaseModel):
    link_id: str
    url: str


class PaymentProvider(ABC):
    """
    Abstract payment provider

    Implementations:
    - HTTP provider (Square-style REST API)
    - In-memory sandbox for development and tests
    """

    @abstractmethod
    async def create_order(
        self,
        line_items: list[PaymentLineItem],
        discounts: list[PaymentDiscount],
        currency: str,
        idempotency_key: str,
    ) -> ExternalOrder:
        """
        Create the order on the provider side

        Args:
            line_items: Items being bought
            discounts: Discounts applied to the whole order
            currency: ISO 4217 currency code
            idempotency_key: Key that makes the call replay-safe

        Returns:
            ExternalOrder with the provider's order id

        Raises:
            PaymentProviderError: On any provider failure
        """
        pass

    @abstractmethod
    async def create_payment_link(self, request: PaymentLinkRequest, idempotency_key: str) -> PaymentLink:
        """
        Create a hosted checkout link for a provider order

        Raises:
            PaymentProviderError: On any provider failure
        """
        pass
