"""Checkout DTOs"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import Field
from storefront_billing.app.use_cases.camel import CamelModel
from storefront_billing.app.use_cases.discounts.dtos import PricedDiscountDTO


class OrderItemDTO(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    unit_price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    sku: Optional[str] = Field(None, max_length=255)
    earns_bonus: bool = Field(False, description="Physical item that earns the purchase credit bonus")
    credits: Decimal = Field(Decimal("0"), ge=0, decimal_places=6, description="Credits granted per unit once paid")

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class PriceOrderCommandDTO(CamelModel):
    items: list[OrderItemDTO] = Field(..., min_length=1)
    discount_code: Optional[str] = Field(None, max_length=50)
    account_id: Optional[str] = Field(None, max_length=255)


class PricedOrderDTO(CamelModel):
    items: list[OrderItemDTO]
    account_id: Optional[str] = None
    currency: str
    subtotal: Decimal
    discount: Optional[PricedDiscountDTO] = None
    discount_amount: Decimal = Decimal("0")
    total: Decimal


class PaymentRequestDTO(CamelModel):
    buyer_email: Optional[str] = Field(None, max_length=320)
    redirect_url: Optional[str] = Field(None, max_length=2048)


class OrderConfirmationDTO(CamelModel):
    order_id: int
    status: str
    subtotal: Decimal
    discount_code: Optional[str] = None
    discount_amount: Decimal
    total: Decimal
    currency: str
    external_order_id: Optional[str] = None
    payment_link_id: Optional[str] = None
    checkout_url: Optional[str] = None
    last_error: Optional[str] = None


class MarkOrderPaidCommandDTO(CamelModel):
    order_id: int
    external_payment_id: Optional[str] = Field(None, max_length=255)


class PaidOrderDTO(CamelModel):
    order_id: int
    status: str
    paid_at: Optional[datetime] = None
    bonus_credits_granted: Decimal = Decimal("0")
    purchased_credits_granted: Decimal = Decimal("0")
