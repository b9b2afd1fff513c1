"""Request schemas for the checkout API"""

from decimal import Decimal
from typing import List, Optional
from pydantic import Field
from storefront_billing.app.use_cases.camel import CamelModel


class OrderItemSchema(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    unit_price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    sku: Optional[str] = Field(default=None, max_length=255)
    earns_bonus: bool = Field(default=False, description="Physical item that earns purchase bonus credits")


class PriceOrderRequestSchema(CamelModel):
    """Request schema for POST /checkout/price"""

    items: List[OrderItemSchema] = Field(..., min_length=1)
    discount_code: Optional[str] = Field(default=None, max_length=50)
    account_id: Optional[str] = Field(default=None, max_length=255)


class PlaceOrderRequestSchema(PriceOrderRequestSchema):
    """
    Request schema for POST /checkout/place-order

    Example:
    ```json
    {
      "items": [{"name": "Custom T-Shirt", "unitPrice": "25.00", "quantity": 1, "earnsBonus": true}],
      "discountCode": "SAVE10",
      "buyerEmail": "buyer@example.com",
      "redirectUrl": "https://shop.example.com/orders/complete"
    }
    ```
    """

    buyer_email: Optional[str] = Field(default=None, max_length=320)
    redirect_url: Optional[str] = Field(default=None, max_length=2048)


class MarkOrderPaidRequestSchema(CamelModel):
    """Request schema for POST /checkout/orders/{id}/paid (payment webhook relay)"""

    external_payment_id: Optional[str] = Field(default=None, max_length=255)
