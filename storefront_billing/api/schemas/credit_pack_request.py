"""Request schemas for the credit pack API"""

from decimal import Decimal
from typing import Optional
from pydantic import Field
from storefront_billing.app.use_cases.camel import CamelModel


class CreateCreditPackRequestSchema(CamelModel):
    """Request schema for POST /credit-packs (internal)"""

    name: str = Field(..., min_length=1, max_length=100)
    credits: Decimal = Field(..., gt=0)
    bonus_credits: Decimal = Field(default=Decimal("0"), ge=0)
    price: Decimal = Field(..., gt=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: bool = True
    is_popular: bool = False
    display_order: int = 0

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Creator Pack",
                "credits": "100",
                "bonusCredits": "10",
                "price": "14.99",
                "isPopular": True,
                "displayOrder": 2,
            }
        }


class PurchaseCreditPackRequestSchema(CamelModel):
    """
    Request schema for POST /checkout/credit-pack

    The buyer is the X-Account-Id caller; ``accountId`` naming another
    account needs X-Internal-Token.
    """

    pack_id: int = Field(..., ge=1)
    account_id: Optional[str] = Field(default=None, max_length=255)
    buyer_email: Optional[str] = Field(default=None, max_length=320)
    redirect_url: Optional[str] = Field(default=None, max_length=2048)

    class Config:
        json_schema_extra = {
            "example": {"packId": 2, "redirectUrl": "https://shop.example.com/credits/complete"}
        }
