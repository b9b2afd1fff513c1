"""Request schemas for the discount API"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import Field
from storefront_billing.app.use_cases.camel import CamelModel
from storefront_billing.domain.discount_code import DiscountKind


class ValidateDiscountRequestSchema(CamelModel):
    """
    Request schema for POST /discount/validate

    ``accountId`` defaults to the X-Account-Id header (another account needs
    X-Internal-Token); guests omit both.
    """

    code: str = Field(..., min_length=1, max_length=50, description="Discount code (case-insensitive)")
    subtotal: Decimal = Field(..., ge=0, description="Order subtotal before discount")
    account_id: Optional[str] = Field(default=None, max_length=255)

    class Config:
        json_schema_extra = {"example": {"code": "save10", "subtotal": "25.00"}}


class CreateDiscountCodeRequestSchema(CamelModel):
    """Request schema for POST /discount/codes (internal)"""

    code: str = Field(..., min_length=1, max_length=50)
    kind: DiscountKind
    value: Decimal = Field(..., gt=0)
    min_order_amount: Optional[Decimal] = Field(default=None, ge=0)
    max_uses: Optional[int] = Field(default=None, ge=1)
    max_uses_per_account: Optional[int] = Field(default=None, ge=1)
    is_active: bool = True
    starts_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "code": "SAVE10",
                "kind": "PERCENTAGE",
                "value": "10",
                "minOrderAmount": "20.00",
                "maxUses": 100,
                "maxUsesPerAccount": 1,
            }
        }
