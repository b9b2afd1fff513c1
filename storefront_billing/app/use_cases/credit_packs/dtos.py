"""Credit pack DTOs"""

from decimal import Decimal
from typing import Optional
from pydantic import Field, field_validator
from storefront_billing.app.use_cases.camel import CamelModel


class CreditPackDTO(CamelModel):
    id: int
    name: str
    credits: Decimal
    bonus_credits: Decimal
    total_credits: Decimal
    price: Decimal
    currency: str
    price_per_credit: Decimal
    savings_percent: int
    is_popular: bool
    description: Optional[str] = None


class CreditPackListDTO(CamelModel):
    packs: list[CreditPackDTO]


class CreateCreditPackCommandDTO(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    credits: Decimal = Field(..., gt=0, decimal_places=6)
    bonus_credits: Decimal = Field(Decimal("0"), ge=0, decimal_places=6)
    price: Decimal = Field(..., gt=0, decimal_places=2)
    currency: str = Field("USD", min_length=3, max_length=3)
    description: Optional[str] = Field(None, max_length=500)
    is_active: bool = True
    is_popular: bool = False
    display_order: int = Field(0, ge=0)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()


class PurchaseCreditPackCommandDTO(CamelModel):
    pack_id: int = Field(..., ge=1)
    account_id: Optional[str] = Field(None, max_length=255)
