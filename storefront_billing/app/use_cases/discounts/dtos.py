"""Discount DTOs"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from pydantic import Field, field_validator, model_validator
from storefront_billing.app.use_cases.camel import CamelModel
from storefront_billing.domain.discount_code import DiscountKind, normalize_code


class ValidateDiscountCommandDTO(CamelModel):
    code: str = Field(..., min_length=1, max_length=50)
    subtotal: Decimal = Field(..., ge=0)
    account_id: Optional[str] = Field(None, max_length=255)


class PricedDiscountDTO(CamelModel):
    code_id: int
    code: str
    kind: DiscountKind
    value: Decimal
    subtotal: Decimal
    discount_amount: Decimal
    total: Decimal


class RedeemDiscountCommandDTO(CamelModel):
    code: str = Field(..., min_length=1, max_length=50)
    order_id: str = Field(..., min_length=1, max_length=64)
    account_id: Optional[str] = Field(None, max_length=255)
    applied_amount: Decimal = Field(..., ge=0)


class RedemptionDTO(CamelModel):
    id: int
    code_id: int
    code: str
    order_id: str
    account_id: Optional[str] = None
    applied_amount: Decimal
    created_at: datetime


class CreateDiscountCodeCommandDTO(CamelModel):
    code: str = Field(..., min_length=1, max_length=50)
    kind: DiscountKind
    value: Decimal = Field(..., gt=0)
    min_order_amount: Optional[Decimal] = Field(None, ge=0)
    max_uses: Optional[int] = Field(None, ge=1)
    max_uses_per_account: Optional[int] = Field(None, ge=1)
    is_active: bool = True
    starts_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        normalized = normalize_code(v)
        if not normalized:
            raise ValueError("Code cannot be empty")
        if any(ch.isspace() for ch in normalized):
            raise ValueError("Code cannot contain whitespace")
        return normalized

    @field_validator("starts_at", "expires_at")
    @classmethod
    def to_naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

    @model_validator(mode="after")
    def validate_rules(self) -> "CreateDiscountCodeCommandDTO":
        if self.kind == DiscountKind.PERCENTAGE and self.value > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        if self.starts_at and self.expires_at and self.starts_at >= self.expires_at:
            raise ValueError("starts_at must be before expires_at")
        return self


class DiscountCodeDTO(CamelModel):
    id: int
    code: str
    kind: DiscountKind
    value: Decimal
    min_order_amount: Optional[Decimal] = None
    max_uses: Optional[int] = None
    max_uses_per_account: Optional[int] = None
    used_count: int
    is_active: bool
    starts_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: datetime
