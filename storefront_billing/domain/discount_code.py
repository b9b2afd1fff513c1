"""Discount Code Domain Entity

Promotion codes applied at checkout. Codes are stored uppercase and matched
case-insensitively after trimming.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import CheckConstraint, Numeric, String
from storefront_billing.domain.base import BaseModel, BigIntegerId


class DiscountKind(str, Enum):
    """How the discount value is interpreted"""
    PERCENTAGE = "PERCENTAGE"        # value is a percentage of the subtotal
    FIXED_AMOUNT = "FIXED_AMOUNT"    # value is an absolute amount, capped at the subtotal


def normalize_code(raw: Optional[str]) -> str:
    return (raw or "").strip().upper()


class DiscountCode(BaseModel, table=True):
    """
    Discount Code - Redeemable promotion

    Domain Rules:
    - code is unique and stored uppercase
    - value > 0; a PERCENTAGE value is at most 100
    - used_count never exceeds max_uses (None = unlimited)
    - max_uses_per_account limits redemptions per authenticated account
    - Valid between starts_at and expires_at when those are set
    """

    __tablename__ = "discount_codes"
    __table_args__ = (
        CheckConstraint('value > 0', name='discount_value_positive'),
        CheckConstraint('used_count >= 0', name='discount_used_count_non_negative'),
        CheckConstraint('max_uses IS NULL OR used_count <= max_uses', name='discount_used_count_within_max'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerId, primary_key=True, autoincrement=True),
        description="Unique code identifier (auto-increment)"
    )

    code: str = Field(
        sa_column=Column(String(50), unique=True, nullable=False, index=True),
        description="Uppercase promotion code"
    )

    kind: DiscountKind = Field(description="PERCENTAGE or FIXED_AMOUNT")

    value: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Percentage (0-100] or fixed amount"
    )

    min_order_amount: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(18, 6), nullable=True),
        description="Minimum subtotal required (None = no minimum)"
    )

    max_uses: Optional[int] = Field(default=None, description="Global redemption cap (None = unlimited)")

    max_uses_per_account: Optional[int] = Field(
        default=None,
        description="Redemption cap per account (None = unlimited)"
    )

    used_count: int = Field(default=0, description="Redemptions so far")

    is_active: bool = Field(default=True, description="Operator kill switch")

    starts_at: Optional[datetime] = Field(default=None, description="Not valid before (UTC)")

    expires_at: Optional[datetime] = Field(default=None, description="Not valid after (UTC)")

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "code": "SAVE10",
                "kind": "PERCENTAGE",
                "value": "10.000000",
                "min_order_amount": "20.000000",
                "max_uses": 1,
                "max_uses_per_account": None,
                "used_count": 0,
                "is_active": True,
            }
        }
