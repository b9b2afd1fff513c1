"""Discount Redemption Domain Entity"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import BigInteger, ForeignKey, Numeric, String, UniqueConstraint
from storefront_billing.domain.base import BaseModel, BigIntegerId


class DiscountRedemption(BaseModel, table=True):
    """
    Discount Redemption - One use of a discount code on one order

    Domain Rules:
    - At most one redemption per (code, order)
    - account_id is None for guest checkouts
    - applied_amount is the discount actually granted on the order
    """

    __tablename__ = "discount_redemptions"
    __table_args__ = (
        UniqueConstraint('code_id', 'order_id', name='uq_discount_redemption_code_order'),
        Index('ix_discount_redemptions_code_account', 'code_id', 'account_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerId, primary_key=True, autoincrement=True),
    )

    code_id: int = Field(
        sa_column=Column(BigInteger, ForeignKey("discount_codes.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to DiscountCode"
    )

    account_id: Optional[str] = Field(default=None, description="Redeeming account (None for guests)")

    order_id: str = Field(
        sa_column=Column(String(64), nullable=False),
        description="Order the code was applied to"
    )

    applied_amount: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Discount granted on the order"
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
