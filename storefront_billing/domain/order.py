"""Order Domain Entity

Local record of a checkout. It is written before any call to the payment
provider so that a failed or interrupted checkout can be resumed with the
same idempotency key.
"""

import json
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from sqlmodel import Field, Column
from sqlalchemy import CheckConstraint, Numeric, String, Text
from storefront_billing.domain.base import BaseModel, BigIntegerId


class OrderStatus(str, Enum):
    """Checkout lifecycle"""
    DRAFT = "DRAFT"                                  # Stored locally, nothing sent to the provider
    ORDER_RECORDED = "ORDER_RECORDED"                # Provider order exists, discount redeemed
    PAYMENT_LINK_CREATED = "PAYMENT_LINK_CREATED"    # Buyer can pay
    PAID = "PAID"                                    # Payment confirmed by webhook
    ABANDONED = "ABANDONED"                          # Closed without payment


PENDING_STATUSES = (OrderStatus.DRAFT, OrderStatus.ORDER_RECORDED)


class Order(BaseModel, table=True):
    """
    Order - Checkout state machine

    Domain Rules:
    - DRAFT -> ORDER_RECORDED -> PAYMENT_LINK_CREATED -> PAID | ABANDONED
    - idempotency_key is generated once and reused for every provider call
    - total = subtotal - discount_amount, never negative
    - last_error keeps the most recent provider failure of a pending order
    """

    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint('subtotal >= 0', name='order_subtotal_non_negative'),
        CheckConstraint('total >= 0', name='order_total_non_negative'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerId, primary_key=True, autoincrement=True),
        description="Unique order identifier (auto-increment)"
    )

    account_id: Optional[str] = Field(default=None, index=True, description="Buyer account (None for guests)")

    status: OrderStatus = Field(default=OrderStatus.DRAFT)

    subtotal: Decimal = Field(sa_column=Column(Numeric(18, 6), nullable=False))

    discount_code: Optional[str] = Field(default=None, sa_column=Column(String(50), nullable=True))

    discount_amount: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 6), nullable=False, default=0),
    )

    total: Decimal = Field(sa_column=Column(Numeric(18, 6), nullable=False))

    currency: str = Field(default="USD", sa_column=Column(String(3), nullable=False, default="USD"))

    line_items_json: str = Field(
        sa_column=Column(Text, nullable=False),
        description="Serialized line items sent to the payment provider"
    )

    buyer_email: Optional[str] = Field(default=None, sa_column=Column(String(320), nullable=True))

    redirect_url: Optional[str] = Field(default=None, sa_column=Column(String(2048), nullable=True))

    idempotency_key: str = Field(
        sa_column=Column(String(64), unique=True, nullable=False),
        description="Base key for every payment provider call of this order"
    )

    external_order_id: Optional[str] = Field(default=None, sa_column=Column(String(255), nullable=True))

    payment_link_id: Optional[str] = Field(default=None, sa_column=Column(String(255), nullable=True))

    payment_url: Optional[str] = Field(default=None, sa_column=Column(String(2048), nullable=True))

    external_payment_id: Optional[str] = Field(default=None, sa_column=Column(String(255), nullable=True))

    last_error: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    paid_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def line_items(self) -> list[dict[str, Any]]:
        return json.loads(self.line_items_json or "[]")

    @property
    def is_pending(self) -> bool:
        return self.status in PENDING_STATUSES
