"""Credit Pack Domain Entity

Purchasable bundles of generation credits, sold through the same payment
provider checkout as physical orders.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import CheckConstraint, Numeric, String
from storefront_billing.domain.base import BaseModel, BigIntegerId


class CreditPack(BaseModel, table=True):
    """
    Credit Pack - Catalog entry for buying credits

    Domain Rules:
    - credits > 0, bonus_credits >= 0, price > 0
    - A purchase grants credits + bonus_credits once the order is paid
    - Only active packs are listed and sold
    """

    __tablename__ = "credit_packs"
    __table_args__ = (
        CheckConstraint('credits > 0', name='credit_pack_credits_positive'),
        CheckConstraint('bonus_credits >= 0', name='credit_pack_bonus_non_negative'),
        CheckConstraint('price > 0', name='credit_pack_price_positive'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerId, primary_key=True, autoincrement=True),
        description="Unique pack identifier (auto-increment)"
    )

    name: str = Field(sa_column=Column(String(100), unique=True, nullable=False))

    credits: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Credits bought"
    )

    bonus_credits: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 6), nullable=False, default=0),
        description="Extra credits included for free"
    )

    price: Decimal = Field(sa_column=Column(Numeric(18, 2), nullable=False))

    currency: str = Field(default="USD", sa_column=Column(String(3), nullable=False, default="USD"))

    description: Optional[str] = Field(default=None, sa_column=Column(String(500), nullable=True))

    is_active: bool = Field(default=True)

    is_popular: bool = Field(default=False, description="Highlighted in the storefront")

    display_order: int = Field(default=0, index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def total_credits(self) -> Decimal:
        return self.credits + self.bonus_credits

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 2,
                "name": "Creator Pack",
                "credits": "100.000000",
                "bonus_credits": "10.000000",
                "price": "14.99",
                "currency": "USD",
                "is_active": True,
                "is_popular": True,
                "display_order": 2,
            }
        }
