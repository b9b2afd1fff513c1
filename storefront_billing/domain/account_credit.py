"""Account Credit Domain Entity

One balance record per account, created lazily on first access.
Balance changes only through the credit accounting use cases, each of which
appends a CreditTransaction in the same database transaction.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import CheckConstraint, Numeric
from storefront_billing.domain.base import BaseModel, BigIntegerId


class AccountCredit(BaseModel, table=True):
    """
    Account Credit - Spendable credit balance of an authenticated account

    Domain Rules:
    - One record per account (account_id is unique)
    - Balance must be non-negative
    - Monthly allocation resets at each calendar month; unspent balance is forfeited
    - Welcome pool is granted once and never replenished
    - lifetime_granted / lifetime_spent only grow and are kept for audit
    """

    __tablename__ = "account_credits"
    __table_args__ = (
        CheckConstraint('balance >= 0', name='account_balance_non_negative'),
        CheckConstraint('monthly_used >= 0', name='account_monthly_used_non_negative'),
        CheckConstraint('welcome_used >= 0', name='account_welcome_used_non_negative'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerId, primary_key=True, autoincrement=True),
        description="Unique record identifier (auto-increment)"
    )

    account_id: str = Field(
        index=True,
        unique=True,
        description="Account ID (unique - one credit record per account)"
    )

    balance: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 6), nullable=False, default=0),
        description="Current spendable balance (must be >= 0)"
    )

    monthly_allocation: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 6), nullable=False, default=0),
        description="Credits granted at each monthly reset"
    )

    monthly_used: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 6), nullable=False, default=0),
        description="Credits spent since the last monthly reset"
    )

    last_monthly_reset_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Timestamp of the last monthly reset (UTC)"
    )

    welcome_allocation: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 6), nullable=False, default=0),
        description="One-time welcome pool"
    )

    welcome_used: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 6), nullable=False, default=0),
        description="Portion of the welcome pool already consumed"
    )

    lifetime_granted: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 6), nullable=False, default=0),
        description="Total credits ever granted (audit)"
    )

    lifetime_spent: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 6), nullable=False, default=0),
        description="Total credits ever spent (audit)"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Record creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last balance change timestamp"
    )

    @property
    def welcome_remaining(self) -> Decimal:
        remaining = (self.welcome_allocation or Decimal("0")) - (self.welcome_used or Decimal("0"))
        return max(remaining, Decimal("0"))

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "account_id": "user_2abc",
                "balance": "37.500000",
                "monthly_allocation": "50.000000",
                "monthly_used": "12.500000",
                "last_monthly_reset_at": "2026-10-01T00:00:00Z",
                "welcome_allocation": "50.000000",
                "welcome_used": "0.000000",
                "lifetime_granted": "50.000000",
                "lifetime_spent": "12.500000",
            }
        }
