"""Credit Transaction Domain Entity

Append-only log of every balance change. Replaying ``amount`` from zero
reproduces the current balance of the account.
"""

import json
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String, Text
from storefront_billing.domain.base import BaseModel, BigIntegerId


class CreditTransactionKind(str, Enum):
    """Credit transaction kinds"""
    MONTHLY_RESET = "MONTHLY_RESET"          # Monthly allocation (initial grant included)
    GENERATION_SPEND = "GENERATION_SPEND"    # Credits spent on an AI generation
    PURCHASE_BONUS = "PURCHASE_BONUS"        # Bonus for a completed physical order
    CREDIT_PURCHASE = "CREDIT_PURCHASE"      # Paid credit pack
    MANUAL_GRANT = "MANUAL_GRANT"            # Operator adjustment
    WELCOME_GRANT = "WELCOME_GRANT"          # One-time welcome pool


class CreditTransaction(BaseModel, table=True):
    """
    Credit Transaction - Immutable record of one balance change

    Domain Rules:
    - Rows are never updated or deleted
    - amount is signed: positive for grants, negative for spends
    - balance_after is the account balance right after this change
    - idempotency_key, when set, is unique and identifies a replayable operation
    """

    __tablename__ = "credit_transactions"
    __table_args__ = (
        Index('ix_credit_transactions_account_created', 'account_id', 'created_at'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerId, primary_key=True, autoincrement=True),
        description="Unique transaction identifier (auto-increment)"
    )

    account_id: str = Field(
        index=True,
        description="Account whose balance changed"
    )

    kind: CreditTransactionKind = Field(
        description="Why the balance changed"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Signed change applied to the balance"
    )

    balance_after: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Balance right after this change"
    )

    reason: str = Field(
        default="",
        sa_column=Column(String(500), nullable=False, default=""),
        description="Human readable reason"
    )

    metadata_json: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Opaque JSON map supplied by the caller"
    )

    idempotency_key: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), unique=True, nullable=True),
        description="Unique key of a replayable operation"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Transaction timestamp"
    )

    @staticmethod
    def dump_metadata(metadata: Optional[dict[str, Any]]) -> Optional[str]:
        if not metadata:
            return None
        return json.dumps(metadata, default=str, sort_keys=True)

    def metadata_dict(self) -> dict[str, Any]:
        if not self.metadata_json:
            return {}
        return json.loads(self.metadata_json)
