"""Credit accounting DTOs"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from pydantic import Field, field_validator
from storefront_billing.app.use_cases.camel import CamelModel
from storefront_billing.domain.credit_transaction import CreditTransactionKind


class AccountCreditDTO(CamelModel):
    account_id: str
    balance: Decimal
    monthly_allocation: Decimal
    monthly_used: Decimal
    last_monthly_reset_at: datetime
    welcome_allocation: Decimal
    welcome_used: Decimal
    lifetime_granted: Decimal
    lifetime_spent: Decimal


class CheckBalanceCommandDTO(CamelModel):
    account_id: str = Field(..., min_length=1, max_length=255)
    action: Optional[str] = Field(None, description="Generation model/action used to look up the price")
    cost: Optional[Decimal] = Field(None, gt=0, decimal_places=6, description="Explicit cost, overrides the price table")


class BalanceCheckResponseDTO(CamelModel):
    sufficient: bool
    balance: Decimal
    cost: Decimal


class DeductCommandDTO(CamelModel):
    account_id: str = Field(..., min_length=1, max_length=255)
    cost: Optional[Decimal] = Field(None, gt=0, decimal_places=6, description="Explicit cost, overrides the price table")
    action: Optional[str] = Field(None, description="Generation model/action used to look up the price")
    reason: str = Field("AI generation", max_length=500)
    metadata: Optional[dict[str, Any]] = None
    idempotency_key: Optional[str] = Field(None, max_length=255)


class DeductResponseDTO(CamelModel):
    ok: bool
    new_balance: Decimal
    cost: Decimal
    transaction_id: Optional[int] = None


class GrantCommandDTO(CamelModel):
    account_id: str = Field(..., min_length=1, max_length=255)
    amount: Decimal = Field(..., ge=0, decimal_places=6)
    kind: CreditTransactionKind = CreditTransactionKind.MANUAL_GRANT
    reason: str = Field("Manual grant", max_length=500)
    metadata: Optional[dict[str, Any]] = None
    idempotency_key: Optional[str] = Field(None, max_length=255)

    @field_validator("kind")
    @classmethod
    def validate_kind(cls, v: CreditTransactionKind) -> CreditTransactionKind:
        if v == CreditTransactionKind.GENERATION_SPEND:
            raise ValueError("GENERATION_SPEND is recorded by deduct, not grant")
        return v


class GrantResponseDTO(CamelModel):
    new_balance: Decimal
    transaction_id: int


class PurchaseBonusCommandDTO(CamelModel):
    account_id: str = Field(..., min_length=1, max_length=255)
    order_id: str = Field(..., min_length=1, max_length=64)
    item_count: int = Field(..., ge=1)


class PurchaseBonusResponseDTO(CamelModel):
    credits_granted: Decimal
    new_balance: Decimal
    transaction_id: int


class TransactionDTO(CamelModel):
    id: int
    account_id: str
    kind: str
    amount: Decimal
    balance_after: Decimal
    reason: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class ListTransactionsResponseDTO(CamelModel):
    transactions: list[TransactionDTO]
    total: int
    limit: int
    offset: int


class CreditStatsDTO(CamelModel):
    account_id: str
    balance: Decimal
    monthly_allocation: Decimal
    monthly_used: Decimal
    welcome_credits_remaining: Decimal
    lifetime_granted: Decimal
    lifetime_spent: Decimal
    last_monthly_reset_at: datetime
    recent_transactions: list[TransactionDTO]


class LedgerDiscrepancyDTO(CamelModel):
    account_id: str
    stored_balance: Decimal
    replayed_balance: Decimal
    discrepancy: Decimal


class ReconciliationResultDTO(CamelModel):
    total_accounts_checked: int
    discrepancies_found: int
    discrepancies: list[LedgerDiscrepancyDTO]
    reconciliation_time: datetime
    execution_time_ms: int


class MonthlyResetSweepResultDTO(CamelModel):
    accounts_due: int
    accounts_reset: int
    failures: int
    execution_time_ms: int
