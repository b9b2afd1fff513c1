"""Request schemas for the credits API

Pydantic models for validating incoming HTTP requests. Field names are
accepted in camelCase (``accountId``) or snake_case.
"""

from decimal import Decimal
from typing import Any, Dict, Optional
from pydantic import Field, field_validator
from storefront_billing.app.use_cases.camel import CamelModel
from storefront_billing.domain.credit_transaction import CreditTransactionKind


class CheckBalanceRequestSchema(CamelModel):
    """
    Request schema for checking a balance

    Used for POST /credits/check. ``accountId`` defaults to the
    X-Account-Id header; naming another account needs X-Internal-Token.
    """

    account_id: Optional[str] = Field(default=None, max_length=255, description="Account identifier")

    action: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Generation model/action (e.g. 'nano-banana'); prices the request"
    )

    cost: Optional[Decimal] = Field(default=None, gt=0, description="Explicit cost, overrides the action price")

    class Config:
        json_schema_extra = {"example": {"accountId": "user_2abc", "action": "nano-banana-pro"}}


class DeductRequestSchema(CamelModel):
    """Request schema for POST /credits/deduct"""

    account_id: Optional[str] = Field(default=None, max_length=255)
    action: Optional[str] = Field(default=None, max_length=100)
    cost: Optional[Decimal] = Field(default=None, gt=0)
    reason: str = Field(default="AI generation", max_length=500)
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="Opaque audit metadata")
    idempotency_key: Optional[str] = Field(default=None, min_length=1, max_length=255)

    @field_validator("cost")
    @classmethod
    def validate_cost(cls, v):
        """Reject costs finer than the ledger precision"""
        if v is not None and v.as_tuple().exponent < -6:
            raise ValueError("Cost cannot have more than 6 decimal places")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "accountId": "user_2abc",
                "action": "flux-dev",
                "reason": "AI generation",
                "metadata": {"prompt": "a cat in a hat"},
                "idempotencyKey": "gen_7f3a",
            }
        }


class GrantRequestSchema(CamelModel):
    """Request schema for POST /credits/grant (internal)"""

    account_id: str = Field(..., min_length=1, max_length=255)
    amount: Decimal = Field(..., ge=0)
    kind: CreditTransactionKind = Field(default=CreditTransactionKind.MANUAL_GRANT)
    reason: str = Field(default="Manual grant", max_length=500)
    metadata: Optional[Dict[str, Any]] = None
    idempotency_key: Optional[str] = Field(default=None, min_length=1, max_length=255)


class PurchaseBonusRequestSchema(CamelModel):
    """Request schema for POST /credits/purchase-bonus (internal)"""

    account_id: str = Field(..., min_length=1, max_length=255)
    order_id: str = Field(..., min_length=1, max_length=64)
    item_count: int = Field(..., ge=1)
