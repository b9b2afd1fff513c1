"""Discount eligibility rules and pricing

Pure functions shared by validation (read-only pricing) and redemption.
The order of the checks is part of the contract: the first failing rule is
the one reported.
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional
from libs.result import Error
from storefront_billing.domain.discount_code import DiscountCode, DiscountKind

CENT = Decimal("0.01")


class DiscountErrorCode(str, Enum):
    CODE_NOT_FOUND = "CODE_NOT_FOUND"
    INACTIVE = "INACTIVE"
    NOT_YET_STARTED = "NOT_YET_STARTED"
    EXPIRED = "EXPIRED"
    BELOW_MINIMUM = "BELOW_MINIMUM"
    GLOBAL_LIMIT_REACHED = "GLOBAL_LIMIT_REACHED"
    PER_ACCOUNT_LIMIT_REACHED = "PER_ACCOUNT_LIMIT_REACHED"


DISCOUNT_ERROR_CODES = frozenset(code.value for code in DiscountErrorCode)


def quantize_money(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def discount_error(code: DiscountErrorCode, message: str, reason: Optional[str] = None) -> Error:
    return Error(code=code.value, message=message, reason=reason)


def code_not_found() -> Error:
    return discount_error(DiscountErrorCode.CODE_NOT_FOUND, "Invalid discount code")


def check_availability(code: DiscountCode, now: datetime) -> Optional[Error]:
    """Active flag and validity window"""
    if not code.is_active:
        return discount_error(DiscountErrorCode.INACTIVE, "This discount code is no longer active")

    if code.starts_at is not None and code.starts_at > now:
        return discount_error(
            DiscountErrorCode.NOT_YET_STARTED,
            "This discount code is not yet available",
            reason=f"starts_at={code.starts_at.isoformat()}",
        )

    if code.expires_at is not None and code.expires_at < now:
        return discount_error(
            DiscountErrorCode.EXPIRED,
            "This discount code has expired",
            reason=f"expires_at={code.expires_at.isoformat()}",
        )

    return None


def check_minimum(code: DiscountCode, subtotal: Decimal) -> Optional[Error]:
    if code.min_order_amount is not None and subtotal < code.min_order_amount:
        return discount_error(
            DiscountErrorCode.BELOW_MINIMUM,
            f"Minimum order amount of {quantize_money(code.min_order_amount)} required",
            reason=f"subtotal={subtotal}, minimum={code.min_order_amount}",
        )
    return None


def check_global_limit(code: DiscountCode) -> Optional[Error]:
    if code.max_uses is not None and code.used_count >= code.max_uses:
        return global_limit_reached(code)
    return None


def global_limit_reached(code: DiscountCode) -> Error:
    return discount_error(
        DiscountErrorCode.GLOBAL_LIMIT_REACHED,
        "This discount code has reached its usage limit",
        reason=f"max_uses={code.max_uses}",
    )


def check_account_limit(code: DiscountCode, account_uses: int) -> Optional[Error]:
    if code.max_uses_per_account is not None and account_uses >= code.max_uses_per_account:
        return discount_error(
            DiscountErrorCode.PER_ACCOUNT_LIMIT_REACHED,
            "You have already used this discount code",
            reason=f"max_uses_per_account={code.max_uses_per_account}, used={account_uses}",
        )
    return None


def compute_discount(code: DiscountCode, subtotal: Decimal) -> Decimal:
    """
    Discount amount for a subtotal, rounded half-up to cents

    PERCENTAGE: subtotal * value / 100. FIXED_AMOUNT: value, capped at the
    subtotal so the total never goes negative.
    """
    if code.kind == DiscountKind.PERCENTAGE:
        amount = subtotal * code.value / Decimal("100")
    else:
        amount = min(code.value, subtotal)
    return min(quantize_money(amount), quantize_money(subtotal))
