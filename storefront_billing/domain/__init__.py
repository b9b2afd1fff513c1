from .base import BaseModel, generate_uuid
from .account_credit import AccountCredit
from .credit_transaction import CreditTransaction, CreditTransactionKind
from .guest_quota import GuestQuota
from .discount_code import DiscountCode, DiscountKind, normalize_code
from .discount_redemption import DiscountRedemption
from .order import Order, OrderStatus
from .credit_pack import CreditPack
from .errors import LedgerInvariantViolation

__all__ = [
    "BaseModel",
    "generate_uuid",
    "AccountCredit",
    "CreditTransaction",
    "CreditTransactionKind",
    "GuestQuota",
    "DiscountCode",
    "DiscountKind",
    "normalize_code",
    "DiscountRedemption",
    "Order",
    "OrderStatus",
    "CreditPack",
    "LedgerInvariantViolation",
]
