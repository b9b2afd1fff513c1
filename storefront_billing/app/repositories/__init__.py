from .account_credit_repository import AccountCreditRepository
from .credit_transaction_repository import CreditTransactionRepository
from .guest_quota_repository import GuestQuotaRepository
from .discount_code_repository import DiscountCodeRepository
from .discount_redemption_repository import DiscountRedemptionRepository
from .order_repository import OrderRepository
from .credit_pack_repository import CreditPackRepository

__all__ = [
    "AccountCreditRepository",
    "CreditTransactionRepository",
    "GuestQuotaRepository",
    "DiscountCodeRepository",
    "DiscountRedemptionRepository",
    "OrderRepository",
    "CreditPackRepository",
]
