from .account_credit_repository import SqlAlchemyAccountCreditRepository
from .credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from .guest_quota_repository import SqlAlchemyGuestQuotaRepository
from .discount_code_repository import SqlAlchemyDiscountCodeRepository
from .discount_redemption_repository import SqlAlchemyDiscountRedemptionRepository
from .order_repository import SqlAlchemyOrderRepository
from .credit_pack_repository import SqlAlchemyCreditPackRepository

__all__ = [
    "SqlAlchemyAccountCreditRepository",
    "SqlAlchemyCreditTransactionRepository",
    "SqlAlchemyGuestQuotaRepository",
    "SqlAlchemyDiscountCodeRepository",
    "SqlAlchemyDiscountRedemptionRepository",
    "SqlAlchemyOrderRepository",
    "SqlAlchemyCreditPackRepository",
]
