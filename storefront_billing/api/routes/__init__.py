from .credits import router as credits_router
from .guest_quota import router as guest_quota_router
from .discounts import router as discounts_router
from .checkout import router as checkout_router
from .credit_packs import router as credit_packs_router

__all__ = ["credits_router", "guest_quota_router", "discounts_router", "checkout_router", "credit_packs_router"]
