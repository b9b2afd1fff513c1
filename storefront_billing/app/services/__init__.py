from .unit_of_work import UnitOfWork
from .clock import Clock
from .payment_provider import (
    PaymentProvider,
    PaymentProviderError,
    PaymentLineItem,
    PaymentDiscount,
    ExternalOrder,
    PaymentLinkRequest,
    PaymentLink,
)

__all__ = [
    "UnitOfWork",
    "Clock",
    "PaymentProvider",
    "PaymentProviderError",
    "PaymentLineItem",
    "PaymentDiscount",
    "ExternalOrder",
    "PaymentLinkRequest",
    "PaymentLink",
]
