from .unit_of_work import SqlAlchemyUnitOfWork
from .clock import SystemClock
from .payment_provider import HttpPaymentProvider, SandboxPaymentProvider, create_payment_provider

__all__ = [
    "SqlAlchemyUnitOfWork",
    "SystemClock",
    "HttpPaymentProvider",
    "SandboxPaymentProvider",
    "create_payment_provider",
]
