"""Test doubles shared by unit and integration tests"""

from datetime import datetime, timedelta
from typing import Optional

from storefront_billing.app.repositories.order_repository import OrderRepository
from storefront_billing.app.services.clock import Clock
from storefront_billing.app.services.payment_provider import (
    ExternalOrder,
    PaymentLink,
    PaymentProvider,
    PaymentProviderError,
)
from storefront_billing.domain.order import Order


class FakeClock(Clock):
    """Clock pinned to a settable naive UTC instant"""

    def __init__(self, now: datetime, timezone_name: str = "UTC"):
        super().__init__(timezone_name)
        self.current = now

    def now(self) -> datetime:
        return self.current

    def set(self, now: datetime) -> None:
        self.current = now

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


class FlakyPaymentProvider(PaymentProvider):
    """
    Wraps another provider and fails the next N calls of a given step

    ``fail_next("create_order", times=1)`` makes the next create_order raise
    PaymentProviderError; later calls go through to the wrapped provider.
    """

    def __init__(self, inner: PaymentProvider):
        self.inner = inner
        self.failures: dict[str, int] = {}
        self.calls: list[tuple[str, str]] = []

    def fail_next(self, step: str, times: int = 1) -> None:
        self.failures[step] = times

    def _maybe_fail(self, step: str, idempotency_key: str) -> None:
        self.calls.append((step, idempotency_key))
        remaining: Optional[int] = self.failures.get(step)
        if remaining:
            self.failures[step] = remaining - 1
            raise PaymentProviderError(f"{step} unavailable")

    async def create_order(self, line_items, discounts, currency, idempotency_key) -> ExternalOrder:
        self._maybe_fail("create_order", idempotency_key)
        return await self.inner.create_order(line_items, discounts, currency, idempotency_key)

    async def create_payment_link(self, request, idempotency_key) -> PaymentLink:
        self._maybe_fail("create_payment_link", idempotency_key)
        return await self.inner.create_payment_link(request, idempotency_key)


class InMemoryOrderRepository(OrderRepository):
    """Order repository backed by a dict, for use case tests"""

    def __init__(self):
        self.orders: dict[int, Order] = {}

    async def create(self, order: Order) -> Order:
        order.id = len(self.orders) + 1
        self.orders[order.id] = order
        return order

    async def get_by_id(self, order_id: int, for_update: bool = False) -> Optional[Order]:
        return self.orders.get(order_id)

    async def update(self, order: Order) -> Order:
        self.orders[order.id] = order
        return order
