"""Unit tests for payment provider adapters"""

import json
import httpx
import pytest
from decimal import Decimal

from storefront_billing.adapter.services.payment_provider import (
    HttpPaymentProvider,
    SandboxPaymentProvider,
    create_payment_provider,
    to_minor_units,
)
from storefront_billing.app.services.payment_provider import (
    PaymentDiscount,
    PaymentLineItem,
    PaymentLinkRequest,
    PaymentProviderError,
)

LINE_ITEMS = [PaymentLineItem(name="Custom T-Shirt", quantity=2, unit_price=Decimal("25.00"), sku="tee-1")]
DISCOUNTS = [PaymentDiscount(code="SAVE10", amount=Decimal("5.00"))]


def link_request() -> PaymentLinkRequest:
    return PaymentLinkRequest(
        order_id=1,
        external_order_id="ext-1",
        amount=Decimal("45.00"),
        currency="USD",
        buyer_email="buyer@example.com",
        redirect_url="https://shop.example.com/done",
    )


class TestMinorUnits:
    def test_rounds_half_up(self):
        assert to_minor_units(Decimal("22.50")) == 2250
        assert to_minor_units(Decimal("0.005")) == 1
        assert to_minor_units(Decimal("0")) == 0


@pytest.mark.asyncio
class TestHttpPaymentProvider:
    async def test_create_order_sends_items_discounts_and_key(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["path"] = request.url.path
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"order": {"id": "ext-1"}})

        provider = HttpPaymentProvider(
            "https://payments.test/", "secret", location_id="loc-1", transport=httpx.MockTransport(handler)
        )

        order = await provider.create_order(LINE_ITEMS, DISCOUNTS, "USD", idempotency_key="key-1:order")

        assert order.external_order_id == "ext-1"
        assert captured["path"] == "/v2/orders"
        assert captured["auth"] == "Bearer secret"
        body = captured["body"]
        assert body["idempotency_key"] == "key-1:order"
        assert body["order"]["location_id"] == "loc-1"
        assert body["order"]["line_items"] == [
            {
                "name": "Custom T-Shirt",
                "quantity": "2",
                "base_price_money": {"amount": 2500, "currency": "USD"},
                "catalog_object_id": "tee-1",
            }
        ]
        assert body["order"]["discounts"][0]["amount_money"] == {"amount": 500, "currency": "USD"}

    async def test_create_payment_link(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["path"] = request.url.path
            captured["body"] = json.loads(request.content)
            return httpx.Response(
                200, json={"payment_link": {"id": "link-1", "url": "https://pay.test/link-1"}}
            )

        provider = HttpPaymentProvider("https://payments.test", "secret", transport=httpx.MockTransport(handler))

        link = await provider.create_payment_link(link_request(), idempotency_key="key-1:link")

        assert link.link_id == "link-1"
        assert link.url == "https://pay.test/link-1"
        assert captured["path"] == "/v2/online-checkout/payment-links"
        body = captured["body"]
        assert body["order_id"] == "ext-1"
        assert body["amount_money"] == {"amount": 4500, "currency": "USD"}
        assert body["checkout_options"] == {"redirect_url": "https://shop.example.com/done"}
        assert body["pre_populated_data"] == {"buyer_email": "buyer@example.com"}

    async def test_http_error_status_raises_provider_error(self):
        provider = HttpPaymentProvider(
            "https://payments.test",
            "secret",
            transport=httpx.MockTransport(lambda request: httpx.Response(503, text="unavailable")),
        )

        with pytest.raises(PaymentProviderError, match="HTTP 503"):
            await provider.create_order(LINE_ITEMS, [], "USD", idempotency_key="key-1:order")

    async def test_transport_error_raises_provider_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        provider = HttpPaymentProvider("https://payments.test", "secret", transport=httpx.MockTransport(handler))

        with pytest.raises(PaymentProviderError):
            await provider.create_order(LINE_ITEMS, [], "USD", idempotency_key="key-1:order")

    async def test_missing_order_id_raises_provider_error(self):
        provider = HttpPaymentProvider(
            "https://payments.test",
            "secret",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"order": {}})),
        )

        with pytest.raises(PaymentProviderError, match="order id"):
            await provider.create_order(LINE_ITEMS, [], "USD", idempotency_key="key-1:order")

    async def test_non_json_body_raises_provider_error(self):
        provider = HttpPaymentProvider(
            "https://payments.test",
            "secret",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>")),
        )

        with pytest.raises(PaymentProviderError, match="non-JSON"):
            await provider.create_payment_link(link_request(), idempotency_key="key-1:link")


@pytest.mark.asyncio
class TestSandboxPaymentProvider:
    async def test_same_key_returns_same_order_and_link(self):
        provider = SandboxPaymentProvider()

        first = await provider.create_order(LINE_ITEMS, DISCOUNTS, "USD", idempotency_key="key-1:order")
        second = await provider.create_order(LINE_ITEMS, DISCOUNTS, "USD", idempotency_key="key-1:order")
        link_a = await provider.create_payment_link(link_request(), idempotency_key="key-1:link")
        link_b = await provider.create_payment_link(link_request(), idempotency_key="key-1:link")

        assert first == second
        assert link_a == link_b
        assert link_a.url == f"https://sandbox.payments.local/checkout/{link_a.link_id}"

    async def test_different_keys_create_different_orders(self):
        provider = SandboxPaymentProvider()

        first = await provider.create_order(LINE_ITEMS, [], "USD", idempotency_key="a:order")
        second = await provider.create_order(LINE_ITEMS, [], "USD", idempotency_key="b:order")

        assert first.external_order_id != second.external_order_id


class TestFactory:
    def test_no_url_gives_sandbox(self):
        assert isinstance(create_payment_provider(base_url=""), SandboxPaymentProvider)

    def test_url_gives_http_provider(self):
        provider = create_payment_provider(base_url="https://payments.test", api_token="secret", timeout=3)
        assert isinstance(provider, HttpPaymentProvider)
        assert provider.timeout == 3
