"""Payment Provider Implementations

HTTP client for a Square-style payments API and an in-memory sandbox used
when no provider URL is configured.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional
import httpx
from storefront_billing.app.services.payment_provider import (
    ExternalOrder,
    PaymentDiscount,
    PaymentLineItem,
    PaymentLink,
    PaymentLinkRequest,
    PaymentProvider,
    PaymentProviderError,
)
from storefront_billing.domain.base import generate_uuid

logger = logging.getLogger(__name__)


def to_minor_units(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class HttpPaymentProvider(PaymentProvider):
    """
    Payment provider that talks to a Square-style REST API

    Every request carries the caller's idempotency key in the body, so a
    retried call returns the order or link created by the first one.
    """

    def __init__(
        self,
        base_url: str,
        api_token: str,
        location_id: str = "",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP payment provider

        Args:
            base_url: Provider API root, e.g. https://connect.squareup.com
            api_token: Bearer token
            location_id: Merchant location the orders belong to
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.api_token = api_token
        self.location_id = location_id
        self.timeout = timeout
        self.transport = transport

    async def create_order(
        self,
        line_items: list[PaymentLineItem],
        discounts: list[PaymentDiscount],
        currency: str,
        idempotency_key: str,
    ) -> ExternalOrder:
        payload = {
            "idempotency_key": idempotency_key,
            "order": {
                "location_id": self.location_id,
                "line_items": [
                    {
                        "name": item.name,
                        "quantity": str(item.quantity),
                        "base_price_money": {"amount": to_minor_units(item.unit_price), "currency": currency},
                        **({"catalog_object_id": item.sku} if item.sku else {}),
                    }
                    for item in line_items
                ],
                "discounts": [
                    {
                        "name": discount.code,
                        "scope": "ORDER",
                        "amount_money": {"amount": to_minor_units(discount.amount), "currency": currency},
                    }
                    for discount in discounts
                ],
            },
        }

        body = await self._post("/v2/orders", payload)
        order_id = (body.get("order") or {}).get("id")
        if not order_id:
            raise PaymentProviderError("Provider response did not include an order id")

        logger.info(f"Payment provider order {order_id} created (key={idempotency_key})")
        return ExternalOrder(external_order_id=order_id)

    async def create_payment_link(self, request: PaymentLinkRequest, idempotency_key: str) -> PaymentLink:
        payload: dict[str, Any] = {
            "idempotency_key": idempotency_key,
            "order_id": request.external_order_id,
            "description": f"Order {request.order_id}",
            "amount_money": {"amount": to_minor_units(request.amount), "currency": request.currency},
        }
        if request.redirect_url:
            payload["checkout_options"] = {"redirect_url": request.redirect_url}
        if request.buyer_email:
            payload["pre_populated_data"] = {"buyer_email": request.buyer_email}

        body = await self._post("/v2/online-checkout/payment-links", payload)
        link = body.get("payment_link") or {}
        if not link.get("id") or not link.get("url"):
            raise PaymentProviderError("Provider response did not include a payment link")

        logger.info(f"Payment link {link['id']} created for provider order {request.external_order_id}")
        return PaymentLink(link_id=link["id"], url=link["url"])

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(path, json=payload, headers=headers)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Payment provider rejected {path}: {e.response.status_code} {e.response.text}")
            raise PaymentProviderError(f"Provider returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Payment provider call {path} failed: {e}")
            raise PaymentProviderError(f"Provider call failed: {e}") from e
        except ValueError as e:
            raise PaymentProviderError("Provider returned a non-JSON body") from e


class SandboxPaymentProvider(PaymentProvider):
    """
    In-memory payment provider

    Useful for development and testing. Honours idempotency keys the same
    way the real provider does.
    """

    def __init__(self, checkout_base_url: str = "https://sandbox.payments.local/checkout"):
        self.checkout_base_url = checkout_base_url.rstrip("/")
        self.orders: dict[str, ExternalOrder] = {}
        self.links: dict[str, PaymentLink] = {}

    async def create_order(
        self,
        line_items: list[PaymentLineItem],
        discounts: list[PaymentDiscount],
        currency: str,
        idempotency_key: str,
    ) -> ExternalOrder:
        if idempotency_key not in self.orders:
            self.orders[idempotency_key] = ExternalOrder(external_order_id=f"sandbox-order-{generate_uuid()}")
            logger.info(
                f"[SANDBOX] Order {self.orders[idempotency_key].external_order_id} created "
                f"with {len(line_items)} line item(s), {len(discounts)} discount(s)"
            )
        return self.orders[idempotency_key]

    async def create_payment_link(self, request: PaymentLinkRequest, idempotency_key: str) -> PaymentLink:
        if idempotency_key not in self.links:
            link_id = f"sandbox-link-{generate_uuid()}"
            self.links[idempotency_key] = PaymentLink(link_id=link_id, url=f"{self.checkout_base_url}/{link_id}")
            logger.info(f"[SANDBOX] Payment link {link_id} created for {request.external_order_id}")
        return self.links[idempotency_key]


def create_payment_provider(
    base_url: Optional[str] = None,
    api_token: str = "",
    location_id: str = "",
    timeout: float = 15.0,
) -> PaymentProvider:
    """
    Factory function to create the configured payment provider

    Args:
        base_url: Provider API root. Without it the sandbox is used.
        api_token: Bearer token for the HTTP provider
        location_id: Merchant location id
        timeout: Request timeout in seconds

    Returns:
        Configured PaymentProvider
    """
    if not base_url:
        logger.warning("PAYMENT_PROVIDER_URL is not set, using the in-memory sandbox provider")
        return SandboxPaymentProvider()

    return HttpPaymentProvider(base_url, api_token, location_id=location_id, timeout=timeout)
