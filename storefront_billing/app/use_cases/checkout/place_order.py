"""PlaceOrder Use Case

Turns a priced cart into a provider order and a hosted payment link.

The local order is committed before the first provider call, and every
provider call reuses the order's idempotency key, so a checkout that fails
halfway can be resumed without creating a second provider order or
redeeming the discount twice.
"""

import asyncio
import json
import logging
from typing import Optional
from libs.result import Result, Return, Error
from storefront_billing.app.billing_settings import BillingSettings
from storefront_billing.app.repositories.order_repository import OrderRepository
from storefront_billing.app.services.clock import Clock
from storefront_billing.app.services.payment_provider import (
    PaymentDiscount,
    PaymentLineItem,
    PaymentLinkRequest,
    PaymentProvider,
    PaymentProviderError,
)
from storefront_billing.app.services.unit_of_work import UnitOfWork
from storefront_billing.app.use_cases.discounts.dtos import RedeemDiscountCommandDTO, ValidateDiscountCommandDTO
from storefront_billing.app.use_cases.discounts.redeem_discount import RedeemDiscount
from storefront_billing.app.use_cases.discounts.validate_discount import ValidateDiscount
from storefront_billing.domain.base import generate_uuid
from storefront_billing.domain.errors import LedgerInvariantViolation
from storefront_billing.domain.order import Order, OrderStatus
from .dtos import OrderConfirmationDTO, PaymentRequestDTO, PricedOrderDTO

logger = logging.getLogger(__name__)

MAX_ERROR_LENGTH = 2000


class PlaceOrder:
    """
    Use Case: Place an order with the payment provider

    Flow (DRAFT -> ORDER_RECORDED -> PAYMENT_LINK_CREATED):
    0. Re-validate the discount so an exhausted code fails before any provider call
    1. Insert the order as DRAFT with a fresh idempotency key and commit
    2. create_order(key + ":order"), bounded by the provider timeout
    3. In one transaction: redeem the discount, store external_order_id, ORDER_RECORDED
    4. create_payment_link(key + ":link"), store link, PAYMENT_LINK_CREATED

    Any provider failure leaves the order in its current pending status with
    last_error set and returns PAYMENT_PROVIDER_ERROR. Nothing is retried
    automatically; ``resume`` continues from the stored status.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: OrderRepository,
        validate_discount: ValidateDiscount,
        redeem_discount: RedeemDiscount,
        payment_provider: PaymentProvider,
        settings: BillingSettings,
        clock: Clock,
    ):
        self.uow = uow
        self.order_repo = order_repo
        self.validate_discount = validate_discount
        self.redeem_discount = redeem_discount
        self.payment_provider = payment_provider
        self.settings = settings
        self.clock = clock

    async def execute(
        self, priced: PricedOrderDTO, payment: Optional[PaymentRequestDTO] = None
    ) -> Result[OrderConfirmationDTO]:
        payment = payment or PaymentRequestDTO()

        # Step 0: Re-validate the discount (read-only)
        if priced.discount is not None:
            revalidated = await self.validate_discount.execute(
                ValidateDiscountCommandDTO(
                    code=priced.discount.code,
                    subtotal=priced.subtotal,
                    account_id=priced.account_id,
                )
            )
            if revalidated.is_err():
                return revalidated

        # Step 1: Record the order locally
        now = self.clock.now()
        try:
            order = await self.order_repo.create(
                Order(
                    account_id=priced.account_id,
                    status=OrderStatus.DRAFT,
                    subtotal=priced.subtotal,
                    discount_code=priced.discount.code if priced.discount else None,
                    discount_amount=priced.discount_amount,
                    total=priced.total,
                    currency=priced.currency,
                    line_items_json=json.dumps([item.model_dump(mode="json") for item in priced.items]),
                    buyer_email=payment.buyer_email,
                    redirect_url=payment.redirect_url,
                    idempotency_key=generate_uuid(),
                    created_at=now,
                    updated_at=now,
                )
            )
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            return Return.err(Error(code="CHECKOUT_FAILED", message="Failed to record order", reason=str(e)))

        logger.info(f"Order {order.id} recorded as DRAFT (total={order.total} {order.currency})")
        return await self._advance(order.id)

    async def resume(self, order_id: int) -> Result[OrderConfirmationDTO]:
        """
        Continue a pending order from its stored status

        Reuses the stored idempotency key, so provider calls that already
        succeeded return their original result.
        """
        order = await self.order_repo.get_by_id(order_id)
        if order is None:
            return Return.err(Error(code="ORDER_NOT_FOUND", message=f"Order {order_id} not found"))
        if order.status == OrderStatus.ABANDONED:
            return Return.err(
                Error(code="ORDER_CLOSED", message=f"Order {order_id} was abandoned and cannot be resumed")
            )

        logger.info(f"Resuming order {order_id} from status {order.status.value}")
        return await self._advance(order_id)

    async def _advance(self, order_id: int) -> Result[OrderConfirmationDTO]:
        try:
            order = await self.order_repo.get_by_id(order_id)

            if order.status == OrderStatus.DRAFT:
                error = await self._record_external_order(order)
                if error is not None:
                    return Return.err(error)
                order = await self.order_repo.get_by_id(order_id)

            if order.status == OrderStatus.ORDER_RECORDED:
                error = await self._create_payment_link(order)
                if error is not None:
                    return Return.err(error)
                order = await self.order_repo.get_by_id(order_id)

            return Return.ok(self._to_confirmation(order))

        except LedgerInvariantViolation:
            await self.uow.rollback()
            raise
        except Exception as e:
            await self.uow.rollback()
            await self._annotate(order_id, f"checkout failed: {e}")
            return Return.err(Error(code="CHECKOUT_FAILED", message="Failed to place order", reason=str(e)))

    async def _record_external_order(self, order: Order) -> Optional[Error]:
        order_id = order.id
        line_items = [PaymentLineItem(**item) for item in order.line_items()]
        discounts = (
            [PaymentDiscount(code=order.discount_code, amount=order.discount_amount)]
            if order.discount_code
            else []
        )

        # Step 2: Provider order
        try:
            external = await asyncio.wait_for(
                self.payment_provider.create_order(
                    line_items,
                    discounts,
                    order.currency,
                    idempotency_key=f"{order.idempotency_key}:order",
                ),
                timeout=self.settings.payment_timeout_seconds,
            )
        except (PaymentProviderError, asyncio.TimeoutError) as e:
            return await self._provider_failure(order_id, "create_order", e)

        # Step 3: Redeem and store the provider reference together
        if order.discount_code:
            redeemed = await self.redeem_discount.apply(
                RedeemDiscountCommandDTO(
                    code=order.discount_code,
                    order_id=str(order_id),
                    account_id=order.account_id,
                    applied_amount=order.discount_amount,
                )
            )
            if redeemed.is_err():
                await self.uow.rollback()
                await self._annotate(order_id, f"{redeemed.error.code}: {redeemed.error.message}")
                logger.info(f"Order {order_id} not recorded, discount rejected: {redeemed.error.code}")
                return redeemed.error

        order.external_order_id = external.external_order_id
        order.status = OrderStatus.ORDER_RECORDED
        order.last_error = None
        order.updated_at = self.clock.now()
        await self.order_repo.update(order)
        await self.uow.commit()

        logger.info(f"Order {order_id} recorded with provider as {external.external_order_id}")
        return None

    async def _create_payment_link(self, order: Order) -> Optional[Error]:
        order_id = order.id

        # Step 4: Payment link
        try:
            link = await asyncio.wait_for(
                self.payment_provider.create_payment_link(
                    PaymentLinkRequest(
                        order_id=order_id,
                        external_order_id=order.external_order_id,
                        amount=order.total,
                        currency=order.currency,
                        buyer_email=order.buyer_email,
                        redirect_url=order.redirect_url,
                    ),
                    idempotency_key=f"{order.idempotency_key}:link",
                ),
                timeout=self.settings.payment_timeout_seconds,
            )
        except (PaymentProviderError, asyncio.TimeoutError) as e:
            return await self._provider_failure(order_id, "create_payment_link", e)

        order.payment_link_id = link.link_id
        order.payment_url = link.url
        order.status = OrderStatus.PAYMENT_LINK_CREATED
        order.last_error = None
        order.updated_at = self.clock.now()
        await self.order_repo.update(order)
        await self.uow.commit()

        logger.info(f"Payment link {link.link_id} created for order {order_id}")
        return None

    async def _provider_failure(self, order_id: int, step: str, exc: Exception) -> Error:
        if isinstance(exc, asyncio.TimeoutError):
            detail = f"{step} timed out after {self.settings.payment_timeout_seconds}s"
        else:
            detail = f"{step} failed: {exc}"

        logger.warning(f"Payment provider error for order {order_id}: {detail}")
        await self._annotate(order_id, detail)
        return Error(code="PAYMENT_PROVIDER_ERROR", message="Payment provider call failed", reason=detail)

    async def _annotate(self, order_id: int, message: str) -> None:
        order = await self.order_repo.get_by_id(order_id)
        if order is None:
            return
        order.last_error = message[:MAX_ERROR_LENGTH]
        order.updated_at = self.clock.now()
        await self.order_repo.update(order)
        await self.uow.commit()

    def _to_confirmation(self, order: Order) -> OrderConfirmationDTO:
        return OrderConfirmationDTO(
            order_id=order.id,
            status=order.status.value,
            subtotal=order.subtotal,
            discount_code=order.discount_code,
            discount_amount=order.discount_amount,
            total=order.total,
            currency=order.currency,
            external_order_id=order.external_order_id,
            payment_link_id=order.payment_link_id,
            checkout_url=order.payment_url,
            last_error=order.last_error,
        )
