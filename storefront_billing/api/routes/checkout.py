"""Checkout API Routes"""

from fastapi import APIRouter, Depends, Request, status
from sqlmodel.ext.asyncio.session import AsyncSession

from storefront_billing.adapter.repositories.account_credit_repository import SqlAlchemyAccountCreditRepository
from storefront_billing.adapter.repositories.credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from storefront_billing.adapter.repositories.credit_pack_repository import SqlAlchemyCreditPackRepository
from storefront_billing.adapter.repositories.discount_code_repository import SqlAlchemyDiscountCodeRepository
from storefront_billing.adapter.repositories.discount_redemption_repository import (
    SqlAlchemyDiscountRedemptionRepository,
)
from storefront_billing.adapter.repositories.order_repository import SqlAlchemyOrderRepository
from storefront_billing.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from storefront_billing.api.error import ClientError
from storefront_billing.api.identity import Actor, get_actor, require_internal_token, resolve_account_id
from storefront_billing.api.schemas.checkout_request import (
    MarkOrderPaidRequestSchema,
    PlaceOrderRequestSchema,
    PriceOrderRequestSchema,
)
from storefront_billing.api.schemas.credit_pack_request import PurchaseCreditPackRequestSchema
from storefront_billing.app.billing_settings import BillingSettings
from storefront_billing.app.services.clock import Clock
from storefront_billing.app.services.payment_provider import PaymentProvider
from storefront_billing.app.use_cases.checkout import (
    MarkOrderPaid,
    MarkOrderPaidCommandDTO,
    OrderConfirmationDTO,
    OrderItemDTO,
    PaidOrderDTO,
    PaymentRequestDTO,
    PlaceOrder,
    PriceOrder,
    PriceOrderCommandDTO,
    PricedOrderDTO,
)
from storefront_billing.app.use_cases.credit_packs import PurchaseCreditPack, PurchaseCreditPackCommandDTO
from storefront_billing.app.use_cases.credits import GetOrInitAccount, GrantCredits, GrantPurchaseBonus
from storefront_billing.app.use_cases.discounts import RedeemDiscount, ValidateDiscount
from storefront_billing.depends import get_clock, get_payment_provider, get_session, get_settings

router = APIRouter(prefix="/checkout", tags=["Checkout"])


class CheckoutServices:
    """Checkout use cases bound to one request session"""

    def __init__(
        self,
        session: AsyncSession,
        settings: BillingSettings,
        clock: Clock,
        payment_provider: PaymentProvider,
    ):
        self.session = session
        self.uow = SqlAlchemyUnitOfWork(session)
        self.settings = settings
        self.clock = clock
        self.payment_provider = payment_provider
        self.code_repo = SqlAlchemyDiscountCodeRepository(session)
        self.redemption_repo = SqlAlchemyDiscountRedemptionRepository(session)
        self.order_repo = SqlAlchemyOrderRepository(session)
        self.validate_discount = ValidateDiscount(self.code_repo, self.redemption_repo, clock)

    def price_order(self) -> PriceOrder:
        return PriceOrder(self.validate_discount, self.settings)

    def place_order(self) -> PlaceOrder:
        return PlaceOrder(
            self.uow,
            self.order_repo,
            self.validate_discount,
            RedeemDiscount(self.uow, self.code_repo, self.redemption_repo, self.clock),
            self.payment_provider,
            self.settings,
            self.clock,
        )

    def mark_order_paid(self) -> MarkOrderPaid:
        account_repo = SqlAlchemyAccountCreditRepository(self.session)
        transaction_repo = SqlAlchemyCreditTransactionRepository(self.session)
        accounts = GetOrInitAccount(self.uow, account_repo, transaction_repo, self.settings, self.clock)
        grant_credits = GrantCredits(self.uow, account_repo, transaction_repo, accounts, self.clock)
        return MarkOrderPaid(
            self.uow,
            self.order_repo,
            GrantPurchaseBonus(grant_credits, self.settings),
            self.clock,
            grant_credits=grant_credits,
        )

    def purchase_credit_pack(self) -> PurchaseCreditPack:
        return PurchaseCreditPack(SqlAlchemyCreditPackRepository(self.session), self.place_order())


def get_checkout_services(
    session: AsyncSession = Depends(get_session),
    settings: BillingSettings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
    payment_provider: PaymentProvider = Depends(get_payment_provider),
) -> CheckoutServices:
    return CheckoutServices(session, settings, clock, payment_provider)


def _price_command(request: PriceOrderRequestSchema, http_request: Request, actor: Actor) -> PriceOrderCommandDTO:
    return PriceOrderCommandDTO(
        items=[OrderItemDTO(**item.model_dump()) for item in request.items],
        discount_code=request.discount_code,
        account_id=resolve_account_id(http_request, request.account_id, actor),
    )


@router.post(
    "/price",
    response_model=PricedOrderDTO,
    status_code=status.HTTP_200_OK,
)
async def price_order(
    request: PriceOrderRequestSchema,
    http_request: Request,
    actor: Actor = Depends(get_actor),
    services: CheckoutServices = Depends(get_checkout_services),
):
    """
    Price a cart, applying a discount code if given.

    A rejected code returns its typed discount error (see `/discount/validate`).
    """
    result = await services.price_order().execute(_price_command(request, http_request, actor))

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.post(
    "/place-order",
    response_model=OrderConfirmationDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        502: {
            "description": "Payment provider failed; the order stays pending",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "PAYMENT_PROVIDER_ERROR",
                            "message": "Payment provider call failed",
                            "reason": "create_order timed out after 15.0s"
                        }
                    }
                }
            }
        },
        422: {
            "description": "Discount code rejected",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "GLOBAL_LIMIT_REACHED",
                            "message": "This discount code has reached its usage limit"
                        }
                    }
                }
            }
        }
    }
)
async def place_order(
    request: PlaceOrderRequestSchema,
    http_request: Request,
    actor: Actor = Depends(get_actor),
    services: CheckoutServices = Depends(get_checkout_services),
):
    """
    Price the cart, record the order and create the hosted payment link.

    **Flow:**
    1. Price the cart and validate the discount code
    2. Record the order locally (DRAFT)
    3. Create the provider order (idempotent), redeem the code
    4. Create the payment link

    **Returns:**
    - 201: Order confirmation with `checkoutUrl`
    - 404/422: Discount code rejected
    - 502: Payment provider failure; the order is kept and can be resumed
    """
    priced = await services.price_order().execute(_price_command(request, http_request, actor))
    if priced.is_err():
        raise ClientError.from_error(priced.error)

    result = await services.place_order().execute(
        priced.value,
        PaymentRequestDTO(buyer_email=request.buyer_email, redirect_url=request.redirect_url),
    )

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.post(
    "/credit-pack",
    response_model=OrderConfirmationDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {
            "description": "Guests cannot buy credits",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "AUTHENTICATION_REQUIRED",
                            "message": "Authentication required to purchase credits"
                        }
                    }
                }
            }
        },
        404: {
            "description": "Unknown or inactive pack",
            "content": {
                "application/json": {
                    "example": {
                        "error": {"code": "CREDIT_PACK_NOT_FOUND", "message": "Credit pack 7 not found or inactive"}
                    }
                }
            }
        }
    }
)
async def purchase_credit_pack(
    request: PurchaseCreditPackRequestSchema,
    http_request: Request,
    actor: Actor = Depends(get_actor),
    services: CheckoutServices = Depends(get_checkout_services),
):
    """
    Start the checkout of a credit pack.

    The order is placed like any other (no discount code). The pack's
    credits are granted when the order is marked paid.
    """
    result = await services.purchase_credit_pack().execute(
        PurchaseCreditPackCommandDTO(
            pack_id=request.pack_id,
            account_id=resolve_account_id(http_request, request.account_id, actor),
        ),
        PaymentRequestDTO(buyer_email=request.buyer_email, redirect_url=request.redirect_url),
    )

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.post(
    "/orders/{order_id}/resume",
    response_model=OrderConfirmationDTO,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_internal_token)],
)
async def resume_order(
    order_id: int,
    services: CheckoutServices = Depends(get_checkout_services),
):
    """Continue a pending order after a provider failure (internal)."""
    result = await services.place_order().resume(order_id)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.post(
    "/orders/{order_id}/paid",
    response_model=PaidOrderDTO,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_internal_token)],
)
async def mark_order_paid(
    order_id: int,
    request: MarkOrderPaidRequestSchema,
    services: CheckoutServices = Depends(get_checkout_services),
):
    """
    Record a confirmed payment (relayed from the provider webhook).

    Replays are no-ops. Signed-in buyers receive the purchase bonus for
    items marked `earnsBonus` and the credits of a purchased credit pack.
    """
    result = await services.mark_order_paid().execute(
        MarkOrderPaidCommandDTO(order_id=order_id, external_payment_id=request.external_payment_id)
    )

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value
