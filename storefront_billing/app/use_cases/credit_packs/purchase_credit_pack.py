"""PurchaseCreditPack Use Case

Sells a credit pack through the regular checkout. The order carries the
pack's credits on its single line item; MarkOrderPaid grants them once the
payment is confirmed.
"""

import logging
from decimal import Decimal
from typing import Optional
from libs.result import Result, Return, Error
from storefront_billing.app.repositories.credit_pack_repository import CreditPackRepository
from storefront_billing.app.use_cases.checkout.dtos import (
    OrderConfirmationDTO,
    OrderItemDTO,
    PaymentRequestDTO,
    PricedOrderDTO,
)
from storefront_billing.app.use_cases.checkout.place_order import PlaceOrder
from .dtos import PurchaseCreditPackCommandDTO

logger = logging.getLogger(__name__)


class PurchaseCreditPack:
    """
    Use Case: Start the checkout of a credit pack

    Business Rules:
    1. Only authenticated accounts can buy credits
    2. Only active packs are sold
    3. Discount codes do not apply to credit packs
    """

    def __init__(self, pack_repo: CreditPackRepository, place_order: PlaceOrder):
        self.pack_repo = pack_repo
        self.place_order = place_order

    async def execute(
        self, command: PurchaseCreditPackCommandDTO, payment: Optional[PaymentRequestDTO] = None
    ) -> Result[OrderConfirmationDTO]:
        if not command.account_id:
            return Return.err(
                Error(code="AUTHENTICATION_REQUIRED", message="Authentication required to purchase credits")
            )

        try:
            pack = await self.pack_repo.get_by_id(command.pack_id)
        except Exception as e:
            return Return.err(
                Error(code="PURCHASE_CREDIT_PACK_FAILED", message="Failed to load credit pack", reason=str(e))
            )

        if pack is None or not pack.is_active:
            return Return.err(
                Error(code="CREDIT_PACK_NOT_FOUND", message=f"Credit pack {command.pack_id} not found or inactive")
            )

        item = OrderItemDTO(
            name=pack.name,
            unit_price=pack.price,
            quantity=1,
            sku=f"credit-pack-{pack.id}",
            credits=pack.total_credits,
        )
        priced = PricedOrderDTO(
            items=[item],
            account_id=command.account_id,
            currency=pack.currency,
            subtotal=pack.price,
            discount_amount=Decimal("0"),
            total=pack.price,
        )

        logger.info(f"Account {command.account_id} buying credit pack {pack.id} ({pack.total_credits} credits)")
        return await self.place_order.execute(priced, payment)
