"""MarkOrderPaid Use Case

Payment webhook handler: PAYMENT_LINK_CREATED -> PAID, then the credits the
order earns: the purchase bonus for bonus-eligible items and the credits of
any purchased credit pack.
"""

import logging
from decimal import Decimal
from typing import Optional
from libs.result import Result, Return, Error
from storefront_billing.app.repositories.order_repository import OrderRepository
from storefront_billing.app.services.clock import Clock
from storefront_billing.app.services.unit_of_work import UnitOfWork
from storefront_billing.app.use_cases.credits.dtos import GrantCommandDTO, PurchaseBonusCommandDTO
from storefront_billing.app.use_cases.credits.grant_credits import GrantCredits
from storefront_billing.app.use_cases.credits.grant_purchase_bonus import GrantPurchaseBonus
from storefront_billing.domain.credit_transaction import CreditTransactionKind
from storefront_billing.domain.order import OrderStatus
from .dtos import MarkOrderPaidCommandDTO, PaidOrderDTO

logger = logging.getLogger(__name__)


class MarkOrderPaid:
    """
    Use Case: Mark an order as paid

    Business Rules:
    1. Only PAYMENT_LINK_CREATED orders can be paid
    2. A replay on a PAID order is a no-op for the order
    3. Credit grants are idempotent per order (``purchase_bonus:{id}`` and
       ``credit_purchase:{id}``), so they run on every call and a crash
       between the status change and a grant heals on replay
    4. Purchased credits go to the buyer account; guest orders earn nothing
    """

    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: OrderRepository,
        grant_purchase_bonus: GrantPurchaseBonus,
        clock: Clock,
        grant_credits: Optional[GrantCredits] = None,
    ):
        self.uow = uow
        self.order_repo = order_repo
        self.grant_purchase_bonus = grant_purchase_bonus
        self.clock = clock
        self.grant_credits = grant_credits or grant_purchase_bonus.grant_credits

    async def execute(self, command: MarkOrderPaidCommandDTO) -> Result[PaidOrderDTO]:
        try:
            order = await self.order_repo.get_by_id(command.order_id, for_update=True)
            if order is None:
                return Return.err(Error(code="ORDER_NOT_FOUND", message=f"Order {command.order_id} not found"))

            if order.status not in (OrderStatus.PAYMENT_LINK_CREATED, OrderStatus.PAID):
                return Return.err(
                    Error(
                        code="INVALID_ORDER_STATE",
                        message=f"Order {order.id} cannot be paid in status {order.status.value}",
                    )
                )

            if order.status != OrderStatus.PAID:
                now = self.clock.now()
                order.status = OrderStatus.PAID
                order.paid_at = now
                order.external_payment_id = command.external_payment_id
                order.updated_at = now
                order = await self.order_repo.update(order)
                await self.uow.commit()
                logger.info(f"Order {order.id} paid (payment={command.external_payment_id})")

            account_id = order.account_id
            paid_at = order.paid_at
            external_payment_id = order.external_payment_id
            line_items = order.line_items()
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code="MARK_ORDER_PAID_FAILED", message="Failed to mark order as paid", reason=str(e))
            )

        bonus_items = sum(int(item.get("quantity", 0)) for item in line_items if item.get("earns_bonus"))
        purchased = sum(
            (Decimal(str(item.get("credits") or 0)) * int(item.get("quantity", 0)) for item in line_items),
            Decimal("0"),
        )

        bonus = Decimal("0")
        if account_id and bonus_items > 0:
            granted = await self.grant_purchase_bonus.execute(
                PurchaseBonusCommandDTO(
                    account_id=account_id,
                    order_id=str(command.order_id),
                    item_count=bonus_items,
                )
            )
            if granted.is_err():
                logger.error(
                    f"Purchase bonus for order {command.order_id} failed: {granted.error.code} {granted.error.reason}"
                )
            else:
                bonus = granted.value.credits_granted

        credits = Decimal("0")
        if account_id and purchased > 0:
            granted = await self.grant_credits.execute(
                GrantCommandDTO(
                    account_id=account_id,
                    amount=purchased,
                    kind=CreditTransactionKind.CREDIT_PURCHASE,
                    reason=f"Credit purchase, order {command.order_id}",
                    metadata={
                        "order_id": str(command.order_id),
                        "external_payment_id": external_payment_id,
                        "items": [item.get("sku") or item.get("name") for item in line_items if item.get("credits")],
                    },
                    idempotency_key=f"credit_purchase:{command.order_id}",
                )
            )
            if granted.is_err():
                logger.error(
                    f"Credit purchase for order {command.order_id} failed: {granted.error.code} {granted.error.reason}"
                )
            else:
                credits = purchased
        elif purchased > 0:
            logger.error(f"Order {command.order_id} bought {purchased} credits without a buyer account")

        return Return.ok(
            PaidOrderDTO(
                order_id=command.order_id,
                status=OrderStatus.PAID.value,
                paid_at=paid_at,
                bonus_credits_granted=bonus,
                purchased_credits_granted=credits,
            )
        )
