"""GrantPurchaseBonus Use Case

Rewards a completed physical order with credits, once per order.
"""

from libs.result import Result, Return
from storefront_billing.app.billing_settings import BillingSettings
from storefront_billing.domain.credit_transaction import CreditTransactionKind
from .dtos import GrantCommandDTO, PurchaseBonusCommandDTO, PurchaseBonusResponseDTO
from .grant_credits import GrantCredits


class GrantPurchaseBonus:
    """
    Use case: Grant the per-item purchase bonus for an order

    Keyed ``purchase_bonus:{order_id}`` so payment webhook replays grant once.
    """

    def __init__(self, grant_credits: GrantCredits, settings: BillingSettings):
        self.grant_credits = grant_credits
        self.settings = settings

    async def execute(self, command: PurchaseBonusCommandDTO) -> Result[PurchaseBonusResponseDTO]:
        amount = self.settings.purchase_bonus_per_item * command.item_count

        result = await self.grant_credits.execute(
            GrantCommandDTO(
                account_id=command.account_id,
                amount=amount,
                kind=CreditTransactionKind.PURCHASE_BONUS,
                reason=f"Purchase bonus for order {command.order_id}",
                metadata={"order_id": command.order_id, "item_count": command.item_count},
                idempotency_key=f"purchase_bonus:{command.order_id}",
            )
        )
        if result.is_err():
            return result

        return Return.ok(
            PurchaseBonusResponseDTO(
                credits_granted=amount,
                new_balance=result.value.new_balance,
                transaction_id=result.value.transaction_id,
            )
        )
