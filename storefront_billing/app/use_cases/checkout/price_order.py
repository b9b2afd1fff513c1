"""PriceOrder Use Case"""

from decimal import Decimal
from libs.result import Result, Return
from storefront_billing.app.billing_settings import BillingSettings
from storefront_billing.app.use_cases.discounts.dtos import ValidateDiscountCommandDTO
from storefront_billing.app.use_cases.discounts.validate_discount import ValidateDiscount
from .dtos import PriceOrderCommandDTO, PricedOrderDTO


class PriceOrder:
    """
    Use case: Price a cart

    subtotal = sum(unit_price * quantity); a discount code, when given, is
    validated against that subtotal and its typed error is returned as-is.
    Read-only.
    """

    def __init__(self, validate_discount: ValidateDiscount, settings: BillingSettings):
        self.validate_discount = validate_discount
        self.settings = settings

    async def execute(self, command: PriceOrderCommandDTO) -> Result[PricedOrderDTO]:
        subtotal = sum((item.line_total for item in command.items), Decimal("0"))

        discount = None
        if command.discount_code and command.discount_code.strip():
            validated = await self.validate_discount.execute(
                ValidateDiscountCommandDTO(
                    code=command.discount_code,
                    subtotal=subtotal,
                    account_id=command.account_id,
                )
            )
            if validated.is_err():
                return validated
            discount = validated.value

        discount_amount = discount.discount_amount if discount else Decimal("0")
        return Return.ok(
            PricedOrderDTO(
                items=command.items,
                account_id=command.account_id,
                currency=self.settings.currency,
                subtotal=subtotal,
                discount=discount,
                discount_amount=discount_amount,
                total=subtotal - discount_amount,
            )
        )
