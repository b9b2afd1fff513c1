"""ValidateDiscount Use Case

Prices a discount code against an order subtotal. Read-only: validating the
same code twice gives the same answer and never consumes a use.
"""

import logging
from libs.result import Result, Return
from storefront_billing.app.repositories.discount_code_repository import DiscountCodeRepository
from storefront_billing.app.repositories.discount_redemption_repository import DiscountRedemptionRepository
from storefront_billing.app.services.clock import Clock
from storefront_billing.domain.discount_code import normalize_code
from . import rules
from .dtos import PricedDiscountDTO, ValidateDiscountCommandDTO

logger = logging.getLogger(__name__)


class ValidateDiscount:
    """
    Use Case: Validate and price a discount code

    Checks, first failure wins:
    1. Code exists (case-insensitive)
    2. Code is active
    3. Validity window has started
    4. Validity window has not ended
    5. Subtotal meets the minimum order amount
    6. Global usage cap not reached
    7. Per-account cap not reached (authenticated callers only)
    """

    def __init__(
        self,
        code_repo: DiscountCodeRepository,
        redemption_repo: DiscountRedemptionRepository,
        clock: Clock,
    ):
        self.code_repo = code_repo
        self.redemption_repo = redemption_repo
        self.clock = clock

    async def execute(self, command: ValidateDiscountCommandDTO) -> Result[PricedDiscountDTO]:
        code = await self.code_repo.get_by_code(normalize_code(command.code))
        if code is None:
            return Return.err(rules.code_not_found())

        error = (
            rules.check_availability(code, self.clock.now())
            or rules.check_minimum(code, command.subtotal)
            or rules.check_global_limit(code)
        )

        if error is None and command.account_id and code.max_uses_per_account is not None:
            account_uses = await self.redemption_repo.count_for_account(code.id, command.account_id)
            error = rules.check_account_limit(code, account_uses)

        if error is not None:
            logger.info(f"Discount code {code.code} rejected: {error.code}")
            return Return.err(error)

        discount_amount = rules.compute_discount(code, command.subtotal)
        return Return.ok(
            PricedDiscountDTO(
                code_id=code.id,
                code=code.code,
                kind=code.kind,
                value=code.value,
                subtotal=command.subtotal,
                discount_amount=discount_amount,
                total=command.subtotal - discount_amount,
            )
        )
