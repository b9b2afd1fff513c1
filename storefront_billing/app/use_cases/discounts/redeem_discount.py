"""RedeemDiscount Use Case

Consumes one use of a discount code for an order. The global cap is
enforced by a conditional increment; the per-account cap is counted after
that increment, while the code row is held by this transaction.
"""

import logging
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from storefront_billing.app.repositories.discount_code_repository import DiscountCodeRepository
from storefront_billing.app.repositories.discount_redemption_repository import DiscountRedemptionRepository
from storefront_billing.app.services.clock import Clock
from storefront_billing.app.services.unit_of_work import UnitOfWork
from storefront_billing.domain.discount_code import normalize_code
from storefront_billing.domain.discount_redemption import DiscountRedemption
from . import rules
from .dtos import RedeemDiscountCommandDTO, RedemptionDTO

logger = logging.getLogger(__name__)


class RedeemDiscount:
    """
    Use Case: Redeem a discount code on an order

    Business Rules:
    1. Code must exist, be active and inside its validity window
    2. used_count never exceeds max_uses, even under concurrent redeemers
    3. max_uses_per_account is checked for authenticated accounts
    4. A (code, order) pair redeems once; a replay returns the first redemption

    ``execute`` owns its transaction. ``apply`` does the same work inside the
    caller's transaction and leaves commit/rollback to the caller, which
    must roll back when an error is returned.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        code_repo: DiscountCodeRepository,
        redemption_repo: DiscountRedemptionRepository,
        clock: Clock,
    ):
        self.uow = uow
        self.code_repo = code_repo
        self.redemption_repo = redemption_repo
        self.clock = clock

    async def execute(self, command: RedeemDiscountCommandDTO) -> Result[RedemptionDTO]:
        try:
            result = await self.apply(command)
            if result.is_err():
                await self.uow.rollback()
                return result
            await self.uow.commit()
            return result
        except IntegrityError:
            # Same (code, order) redeemed concurrently; report the winner
            await self.uow.rollback()
            return await self._replay_or_fail(command)
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code="REDEEM_DISCOUNT_FAILED", message="Failed to redeem discount code", reason=str(e))
            )

    async def apply(self, command: RedeemDiscountCommandDTO) -> Result[RedemptionDTO]:
        # Step 1: Resolve the code
        code = await self.code_repo.get_by_code(normalize_code(command.code))
        if code is None:
            return Return.err(rules.code_not_found())

        # Step 2: Replay
        existing = await self.redemption_repo.get_by_code_and_order(code.id, command.order_id)
        if existing is not None:
            return Return.ok(self._to_response_dto(existing, code.code))

        # Step 3: Active and in window
        now = self.clock.now()
        error = rules.check_availability(code, now)
        if error is not None:
            return Return.err(error)

        # Step 4: Take one use under the global cap
        if not await self.code_repo.increment_usage_if_available(code.id, now):
            logger.info(f"Discount code {code.code} exhausted while redeeming order {command.order_id}")
            return Return.err(rules.global_limit_reached(code))

        # Step 5: Per-account cap
        if command.account_id and code.max_uses_per_account is not None:
            account_uses = await self.redemption_repo.count_for_account(code.id, command.account_id)
            error = rules.check_account_limit(code, account_uses)
            if error is not None:
                return Return.err(error)

        # Step 6: Record the redemption
        redemption = await self.redemption_repo.create(
            DiscountRedemption(
                code_id=code.id,
                account_id=command.account_id,
                order_id=command.order_id,
                applied_amount=command.applied_amount,
                created_at=now,
            )
        )

        logger.info(f"Discount code {code.code} redeemed on order {command.order_id}")
        return Return.ok(self._to_response_dto(redemption, code.code))

    async def _replay_or_fail(self, command: RedeemDiscountCommandDTO) -> Result[RedemptionDTO]:
        code = await self.code_repo.get_by_code(normalize_code(command.code))
        if code is not None:
            existing = await self.redemption_repo.get_by_code_and_order(code.id, command.order_id)
            if existing is not None:
                return Return.ok(self._to_response_dto(existing, code.code))
        return Return.err(
            Error(
                code="REDEEM_DISCOUNT_FAILED",
                message="Failed to redeem discount code",
                reason="concurrent redemption conflict",
            )
        )

    def _to_response_dto(self, redemption: DiscountRedemption, code: str) -> RedemptionDTO:
        return RedemptionDTO(
            id=redemption.id,
            code_id=redemption.code_id,
            code=code,
            order_id=redemption.order_id,
            account_id=redemption.account_id,
            applied_amount=redemption.applied_amount,
            created_at=redemption.created_at,
        )
