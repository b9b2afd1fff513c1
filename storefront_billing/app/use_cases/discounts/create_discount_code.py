"""CreateDiscountCode Use Case"""

import logging
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from storefront_billing.app.repositories.discount_code_repository import DiscountCodeRepository
from storefront_billing.app.services.clock import Clock
from storefront_billing.app.services.unit_of_work import UnitOfWork
from storefront_billing.domain.discount_code import DiscountCode
from .dtos import CreateDiscountCodeCommandDTO, DiscountCodeDTO

logger = logging.getLogger(__name__)


class CreateDiscountCode:
    """Use case: Operator creates a discount code (code is stored uppercase)"""

    def __init__(self, uow: UnitOfWork, code_repo: DiscountCodeRepository, clock: Clock):
        self.uow = uow
        self.code_repo = code_repo
        self.clock = clock

    async def execute(self, command: CreateDiscountCodeCommandDTO) -> Result[DiscountCodeDTO]:
        duplicate = Error(
            code="CODE_ALREADY_EXISTS",
            message=f"Discount code {command.code} already exists",
        )

        try:
            if await self.code_repo.get_by_code(command.code) is not None:
                return Return.err(duplicate)

            now = self.clock.now()
            code = await self.code_repo.create(
                DiscountCode(
                    code=command.code,
                    kind=command.kind,
                    value=command.value,
                    min_order_amount=command.min_order_amount,
                    max_uses=command.max_uses,
                    max_uses_per_account=command.max_uses_per_account,
                    used_count=0,
                    is_active=command.is_active,
                    starts_at=command.starts_at,
                    expires_at=command.expires_at,
                    created_at=now,
                    updated_at=now,
                )
            )
            await self.uow.commit()
        except IntegrityError:
            await self.uow.rollback()
            return Return.err(duplicate)
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code="CREATE_DISCOUNT_CODE_FAILED", message="Failed to create discount code", reason=str(e))
            )

        logger.info(f"Discount code {code.code} created ({code.kind.value} {code.value})")
        return Return.ok(
            DiscountCodeDTO(
                id=code.id,
                code=code.code,
                kind=code.kind,
                value=code.value,
                min_order_amount=code.min_order_amount,
                max_uses=code.max_uses,
                max_uses_per_account=code.max_uses_per_account,
                used_count=code.used_count,
                is_active=code.is_active,
                starts_at=code.starts_at,
                expires_at=code.expires_at,
                created_at=code.created_at,
            )
        )
