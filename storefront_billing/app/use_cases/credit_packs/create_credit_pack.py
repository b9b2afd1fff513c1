"""CreateCreditPack Use Case"""

import logging
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from storefront_billing.app.repositories.credit_pack_repository import CreditPackRepository
from storefront_billing.app.services.clock import Clock
from storefront_billing.app.services.unit_of_work import UnitOfWork
from storefront_billing.domain.credit_pack import CreditPack
from .dtos import CreateCreditPackCommandDTO, CreditPackDTO
from .list_credit_packs import to_credit_pack_dto

logger = logging.getLogger(__name__)


class CreateCreditPack:
    """Use case: Operator adds a credit pack to the catalog (names are unique)"""

    def __init__(self, uow: UnitOfWork, pack_repo: CreditPackRepository, clock: Clock):
        self.uow = uow
        self.pack_repo = pack_repo
        self.clock = clock

    async def execute(self, command: CreateCreditPackCommandDTO) -> Result[CreditPackDTO]:
        now = self.clock.now()
        try:
            pack = await self.pack_repo.create(
                CreditPack(
                    name=command.name,
                    credits=command.credits,
                    bonus_credits=command.bonus_credits,
                    price=command.price,
                    currency=command.currency,
                    description=command.description,
                    is_active=command.is_active,
                    is_popular=command.is_popular,
                    display_order=command.display_order,
                    created_at=now,
                    updated_at=now,
                )
            )
            await self.uow.commit()
        except IntegrityError:
            await self.uow.rollback()
            return Return.err(
                Error(code="CREDIT_PACK_ALREADY_EXISTS", message=f"Credit pack {command.name} already exists")
            )
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code="CREATE_CREDIT_PACK_FAILED", message="Failed to create credit pack", reason=str(e))
            )

        logger.info(f"Credit pack {pack.id} created: {pack.name} ({pack.total_credits} credits for {pack.price})")
        return Return.ok(to_credit_pack_dto(pack))
