"""ListCreditPacks Use Case"""

from decimal import Decimal, ROUND_HALF_UP
from libs.result import Result, Return, Error
from storefront_billing.app.repositories.credit_pack_repository import CreditPackRepository
from storefront_billing.domain.credit_pack import CreditPack
from .dtos import CreditPackDTO, CreditPackListDTO


def to_credit_pack_dto(pack: CreditPack) -> CreditPackDTO:
    """Catalog view of a pack: totals, price per credit (0.001) and bonus share in percent"""
    total = pack.total_credits
    price_per_credit = (pack.price / total).quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)
    savings = (pack.bonus_credits * 100 / pack.credits).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return CreditPackDTO(
        id=pack.id,
        name=pack.name,
        credits=pack.credits,
        bonus_credits=pack.bonus_credits,
        total_credits=total,
        price=pack.price,
        currency=pack.currency,
        price_per_credit=price_per_credit,
        savings_percent=int(savings),
        is_popular=pack.is_popular,
        description=pack.description,
    )


class ListCreditPacks:
    """Use case: Active credit packs in display order (read-only)"""

    def __init__(self, pack_repo: CreditPackRepository):
        self.pack_repo = pack_repo

    async def execute(self) -> Result[CreditPackListDTO]:
        try:
            packs = await self.pack_repo.list_active()
        except Exception as e:
            return Return.err(
                Error(code="LIST_CREDIT_PACKS_FAILED", message="Failed to list credit packs", reason=str(e))
            )
        return Return.ok(CreditPackListDTO(packs=[to_credit_pack_dto(pack) for pack in packs]))
