"""Credit Pack API Routes"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from storefront_billing.adapter.repositories.credit_pack_repository import SqlAlchemyCreditPackRepository
from storefront_billing.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from storefront_billing.api.error import ClientError
from storefront_billing.api.identity import require_internal_token
from storefront_billing.api.schemas.credit_pack_request import CreateCreditPackRequestSchema
from storefront_billing.app.services.clock import Clock
from storefront_billing.app.use_cases.credit_packs import (
    CreateCreditPack,
    CreateCreditPackCommandDTO,
    CreditPackDTO,
    CreditPackListDTO,
    ListCreditPacks,
)
from storefront_billing.depends import get_clock, get_session

router = APIRouter(prefix="/credit-packs", tags=["Credit Packs"])


@router.get(
    "",
    response_model=CreditPackListDTO,
    status_code=status.HTTP_200_OK,
)
async def list_credit_packs(session: AsyncSession = Depends(get_session)):
    """
    Active credit packs in display order.

    Each pack shows `totalCredits` (credits plus bonus), `pricePerCredit`
    and `savingsPercent` (bonus share of the base credits).
    """
    result = await ListCreditPacks(SqlAlchemyCreditPackRepository(session)).execute()

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.post(
    "",
    response_model=CreditPackDTO,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_internal_token)],
)
async def create_credit_pack(
    request: CreateCreditPackRequestSchema,
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """Add a credit pack to the catalog (internal). Pack names are unique."""
    command = CreateCreditPackCommandDTO(**request.model_dump())

    use_case = CreateCreditPack(SqlAlchemyUnitOfWork(session), SqlAlchemyCreditPackRepository(session), clock)
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value
