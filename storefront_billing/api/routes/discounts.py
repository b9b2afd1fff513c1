"""Discount API Routes"""

from fastapi import APIRouter, Depends, Request, status
from sqlmodel.ext.asyncio.session import AsyncSession

from storefront_billing.adapter.repositories.discount_code_repository import SqlAlchemyDiscountCodeRepository
from storefront_billing.adapter.repositories.discount_redemption_repository import (
    SqlAlchemyDiscountRedemptionRepository,
)
from storefront_billing.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from storefront_billing.api.error import ClientError
from storefront_billing.api.identity import Actor, get_actor, require_internal_token, resolve_account_id
from storefront_billing.api.schemas.discount_request import (
    CreateDiscountCodeRequestSchema,
    ValidateDiscountRequestSchema,
)
from storefront_billing.app.services.clock import Clock
from storefront_billing.app.use_cases.discounts import (
    CreateDiscountCode,
    CreateDiscountCodeCommandDTO,
    DiscountCodeDTO,
    PricedDiscountDTO,
    ValidateDiscount,
    ValidateDiscountCommandDTO,
)
from storefront_billing.depends import get_clock, get_session

router = APIRouter(prefix="/discount", tags=["Discounts"])


@router.post(
    "/validate",
    response_model=PricedDiscountDTO,
    status_code=status.HTTP_200_OK,
    responses={
        404: {
            "description": "Unknown code",
            "content": {
                "application/json": {
                    "example": {"error": {"code": "CODE_NOT_FOUND", "message": "Invalid discount code"}}
                }
            }
        },
        422: {
            "description": "Code exists but cannot be applied",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "BELOW_MINIMUM",
                            "message": "Minimum order amount of 20.00 required"
                        }
                    }
                }
            }
        }
    }
)
async def validate_discount(
    request: ValidateDiscountRequestSchema,
    http_request: Request,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """
    Validate and price a discount code against a subtotal.

    Read-only: validating never consumes a use of the code.

    **Error codes:** `CODE_NOT_FOUND`, `INACTIVE`, `NOT_YET_STARTED`,
    `EXPIRED`, `BELOW_MINIMUM`, `GLOBAL_LIMIT_REACHED`,
    `PER_ACCOUNT_LIMIT_REACHED` (first failing rule wins).
    """
    use_case = ValidateDiscount(
        SqlAlchemyDiscountCodeRepository(session),
        SqlAlchemyDiscountRedemptionRepository(session),
        clock,
    )
    result = await use_case.execute(
        ValidateDiscountCommandDTO(
            code=request.code,
            subtotal=request.subtotal,
            account_id=resolve_account_id(http_request, request.account_id, actor),
        )
    )

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.post(
    "/codes",
    response_model=DiscountCodeDTO,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_internal_token)],
)
async def create_discount_code(
    request: CreateDiscountCodeRequestSchema,
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """Create a discount code (internal). The code is stored uppercase."""
    command = CreateDiscountCodeCommandDTO(**request.model_dump())

    use_case = CreateDiscountCode(SqlAlchemyUnitOfWork(session), SqlAlchemyDiscountCodeRepository(session), clock)
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value
