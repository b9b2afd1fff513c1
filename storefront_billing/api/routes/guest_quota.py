"""Guest Quota API Routes"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlmodel.ext.asyncio.session import AsyncSession

from storefront_billing.adapter.repositories.guest_quota_repository import SqlAlchemyGuestQuotaRepository
from storefront_billing.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from storefront_billing.api.error import ClientError
from storefront_billing.api.identity import Actor, get_actor, require_value
from storefront_billing.api.schemas.guest_quota_request import GuestQuotaRequestSchema
from storefront_billing.app.billing_settings import BillingSettings
from storefront_billing.app.services.clock import Clock
from storefront_billing.app.use_cases.guest_quota import (
    ConsumeGuestQuota,
    GetGuestQuota,
    GuestQuotaCommandDTO,
    GuestQuotaResponseDTO,
)
from storefront_billing.depends import get_clock, get_session, get_settings

router = APIRouter(prefix="/guest-quota", tags=["Guest Quota"])


@router.post(
    "/check",
    response_model=GuestQuotaResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        429: {
            "description": "Guest limit reached for the current window",
            "content": {
                "application/json": {
                    "example": {"allowed": False, "remaining": 0, "resetsAt": "2026-10-20T09:15:00"}
                }
            }
        }
    }
)
async def check_guest_quota(
    request: GuestQuotaRequestSchema,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
    settings: BillingSettings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
):
    """
    Check and consume one guest generation.

    The session comes from `sessionId` or the X-Session-Id header; the
    client IP is recorded for audit only.

    **Returns:**
    - 200: `{allowed: true, remaining, resetsAt}` - the generation was counted
    - 429: `{allowed: false, remaining: 0, resetsAt}` - nothing was counted
    """
    session_id = require_value(request.session_id or actor.session_id, "sessionId", "X-Session-Id")

    use_case = ConsumeGuestQuota(SqlAlchemyUnitOfWork(session), SqlAlchemyGuestQuotaRepository(session), settings, clock)
    result = await use_case.execute(GuestQuotaCommandDTO(session_id=session_id, ip=actor.ip))

    if result.is_err():
        raise ClientError.from_error(result.error)

    if not result.value.allowed:
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content=result.value.model_dump(mode="json", by_alias=True),
        )

    return result.value


@router.get(
    "/{session_id}",
    response_model=GuestQuotaResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def get_guest_quota(
    session_id: str,
    session: AsyncSession = Depends(get_session),
    settings: BillingSettings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
):
    """Read-only guest quota status (nothing is consumed)."""
    result = await GetGuestQuota(SqlAlchemyGuestQuotaRepository(session), settings, clock).execute(session_id)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value
