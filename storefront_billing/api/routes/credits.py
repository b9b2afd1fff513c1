"""Credits API Routes

FastAPI routes for the authenticated credit ledger.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlmodel.ext.asyncio.session import AsyncSession

from storefront_billing.adapter.repositories.account_credit_repository import SqlAlchemyAccountCreditRepository
from storefront_billing.adapter.repositories.credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from storefront_billing.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from storefront_billing.api.error import ClientError
from storefront_billing.api.identity import (
    Actor,
    get_actor,
    require_internal_token,
    require_value,
    resolve_account_id,
)
from storefront_billing.api.schemas.credits_request import (
    CheckBalanceRequestSchema,
    DeductRequestSchema,
    GrantRequestSchema,
    PurchaseBonusRequestSchema,
)
from storefront_billing.app.billing_settings import BillingSettings
from storefront_billing.app.services.clock import Clock
from storefront_billing.app.use_cases.credits import (
    BalanceCheckResponseDTO,
    CheckBalance,
    CheckBalanceCommandDTO,
    CreditStatsDTO,
    DeductCommandDTO,
    DeductCredits,
    DeductResponseDTO,
    GetCreditStats,
    GetOrInitAccount,
    GrantCommandDTO,
    GrantCredits,
    GrantPurchaseBonus,
    GrantResponseDTO,
    ListTransactions,
    ListTransactionsResponseDTO,
    PurchaseBonusCommandDTO,
    PurchaseBonusResponseDTO,
)
from storefront_billing.depends import get_clock, get_session, get_settings
from storefront_billing.domain.credit_transaction import CreditTransactionKind

router = APIRouter(prefix="/credits", tags=["Credits"])


class CreditServices:
    """Repositories and use cases of the credit ledger bound to one request session"""

    def __init__(self, session: AsyncSession, settings: BillingSettings, clock: Clock):
        self.uow = SqlAlchemyUnitOfWork(session)
        self.account_repo = SqlAlchemyAccountCreditRepository(session)
        self.transaction_repo = SqlAlchemyCreditTransactionRepository(session)
        self.settings = settings
        self.clock = clock
        self.accounts = GetOrInitAccount(self.uow, self.account_repo, self.transaction_repo, settings, clock)

    def check_balance(self) -> CheckBalance:
        return CheckBalance(self.accounts, self.settings)

    def deduct_credits(self) -> DeductCredits:
        return DeductCredits(
            self.uow, self.account_repo, self.transaction_repo, self.accounts, self.settings, self.clock
        )

    def grant_credits(self) -> GrantCredits:
        return GrantCredits(self.uow, self.account_repo, self.transaction_repo, self.accounts, self.clock)

    def grant_purchase_bonus(self) -> GrantPurchaseBonus:
        return GrantPurchaseBonus(self.grant_credits(), self.settings)


def get_credit_services(
    session: AsyncSession = Depends(get_session),
    settings: BillingSettings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
) -> CreditServices:
    return CreditServices(session, settings, clock)


@router.post(
    "/check",
    response_model=BalanceCheckResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def check_balance(
    request: CheckBalanceRequestSchema,
    http_request: Request,
    actor: Actor = Depends(get_actor),
    services: CreditServices = Depends(get_credit_services),
):
    """
    Check whether the account can afford one generation.

    Read-only apart from lazily creating the account (with its monthly
    allocation) on first access.

    **Example request:**
    ```json
    {"accountId": "user_2abc", "action": "nano-banana"}
    ```

    **Returns:**
    - 200: `{sufficient, balance, cost}`
    """
    account_id = require_value(
        resolve_account_id(http_request, request.account_id, actor), "accountId", "X-Account-Id"
    )

    result = await services.check_balance().execute(
        CheckBalanceCommandDTO(account_id=account_id, action=request.action, cost=request.cost)
    )

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.post(
    "/deduct",
    response_model=DeductResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        409: {
            "description": "Insufficient credits",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INSUFFICIENT_BALANCE",
                            "message": "Insufficient credits. Required: 2, Available: 0.5"
                        }
                    }
                }
            }
        },
        400: {
            "description": "Validation error",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "VALIDATION_ERROR",
                            "message": "Invalid request parameters"
                        }
                    }
                }
            }
        }
    }
)
async def deduct_credits(
    request: DeductRequestSchema,
    http_request: Request,
    actor: Actor = Depends(get_actor),
    services: CreditServices = Depends(get_credit_services),
):
    """
    Deduct credits for one generation.

    The balance check and the decrement are one conditional update, so two
    concurrent requests can never overdraw the account. Repeating a request
    with the same `idempotencyKey` returns the original result without a
    second charge.

    **Request body:**
    - `accountId` (optional): Defaults to the X-Account-Id header; another
      account requires X-Internal-Token
    - `action` (optional): Model/action used to price the generation
    - `cost` (optional): Explicit cost, overrides the action price
    - `reason` (optional): Audit reason
    - `metadata` (optional): Opaque audit metadata
    - `idempotencyKey` (optional): Replay-safe key

    **Returns:**
    - 200: `{ok, newBalance, cost, transactionId}`
    - 409: Insufficient credits
    - 400: Invalid request parameters
    """
    account_id = require_value(
        resolve_account_id(http_request, request.account_id, actor), "accountId", "X-Account-Id"
    )

    command = DeductCommandDTO(
        account_id=account_id,
        cost=request.cost,
        action=request.action,
        reason=request.reason,
        metadata=request.metadata,
        idempotency_key=request.idempotency_key,
    )

    result = await services.deduct_credits().execute(command)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.post(
    "/grant",
    response_model=GrantResponseDTO,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_internal_token)],
)
async def grant_credits(
    request: GrantRequestSchema,
    services: CreditServices = Depends(get_credit_services),
):
    """
    Grant credits to an account (operator or internal service).

    Requires the `X-Internal-Token` header. `GENERATION_SPEND` cannot be
    granted.
    """
    command = GrantCommandDTO(
        account_id=request.account_id,
        amount=request.amount,
        kind=request.kind,
        reason=request.reason,
        metadata=request.metadata,
        idempotency_key=request.idempotency_key,
    )

    result = await services.grant_credits().execute(command)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.post(
    "/purchase-bonus",
    response_model=PurchaseBonusResponseDTO,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_internal_token)],
)
async def grant_purchase_bonus(
    request: PurchaseBonusRequestSchema,
    services: CreditServices = Depends(get_credit_services),
):
    """Grant the per-item purchase bonus for an order, once per order."""
    result = await services.grant_purchase_bonus().execute(
        PurchaseBonusCommandDTO(
            account_id=request.account_id,
            order_id=request.order_id,
            item_count=request.item_count,
        )
    )

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.get(
    "/{account_id}",
    response_model=CreditStatsDTO,
    status_code=status.HTTP_200_OK,
)
async def get_credit_stats(
    account_id: str,
    services: CreditServices = Depends(get_credit_services),
):
    """
    Credit overview for an account.

    Balance, remaining welcome credits, lifetime totals and the ten most
    recent transactions. Creates the account on first access.
    """
    result = await GetCreditStats(services.accounts, services.transaction_repo).execute(account_id)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.get(
    "/{account_id}/transactions",
    response_model=ListTransactionsResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def list_transactions(
    account_id: str,
    limit: int = Query(default=20, ge=1, le=100, description="Maximum number of transactions"),
    offset: int = Query(default=0, ge=0, description="Number of transactions to skip"),
    kind: Optional[CreditTransactionKind] = Query(default=None, description="Filter by transaction kind"),
    services: CreditServices = Depends(get_credit_services),
):
    """
    List an account's credit transactions, newest first.

    **Query parameters:**
    - `limit` (optional): 1-100, default 20
    - `offset` (optional): default 0
    - `kind` (optional): e.g. `GENERATION_SPEND`
    """
    result = await ListTransactions(services.transaction_repo).execute(
        account_id=account_id, limit=limit, offset=offset, kind=kind
    )

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value
