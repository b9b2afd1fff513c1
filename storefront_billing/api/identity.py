"""Request identity

The storefront's auth layer sits in front of this service and forwards the
caller's identity in headers: ``X-Account-Id`` for signed-in users and
``X-Session-Id`` for guests. Operator endpoints require ``X-Internal-Token``.
"""

import secrets
from dataclasses import dataclass
from typing import Optional
from fastapi import Request, status
from libs.result import Error
from storefront_billing.api.error import ClientError


@dataclass(frozen=True)
class Actor:
    account_id: Optional[str]
    session_id: Optional[str]
    ip: Optional[str]


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None


def get_actor(request: Request) -> Actor:
    return Actor(
        account_id=(request.headers.get("X-Account-Id") or "").strip() or None,
        session_id=(request.headers.get("X-Session-Id") or "").strip() or None,
        ip=client_ip(request),
    )


def is_valid_internal_token(expected_token: str, received_token: Optional[str]) -> bool:
    if not expected_token or not received_token:
        return False
    return secrets.compare_digest(expected_token, received_token)


def require_internal_token(request: Request) -> None:
    config = request.app.state.config
    if config.AUTH_DISABLED:
        return
    if not is_valid_internal_token(config.INTERNAL_API_TOKEN, request.headers.get("X-Internal-Token")):
        raise ClientError(
            Error(code="UNAUTHORIZED", message="A valid internal token is required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


def resolve_account_id(request: Request, claimed: Optional[str], actor: Actor) -> Optional[str]:
    """
    Account the request acts for.

    The X-Account-Id header is the caller's identity. A body ``accountId``
    naming any other account is only honoured on internally authenticated
    calls (backend services acting on a user's behalf).
    """
    if claimed and claimed != actor.account_id:
        require_internal_token(request)
        return claimed
    return actor.account_id


def require_value(value: Optional[str], field: str, header: str) -> str:
    if not value:
        raise ClientError(
            Error(
                code="VALIDATION_ERROR",
                message="Invalid request parameters",
                reason=f"{field} is required (body field or {header} header)",
            )
        )
    return value
