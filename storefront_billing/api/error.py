"""API error handling

Use cases return ``Result`` errors; routes raise ``ClientError`` with the
HTTP status that fits the error code. Every error body has the shape
``{"error": {"code": ..., "message": ..., "reason": ...}}``.
"""

import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from libs.result import Error
from storefront_billing.domain.errors import LedgerInvariantViolation

logger = logging.getLogger(__name__)

# Well-formed request rejected by a business rule
UNPROCESSABLE = 422

STATUS_BY_CODE = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "UNAUTHORIZED": status.HTTP_401_UNAUTHORIZED,
    "AUTHENTICATION_REQUIRED": status.HTTP_401_UNAUTHORIZED,
    "ACCOUNT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "CODE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "ORDER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "CREDIT_PACK_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INSUFFICIENT_BALANCE": status.HTTP_409_CONFLICT,
    "CODE_ALREADY_EXISTS": status.HTTP_409_CONFLICT,
    "CREDIT_PACK_ALREADY_EXISTS": status.HTTP_409_CONFLICT,
    "IDEMPOTENCY_KEY_CONFLICT": status.HTTP_409_CONFLICT,
    "ORDER_CLOSED": status.HTTP_409_CONFLICT,
    "INVALID_ORDER_STATE": status.HTTP_409_CONFLICT,
    "INACTIVE": UNPROCESSABLE,
    "NOT_YET_STARTED": UNPROCESSABLE,
    "EXPIRED": UNPROCESSABLE,
    "BELOW_MINIMUM": UNPROCESSABLE,
    "GLOBAL_LIMIT_REACHED": UNPROCESSABLE,
    "PER_ACCOUNT_LIMIT_REACHED": UNPROCESSABLE,
    "GUEST_LIMIT_EXCEEDED": status.HTTP_429_TOO_MANY_REQUESTS,
    "PAYMENT_PROVIDER_ERROR": status.HTTP_502_BAD_GATEWAY,
}


class ClientError(Exception):
    def __init__(self, error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code

    @classmethod
    def from_error(cls, error: Error) -> "ClientError":
        """Pick the status for a use-case error code (unknown *_FAILED codes are 500)"""
        if error.code in STATUS_BY_CODE:
            return cls(error, status_code=STATUS_BY_CODE[error.code])
        if error.code.endswith("_FAILED"):
            return cls(error, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return cls(error)


def error_response(error: Error, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error.model_dump(exclude_none=True)})


def _describe_validation_errors(errors) -> str:
    parts = []
    for err in errors:
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return "; ".join(parts)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ClientError)
    async def client_error_handler(request: Request, exc: ClientError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.error.code} {exc.error.reason}")
        return error_response(exc.error, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(
            Error(
                code="VALIDATION_ERROR",
                message="Invalid request parameters",
                reason=_describe_validation_errors(exc.errors()),
            ),
            status.HTTP_400_BAD_REQUEST,
        )

    @app.exception_handler(ValidationError)
    async def command_validation_handler(request: Request, exc: ValidationError):
        return error_response(
            Error(
                code="VALIDATION_ERROR",
                message="Invalid request parameters",
                reason=_describe_validation_errors(exc.errors()),
            ),
            status.HTTP_400_BAD_REQUEST,
        )

    @app.exception_handler(LedgerInvariantViolation)
    async def invariant_violation_handler(request: Request, exc: LedgerInvariantViolation):
        logger.critical(f"{request.method} {request.url.path}: {exc}")
        return error_response(
            Error(code="INVARIANT_VIOLATION", message="Internal ledger error"),
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
