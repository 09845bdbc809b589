"""Error handling middleware and exception handlers."""

from typing import Dict, Type

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog

from src.domain.exceptions import (
    ActorNotAuthenticatedException,
    ActorNotAuthorizedException,
    ConcurrencyConflictException,
    DataIntegrityException,
    DomainException,
    FinancialValidationException,
    IllegalTransitionException,
    ImportStageException,
    InsufficientCreditException,
    InvalidRequestException,
    NoApprovedCreditException,
    NotFoundException,
    PaymentScheduleException,
    PaymentStateException,
    SnapshotLockedException,
)
from .request_context import get_request_id

logger = structlog.get_logger(__name__)

# Most specific first; the first matching class decides the status code.
STATUS_CODES: Dict[Type[DomainException], int] = {
    NotFoundException: 404,
    ActorNotAuthenticatedException: 401,
    ActorNotAuthorizedException: 403,
    InvalidRequestException: 400,
    FinancialValidationException: 422,
    IllegalTransitionException: 409,
    ImportStageException: 409,
    InsufficientCreditException: 409,
    NoApprovedCreditException: 409,
    ConcurrencyConflictException: 409,
    PaymentStateException: 409,
    PaymentScheduleException: 409,
    SnapshotLockedException: 409,
    DataIntegrityException: 500,
}


def status_code_for(exc: DomainException) -> int:
    for exc_type, status_code in STATUS_CODES.items():
        if isinstance(exc, exc_type):
            return status_code
    return 400


def error_body(exc: DomainException) -> dict:
    body = {
        "error": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    body.update(exc.details())
    return body


def error_handler_middleware(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI app.

    Maps domain exceptions to appropriate HTTP responses.
    """

    @app.exception_handler(DataIntegrityException)
    async def data_integrity_handler(
        request: Request,
        exc: DataIntegrityException,
    ) -> JSONResponse:
        """Handle persisted data outside its closed value sets."""
        logger.error(
            "data_integrity_error",
            request_id=get_request_id(),
            message=exc.message,
        )
        return JSONResponse(status_code=500, content=error_body(exc))

    @app.exception_handler(ConcurrencyConflictException)
    async def concurrency_conflict_handler(
        request: Request,
        exc: ConcurrencyConflictException,
    ) -> JSONResponse:
        """Handle lost optimistic-update races; the client may retry."""
        logger.warning(
            "concurrency_conflict",
            request_id=get_request_id(),
            resource_id=exc.resource_id,
        )
        return JSONResponse(
            status_code=409,
            content=error_body(exc),
            headers={"Retry-After": "0"},
        )

    @app.exception_handler(DomainException)
    async def domain_exception_handler(
        request: Request,
        exc: DomainException,
    ) -> JSONResponse:
        """Handle domain exceptions."""
        status_code = status_code_for(exc)
        logger.warning(
            "domain_exception",
            request_id=get_request_id(),
            code=exc.code,
            message=exc.message,
            status_code=status_code,
        )
        return JSONResponse(status_code=status_code, content=error_body(exc))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            "unhandled_exception",
            request_id=get_request_id(),
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "INTERNAL_ERROR",
                "message": "An unexpected error occurred.",
                "request_id": get_request_id(),
            },
        )
