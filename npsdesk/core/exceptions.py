"""
Application exceptions and the handlers that render them
"""
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


logger = logging.getLogger(__name__)


class EntitlementError(Exception):
    """Base class for failures while evaluating entitlements.

    These never reach the client: the entitlement service logs them and
    falls back to the most restrictive state.
    """

    def __init__(self, message: str, *, account_id: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.account_id = account_id


class EntitlementFetchError(EntitlementError):
    """The backend could not be reached while loading entitlement data."""


class MissingAccountDataError(EntitlementError):
    """The account does not exist or has no creation timestamp."""


class AccountDeactivatedError(EntitlementError):
    """The account was deactivated and is granted nothing."""


class UnknownPlanError(EntitlementError):
    """A subscription references a plan identifier absent from the plan table."""

    def __init__(self, plan_id: Optional[str], *, account_id: Any = None) -> None:
        super().__init__(f"Unknown plan identifier: {plan_id!r}", account_id=account_id)
        self.plan_id = plan_id


def _error_body(message: Any, details: Any = None) -> dict:
    return {"message": message, "details": details}


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"HTTP {exc.status_code} on {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body("Validation error", jsonable_encoder(exc.errors())),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the JSON error handlers to the application."""

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
