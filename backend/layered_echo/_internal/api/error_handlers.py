"""Error Handlers — global exception handlers and the domain error -> status table.

Invariants:
    - DOMAIN_ERROR_STATUS is the only place a domain error acquires an HTTP status
    - DomainError -> status from the table + stable envelope (code, message, category, severity)
    - Unmatched route (404) and wrong method on a known path (405) -> 404 NOT_FOUND
    - Malformed request (RequestValidationError) -> 404 NOT_FOUND, same envelope
    - Exception (catch-all) -> 500 INTERNAL_ERROR, never leaks internal details

Design Decisions:
    - Explicit table, not inferred: integration tests asserting on exact error
      responses stay valid across business logic implementations
    - A domain category missing from the table is a wiring defect: logged as
      an error and answered with the catch-all envelope
"""

import logging
from types import MappingProxyType
from typing import Mapping

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from layered_echo._internal.core.errors import (
    DomainError, EchoServiceError, ErrorCategory, ErrorSeverity,
)

logger = logging.getLogger(__name__)

DOMAIN_ERROR_STATUS: Mapping[ErrorCategory, int] = MappingProxyType({
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.BUSINESS_RULE: 422,
    ErrorCategory.RESOURCE_NOT_FOUND: 404,
    ErrorCategory.CONFLICT: 409,
    ErrorCategory.DATA_ACCESS: 503,
})

NOT_FOUND_RESPONSE = EchoServiceError(
    "No route matches the request", "NOT_FOUND",
    ErrorCategory.RESOURCE_NOT_FOUND, ErrorSeverity.ERROR,
).to_response()

INTERNAL_ERROR_RESPONSE = EchoServiceError(
    "An unexpected error occurred", "INTERNAL_ERROR",
    ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
).to_response()


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_http_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        """Map a domain error to its fixed transport status."""
        status_code = DOMAIN_ERROR_STATUS.get(exc.category)
        if status_code is None:
            logger.error(
                f"No status mapped for domain error category {exc.category.value}",
                extra={"error_code": exc.code, "path": request.url.path},
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=INTERNAL_ERROR_RESPONSE,
            )
        logger.warning(
            f"DomainError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(status_code=status_code, content=exc.to_response())


def _register_http_error_handler(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        """Unmatched routes answer NOT_FOUND regardless of method."""
        if exc.status_code in (
            status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED,
        ):
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content=NOT_FOUND_RESPONSE,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=EchoServiceError(
                str(exc.detail), f"HTTP_{exc.status_code}", ErrorCategory.INTERNAL,
            ).to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Malformed requests match no handler contract: NOT_FOUND."""
        logger.warning(
            f"Malformed request on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=NOT_FOUND_RESPONSE,
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=INTERNAL_ERROR_RESPONSE,
        )
