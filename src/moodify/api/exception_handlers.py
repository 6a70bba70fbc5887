"""Global exception handlers.

Domain exceptions are raised wherever the problem is detected and converted
to HTTP responses here, in one place:

| Exception                                 | Status |
|-------------------------------------------|--------|
| AuthenticationError                       | 401    |
| ValidationError / RequestValidationError  | 400    |
| BusinessRuleViolation                     | 400    |
| EntityNotFoundException                   | 404    |
| DuplicateEntityException                  | 409    |
| ExternalServiceError (incl. ProviderError)| 500    |
| ConfigurationError                        | 503    |
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from moodify.api.envelopes import error_body
from moodify.application.validation import format_errors
from moodify.domain.exceptions import (
    AuthenticationError,
    BusinessRuleViolation,
    ConfigurationError,
    DuplicateEntityException,
    EntityNotFoundException,
    ExternalServiceError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _json_safe(value: Any) -> Any:
    # request bodies can show up as bytes inside pydantic error dicts
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


# Hey future me, register these ONCE during app setup (create_app does it). Starlette picks the
# handler by walking the exception's MRO, so ProviderError lands in the ExternalServiceError
# handler - no separate registration needed.
def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers mapping domain exceptions to JSON error responses."""

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(
        request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        logger.info(
            "Unauthenticated request to %s",
            request.url.path,
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=error_body(exc.message),
        )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        logger.warning(
            "Validation error at %s: %d field(s)",
            request.url.path,
            len(exc.errors),
            extra={"path": request.url.path, "errors": exc.errors},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(exc.message, exc.errors),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = format_errors(
            ({k: _json_safe(v) for k, v in e.items()} for e in exc.errors()),
            skip_prefixes=("body", "query", "path", "header", "cookie"),
        )
        logger.warning(
            "Request validation error at %s: %s",
            request.url.path,
            errors,
            extra={"path": request.url.path, "errors": errors},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body("Invalid input data", errors),
        )

    @app.exception_handler(BusinessRuleViolation)
    async def business_rule_violation_handler(
        request: Request, exc: BusinessRuleViolation
    ) -> JSONResponse:
        logger.warning(
            "Business rule violation at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error": exc.message},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(exc.message),
        )

    @app.exception_handler(EntityNotFoundException)
    async def entity_not_found_handler(
        request: Request, exc: EntityNotFoundException
    ) -> JSONResponse:
        logger.info(
            "Entity not found at %s: %s %s",
            request.url.path,
            exc.entity_type,
            exc.entity_id,
            extra={"path": request.url.path, "entity_type": exc.entity_type},
        )
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=error_body(f"{exc.entity_type} not found"),
        )

    @app.exception_handler(DuplicateEntityException)
    async def duplicate_entity_handler(
        request: Request, exc: DuplicateEntityException
    ) -> JSONResponse:
        logger.warning(
            "Duplicate entity at %s: %s",
            request.url.path,
            exc.entity_type,
            extra={"path": request.url.path, "entity_type": exc.entity_type},
        )
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=error_body(f"{exc.entity_type} already exists"),
        )

    @app.exception_handler(ExternalServiceError)
    async def external_service_error_handler(
        request: Request, exc: ExternalServiceError
    ) -> JSONResponse:
        logger.error(
            "External service error at %s (%s): %s",
            request.url.path,
            exc.service,
            exc.message,
            extra={
                "path": request.url.path,
                "service": exc.service,
                "http_status": exc.http_status,
            },
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(exc.message),
        )

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        logger.error(
            "Configuration error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=error_body(exc.message),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            "HTTP error %d at %s: %s",
            exc.status_code,
            request.url.path,
            exc.detail,
            extra={"path": request.url.path, "status_code": exc.status_code},
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )
