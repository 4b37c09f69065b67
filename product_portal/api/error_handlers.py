from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from product_portal.core.exceptions import (
    APIException,
    ConfigurationError,
    NotFoundError,
    QueryError,
)
from product_portal.core.logging import get_correlation_id, get_logger

# Initialize logger
logger = get_logger(__name__)

_REDACTED_KEYS = ("authorization", "credential", "subscription_key", "api_key")


def _safe_context(context: dict) -> dict:
    """Copy an error context, masking credential-like entries."""
    return {
        key: "[REDACTED]" if key.lower() in _REDACTED_KEYS else value
        for key, value in (context or {}).items()
    }


async def handle_api_exception(request: Request, exc: APIException) -> JSONResponse:
    """
    Handle APIException instances not covered by a more specific handler.

    Args:
        request: FastAPI request object
        exc: APIException instance

    Returns:
        JSONResponse: Formatted error response
    """
    logger.error(
        f"API Exception: {exc.detail}",
        extra={"status_code": exc.status_code, "error_code": exc.code}
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(request_id=get_correlation_id())
    )


async def handle_not_found_exception(request: Request, exc: NotFoundError) -> JSONResponse:
    """
    Handle resource not found errors.

    Args:
        request: FastAPI request object
        exc: NotFoundError instance

    Returns:
        JSONResponse: Formatted not found error response
    """
    logger.info(
        f"Resource not found: {exc.detail}",
        extra={
            "resource_type": exc.context.get("resource_type"),
            "resource_id": exc.context.get("resource_id")
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(request_id=get_correlation_id())
    )


async def handle_query_exception(request: Request, exc: QueryError) -> JSONResponse:
    """
    Handle failed gateway calls.

    The upstream response body stays in the logs and is not sent back to the
    caller.

    Args:
        request: FastAPI request object
        exc: QueryError instance

    Returns:
        JSONResponse: Formatted gateway error response
    """
    logger.error(
        f"Gateway query failed: {exc.detail}",
        extra={
            "upstream_status": exc.upstream_status,
            "original_error": exc.context.get("original_error")
        }
    )
    context = _safe_context(exc.context)
    context.pop("body", None)
    context.pop("original_error", None)

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.code,
                "message": exc.detail,
                "status_code": exc.status_code,
                "context": context,
                "request_id": get_correlation_id()
            }
        }
    )


async def handle_configuration_exception(request: Request, exc: ConfigurationError) -> JSONResponse:
    """
    Handle gateway client misconfiguration.

    Args:
        request: FastAPI request object
        exc: ConfigurationError instance

    Returns:
        JSONResponse: Formatted configuration error response
    """
    logger.critical(f"Gateway client misconfigured: {exc.detail}", extra={"setting": exc.context.get("setting")})
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(request_id=get_correlation_id())
    )


async def handle_request_validation_exception(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors, e.g. an edit form with a missing price."""
    errors = [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    logger.warning("Request validation failed", extra={"errors": errors})

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": {
                "code": "validation_error",
                "message": "Request validation error",
                "status_code": status.HTTP_422_UNPROCESSABLE_ENTITY,
                "context": {"errors": errors},
                "request_id": get_correlation_id()
            }
        }
    )


async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred",
                "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
                "request_id": get_correlation_id()
            }
        }
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Configure exception handlers for the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(NotFoundError, handle_not_found_exception)
    app.add_exception_handler(QueryError, handle_query_exception)
    app.add_exception_handler(ConfigurationError, handle_configuration_exception)
    app.add_exception_handler(APIException, handle_api_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_exception)
    app.add_exception_handler(Exception, handle_unexpected_exception)
