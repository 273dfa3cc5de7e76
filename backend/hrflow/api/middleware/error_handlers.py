"""
Error Handlers

Map domain, request-validation and storage failures onto the API's JSON
error envelope: {"error": {"code", "message", "details"}}.
"""
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from pymongo.errors import PyMongoError

from ...domain.errors import DomainError
from ...utils.logger import get_logger, get_correlation_id

logger = get_logger(__name__)


def _error_response(status_code: int, code: str, message: str, details: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message, "details": details}},
        headers={"X-Correlation-Id": get_correlation_id() or ""}
    )


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """
    Expected business errors: invalid templates, missing workflows, locked
    tasks, finished workflows and the like.
    """
    logger.warning(
        f"Domain error: {exc.error_code} - {exc.message}",
        extra={
            "error_code": exc.error_code,
            "workflow_id": request.path_params.get("workflow_id"),
            "task_id": request.path_params.get("task_id"),
        }
    )
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
        headers={"X-Correlation-Id": get_correlation_id() or ""}
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Request body, path or query did not match the schema"""
    errors = [
        {"path": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]
    logger.warning(
        f"Validation error on {request.method} {request.url.path}: {len(errors)} problem(s)",
        extra={"error_code": "VALIDATION_ERROR"}
    )
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        "VALIDATION_ERROR",
        "Request validation failed",
        {"errors": errors}
    )


async def storage_error_handler(request: Request, exc: PyMongoError) -> JSONResponse:
    """The document store rejected or failed an operation"""
    logger.error(f"Storage error: {exc}", exc_info=True, extra={"error_code": "STORAGE_ERROR"})
    return _error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "STORAGE_ERROR",
        "The data store is unavailable",
        {}
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything else is a bug; log the stack trace"""
    logger.error(f"Unexpected error: {exc}", exc_info=True)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An unexpected error occurred",
        {"hint": "Check server logs for details"}
    )


def register_error_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(PyMongoError, storage_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)
