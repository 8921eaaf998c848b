"""Uniform error responses: ``{"success": false, "error": {code, message, details}}``."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from cellar.errors import CellarError

logger = structlog.get_logger(__name__)


def error_response(status_code: int, code: str, message: str, details=None) -> JSONResponse:
    error = {"code": code, "message": message}
    if details:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


async def _cellar_error(request: Request, exc: CellarError) -> JSONResponse:
    logger.info("Request rejected", path=request.url.path, code=exc.code, message=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.to_dict()})


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return error_response(400, "INVALID", "Validation failed", exc.messages)


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = {".".join(str(p) for p in e["loc"]): e["msg"] for e in exc.errors()}
    return error_response(400, "INVALID", "Validation failed", details)


async def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return error_response(404, "NOT_FOUND", "Resource not found")


async def _version_conflict(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    logger.warning("Concurrent modification rejected", path=request.url.path)
    return error_response(409, "CONFLICT", "The resource was modified concurrently, please retry")


async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path, method=request.method, error=str(exc))
    return error_response(500, "INTERNAL_ERROR", "Something went wrong")


def register_error_handlers(app: FastAPI) -> None:
    """Protean's defaults first, then the store's envelope for the errors we raise."""
    register_exception_handlers(app)
    app.add_exception_handler(CellarError, _cellar_error)
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(ExpectedVersionError, _version_conflict)
    app.add_exception_handler(Exception, _unexpected)
