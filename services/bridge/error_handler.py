"""
Centralized Error Handling for Bridge-Y

Every failure leaves the service as a JSON body with an "error" key and a
status code taken from EXCEPTION_TO_STATUS. Internal error text and stack
traces go to the log, never to the caller.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from exceptions import BaseBridgeException, ValidationFailed, EXCEPTION_TO_STATUS
from logging_config import get_logger, log_error

logger = get_logger(__name__)

# Location prefixes FastAPI puts in front of the offending field name
_LOCATION_PREFIXES = ("body", "query", "path", "header")


def format_validation_errors(errors) -> list[dict]:
    """
    Flatten pydantic errors into {field, message, type} entries.

    ("body", "action") -> "action"
    ("query", "limit") -> "limit"
    ("body",)          -> "body"   (missing or non-object body)
    """
    formatted = []
    for err in errors:
        loc = list(err.get("loc", ()))
        if len(loc) > 1 and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        formatted.append({
            "field": ".".join(str(part) for part in loc) or "body",
            "message": err.get("msg", "Invalid value"),
            "type": err.get("type", "value_error"),
        })
    return formatted


def status_for(exc: BaseBridgeException) -> int:
    for exc_class in type(exc).__mro__:
        if exc_class in EXCEPTION_TO_STATUS:
            return EXCEPTION_TO_STATUS[exc_class]
    return 500


async def bridge_exception_handler(request: Request, exc: BaseBridgeException) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(
            "store_error",
            path=request.url.path,
            error_code=type(exc).__name__,
            reason=getattr(exc, "reason", exc.message),
        )
    return JSONResponse(status_code=status_code, content=exc.to_dict())


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    failure = ValidationFailed(format_validation_errors(exc.errors()))
    logger.info("validation_failed", path=request.url.path, fields=[d["field"] for d in failure.details])
    return JSONResponse(status_code=status_for(failure), content=failure.to_dict())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes, wrong methods and other framework errors"""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log_error(exc, {"path": request.url.path, "method": request.method})
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BaseBridgeException, bridge_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
