"""
Central error handling: every error response is JSON {error, status_code, detail, path}.
"""
import logging

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from geofence_attendance.core.config import settings

logger = logging.getLogger(__name__)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle HTTPException. detail may be a string or a dict (attendance errors carry
    code/message plus distance and accuracy figures).
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": True,
            "status_code": exc.status_code,
            "detail": exc.detail,
            "path": str(request.url.path),
        },
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle RequestValidationError. Field-level errors are hidden in production.
    """
    content = {
        "error": True,
        "status_code": status.HTTP_422_UNPROCESSABLE_ENTITY,
        "detail": "Validation error",
        "path": str(request.url.path),
    }
    if settings.APP_ENV == "prod":
        content["detail"] = "Validation error: Invalid request data"
    else:
        # ctx may hold exception instances (e.g. ValueError from validators)
        errors = []
        for e in exc.errors():
            err = dict(e)
            if isinstance(err.get("ctx"), dict):
                err["ctx"] = {
                    k: (v if isinstance(v, (str, int, float, bool, type(None))) else str(v))
                    for k, v in err["ctx"].items()
                }
            errors.append(err)
        content["errors"] = errors
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=content)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions (including store unavailability) as 500.
    Details are only exposed outside production.
    """
    logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": True,
            "status_code": 500,
            "detail": "Internal server error" if settings.APP_ENV == "prod" else str(exc),
            "path": str(request.url.path),
        },
    )
