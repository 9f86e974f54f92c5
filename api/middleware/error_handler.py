"""
Exception handlers: every failure is rendered as an ErrorResponse envelope
"""

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorResponse
from utils.errors import ConsistencyWarning, IngestError
from utils.logger import setup_logger

logger = setup_logger("api.errors")


def error_response(status_code: int, error: str, detail: Optional[str] = None,
                   video_id: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=error, detail=detail, video_id=video_id)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


async def ingest_error_handler(request: Request, exc: IngestError) -> JSONResponse:
    if isinstance(exc, ConsistencyWarning):
        logger.error(
            f"Consistency warning for video {exc.video_id}: object {exc.orphan_key} "
            f"stored without metadata"
        )
    elif exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}", exc_info=exc)
    else:
        logger.info(f"{type(exc).__name__} on {request.url.path}: {exc.message}")

    return error_response(exc.status_code, type(exc).__name__, exc.message, exc.video_id)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return error_response(exc.status_code, "HTTPError", detail)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    )
    return error_response(status.HTTP_400_BAD_REQUEST, "ValidationError", problems or "Invalid input")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "InternalServerError",
        "An unexpected error occurred"
    )


def add_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(IngestError, ingest_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
