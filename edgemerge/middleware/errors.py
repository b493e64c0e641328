from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from edgemerge.models.errors import AggregatorError

logger = logging.getLogger(__name__)

# Context attributes copied into the error body when an error carries them.
ERROR_CONTEXT = ("uri", "endpoint", "field", "index")


def error_body(exc: AggregatorError) -> dict[str, object]:
    detail: dict[str, object] = {"message": exc.message, "type": exc.error_type}
    for name in ERROR_CONTEXT:
        value = getattr(exc, name, None)
        if value is not None:
            detail[name] = value
    return {"error": detail}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AggregatorError)
    async def aggregator_error_handler(request: Request, exc: AggregatorError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=AggregatorError.status_code, content=error_body(AggregatorError()))
