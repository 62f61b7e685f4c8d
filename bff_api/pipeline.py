"""Request pipeline stages.

Each stage is an HTTP middleware that either answers the request itself or
passes it on. ``PIPELINE`` lists them in execution order.
"""

import time
import uuid

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from loguru import logger


def is_json_media_type(content_type: str | None) -> bool:
    """Check for ``application/json`` or an ``application/*+json`` type.

    Parameters such as ``charset`` are ignored.
    """
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type == "application/json":
        return True
    return media_type.startswith("application/") and media_type.endswith("+json")


async def log_request(request: Request, call_next):
    """Tag the request with an ID and log it with its outcome.

    Args:
        request: Incoming FastAPI request.
        call_next: Next stage in the pipeline.

    Returns:
        Response with X-Request-ID header.
    """
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    request.state.request_id = request_id
    started = time.perf_counter()

    with logger.contextualize(request_id=request_id):
        logger.debug(
            "Request started",
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception:
            logger.error("{method} {path} crashed", method=request.method, path=request.url.path)
            raise

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "{method} {path} {status_code} {duration_ms}ms",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return response


async def require_json_content_type(request: Request, call_next):
    """Reject POST bodies that are not JSON with 415."""
    content_type = request.headers.get("content-type")
    if request.method == "POST" and not is_json_media_type(content_type):
        logger.warning("Invalid content-type: {content_type}", content_type=content_type)
        return JSONResponse(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            content={"error": "Unsupported Media Type"},
        )
    return await call_next(request)


PIPELINE = (log_request, require_json_content_type)


def install_pipeline(app: FastAPI) -> None:
    """Register the pipeline stages so the first one runs outermost."""
    for stage in reversed(PIPELINE):
        app.middleware("http")(stage)
