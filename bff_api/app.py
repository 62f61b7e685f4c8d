"""FastAPI application: lifecycle, GraphQL routes and error handlers."""

import asyncio
import json
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from .cache import Cache, create_cache
from .config import Settings, load_settings
from .exceptions import (
    BadRequestError,
    BFFError,
    CacheConnectionError,
    GraphQLExecutionError,
    RequestTimeoutError,
    StartupError,
)
from .pipeline import install_pipeline
from .schema import schema
from .users import UserRepository, UserService


@dataclass(frozen=True)
class AppContext:
    """Components shared by every request, built once at startup."""

    settings: Settings
    cache: Cache
    users: UserService


class GraphQLRequest(BaseModel):
    """GraphQL-over-HTTP request body."""

    query: str
    variables: dict[str, Any] | None = None
    operation_name: str | None = Field(None, alias="operationName")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    settings: Settings = app.state.settings

    cache = create_cache(settings)
    try:
        await cache.startup()
    except CacheConnectionError as e:
        logger.critical("Startup failed: {error}", error=str(e))
        raise StartupError(str(e)) from e

    users = UserService(UserRepository(), cache, ttl=settings.cache_ttl_seconds)
    app.state.context = AppContext(settings=settings, cache=cache, users=users)
    logger.info("Server running at http://{}:{}/graphql", settings.host, settings.port)

    yield

    await users.wait_pending()
    await cache.shutdown()
    logger.info("Server closed")


async def execute_operation(request: Request, operation: GraphQLRequest) -> JSONResponse:
    """Run one GraphQL operation under the request timeout.

    Raises:
        RequestTimeoutError: If execution exceeds the configured timeout.
        GraphQLExecutionError: If a resolver raised an unexpected exception.
    """
    context: AppContext = request.app.state.context

    try:
        result = await asyncio.wait_for(
            schema.execute(
                operation.query,
                variable_values=operation.variables,
                context_value={"request": request, "users": context.users},
                operation_name=operation.operation_name,
            ),
            timeout=context.settings.request_timeout_seconds,
        )
    except TimeoutError as e:
        raise RequestTimeoutError(
            f"GraphQL execution exceeded {context.settings.request_timeout_seconds}s"
        ) from e
    except Exception as e:
        raise GraphQLExecutionError(str(e)) from e

    errors = result.errors or []
    for error in errors:
        if error.original_error is not None:
            raise GraphQLExecutionError(error.message) from error.original_error

    formatted = [error.formatted for error in errors]
    if formatted and result.data is None:
        # Parse or validation failure, nothing was executed
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": formatted})

    body: dict[str, Any] = {"data": result.data}
    if formatted:
        body["errors"] = formatted
    return JSONResponse(content=body)


async def graphql_post_endpoint(request: Request, operation: GraphQLRequest) -> JSONResponse:
    """Execute a GraphQL operation sent as a JSON body."""
    return await execute_operation(request, operation)


async def graphql_get_endpoint(
    request: Request,
    query: str,
    variables: str | None = None,
    operation_name: Annotated[str | None, Query(alias="operationName")] = None,
) -> JSONResponse:
    """Execute a GraphQL operation sent as query parameters."""
    try:
        parsed = json.loads(variables) if variables else None
    except json.JSONDecodeError as e:
        raise BadRequestError("Variables are not valid JSON") from e

    operation = GraphQLRequest(query=query, variables=parsed, operationName=operation_name)
    return await execute_operation(request, operation)


async def health_endpoint(request: Request) -> dict[str, str]:
    """Report liveness and which cache backend is active.

    The only route besides /graphql; it goes through the same pipeline.
    """
    context: AppContext = request.app.state.context
    return {"status": "ok", "cache": context.cache.name}


async def not_found_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Answer unmatched routes with a JSON 404."""
    logger.warning("404: {method} {path}", method=request.method, path=request.url.path)
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": "Not found"})


def _is_malformed_json(exc: Exception) -> bool:
    if isinstance(exc, RequestValidationError):
        return any(error.get("type") == "json_invalid" for error in exc.errors())
    return isinstance(exc.__cause__, json.JSONDecodeError)


async def bad_request_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log full detail, answer with a sanitized 400."""
    logger.opt(exception=exc).error(
        "Request failed: {message}",
        message=str(exc),
        path=request.url.path,
        method=request.method,
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "message": "Invalid request",
                "details": "Malformed JSON" if _is_malformed_json(exc) else "Bad request",
            }
        },
    )


async def timeout_handler(request: Request, exc: RequestTimeoutError) -> JSONResponse:
    """Answer requests that ran out of time with 504."""
    logger.error(
        "Request timed out: {message}",
        message=str(exc),
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(
        status_code=status.HTTP_504_GATEWAY_TIMEOUT, content={"error": "Gateway timeout"}
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to run with. Loaded from the environment if omitted.

    Returns:
        Application ready to be served.
    """
    app = FastAPI(
        title="BFF GraphQL Server",
        version="1.0.0",
        description="GraphQL Backend for Frontend with optional Redis caching",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings or load_settings()

    install_pipeline(app)

    app.add_exception_handler(status.HTTP_404_NOT_FOUND, not_found_handler)  # type: ignore[arg-type]
    app.add_exception_handler(status.HTTP_405_METHOD_NOT_ALLOWED, not_found_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestTimeoutError, timeout_handler)  # type: ignore[arg-type]
    app.add_exception_handler(BFFError, bad_request_handler)
    app.add_exception_handler(RequestValidationError, bad_request_handler)
    app.add_exception_handler(Exception, bad_request_handler)

    app.post("/graphql", tags=["graphql"])(graphql_post_endpoint)
    app.get("/graphql", tags=["graphql"])(graphql_get_endpoint)
    app.get("/health", tags=["health"])(health_endpoint)

    return app
