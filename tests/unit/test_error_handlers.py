"""Test error handlers."""

import json
from unittest.mock import Mock

import pytest
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException

from bff_api.app import bad_request_handler, not_found_handler, timeout_handler
from bff_api.exceptions import BadRequestError, GraphQLExecutionError, RequestTimeoutError


def make_request() -> Mock:
    request = Mock(spec=Request)
    request.method = "POST"
    request.url = Mock(path="/graphql")
    return request


def raised(exc: Exception, cause: Exception | None = None) -> Exception:
    """Return exc with a traceback, as handlers receive it."""
    try:
        raise exc from cause
    except Exception as e:
        return e


@pytest.mark.asyncio
async def test_malformed_json_body():
    errors = [{"type": "json_invalid", "loc": ("body", 1), "msg": "JSON decode error", "input": {}}]

    response = await bad_request_handler(make_request(), RequestValidationError(errors))

    assert response.status_code == 400
    assert json.loads(response.body) == {
        "error": {"message": "Invalid request", "details": "Malformed JSON"}
    }


@pytest.mark.asyncio
async def test_missing_body_field_is_generic():
    errors = [{"type": "missing", "loc": ("body", "query"), "msg": "Field required", "input": {}}]

    response = await bad_request_handler(make_request(), RequestValidationError(errors))

    assert json.loads(response.body)["error"]["details"] == "Bad request"


@pytest.mark.asyncio
async def test_malformed_json_from_cause():
    try:
        json.loads("{nope")
    except json.JSONDecodeError as cause:
        exc = raised(BadRequestError("Variables are not valid JSON"), cause)

    response = await bad_request_handler(make_request(), exc)

    assert json.loads(response.body)["error"]["details"] == "Malformed JSON"


@pytest.mark.asyncio
async def test_execution_error_is_sanitized():
    """Should never leak the message or stack of the underlying error."""
    exc = raised(GraphQLExecutionError("secret table users_v2 missing"), KeyError("users_v2"))

    response = await bad_request_handler(make_request(), exc)
    body = response.body.decode()

    assert response.status_code == 400
    assert json.loads(body) == {"error": {"message": "Invalid request", "details": "Bad request"}}
    assert "users_v2" not in body
    assert "Traceback" not in body


@pytest.mark.asyncio
async def test_timeout_returns_504():
    response = await timeout_handler(make_request(), RequestTimeoutError("too slow"))

    assert response.status_code == 504
    assert json.loads(response.body) == {"error": "Gateway timeout"}


@pytest.mark.asyncio
async def test_not_found():
    response = await not_found_handler(make_request(), HTTPException(status_code=404))

    assert response.status_code == 404
    assert response.body == b'{"error":"Not found"}'
