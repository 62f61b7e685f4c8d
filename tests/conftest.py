"""Shared test fixtures."""

from collections.abc import AsyncGenerator
from unittest.mock import patch

import pytest
import pytest_asyncio
from fakeredis import FakeAsyncRedis
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from bff_api.app import create_app, lifespan
from bff_api.cache import RedisCache
from bff_api.config import Settings


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings with Redis disabled and logs kept out of the repo."""
    return Settings(
        _env_file=None,
        enable_redis=False,
        log_level="ERROR",
        log_dir=str(tmp_path / "logs"),
    )


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI, None]:
    """Application with its lifespan entered."""
    application = create_app(settings)
    async with lifespan(application):
        yield application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client talking to the app in-process."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def fake_redis() -> AsyncGenerator[FakeAsyncRedis, None]:
    """In-memory Redis server stand-in."""
    client = FakeAsyncRedis(decode_responses=True)
    await client.flushall()
    yield client


@pytest_asyncio.fixture
async def redis_cache(fake_redis: FakeAsyncRedis) -> AsyncGenerator[RedisCache, None]:
    """RedisCache wired to fakeredis."""
    cache = RedisCache("redis://cache.test:6379")
    with patch("bff_api.cache.redis.from_url", return_value=fake_redis):
        await cache.startup()
        yield cache
        await cache.shutdown()


@pytest.fixture
def get_user_query() -> dict:
    """GraphQL body for looking up user 1."""
    return {
        "query": "query GetUser($id: ID!) { getUser(id: $id) { id name email } }",
        "variables": {"id": "1"},
        "operationName": "GetUser",
    }
