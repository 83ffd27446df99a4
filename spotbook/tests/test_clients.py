from unittest.mock import AsyncMock

import pytest

from spotbook.app.core import http_client as http_module
from spotbook.app.core import redis_client as redis_module
from spotbook.app.core.clock import default_clock
from spotbook.app.core.config import settings
from spotbook.app.core.redis_client import RedisStore, get_stored_user


@pytest.mark.asyncio
async def test_redis_store_reads_key():
    client = AsyncMock()
    client.get.return_value = "user-42"

    assert await RedisStore(client).get("user") == "user-42"
    client.get.assert_awaited_once_with("user")


@pytest.mark.asyncio
async def test_redis_store_decodes_bytes():
    client = AsyncMock()
    client.get.return_value = b"user-42"

    assert await RedisStore(client).get("user") == "user-42"


@pytest.mark.asyncio
async def test_redis_store_requires_connection(monkeypatch):
    monkeypatch.setattr(redis_module, "redis_client", None)

    with pytest.raises(RuntimeError):
        await RedisStore().get("user")


@pytest.mark.asyncio
async def test_get_stored_user_uses_configured_key():
    client = AsyncMock()
    client.get.return_value = "user-42"

    assert await get_stored_user(RedisStore(client)) == "user-42"
    client.get.assert_awaited_once_with(settings.USER_STORAGE_KEY)


@pytest.mark.asyncio
async def test_get_stored_user_treats_empty_as_missing():
    client = AsyncMock()
    client.get.return_value = ""

    assert await get_stored_user(RedisStore(client), "session") is None
    client.get.assert_awaited_once_with("session")


@pytest.mark.asyncio
async def test_redis_lifecycle():
    await redis_module.init_redis()
    try:
        assert redis_module.redis_client is not None
    finally:
        await redis_module.close_redis()
    assert redis_module.redis_client is None


@pytest.mark.asyncio
async def test_api_client_lifecycle():
    with pytest.raises(RuntimeError):
        http_module.get_api_client()

    await http_module.init_api_client()
    try:
        client = http_module.get_api_client()
        assert str(client.base_url).rstrip("/") == settings.API_BASE_URL.rstrip("/")
        assert client.timeout.read == settings.REQUEST_TIMEOUT_SECONDS
    finally:
        await http_module.close_api_client()

    with pytest.raises(RuntimeError):
        http_module.get_api_client()


def test_default_clock_uses_configured_timezone(monkeypatch):
    monkeypatch.setattr(settings, "TIMEZONE", "America/Sao_Paulo")
    assert str(default_clock().tzinfo) == "America/Sao_Paulo"

    monkeypatch.setattr(settings, "TIMEZONE", None)
    assert default_clock().tzinfo is None
