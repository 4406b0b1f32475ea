"""Tests for the shared Redis client factory."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from gameify.config import get_settings
from gameify.shared.clients import redis_client


@pytest.fixture(autouse=True)
def fresh_client(monkeypatch):
    monkeypatch.setattr(redis_client, "_redis_client", None)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestRedisClient:
    def test_url_comes_from_settings(self, monkeypatch):
        monkeypatch.setenv("GAMEIFY_REDIS_URL", "redis://cache:6379/3")
        assert redis_client.get_redis_url() == "redis://cache:6379/3"

    @pytest.mark.asyncio
    async def test_client_is_created_once_and_closed(self, monkeypatch):
        monkeypatch.setenv("GAMEIFY_REDIS_URL", "redis://cache:6379/3")
        client = MagicMock()
        client.aclose = AsyncMock()

        with patch.object(redis_client.redis, "from_url", return_value=client) as from_url:
            first = await redis_client.get_redis_client()
            second = await redis_client.get_redis_client("redis://ignored:6379/0")

        assert first is second is client
        from_url.assert_called_once()
        assert from_url.call_args.args[0] == "redis://cache:6379/3"
        assert from_url.call_args.kwargs["decode_responses"] is True

        await redis_client.close_redis_client()

        client.aclose.assert_awaited_once()
        assert redis_client._redis_client is None

    @pytest.mark.asyncio
    async def test_close_without_client_is_a_no_op(self):
        await redis_client.close_redis_client()
        assert redis_client._redis_client is None
