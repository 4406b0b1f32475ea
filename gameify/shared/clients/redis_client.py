"""Redis client with connection pooling and retry logic."""

import redis.asyncio as redis
from redis.asyncio.retry import Retry
from redis.backoff import ExponentialBackoff

from gameify.config import get_settings
from gameify.shared.utils.logging import get_logger

logger = get_logger(__name__)

# Global client instance
_redis_client: redis.Redis | None = None


def get_redis_url() -> str:
    """Get Redis URL from settings."""
    return get_settings().redis_url


async def get_redis_client(url: str | None = None) -> redis.Redis:
    """Get or create the shared Redis client with connection pooling."""
    global _redis_client
    if _redis_client is None:
        url = url or get_redis_url()
        retry = Retry(ExponentialBackoff(), retries=3)
        _redis_client = redis.from_url(
            url,
            encoding="utf-8",
            decode_responses=True,
            retry=retry,
            retry_on_timeout=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            health_check_interval=30,
        )
        logger.info("redis_client_created", url=url.split("@")[-1])
    return _redis_client


async def close_redis_client() -> None:
    """Close Redis connection."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
        logger.info("redis_client_closed")
