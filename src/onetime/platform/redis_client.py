"""
Centralized Redis Client Management.

One connection pool per process, shared by the models and the rate limit
counter store.
"""

from collections.abc import AsyncGenerator
from typing import Any

import structlog
from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from onetime.platform.settings import settings

logger = structlog.get_logger(__name__)

RedisClientType = Redis


class RedisClientManager:
    """
    Singleton Redis client manager with connection pooling.

    Features:
    - Connection pooling for performance
    - Health checking
    - Graceful shutdown
    """

    _instance: "RedisClientManager | None" = None
    _pool: ConnectionPool | None = None
    _client: RedisClientType | None = None

    def __new__(cls) -> "RedisClientManager":
        """Ensure singleton instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    async def initialize(self, url: str | None = None, **kwargs: Any) -> None:
        """
        Initialize Redis connection pool and verify the server answers.

        Args:
            url: Redis URL (defaults to settings.redis.redis_url)
            **kwargs: Additional Redis connection parameters

        Raises:
            RedisError: If the server cannot be reached
        """
        if self._pool is not None:
            logger.warning("Redis client already initialized")
            return

        url = url or settings.redis.redis_url

        try:
            self._pool = ConnectionPool.from_url(
                url,
                decode_responses=settings.redis.decode_responses,
                max_connections=settings.redis.max_connections,
                socket_timeout=settings.redis.socket_timeout,
                socket_connect_timeout=settings.redis.socket_timeout,
                **kwargs,
            )
            self._client = Redis(connection_pool=self._pool)

            await self._client.ping()

            logger.info(
                "redis.initialized",
                host=settings.redis.host,
                port=settings.redis.port,
                db=settings.redis.db,
                max_connections=settings.redis.max_connections,
            )

        except RedisError as e:
            logger.error("redis.initialization_failed", url=_safe_url(url), error=str(e))
            self._pool = None
            self._client = None
            raise

    async def close(self) -> None:
        """Close Redis connection pool."""
        if self._client:
            await self._client.aclose()
            self._client = None

        if self._pool:
            await self._pool.disconnect()
            self._pool = None

        logger.info("redis.closed")

    def get_client(self) -> RedisClientType:
        """
        Get Redis client instance.

        Raises:
            RuntimeError: If client not initialized
        """
        if self._client is None:
            raise RuntimeError("Redis client not initialized. Call initialize() first.")
        return self._client


def _safe_url(url: str) -> str:
    # strip credentials before logging
    if "@" in url:
        scheme, _, rest = url.partition("://")
        return f"{scheme}://***@{rest.split('@', 1)[1]}"
    return url


# Global Redis client manager instance
redis_manager = RedisClientManager()


async def get_redis_client() -> AsyncGenerator[RedisClientType]:
    """
    FastAPI dependency for Redis client.

    Yields:
        Redis client instance
    """
    yield redis_manager.get_client()


async def init_redis() -> None:
    """
    Initialize Redis client on application startup.

    A Redis connection failure at boot is fatal.
    """
    try:
        await redis_manager.initialize()
        logger.info("redis.startup_complete")
    except Exception as e:
        logger.error("redis.startup_failed", error=str(e))
        raise RuntimeError("Redis initialization failed") from e


async def shutdown_redis() -> None:
    """Close Redis connections on application shutdown."""
    try:
        await redis_manager.close()
        logger.info("redis.shutdown_complete")
    except Exception as e:
        logger.error("redis.shutdown_failed", error=str(e))


async def check_redis_health(client: RedisClientType | None) -> dict[str, Any]:
    """Ping Redis and describe the outcome; never raises."""
    if client is None:
        return {"status": "unhealthy", "message": "Redis client not initialized"}

    try:
        await client.ping()
    except RedisError as e:
        logger.error("redis.health_check_failed", error=str(e))
        return {"status": "unhealthy", "message": "Redis unavailable"}
    return {"status": "healthy"}
