"""
Redis client wrapper for conversation history.

Each chat session owns one Redis list of JSON-encoded messages. Appends are
followed by an LTRIM so the list never holds more than the configured number
of entries, and by an EXPIRE so idle sessions disappear.

Includes connection pooling and retry logic for resilience.
"""

import logging
import asyncio
from typing import Optional, List
from contextlib import asynccontextmanager
import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import RedisError, ConnectionError, TimeoutError


logger = logging.getLogger(__name__)


class RedisConnectionError(Exception):
    """Raised when Redis connection fails after retries."""
    pass


class RedisClient:
    """
    Redis client wrapper with connection pooling and retry logic.

    Provides capped per-session history lists (RPUSH + LTRIM + EXPIRE).
    """

    SESSION_HISTORY_KEY = "session:{session_id}:history"

    def __init__(
        self,
        redis_url: Optional[str] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        connection_timeout: int = 5
    ):
        """
        Initialize Redis client.

        Args:
            redis_url: Redis connection URL. If None, will load from settings.
            max_retries: Maximum number of retry attempts for transient errors
            retry_delay: Base delay between retries (exponential backoff)
            connection_timeout: Connection timeout in seconds
        """
        self._redis_url = redis_url
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[redis.Redis] = None
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._connection_timeout = connection_timeout

    async def initialize(self) -> None:
        """
        Initialize Redis connection pool.

        Should be called during application startup.

        Raises:
            RedisConnectionError: If connection fails
        """
        try:
            if not self._redis_url:
                from ai_editor.config import settings
                self._redis_url = settings.redis_url

            self._pool = ConnectionPool.from_url(
                self._redis_url,
                max_connections=10,
                decode_responses=True,
                socket_timeout=self._connection_timeout,
                socket_connect_timeout=self._connection_timeout
            )
            self._client = redis.Redis(connection_pool=self._pool)

            await self._client.ping()

            logger.info("Redis connection pool initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize Redis connection pool: {e}")
            raise RedisConnectionError(f"Failed to connect to Redis: {e}") from e

    async def close(self) -> None:
        """
        Close Redis connection pool.

        Should be called during application shutdown.
        """
        if self._client:
            await self._client.aclose()

        if self._pool:
            await self._pool.disconnect()

        logger.info("Redis connection pool closed")

    @asynccontextmanager
    async def _get_client(self):
        """
        Get Redis client with connection check.

        Raises:
            RuntimeError: If client not initialized
        """
        if not self._client:
            raise RuntimeError("Redis client not initialized. Call initialize() first.")

        yield self._client

    async def _retry_operation(self, operation, *args, **kwargs):
        """
        Execute Redis operation with retry logic.

        Raises:
            RedisConnectionError: If operation fails after all retries
        """
        last_error = None

        for attempt in range(self._max_retries):
            try:
                return await operation(*args, **kwargs)

            except (ConnectionError, TimeoutError) as e:
                last_error = e
                if attempt < self._max_retries - 1:
                    delay = self._retry_delay * (2 ** attempt)
                    logger.warning(
                        f"Redis operation failed (attempt {attempt + 1}/{self._max_retries}), "
                        f"retrying in {delay}s: {e}"
                    )
                    await asyncio.sleep(delay)
                else:
                    logger.error(f"Redis operation failed after {self._max_retries} attempts: {e}")

            except RedisError as e:
                logger.error(f"Redis operation failed with non-transient error: {e}")
                raise

        raise RedisConnectionError(f"Redis operation failed after {self._max_retries} retries: {last_error}")

    # ========== Session History Operations (List) ==========

    def _history_key(self, session_id: str) -> str:
        """Get Redis key for a session's history."""
        return self.SESSION_HISTORY_KEY.format(session_id=session_id)

    async def append_history(
        self,
        session_id: str,
        entries: List[str],
        max_length: int,
        ttl_seconds: int
    ) -> None:
        """
        Append entries to a session's history and evict the oldest beyond ``max_length``.

        Args:
            session_id: Chat session identifier
            entries: Serialized messages, oldest first
            max_length: Number of most recent entries to keep
            ttl_seconds: Expiry of the whole history, refreshed on every append

        Raises:
            RedisConnectionError: If operation fails after retries
        """
        if not entries:
            return

        async def _append():
            async with self._get_client() as client:
                key = self._history_key(session_id)
                async with client.pipeline(transaction=True) as pipe:
                    pipe.rpush(key, *entries)
                    pipe.ltrim(key, -max_length, -1)
                    pipe.expire(key, ttl_seconds)
                    await pipe.execute()

                logger.debug(f"Appended {len(entries)} history entries for session {session_id}")

        await self._retry_operation(_append)

    async def get_history(self, session_id: str) -> List[str]:
        """
        Get a session's history, oldest first.

        Returns:
            Serialized messages; empty list for an unknown session

        Raises:
            RedisConnectionError: If operation fails after retries
        """
        async def _get():
            async with self._get_client() as client:
                return await client.lrange(self._history_key(session_id), 0, -1)

        return await self._retry_operation(_get)


_redis_client: Optional[RedisClient] = None


def get_redis_client() -> RedisClient:
    """
    Get or create the global Redis client instance.

    Returns:
        RedisClient instance
    """
    global _redis_client
    if _redis_client is None:
        _redis_client = RedisClient()
    return _redis_client
