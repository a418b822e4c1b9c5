"""Redis-backed chat memory store.

Each conversation lives in one Redis list:

    <prefix><memory_id>  ->  [json message, json message, ...]

The default prefix is ``langchain4j:chat-memory:``. ``update_messages``
replaces the whole list (DEL then RPUSH in one MULTI/EXEC pipeline), so
readers never observe a half-written conversation.
"""

from typing import Any

from redis import ConnectionPool, Redis, RedisError

from llm_recipes.core.config import get_settings
from llm_recipes.core.errors import MemoryStoreError, ValidationError
from llm_recipes.core.logging import get_logger
from llm_recipes.memory.serialization import message_from_json, message_to_json
from llm_recipes.memory.store import ChatMemoryStore
from llm_recipes.providers.base import Message

logger = get_logger(__name__)


class RedisChatMemoryStore(ChatMemoryStore):
    """Chat memory store persisting each conversation as a Redis list.

    Pass a configured client for dependency injection, or let the store build
    a pooled client from ``url`` (or host/port).

    Args:
        redis_client: A configured Redis client. Takes precedence over url/host.
        url: Redis URL. Defaults to the configured ``redis_url``.
        host: Redis host; used with ``port`` when no url is given.
        port: Redis port.
        password: Optional Redis password for host/port connections.
        key_prefix: Prefix prepended to memory ids.
        max_connections: Connection pool size.
    """

    def __init__(
        self,
        redis_client: Redis | None = None,
        *,
        url: str | None = None,
        host: str | None = None,
        port: int = 6379,
        password: str | None = None,
        key_prefix: str | None = None,
        max_connections: int | None = None,
    ) -> None:
        settings = get_settings()
        self.key_prefix = key_prefix if key_prefix is not None else settings.chat_memory_key_prefix
        self._pool: ConnectionPool | None = None

        if redis_client is not None:
            self._redis = redis_client
        else:
            max_connections = max_connections or settings.redis_max_connections
            if host is not None:
                self._pool = ConnectionPool(
                    host=host,
                    port=port,
                    password=password,
                    max_connections=max_connections,
                    decode_responses=True,
                )
            else:
                self._pool = ConnectionPool.from_url(
                    url or settings.redis_url,
                    max_connections=max_connections,
                    decode_responses=True,
                )
            self._redis = Redis(connection_pool=self._pool)

    def key_for(self, memory_id: str) -> str:
        """Build the Redis key holding a conversation."""
        return f"{self.key_prefix}{memory_id}"

    def get_messages(self, memory_id: str) -> list[Message]:
        key = self.key_for(memory_id)
        try:
            raw_messages = self._redis.lrange(key, 0, -1)
        except RedisError as e:
            raise MemoryStoreError(f"Failed to read {key}: {e}", memory_id=memory_id) from e
        try:
            return [message_from_json(raw) for raw in raw_messages]  # type: ignore[union-attr]
        except ValidationError as e:
            logger.warning("chat_memory_corrupt", key=key, error=e.message)
            raise MemoryStoreError(f"Corrupt message stored under {key}: {e.message}", memory_id=memory_id) from e

    def update_messages(self, memory_id: str, messages: list[Message]) -> None:
        key = self.key_for(memory_id)
        try:
            pipe = self._redis.pipeline(transaction=True)
            pipe.delete(key)
            if messages:
                pipe.rpush(key, *(message_to_json(m) for m in messages))
            pipe.execute()
        except RedisError as e:
            raise MemoryStoreError(f"Failed to write {key}: {e}", memory_id=memory_id) from e
        logger.debug("chat_memory_stored", key=key, messages=len(messages))

    def delete_messages(self, memory_id: str) -> None:
        key = self.key_for(memory_id)
        try:
            self._redis.delete(key)
        except RedisError as e:
            raise MemoryStoreError(f"Failed to delete {key}: {e}", memory_id=memory_id) from e
        logger.debug("chat_memory_deleted", key=key)

    def ping(self) -> bool:
        """Check the connection, returning False if Redis is unreachable."""
        try:
            return bool(self._redis.ping())
        except RedisError:
            return False

    def close(self) -> None:
        """Release pooled connections (injected clients are left open)."""
        if self._pool is not None:
            self._pool.disconnect()

    def __enter__(self) -> "RedisChatMemoryStore":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
