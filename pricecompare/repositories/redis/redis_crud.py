"""Module for reading and writing expiring cache payloads in Redis."""

import logging
from typing import Optional, Union

import redis

logger = logging.getLogger(__name__)


def str_to_bool(value: str) -> bool:
    """Convert REDIS_SSL env variable to boolean."""
    return value.lower() in ("true", "1", "yes")


class RedisDatabase:
    """Handles operations with the Redis database for cached search results."""

    def __init__(
        self,
        host: str,
        port: int,
        password: Optional[str],
        ssl: Union[str, bool],
    ) -> None:
        """
        Initialize a connection to the Redis database.

        Args:
            host (str): The hostname or IP address of the Redis server.
            port (int): The port number of the Redis server (default is 6379).
            password (Optional[str]): Password for the Redis server, if any.
            ssl (Union[str, bool]): Whether to use TLS; strings such as "true" are accepted.
        """
        ssl = str_to_bool(ssl) if isinstance(ssl, str) else ssl
        self.handler = redis.Redis(
            host=host,
            port=port,
            password=password,
            ssl=ssl,
            db=0,
            ssl_cert_reqs=None,
        )

    def get(self, key: str) -> Optional[bytes]:
        """Return the raw payload stored under key, if any."""
        return self.handler.get(key)  # type: ignore[return-value]

    def set(self, key: str, payload: str, ttl_seconds: int) -> None:
        """Store payload under key, replacing any previous value and TTL."""
        self.handler.set(key, payload, ex=ttl_seconds)
        logger.debug("Cached %s for %d seconds", key, ttl_seconds)
