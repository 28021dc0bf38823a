from redis import Redis, RedisError
import json
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


class RedisCache:
    """
    JSON document helper over a Redis connection. Read and write errors are logged and
    reported as a miss (None) or False, so callers can treat the cache as optional.
    """

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0, client: Optional[Redis] = None):
        self.host = host
        self.port = port
        self.db = db
        self.client = client if client is not None else Redis(host=self.host, port=self.port, db=self.db)

    def ping(self) -> bool:
        try:
            if self.client.ping():
                logger.info("Connected to Redis at %s:%s", self.host, self.port)
                return True
            logger.warning("Cannot connect to Redis at %s:%s", self.host, self.port)
            return False
        except RedisError as e:
            logger.exception("Could not connect to Redis at %s:%s - %s", self.host, self.port, str(e))
            return False

    def set(self, key: str, value: Any, ex: Optional[int] = None) -> bool:
        """Store ``value`` as JSON. Without ``ex`` the key never expires."""
        try:
            self.client.set(key, json.dumps(value), ex=ex)
            if ex:
                logger.debug(f"Set key {key} in Redis (expires in {ex} seconds)")
            else:
                logger.debug(f"Set key {key} in Redis (no expiry)")
            return True
        except RedisError as e:
            logger.exception(f"Redis set error for key {key}: {str(e)}")
            return False

    def get(self, key: str) -> Optional[Any]:
        try:
            value = self.client.get(key)
            if value:
                try:
                    return json.loads(value.decode("utf-8"))
                except (json.JSONDecodeError, UnicodeDecodeError) as e:
                    logger.error(f"Failed to decode JSON for key {key}: {str(e)}")
                    return None
            return None
        except RedisError as e:
            logger.exception(f"Redis get error for key {key}: {str(e)}")
            return None

    def close(self) -> None:
        self.client.close()
