"""
Key-value storage for cart persistence.

Values are JSON-serialized on write and parsed on read. Errors from the
underlying backend are not swallowed: a storage outage surfaces to the caller.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import json
import logging
import threading
from redis import Redis
from storefront.config import settings

logger = logging.getLogger(__name__)


class KeyValueStorage(ABC):
    """Minimal get/set interface the cart store persists through"""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    def set_if_absent(self, key: str, value: Any) -> bool:
        """Store value only if key is unset. Returns True if it was stored."""
        if self.get(key) is not None:
            return False
        self.set(key, value)
        return True

    def ping(self) -> bool:
        return True


class MemoryStorage(KeyValueStorage):
    """In-process storage, used in tests and when no Redis is configured"""

    def __init__(self):
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def set_if_absent(self, key: str, value: Any) -> bool:
        with self._lock:
            if key in self._data:
                return False
            self._data[key] = json.dumps(value)
            return True

    def keys(self):
        return list(self._data.keys())


class RedisStorage(KeyValueStorage):
    """Redis-backed storage"""

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.REDIS_URL
        self._redis: Optional[Redis] = None

    def connect(self):
        """Create the client and check the connection"""
        self._redis = Redis.from_url(self.url, decode_responses=True, max_connections=10)
        try:
            self._redis.ping()
            logger.info("Redis connected successfully")
        except Exception as e:
            # Keep the client: cart operations will raise until Redis comes back
            logger.error(f"Redis connection failed: {e}")

    def disconnect(self):
        if self._redis:
            self._redis.close()
            logger.info("Redis disconnected")

    @property
    def client(self) -> Redis:
        if self._redis is None:
            self.connect()
        return self._redis

    def get(self, key: str) -> Optional[Any]:
        raw = self.client.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        self.client.set(key, json.dumps(value))

    def delete(self, key: str) -> None:
        self.client.delete(key)

    def set_if_absent(self, key: str, value: Any) -> bool:
        return bool(self.client.set(key, json.dumps(value), nx=True))

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except Exception as e:
            logger.error(f"Redis ping failed: {e}")
            return False


_storage: Optional[KeyValueStorage] = None


def get_storage() -> KeyValueStorage:
    """Process-wide storage backend (Redis unless overridden)"""
    global _storage
    if _storage is None:
        _storage = RedisStorage()
    return _storage


def set_storage(storage: Optional[KeyValueStorage]):
    global _storage
    _storage = storage
