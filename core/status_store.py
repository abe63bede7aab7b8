"""
Key-value stores for invoice status.

StatusStore is the seam: the in-process map is the default for a single
process and for tests, ValkeyStatusStore backs horizontally-scaled
deployments. Writes are single-key sets, so no locking is needed.
"""

import logging
from abc import ABC, abstractmethod

import redis

logger = logging.getLogger(__name__)


class StatusStore(ABC):
    """Minimal string key-value store."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value, or None if the key doesn't exist."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Overwrite key with value."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete key. Returns True if it existed."""


class InMemoryStatusStore(StatusStore):
    """
    Process-local store backed by a dict.

    Lives as long as the process. Entries are never evicted.
    """

    def __init__(self):
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def __len__(self) -> int:
        return len(self._data)


class ValkeyStatusStore(StatusStore):
    """
    Valkey (Redis-compatible) store shared between processes.

    Usage:
        store = ValkeyStatusStore("redis://localhost:6379/0", expire_seconds=86400)
        store.set("status:order_1", "Paid")
        store.get("status:order_1")  # "Paid"

    Fail-fast: raises on connection failure, never returns fallback values.
    """

    def __init__(self, url: str, key_prefix: str = "checkout:", expire_seconds: int | None = None):
        """
        Initialize Valkey connection.

        Args:
            url: Redis-compatible connection URL (e.g., redis://localhost:6379/0)
            key_prefix: Namespace prepended to every key
            expire_seconds: TTL applied on every write (None for no expiration)

        Raises:
            redis.ConnectionError: If connection fails
        """
        self._client = redis.from_url(url, decode_responses=True)
        self._prefix = key_prefix
        self._expire_seconds = expire_seconds
        # Verify connectivity immediately (fail-fast)
        self._client.ping()
        logger.info("ValkeyStatusStore connected")

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> str | None:
        return self._client.get(self._key(key))

    def set(self, key: str, value: str) -> None:
        if self._expire_seconds is not None:
            self._client.setex(self._key(key), self._expire_seconds, value)
        else:
            self._client.set(self._key(key), value)

    def delete(self, key: str) -> bool:
        return self._client.delete(self._key(key)) > 0

    def close(self) -> None:
        """Close the connection."""
        self._client.close()
        logger.info("ValkeyStatusStore closed")
