"""Key-value stores for durable session state."""
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from exam_bot.core.database import Database, get_db

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Keyed get/set of JSON-compatible values."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None if absent or unreadable."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Overwrite the value stored under key."""


def _decode(key: str, raw: Optional[str]) -> Optional[Any]:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Unreadable record for key %r, treating as absent", key)
        return None


class MemoryKeyValueStore(KeyValueStore):
    """In-process store. Values are kept as JSON text, like on disk."""

    def __init__(self):
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> Optional[Any]:
        return _decode(key, self._data.get(key))

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value, ensure_ascii=False)


class SqliteKeyValueStore(KeyValueStore):
    """
    Store backed by the kv_store table.

    Each chat gets its own namespace, so keys only need to be unique per chat.
    """

    def __init__(self, db: Database, namespace: str = "default"):
        self.db = db
        self.namespace = namespace

    async def get(self, key: str) -> Optional[Any]:
        row = await self.db.fetchone(
            "SELECT value FROM kv_store WHERE namespace = ? AND key = ?",
            (self.namespace, key),
        )
        if not row:
            return None
        return _decode(key, row[0])

    async def set(self, key: str, value: Any) -> None:
        query = """
            INSERT INTO kv_store (namespace, key, value)
            VALUES (?, ?, ?)
            ON CONFLICT(namespace, key) DO UPDATE SET
                value = excluded.value,
                updated_at = datetime('now')
        """
        await self.db.execute(
            query, (self.namespace, key, json.dumps(value, ensure_ascii=False))
        )


def store_for_chat(chat_id: int) -> KeyValueStore:
    """Store namespaced to one Telegram chat, on the global database."""
    return SqliteKeyValueStore(get_db(), namespace=str(chat_id))
