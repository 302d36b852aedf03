"""
Media store.

Async key-value store for media payloads, namespaced by MediaKind. Each
application instance owns its store; nothing here is a module-level handle.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

from shared.logging import get_logger
from shared.models.media import MediaKind, StoredMedia

logger = get_logger("media_store")


class MediaStore(ABC):
    """Explicit get/put/delete/clear over (kind, key)."""

    @abstractmethod
    async def put(self, media: StoredMedia) -> str:
        """Store media, replacing any existing entry. Returns the key."""

    @abstractmethod
    async def get(self, kind: MediaKind, key: str) -> Optional[StoredMedia]:
        """Return stored media or None."""

    @abstractmethod
    async def delete(self, kind: MediaKind, key: str) -> bool:
        """Delete media. Returns True if something was removed."""

    @abstractmethod
    async def clear(self, kind: Optional[MediaKind] = None) -> None:
        """Remove everything in one namespace, or in all of them."""


class InMemoryMediaStore(MediaStore):
    """
    Process-local store guarded by an asyncio lock.

    Each kind is bounded by an item count and, optionally, a byte budget.
    The oldest entries of the same kind are evicted first. A single payload
    larger than the byte budget is not kept at all.
    """

    def __init__(self, max_items_per_kind: int = 32, max_bytes_per_kind: Optional[int] = None):
        self._items: Dict[Tuple[MediaKind, str], StoredMedia] = {}
        self._lock = asyncio.Lock()
        self.max_items_per_kind = max_items_per_kind
        self.max_bytes_per_kind = max_bytes_per_kind

    async def put(self, media: StoredMedia) -> str:
        async with self._lock:
            self._items.pop((media.kind, media.key), None)
            if self.max_bytes_per_kind is not None and len(media.data) > self.max_bytes_per_kind:
                logger.warning(
                    f"Not storing {media.kind.value} media larger than the store budget",
                    extra={
                        "key": media.key,
                        "size_bytes": len(media.data),
                        "max_bytes_per_kind": self.max_bytes_per_kind,
                    }
                )
                return media.key
            self._evict_oldest(media.kind, incoming_bytes=len(media.data))
            self._items[(media.kind, media.key)] = media
        logger.debug(
            f"Stored {media.kind.value} media",
            extra={"key": media.key, "size_bytes": len(media.data)}
        )
        return media.key

    async def get(self, kind: MediaKind, key: str) -> Optional[StoredMedia]:
        async with self._lock:
            return self._items.get((kind, key))

    async def delete(self, kind: MediaKind, key: str) -> bool:
        async with self._lock:
            return self._items.pop((kind, key), None) is not None

    async def clear(self, kind: Optional[MediaKind] = None) -> None:
        async with self._lock:
            if kind is None:
                self._items.clear()
                return
            for item_key in [k for k in self._items if k[0] == kind]:
                del self._items[item_key]

    def total_bytes(self, kind: MediaKind) -> int:
        """Payload bytes currently held for one kind."""
        return sum(len(m.data) for k, m in self._items.items() if k[0] == kind)

    def _over_budget(self, same_kind: list, total: int, incoming_bytes: int) -> bool:
        if len(same_kind) >= self.max_items_per_kind:
            return True
        return self.max_bytes_per_kind is not None and total + incoming_bytes > self.max_bytes_per_kind

    def _evict_oldest(self, kind: MediaKind, incoming_bytes: int = 0) -> None:
        # Dicts keep insertion order, so the first match is the oldest entry
        same_kind = [k for k in self._items if k[0] == kind]
        total = self.total_bytes(kind)
        while same_kind and self._over_budget(same_kind, total, incoming_bytes):
            oldest = same_kind.pop(0)
            total -= len(self._items.pop(oldest).data)
            logger.info("Evicted stored media", extra={"kind": kind.value, "key": oldest[1]})
