import asyncio
import json
import logging
from typing import Protocol

import aiosqlite

from config import settings

log = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    async def get_value(self, key: str) -> str | None: ...

    async def set_value(self, key: str, value: str) -> None: ...


def toggle_favorite(favorites: frozenset[str], listing_id: str) -> frozenset[str]:
    if listing_id in favorites:
        return favorites - {listing_id}
    return favorites | {listing_id}


def decode_favorites(blob: str | None) -> frozenset[str]:
    """Decode a stored ``{id: marker}`` object; anything malformed is empty."""
    if not blob:
        return frozenset()
    try:
        data = json.loads(blob)
    except (ValueError, RecursionError):
        log.warning("Stored favorites are not valid JSON, starting empty")
        return frozenset()
    if not isinstance(data, dict):
        log.warning(f"Stored favorites are a {type(data).__name__}, not an object, starting empty")
        return frozenset()
    return frozenset(str(key) for key, marker in data.items() if marker)


def encode_favorites(favorites: frozenset[str]) -> str:
    return json.dumps({listing_id: True for listing_id in sorted(favorites)})


class FavoriteStore:
    """Favorite listing ids, persisted as one blob in a key-value store."""

    def __init__(self, kv: KeyValueStore, key: str | None = None):
        self.kv = kv
        self.key = key or settings.favorites_key
        self._favorites: frozenset[str] = frozenset()
        self._pending: set[asyncio.Task] = set()

    @property
    def favorites(self) -> frozenset[str]:
        return self._favorites

    async def load(self) -> frozenset[str]:
        try:
            blob = await self.kv.get_value(self.key)
        except (aiosqlite.Error, OSError, RuntimeError) as e:
            log.warning(f"Failed to read favorites: {e}")
            blob = None
        self._favorites = decode_favorites(blob)
        log.info(f"Loaded {len(self._favorites)} favorites")
        return self._favorites

    async def save(self, favorites: frozenset[str]) -> None:
        try:
            await self.kv.set_value(self.key, encode_favorites(favorites))
        except (aiosqlite.Error, OSError, RuntimeError) as e:
            log.warning(f"Failed to save favorites: {e}")

    def toggle(self, listing_id: str) -> frozenset[str]:
        """Flip *listing_id* and persist the new set without waiting for the write."""
        self._favorites = toggle_favorite(self._favorites, listing_id)
        task = asyncio.get_running_loop().create_task(self.save(self._favorites))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        log.debug(f"Toggled favorite {listing_id} ({len(self._favorites)} total)")
        return self._favorites

    async def flush(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending)
