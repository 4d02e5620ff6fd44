"""Simple JSON-backed storage for the local wardrobe and history mirror."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from dataclasses import asdict
from pathlib import Path
from typing import Any, Iterable, TypeVar

from mylook.models import HistoryEntry, UserSettings, WardrobeItem
from mylook.storage.schema import HISTORY_SCHEMA, SETTINGS_CACHE_KEY, WARDROBE_SCHEMA, CollectionSchema

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class LocalCache:
    """Durable key to JSON blob store, one file per key."""

    def __init__(self, root: Path) -> None:
        self._root = root
        self._root.mkdir(parents=True, exist_ok=True)
        self._locks: dict[str, asyncio.Lock] = {}

    def _path_for(self, key: str) -> Path:
        return self._root / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def _lock_for(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    async def read_json(self, key: str, fallback: Any) -> Any:
        """Return the stored value, or ``fallback`` when missing or unreadable."""

        async with self._lock_for(key):
            path = self._path_for(key)
            if not path.exists():
                return fallback
            try:
                data = await asyncio.to_thread(path.read_text, encoding="utf-8")
                return json.loads(data)
            except (OSError, json.JSONDecodeError) as exc:
                logger.warning("Cache entry %s is unreadable, using fallback: %s", key, exc)
                return fallback

    async def persist(self, key: str, value: Any) -> None:
        """Replace the stored value for ``key``."""

        body = json.dumps(value, ensure_ascii=False, indent=2)
        async with self._lock_for(key):
            await asyncio.to_thread(self._write_file, self._path_for(key), body)

    @staticmethod
    def _write_file(path: Path, body: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(body, encoding="utf-8")
        tmp_path.replace(path)

    async def load_collection(self, schema: CollectionSchema[T]) -> list[T]:
        return schema.load_cached(await self.read_json(schema.cache_key, []))

    async def save_collection(self, schema: CollectionSchema[T], records: Iterable[T]) -> None:
        await self.persist(schema.cache_key, schema.dump_cached(records))

    async def load_wardrobe(self) -> list[WardrobeItem]:
        return await self.load_collection(WARDROBE_SCHEMA)

    async def save_wardrobe(self, items: Iterable[WardrobeItem]) -> None:
        await self.save_collection(WARDROBE_SCHEMA, items)

    async def load_history(self) -> list[HistoryEntry]:
        return await self.load_collection(HISTORY_SCHEMA)

    async def save_history(self, entries: Iterable[HistoryEntry]) -> None:
        await self.save_collection(HISTORY_SCHEMA, entries)

    async def load_settings(self) -> UserSettings:
        payload = await self.read_json(SETTINGS_CACHE_KEY, {})
        if not isinstance(payload, dict):
            return UserSettings()
        defaults = UserSettings()
        return UserSettings(
            api_key=str(payload.get("api_key") or "").strip(),
            model=str(payload.get("model") or "").strip() or defaults.model,
        )

    async def save_settings(self, settings: UserSettings) -> None:
        await self.persist(SETTINGS_CACHE_KEY, asdict(settings))
