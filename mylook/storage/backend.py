"""Filesystem storage for item photos."""

from __future__ import annotations

import asyncio
from pathlib import Path


class LocalStorage:
    """Stores binary blobs under a media root and serves them from a base URL."""

    def __init__(self, root: Path, base_url: str = "/media") -> None:
        self._root = root
        self._base_url = base_url.rstrip("/")
        self._root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if not path.is_relative_to(self._root.resolve()):
            raise ValueError(f"Storage key escapes media root: {key}")
        return path

    def url_for(self, key: str) -> str:
        return f"{self._base_url}/{key}"

    async def save(self, key: str, data: bytes) -> str:
        """Write ``data`` under ``key`` and return the key."""

        path = self._resolve(key)
        await asyncio.to_thread(self._write_file, path, data)
        return key

    async def remove(self, key: str) -> None:
        path = self._resolve(key)
        await asyncio.to_thread(path.unlink, missing_ok=True)

    @staticmethod
    def _write_file(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
