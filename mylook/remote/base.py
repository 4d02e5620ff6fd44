"""Interface of the remote record and photo store."""

from __future__ import annotations

import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from mylook.imgproc.normalize import guess_extension


@dataclass(frozen=True, slots=True)
class UploadedImage:
    """Location of a stored photo."""

    path: str
    url: str


def build_object_path(data_url: str, now_ms: int | None = None) -> str:
    """Return ``items/<epoch-ms>_<uuid>.<ext>`` for a new photo."""

    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"items/{stamp}_{uuid.uuid4()}.{guess_extension(data_url)}"


class RemoteStore(ABC):
    """
    CRUD and ordered queries against the ``wardrobe_items`` and
    ``history_entries`` collections plus photo storage.

    Every method raises :class:`mylook.errors.NetworkFailure` when the store
    cannot be reached or rejects the request.
    """

    @abstractmethod
    async def fetch_all(self, table: str, order_by: str, *, descending: bool) -> list[dict[str, Any]]:
        """Return every row of ``table`` ordered by ``order_by``."""

    @abstractmethod
    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        """Insert rows in one request and return the stored representation."""

    @abstractmethod
    async def update(self, table: str, record_id: str, values: Mapping[str, Any]) -> None:
        """Update a single row by id."""

    @abstractmethod
    async def delete(self, table: str, record_id: str) -> None:
        """Delete a single row by id."""

    @abstractmethod
    async def upload_image(self, data_url: str) -> UploadedImage:
        """Store an inline photo and return its path and public URL."""

    @abstractmethod
    async def remove_image(self, path: str) -> None:
        """Remove a stored photo."""

    @abstractmethod
    async def ping(self) -> bool:
        """Return ``True`` when the store answers a trivial query."""

    async def close(self) -> None:
        """Release underlying resources."""
