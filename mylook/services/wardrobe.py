"""Local-first mutations of wardrobe and history records."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace

from mylook.errors import NetworkFailure, RecordNotFound
from mylook.imgproc.normalize import ImageNormalizer
from mylook.models import HistoryEntry, WardrobeItem
from mylook.monitoring.logging import log_failure
from mylook.remote.base import RemoteStore
from mylook.sanitize import (
    new_id,
    sanitize_category,
    sanitize_name,
    sanitize_season,
    sanitize_tags,
    utc_now_iso,
)
from mylook.state import AppState
from mylook.storage.repository import LocalCache
from mylook.storage.schema import HISTORY_SCHEMA, WARDROBE_SCHEMA

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ItemDraft:
    """Unvalidated fields of a garment about to be added."""

    name: str = ""
    category: str = "tops"
    style_tags: list[str] = field(default_factory=list)
    season: str = "all"
    image_data: str = ""


@dataclass(slots=True)
class MutationResult:
    """Record after a mutation plus an optional message about remote trouble."""

    record: WardrobeItem | HistoryEntry
    status: str | None = None


class WardrobeService:
    """
    Applies changes locally first, then mirrors them to the remote store.

    Remote failures are logged and reported in the result status; local
    state is never rolled back.
    """

    def __init__(
        self,
        cache: LocalCache,
        remote: RemoteStore | None = None,
        normalizer: ImageNormalizer | None = None,
    ) -> None:
        self._cache = cache
        self._remote = remote
        self._normalizer = normalizer or ImageNormalizer()

    async def _save_wardrobe(self, state: AppState) -> None:
        await self._cache.save_wardrobe([*state.wardrobe, *state.pending_wardrobe])

    async def add_item(self, state: AppState, draft: ItemDraft) -> MutationResult:
        """Create an item from ``draft`` and put it at the top of the wardrobe."""

        image_data = draft.image_data
        if image_data:
            image_data = await asyncio.to_thread(self._normalizer.resize_data_url, image_data)
        item = WardrobeItem(
            id=new_id(),
            name=sanitize_name(draft.name),
            category=sanitize_category(draft.category),
            style_tags=sanitize_tags(draft.style_tags),
            season=sanitize_season(draft.season),
            image_data=image_data,
            created_at=utc_now_iso(),
        )

        stored = item
        status = None
        if self._remote is not None:
            try:
                if item.needs_upload:
                    uploaded = await self._remote.upload_image(item.image_data)
                    stored = replace(item, image_url=uploaded.url, image_path=uploaded.path)
                inserted = await self._remote.insert(WARDROBE_SCHEMA.table, [WARDROBE_SCHEMA.to_row(stored)])
                if inserted:
                    stored = WARDROBE_SCHEMA.from_row(inserted[0])
            except NetworkFailure as exc:
                log_failure(logger, "wardrobe_insert_failed", exc, category=item.category.value, name=item.name)
                status = "Remote save failed. Saved locally on this device."
                if stored.image_path:
                    await self._discard_upload(stored.image_path, item.id)
                stored = item

        state.wardrobe.insert(0, stored)
        await self._save_wardrobe(state)
        return MutationResult(stored, status)

    async def record_history(self, state: AppState, entry: HistoryEntry) -> MutationResult:
        """Append an accepted look to history."""

        stored = entry
        status = None
        if self._remote is not None:
            try:
                inserted = await self._remote.insert(HISTORY_SCHEMA.table, [HISTORY_SCHEMA.to_row(entry)])
                if inserted:
                    stored = HISTORY_SCHEMA.from_row(inserted[0])
            except NetworkFailure as exc:
                log_failure(logger, "history_insert_failed", exc, look_type=entry.look_type)
                status = "Remote save failed. Saved locally on this device."

        state.history.append(stored)
        await self._cache.save_history(state.history)
        return MutationResult(stored, status)

    async def toggle_item_favorite(self, state: AppState, item_id: str) -> MutationResult:
        item = state.find_item(item_id)
        if item is None:
            raise RecordNotFound(f"Wardrobe item {item_id} not found.")
        item.is_favorite = not item.is_favorite
        await self._save_wardrobe(state)
        status = await self._push_favorite(WARDROBE_SCHEMA.table, item.id, item.is_favorite)
        return MutationResult(item, status)

    async def toggle_history_favorite(self, state: AppState, entry_id: str) -> MutationResult:
        entry = state.find_entry(entry_id)
        if entry is None:
            raise RecordNotFound(f"History entry {entry_id} not found.")
        entry.is_favorite = not entry.is_favorite
        await self._cache.save_history(state.history)
        status = await self._push_favorite(HISTORY_SCHEMA.table, entry.id, entry.is_favorite)
        return MutationResult(entry, status)

    async def _discard_upload(self, path: str, item_id: str) -> None:
        try:
            await self._remote.remove_image(path)
        except NetworkFailure as exc:
            log_failure(logger, "orphan_image_cleanup_failed", exc, item_id=item_id, path=path)

    async def _push_favorite(self, table: str, record_id: str, is_favorite: bool) -> str | None:
        if self._remote is None:
            return None
        try:
            await self._remote.update(table, record_id, {"is_favorite": is_favorite})
        except NetworkFailure as exc:
            log_failure(logger, "favorite_update_failed", exc, table=table, record_id=record_id)
            return "Favorite saved locally; remote update failed."
        return None

    async def delete_item(self, state: AppState, item_id: str) -> MutationResult:
        """Remove an item locally, then its photo and row remotely."""

        item = state.find_item(item_id)
        if item is None:
            raise RecordNotFound(f"Wardrobe item {item_id} not found.")
        state.wardrobe = [candidate for candidate in state.wardrobe if candidate.id != item_id]
        await self._save_wardrobe(state)

        if self._remote is None:
            return MutationResult(item)

        status = None
        if item.image_path:
            try:
                await self._remote.remove_image(item.image_path)
            except NetworkFailure as exc:
                log_failure(logger, "wardrobe_image_delete_failed", exc, item_id=item.id)
                status = "Delete sync failed. Removed local copy."
        try:
            await self._remote.delete(WARDROBE_SCHEMA.table, item.id)
        except NetworkFailure as exc:
            log_failure(logger, "wardrobe_delete_failed", exc, item_id=item.id)
            status = "Delete sync failed. Removed local copy."
        return MutationResult(item, status)
