"""Startup reconciliation between the local cache and the remote store."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Awaitable, Callable, Generic, Sequence, TypeVar

from mylook.errors import MyLookError, NetworkFailure, PartialMigrationFailure
from mylook.models import HistoryEntry, WardrobeItem
from mylook.monitoring.logging import log_failure
from mylook.remote.base import RemoteStore
from mylook.storage.repository import LocalCache
from mylook.storage.schema import HISTORY_SCHEMA, WARDROBE_SCHEMA, CollectionSchema

logger = logging.getLogger(__name__)

T = TypeVar("T")

STATUS_SYNCED = "Remote sync: synced."
STATUS_FAILED = "Remote sync: sync failed. Working locally."
STATUS_NOT_CONFIGURED = "Remote sync: not configured. Using local storage only."


class SyncState(str, Enum):
    """Stages a collection passes through during one reconciliation run."""

    UNSYNCED = "unsynced"
    FETCHING = "fetching"
    EMPTY_REMOTE = "empty_remote"
    POPULATED_REMOTE = "populated_remote"
    MIGRATING = "migrating"
    RECONCILED = "reconciled"
    DEGRADED_LOCAL = "degraded_local"


@dataclass(slots=True)
class SyncResult(Generic[T]):
    """Outcome of reconciling one collection."""

    collection: str
    state: SyncState
    records: list[T]
    status: str
    path: list[SyncState] = field(default_factory=list)
    migration_attempts: int = 0
    migration_error: MyLookError | None = None
    # local records that failed to migrate; cached alongside ``records``
    unmigrated: list[T] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is SyncState.RECONCILED


@dataclass(slots=True)
class _MigrationOutcome(Generic[T]):
    attempts: int = 0
    error: MyLookError | None = None
    unmigrated: list[T] = field(default_factory=list)
    abort: bool = False


class Reconciler:
    """
    Establishes one authoritative view of wardrobe and history.

    Remote data always wins once the store is reachable. Migration of local
    records only happens while the remote collection is empty, so repeated
    runs never duplicate rows. Each collection holds its own lock; the two
    collections may reconcile concurrently.
    """

    def __init__(self, remote: RemoteStore, cache: LocalCache) -> None:
        self._remote = remote
        self._cache = cache
        self._locks: dict[str, asyncio.Lock] = {
            WARDROBE_SCHEMA.name: asyncio.Lock(),
            HISTORY_SCHEMA.name: asyncio.Lock(),
        }

    async def reconcile_wardrobe(self, local: Sequence[WardrobeItem]) -> SyncResult[WardrobeItem]:
        return await self._reconcile(WARDROBE_SCHEMA, local, self._migrate_wardrobe)

    async def reconcile_history(self, local: Sequence[HistoryEntry]) -> SyncResult[HistoryEntry]:
        return await self._reconcile(HISTORY_SCHEMA, local, self._migrate_history)

    async def reconcile_all(
        self,
        wardrobe: Sequence[WardrobeItem],
        history: Sequence[HistoryEntry],
    ) -> tuple[SyncResult[WardrobeItem], SyncResult[HistoryEntry]]:
        wardrobe_result, history_result = await asyncio.gather(
            self.reconcile_wardrobe(wardrobe),
            self.reconcile_history(history),
        )
        return wardrobe_result, history_result

    async def _fetch(self, schema: CollectionSchema[T]) -> list[T]:
        rows = await self._remote.fetch_all(schema.table, schema.order_by, descending=schema.descending)
        return [schema.from_row(row) for row in rows]

    async def _reconcile(
        self,
        schema: CollectionSchema[T],
        local: Sequence[T],
        migrate: Callable[[Sequence[T]], Awaitable[_MigrationOutcome[T]]],
    ) -> SyncResult[T]:
        async with self._locks[schema.name]:
            path = [SyncState.UNSYNCED, SyncState.FETCHING]

            def degraded(status: str, error: MyLookError | None = None, attempts: int = 0) -> SyncResult[T]:
                path.append(SyncState.DEGRADED_LOCAL)
                return SyncResult(
                    collection=schema.name,
                    state=SyncState.DEGRADED_LOCAL,
                    records=list(local),
                    status=status,
                    path=path,
                    migration_attempts=attempts,
                    migration_error=error,
                )

            try:
                remote_records = await self._fetch(schema)
            except NetworkFailure as exc:
                log_failure(logger, "remote_sync_failed", exc, collection=schema.name)
                return degraded(STATUS_FAILED)

            path.append(SyncState.POPULATED_REMOTE if remote_records else SyncState.EMPTY_REMOTE)

            outcome: _MigrationOutcome[T] = _MigrationOutcome()
            if not remote_records and local:
                path.append(SyncState.MIGRATING)
                logger.info("Migrating %d local %s record(s) to the remote store", len(local), schema.name)
                outcome = await migrate(local)
                if outcome.abort:
                    return degraded(
                        f"Remote sync: {schema.name} migration failed. Working locally.",
                        outcome.error,
                        outcome.attempts,
                    )

            try:
                remote_records = await self._fetch(schema)
            except NetworkFailure as exc:
                log_failure(logger, "remote_sync_failed", exc, collection=schema.name)
                return degraded(STATUS_FAILED, outcome.error, outcome.attempts)

            try:
                # un-migrated records stay cached until the next sync attempt
                await self._cache.save_collection(schema, [*remote_records, *outcome.unmigrated])
            except OSError as exc:
                log_failure(logger, "cache_write_failed", exc, collection=schema.name)

            status = STATUS_SYNCED
            if outcome.unmigrated:
                status = f"Remote sync: synced, {len(outcome.unmigrated)} {schema.name} record(s) not migrated."
            path.append(SyncState.RECONCILED)
            return SyncResult(
                collection=schema.name,
                state=SyncState.RECONCILED,
                records=remote_records,
                status=status,
                path=path,
                migration_attempts=outcome.attempts,
                migration_error=outcome.error,
                unmigrated=list(outcome.unmigrated),
            )

    async def _discard_upload(self, path: str, item_id: str) -> None:
        try:
            await self._remote.remove_image(path)
        except NetworkFailure as exc:
            log_failure(logger, "orphan_image_cleanup_failed", exc, item_id=item_id, path=path)

    async def _migrate_wardrobe(self, local: Sequence[WardrobeItem]) -> _MigrationOutcome[WardrobeItem]:
        outcome: _MigrationOutcome[WardrobeItem] = _MigrationOutcome()
        failures: dict[str, str] = {}
        for item in local:
            outcome.attempts += 1
            uploaded_path = ""
            try:
                migrated = item
                if item.needs_upload:
                    uploaded = await self._remote.upload_image(item.image_data)
                    uploaded_path = uploaded.path
                    migrated = replace(item, image_url=uploaded.url, image_path=uploaded.path)
                await self._remote.insert(WARDROBE_SCHEMA.table, [WARDROBE_SCHEMA.to_row(migrated)])
            except NetworkFailure as exc:
                log_failure(logger, "wardrobe_migration_failed", exc, item_id=item.id)
                failures[item.id] = str(exc)
                outcome.unmigrated.append(item)
                if uploaded_path:
                    await self._discard_upload(uploaded_path, item.id)
        if failures:
            outcome.error = PartialMigrationFailure(WARDROBE_SCHEMA.name, failures)
        return outcome

    async def _migrate_history(self, local: Sequence[HistoryEntry]) -> _MigrationOutcome[HistoryEntry]:
        rows = [HISTORY_SCHEMA.to_row(entry) for entry in local]
        try:
            await self._remote.insert(HISTORY_SCHEMA.table, rows)
        except NetworkFailure as exc:
            log_failure(logger, "history_migration_failed", exc, entries=len(rows))
            return _MigrationOutcome(attempts=1, error=exc, abort=True)
        return _MigrationOutcome(attempts=1)
