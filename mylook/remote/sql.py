"""Remote store backed by an async SQLAlchemy database and a media directory."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from mylook.db.models import MODELS_BY_TABLE, Base
from mylook.db.session import create_engine, create_session_factory, init_db
from mylook.errors import NetworkFailure
from mylook.imgproc.normalize import data_url_to_bytes
from mylook.remote.base import RemoteStore, UploadedImage, build_object_path
from mylook.storage.backend import LocalStorage

logger = logging.getLogger(__name__)


class SQLRemoteStore(RemoteStore):
    """Self-hosted alternative to Supabase used for offline setups."""

    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: async_sessionmaker[AsyncSession],
        media: LocalStorage,
    ) -> None:
        self._engine = engine
        self._session_factory = session_factory
        self._media = media
        self._initialised = False

    @classmethod
    def from_url(cls, database_url: str, media: LocalStorage) -> "SQLRemoteStore":
        engine = create_engine(database_url)
        return cls(engine, create_session_factory(engine), media)

    async def _ensure_schema(self) -> None:
        if not self._initialised:
            await init_db(self._engine)
            self._initialised = True

    @staticmethod
    def _model_for(table: str) -> type[Base]:
        try:
            return MODELS_BY_TABLE[table]
        except KeyError as exc:
            raise NetworkFailure(f"Unknown table {table}.", status_code=404) from exc

    @staticmethod
    def _as_row(record: Base) -> dict[str, Any]:
        return {column.key: getattr(record, column.key) for column in record.__table__.columns}

    async def fetch_all(self, table: str, order_by: str, *, descending: bool) -> list[dict[str, Any]]:
        model = self._model_for(table)
        column = getattr(model, order_by)
        stmt = select(model).order_by(column.desc() if descending else column.asc())
        try:
            await self._ensure_schema()
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [self._as_row(record) for record in result.scalars().all()]
        except SQLAlchemyError as exc:
            raise NetworkFailure(f"Query on {table} failed: {exc}") from exc

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        if not rows:
            return []
        model = self._model_for(table)
        records = [model(**dict(row)) for row in rows]
        try:
            await self._ensure_schema()
            async with self._session_factory() as session:
                session.add_all(records)
                await session.commit()
                return [self._as_row(record) for record in records]
        except SQLAlchemyError as exc:
            raise NetworkFailure(f"Insert into {table} failed: {exc}") from exc

    async def update(self, table: str, record_id: str, values: Mapping[str, Any]) -> None:
        model = self._model_for(table)
        stmt = update(model).where(model.id == record_id).values(**dict(values))
        try:
            await self._ensure_schema()
            async with self._session_factory() as session:
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as exc:
            raise NetworkFailure(f"Update of {table}/{record_id} failed: {exc}") from exc

    async def delete(self, table: str, record_id: str) -> None:
        model = self._model_for(table)
        stmt = delete(model).where(model.id == record_id)
        try:
            await self._ensure_schema()
            async with self._session_factory() as session:
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as exc:
            raise NetworkFailure(f"Delete of {table}/{record_id} failed: {exc}") from exc

    async def upload_image(self, data_url: str) -> UploadedImage:
        try:
            data, _ = data_url_to_bytes(data_url)
            path = await self._media.save(build_object_path(data_url), data)
        except (ValueError, OSError) as exc:
            raise NetworkFailure(f"Photo cannot be stored: {exc}") from exc
        return UploadedImage(path=path, url=self._media.url_for(path))

    async def remove_image(self, path: str) -> None:
        try:
            await self._media.remove(path)
        except (ValueError, OSError) as exc:
            raise NetworkFailure(f"Photo {path} cannot be removed: {exc}") from exc

    async def ping(self) -> bool:
        await self.fetch_all("wardrobe_items", "created_at", descending=True)
        return True

    async def close(self) -> None:
        await self._engine.dispose()
