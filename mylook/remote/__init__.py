"""Remote record and photo stores."""

from __future__ import annotations

from pathlib import Path

from mylook.config.settings import Settings
from mylook.remote.base import RemoteStore, UploadedImage, build_object_path
from mylook.remote.sql import SQLRemoteStore
from mylook.remote.supabase import SupabaseRemoteStore
from mylook.storage.backend import LocalStorage


def build_remote_store(settings: Settings) -> RemoteStore | None:
    """Return the configured remote store, or ``None`` for local-only mode."""

    if settings.remote_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_key:
            return None
        return SupabaseRemoteStore(
            settings.supabase_url,
            settings.supabase_key,
            settings.supabase_bucket,
            timeout=settings.remote_timeout,
        )
    if settings.remote_backend == "sql":
        media = LocalStorage(Path(settings.media_root), settings.media_base_url)
        return SQLRemoteStore.from_url(settings.database_url, media)
    return None


__all__ = [
    "RemoteStore",
    "SQLRemoteStore",
    "SupabaseRemoteStore",
    "UploadedImage",
    "build_object_path",
    "build_remote_store",
]
