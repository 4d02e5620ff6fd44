"""Tests for the Supabase REST and Storage client."""

from __future__ import annotations

import json

import httpx
import pytest

from mylook.errors import NetworkFailure
from mylook.remote.supabase import SupabaseRemoteStore


def _store(handler) -> SupabaseRemoteStore:
    return SupabaseRemoteStore(
        "https://project.supabase.test/",
        "anon-key",
        "wardrobe-images",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_fetch_all_orders_and_authenticates() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"id": "t1"}, "junk"])

    store = _store(handler)
    try:
        rows = await store.fetch_all("wardrobe_items", "created_at", descending=True)
    finally:
        await store.close()

    assert rows == [{"id": "t1"}]
    request = seen[0]
    assert request.url.path == "/rest/v1/wardrobe_items"
    assert request.url.params["order"] == "created_at.desc"
    assert request.url.params["select"] == "*"
    assert request.headers["apikey"] == "anon-key"
    assert request.headers["Authorization"] == "Bearer anon-key"


@pytest.mark.asyncio
async def test_insert_asks_for_representation() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Prefer"] == "return=representation"
        return httpx.Response(201, json=json.loads(request.content))

    store = _store(handler)
    try:
        rows = await store.insert("history_entries", [{"id": "h1"}, {"id": "h2"}])
    finally:
        await store.close()

    assert [row["id"] for row in rows] == ["h1", "h2"]


@pytest.mark.asyncio
async def test_update_and_delete_filter_by_id() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    store = _store(handler)
    try:
        await store.update("wardrobe_items", "t1", {"is_favorite": True})
        await store.delete("wardrobe_items", "t1")
    finally:
        await store.close()

    assert [request.method for request in seen] == ["PATCH", "DELETE"]
    assert all(request.url.params["id"] == "eq.t1" for request in seen)
    assert json.loads(seen[0].content) == {"is_favorite": True}


@pytest.mark.asyncio
async def test_upload_image_returns_public_url() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"Key": "wardrobe-images/items/x.png"})

    store = _store(handler)
    try:
        uploaded = await store.upload_image("data:image/png;base64,YWJj")
    finally:
        await store.close()

    assert uploaded.path.startswith("items/")
    assert uploaded.path.endswith(".png")
    assert uploaded.url == f"https://project.supabase.test/storage/v1/object/public/wardrobe-images/{uploaded.path}"
    assert seen[0].url.path == f"/storage/v1/object/wardrobe-images/{uploaded.path}"
    assert seen[0].headers["Content-Type"] == "image/png"
    assert seen[0].content == b"abc"


@pytest.mark.asyncio
async def test_remove_image_sends_prefixes() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    store = _store(handler)
    try:
        await store.remove_image("items/1_a.jpg")
    finally:
        await store.close()

    assert seen[0].method == "DELETE"
    assert json.loads(seen[0].content) == {"prefixes": ["items/1_a.jpg"]}


@pytest.mark.asyncio
async def test_rejected_request_raises_network_failure() -> None:
    store = _store(lambda request: httpx.Response(401, json={"message": "JWT expired"}))
    try:
        with pytest.raises(NetworkFailure) as excinfo:
            await store.fetch_all("wardrobe_items", "created_at", descending=True)
    finally:
        await store.close()

    assert excinfo.value.status_code == 401


def test_missing_credentials_are_rejected() -> None:
    with pytest.raises(RuntimeError):
        SupabaseRemoteStore("", "", "wardrobe-images")
