"""Shared fakes for the remote store and the geo/weather provider."""

from __future__ import annotations

import random
from pathlib import Path
from typing import Any, Mapping, Sequence

import httpx
import pytest

from mylook.clients.geo_weather import CurrentWeather, IpLocation
from mylook.clients.openai_client import OpenAIClient
from mylook.config.settings import Settings, get_settings
from mylook.context.locator import DeviceLocator, UnavailableLocator
from mylook.errors import NetworkFailure
from mylook.logic import OutfitAssistant
from mylook.models import Category, Coordinates, Season, WardrobeItem
from mylook.remote.base import RemoteStore, UploadedImage
from mylook.storage.repository import LocalCache


class InMemoryRemoteStore(RemoteStore):
    """Remote store keeping rows in dictionaries and recording every call."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {"wardrobe_items": [], "history_entries": []}
        self.images: dict[str, str] = {}
        self.calls: list[tuple[Any, ...]] = []
        self.fail_fetch = False
        self.fail_insert_tables: set[str] = set()
        self.fail_insert_ids: set[str] = set()
        self.fail_upload = False
        self.fail_update = False
        self.fail_delete = False
        self.fail_remove_image = False
        self.closed = False

    async def fetch_all(self, table: str, order_by: str, *, descending: bool) -> list[dict[str, Any]]:
        self.calls.append(("fetch_all", table))
        if self.fail_fetch:
            raise NetworkFailure("remote offline")
        rows = [dict(row) for row in self.tables[table]]
        return sorted(rows, key=lambda row: row[order_by], reverse=descending)

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        self.calls.append(("insert", table, len(rows)))
        if table in self.fail_insert_tables or any(row["id"] in self.fail_insert_ids for row in rows):
            raise NetworkFailure("insert rejected", status_code=500)
        stored = [dict(row) for row in rows]
        self.tables[table].extend(stored)
        return [dict(row) for row in stored]

    async def update(self, table: str, record_id: str, values: Mapping[str, Any]) -> None:
        self.calls.append(("update", table, record_id))
        if self.fail_update:
            raise NetworkFailure("update rejected", status_code=500)
        for row in self.tables[table]:
            if row["id"] == record_id:
                row.update(values)

    async def delete(self, table: str, record_id: str) -> None:
        self.calls.append(("delete", table, record_id))
        if self.fail_delete:
            raise NetworkFailure("delete rejected", status_code=500)
        self.tables[table] = [row for row in self.tables[table] if row["id"] != record_id]

    async def upload_image(self, data_url: str) -> UploadedImage:
        self.calls.append(("upload_image",))
        if self.fail_upload:
            raise NetworkFailure("upload rejected", status_code=413)
        path = f"items/{len(self.images) + 1}.jpg"
        self.images[path] = data_url
        return UploadedImage(path=path, url=f"https://cdn.test/{path}")

    async def remove_image(self, path: str) -> None:
        self.calls.append(("remove_image", path))
        if self.fail_remove_image:
            raise NetworkFailure("remove rejected", status_code=500)
        self.images.pop(path, None)

    async def ping(self) -> bool:
        return not self.fail_fetch

    async def close(self) -> None:
        self.closed = True

    def count(self, method: str, table: str | None = None) -> int:
        return sum(1 for call in self.calls if call[0] == method and (table is None or call[1] == table))


class FakeGeoProvider:
    """Stands in for :class:`GeoWeatherClient` with scripted answers."""

    def __init__(
        self,
        *,
        ip_location: IpLocation | None = None,
        weather: CurrentWeather | None = None,
        city: str | None = None,
        fail_ip: bool = False,
        fail_weather: bool = False,
        fail_reverse: bool = False,
    ) -> None:
        self.ip_location = ip_location or IpLocation(latitude=48.85, longitude=2.35, city="Paris")
        self.weather = weather or CurrentWeather(temperature_c=21.0, weather_code=0)
        self.city = city
        self.fail_ip = fail_ip
        self.fail_weather = fail_weather
        self.fail_reverse = fail_reverse
        self.weather_calls: list[Coordinates] = []
        self.reverse_calls: list[Coordinates] = []
        self.closed = False

    async def ip_geolocate(self) -> IpLocation:
        if self.fail_ip:
            raise NetworkFailure("ipapi unavailable")
        return self.ip_location

    async def current_weather(self, coordinates: Coordinates) -> CurrentWeather:
        self.weather_calls.append(coordinates)
        if self.fail_weather:
            raise NetworkFailure("weather unavailable", status_code=503)
        return self.weather

    async def reverse_geocode(self, coordinates: Coordinates) -> str | None:
        self.reverse_calls.append(coordinates)
        if self.fail_reverse:
            raise NetworkFailure("geocoder unavailable")
        return self.city

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self.closed = True


def make_item(
    item_id: str,
    category: Category,
    season: Season = Season.ALL,
    *,
    created_at: str = "2024-01-01T00:00:00+00:00",
    image_data: str = "",
    image_url: str = "",
) -> WardrobeItem:
    return WardrobeItem(
        id=item_id,
        name=item_id.upper(),
        category=category,
        season=season,
        image_data=image_data,
        image_url=image_url,
        created_at=created_at,
    )


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> None:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def remote_store() -> InMemoryRemoteStore:
    return InMemoryRemoteStore()


@pytest.fixture
def cache(tmp_path: Path) -> LocalCache:
    return LocalCache(tmp_path / "cache")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(cache_root=str(tmp_path / "cache"), media_root=str(tmp_path / "media"))


@pytest.fixture
def rng() -> random.Random:
    return random.Random(7)


def make_assistant(
    settings: Settings,
    cache: LocalCache,
    *,
    remote: RemoteStore | None = None,
    provider: FakeGeoProvider | None = None,
    locator: DeviceLocator | None = None,
    ai_handler=None,
    rng: random.Random | None = None,
) -> OutfitAssistant:
    """Assistant wired to in-process fakes instead of network clients."""

    handler = ai_handler or (lambda request: httpx.Response(500, text="AI disabled in tests"))
    return OutfitAssistant(
        settings,
        cache,
        remote=remote,
        geo_client=provider or FakeGeoProvider(fail_ip=True),
        ai_client=OpenAIClient("https://ai.test/v1", transport=httpx.MockTransport(handler)),
        locator=locator or UnavailableLocator(),
        rng=rng or random.Random(3),
    )
