"""Tests for the location, weather and time context pipeline."""

from __future__ import annotations

import asyncio
from datetime import datetime

import pytest

from mylook.clients.geo_weather import CurrentWeather, IpLocation
from mylook.context.locator import DeviceLocator, StaticLocator, UnavailableLocator, locator_from_settings
from mylook.context.pipeline import (
    ContextTimeouts,
    fallback_context,
    infer_season,
    infer_time_of_day,
    resolve_context,
    weather_code_to_label,
)
from mylook.models import Coordinates, Season, TimeOfDay
from conftest import FakeGeoProvider

NOON_IN_JANUARY = datetime(2024, 1, 15, 12, 0)


class _SlowLocator(DeviceLocator):
    async def locate(self) -> Coordinates:
        await asyncio.sleep(5)
        return Coordinates(latitude=1.0, longitude=1.0)


@pytest.mark.parametrize(
    ("month", "season"),
    [
        (12, Season.WINTER),
        (1, Season.WINTER),
        (2, Season.WINTER),
        (3, Season.SPRING),
        (5, Season.SPRING),
        (6, Season.SUMMER),
        (8, Season.SUMMER),
        (9, Season.AUTUMN),
        (11, Season.AUTUMN),
    ],
)
def test_infer_season(month: int, season: Season) -> None:
    assert infer_season(month) is season


def test_infer_time_of_day_boundaries() -> None:
    assert infer_time_of_day(5) is TimeOfDay.NIGHT
    assert infer_time_of_day(6) is TimeOfDay.DAY
    assert infer_time_of_day(18) is TimeOfDay.DAY
    assert infer_time_of_day(19) is TimeOfDay.NIGHT


def test_weather_code_labels() -> None:
    assert weather_code_to_label(0) == "clear"
    assert weather_code_to_label(2) == "cloudy"
    assert weather_code_to_label(63) == "rain"
    assert weather_code_to_label(75) == "snow"
    assert weather_code_to_label(99) == "thunderstorm"
    assert weather_code_to_label(7) == "mixed"
    assert weather_code_to_label(None) == "unknown"


def test_fallback_context_uses_the_clock_only() -> None:
    context = fallback_context(datetime(2024, 7, 1, 22, 0))

    assert context.season is Season.SUMMER
    assert context.time_of_day is TimeOfDay.NIGHT
    assert context.city == "Unknown"
    assert context.temperature_c is None
    assert context.source == "fallback"


def test_locator_from_settings() -> None:
    assert isinstance(locator_from_settings(None, 2.0), UnavailableLocator)
    assert isinstance(locator_from_settings(1.0, 2.0), StaticLocator)


@pytest.mark.asyncio
async def test_device_position_with_weather() -> None:
    provider = FakeGeoProvider(weather=CurrentWeather(temperature_c=3.5, weather_code=71), city="Oslo")

    context = await resolve_context(StaticLocator(59.9, 10.7), provider, now=NOON_IN_JANUARY)

    assert context.source == "weather+device_gps"
    assert context.city == "Oslo"
    assert context.weather_label == "snow"
    assert context.temperature_c == 3.5
    assert context.season is Season.WINTER
    assert context.time_of_day is TimeOfDay.DAY
    assert provider.weather_calls == [Coordinates(latitude=59.9, longitude=10.7)]


@pytest.mark.asyncio
async def test_ip_lookup_used_when_device_position_is_unavailable() -> None:
    provider = FakeGeoProvider(ip_location=IpLocation(latitude=48.85, longitude=2.35, city="Paris"))

    context = await resolve_context(UnavailableLocator(), provider, now=NOON_IN_JANUARY)

    assert context.source == "weather+ip_fallback"
    assert context.city == "Paris"
    assert provider.reverse_calls == []


@pytest.mark.asyncio
async def test_slow_device_position_times_out_to_ip_lookup() -> None:
    provider = FakeGeoProvider()

    context = await resolve_context(
        _SlowLocator(),
        provider,
        now=NOON_IN_JANUARY,
        timeouts=ContextTimeouts(geolocation=0.01),
    )

    assert context.source == "weather+ip_fallback"


@pytest.mark.asyncio
async def test_no_position_at_all_returns_clock_fallback() -> None:
    provider = FakeGeoProvider(fail_ip=True)

    context = await resolve_context(UnavailableLocator(), provider, now=NOON_IN_JANUARY)

    assert context == fallback_context(NOON_IN_JANUARY)
    assert provider.weather_calls == []


@pytest.mark.asyncio
async def test_ip_lookup_without_coordinates_returns_clock_fallback() -> None:
    provider = FakeGeoProvider(ip_location=IpLocation(city="Nowhere"))

    context = await resolve_context(UnavailableLocator(), provider, now=NOON_IN_JANUARY)

    assert context.source == "fallback"


@pytest.mark.asyncio
async def test_weather_failure_keeps_location() -> None:
    provider = FakeGeoProvider(fail_weather=True, city="Berlin")

    context = await resolve_context(StaticLocator(52.5, 13.4), provider, now=NOON_IN_JANUARY)

    assert context.source == "location_only+device_gps"
    assert context.city == "Berlin"
    assert context.weather_label == "unknown"
    assert context.temperature_c is None
    assert context.latitude == 52.5


@pytest.mark.asyncio
async def test_reverse_geocode_failure_leaves_city_unknown() -> None:
    provider = FakeGeoProvider(fail_reverse=True)

    context = await resolve_context(StaticLocator(52.5, 13.4), provider, now=NOON_IN_JANUARY)

    assert context.source == "weather+device_gps"
    assert context.city == "Unknown"
