"""Resolve season, weather and time-of-day context from device and network signals."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime

from mylook.clients.geo_weather import CurrentWeather, GeoWeatherClient
from mylook.config.settings import Settings
from mylook.context.locator import DeviceLocator, LocationUnavailable
from mylook.errors import NetworkFailure
from mylook.models import UNKNOWN_CITY, Context, Coordinates, Season, TimeOfDay
from mylook.monitoring.logging import log_failure

logger = logging.getLogger(__name__)

_WEATHER_BUCKETS: tuple[tuple[frozenset[int], str], ...] = (
    (frozenset({0}), "clear"),
    (frozenset({1, 2, 3}), "cloudy"),
    (frozenset({45, 48}), "fog"),
    (frozenset({51, 53, 55, 56, 57}), "drizzle"),
    (frozenset({61, 63, 65, 66, 67, 80, 81, 82}), "rain"),
    (frozenset({71, 73, 75, 77, 85, 86}), "snow"),
    (frozenset({95, 96, 99}), "thunderstorm"),
)

_RECOVERABLE = (NetworkFailure, LocationUnavailable, asyncio.TimeoutError)


@dataclass(frozen=True, slots=True)
class ContextTimeouts:
    """Upper bound in seconds for each step of the pipeline."""

    geolocation: float = 8.0
    ip_geolocation: float = 8.0
    weather: float = 10.0
    reverse_geocode: float = 8.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "ContextTimeouts":
        return cls(
            geolocation=settings.geolocation_timeout,
            ip_geolocation=settings.ip_geolocation_timeout,
            weather=settings.weather_timeout,
            reverse_geocode=settings.reverse_geocode_timeout,
        )


def infer_season(month: int) -> Season:
    """Map a calendar month (1-12) to a season, ignoring hemisphere."""

    if month == 12 or month <= 2:
        return Season.WINTER
    if month <= 5:
        return Season.SPRING
    if month <= 8:
        return Season.SUMMER
    return Season.AUTUMN


def infer_time_of_day(hour: int) -> TimeOfDay:
    return TimeOfDay.DAY if 6 <= hour < 19 else TimeOfDay.NIGHT


def weather_code_to_label(code: int | None) -> str:
    if code is None:
        return "unknown"
    for codes, label in _WEATHER_BUCKETS:
        if code in codes:
            return label
    return "mixed"


def fallback_context(now: datetime | None = None) -> Context:
    """Context computed from the local clock only."""

    now = now or datetime.now()
    return Context(
        season=infer_season(now.month),
        time_of_day=infer_time_of_day(now.hour),
    )


async def resolve_context(
    locator: DeviceLocator,
    provider: GeoWeatherClient,
    *,
    now: datetime | None = None,
    timeouts: ContextTimeouts = ContextTimeouts(),
) -> Context:
    """
    Build a best-effort context; never raises.

    Device position is tried first, then IP geolocation. Without coordinates
    the clock-only fallback is returned. With coordinates, weather and
    reverse geocoding are each attempted once and may fail independently.
    """

    baseline = fallback_context(now)
    city: str | None = None
    location_source = "device_gps"

    try:
        coordinates: Coordinates | None = await asyncio.wait_for(locator.locate(), timeouts.geolocation)
    except _RECOVERABLE as exc:
        logger.info("Device location unavailable, trying IP lookup: %s", str(exc) or "timeout")
        coordinates = None

    if coordinates is None:
        try:
            ip_location = await asyncio.wait_for(provider.ip_geolocate(), timeouts.ip_geolocation)
        except _RECOVERABLE as exc:
            log_failure(logger, "location_failed", exc)
            return baseline
        if ip_location.latitude is None or ip_location.longitude is None:
            logger.warning("location_failed: IP lookup returned no coordinates")
            return baseline
        coordinates = Coordinates(latitude=ip_location.latitude, longitude=ip_location.longitude)
        city = ip_location.city or None
        location_source = "ip_fallback"

    weather: CurrentWeather | None = None
    try:
        weather = await asyncio.wait_for(provider.current_weather(coordinates), timeouts.weather)
    except _RECOVERABLE as exc:
        log_failure(
            logger,
            "weather_fetch_failed",
            exc,
            lat=coordinates.latitude,
            lon=coordinates.longitude,
        )

    if not city:
        try:
            city = await asyncio.wait_for(provider.reverse_geocode(coordinates), timeouts.reverse_geocode)
        except _RECOVERABLE as exc:
            log_failure(logger, "reverse_geocode_failed", exc)

    if weather is None:
        return Context(
            season=baseline.season,
            time_of_day=baseline.time_of_day,
            city=city or UNKNOWN_CITY,
            source=f"location_only+{location_source}",
            latitude=coordinates.latitude,
            longitude=coordinates.longitude,
        )

    return Context(
        season=baseline.season,
        time_of_day=baseline.time_of_day,
        city=city or UNKNOWN_CITY,
        weather_label=weather_code_to_label(weather.weather_code),
        temperature_c=weather.temperature_c,
        source=f"weather+{location_source}",
        latitude=coordinates.latitude,
        longitude=coordinates.longitude,
    )
