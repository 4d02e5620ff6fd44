"""Async clients for IP geolocation, current weather and reverse geocoding."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

import httpx
from pydantic import BaseModel, ValidationError

from mylook.errors import NetworkFailure
from mylook.models import Coordinates

logger = logging.getLogger(__name__)


class IpLocation(BaseModel):
    """Subset of the ipapi.co response."""

    latitude: float | None = None
    longitude: float | None = None
    city: str | None = None


class _Current(BaseModel):
    temperature_2m: float | None = None
    weather_code: int | None = None


class _ForecastResponse(BaseModel):
    current: _Current = _Current()


class _ReverseResult(BaseModel):
    name: str | None = None


class _ReverseResponse(BaseModel):
    results: list[_ReverseResult] = []


@dataclass(frozen=True, slots=True)
class CurrentWeather:
    temperature_c: float | None
    weather_code: int | None


class GeoWeatherClient:
    """Wraps Open-Meteo forecast/geocoding and ipapi.co lookups."""

    def __init__(
        self,
        *,
        ip_geolocation_url: str,
        weather_url: str,
        reverse_geocode_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._ip_geolocation_url = ip_geolocation_url
        self._weather_url = weather_url
        self._reverse_geocode_url = reverse_geocode_url
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self) -> None:
        """Close the underlying HTTP client."""

        await self._client.aclose()

    async def _get_json(self, url: str, params: Mapping[str, Any] | None = None) -> Any:
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as exc:
            raise NetworkFailure(f"Request to {url} timed out.") from exc
        except httpx.HTTPStatusError as exc:
            raise NetworkFailure(
                f"{url} returned {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise NetworkFailure(f"Request to {url} failed: {exc}") from exc

    async def ip_geolocate(self) -> IpLocation:
        payload = await self._get_json(self._ip_geolocation_url)
        try:
            return IpLocation.model_validate(payload)
        except ValidationError as exc:
            raise NetworkFailure("IP geolocation returned an unexpected payload.") from exc

    async def current_weather(self, coordinates: Coordinates) -> CurrentWeather:
        payload = await self._get_json(
            self._weather_url,
            params={
                "latitude": coordinates.latitude,
                "longitude": coordinates.longitude,
                "current": "temperature_2m,weather_code",
                "timezone": "auto",
            },
        )
        try:
            forecast = _ForecastResponse.model_validate(payload)
        except ValidationError as exc:
            raise NetworkFailure("Weather provider returned an unexpected payload.") from exc
        return CurrentWeather(
            temperature_c=forecast.current.temperature_2m,
            weather_code=forecast.current.weather_code,
        )

    async def reverse_geocode(self, coordinates: Coordinates) -> str | None:
        """Return the nearest place name, or ``None`` when nothing matches."""

        payload = await self._get_json(
            self._reverse_geocode_url,
            params={
                "latitude": coordinates.latitude,
                "longitude": coordinates.longitude,
                "language": "en",
                "format": "json",
            },
        )
        try:
            parsed = _ReverseResponse.model_validate(payload)
        except ValidationError as exc:
            raise NetworkFailure("Reverse geocoding returned an unexpected payload.") from exc
        if parsed.results and parsed.results[0].name:
            return parsed.results[0].name
        return None

    async def ping(self) -> bool:
        """Return ``True`` if the weather provider answers for a fixed location."""

        await self.current_weather(Coordinates(latitude=0.0, longitude=0.0))
        return True
