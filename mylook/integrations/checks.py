"""Connectivity checks for the AI, weather and remote storage providers."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable

from mylook.clients.geo_weather import GeoWeatherClient
from mylook.clients.openai_client import OpenAIClient
from mylook.config.settings import get_settings
from mylook.remote import build_remote_store


@dataclass(slots=True)
class IntegrationCheckResult:
    """Structured result describing the integration check outcome."""

    name: str
    success: bool
    message: str


async def _run_check(
    name: str,
    factory: Callable[[], Awaitable[bool]],
    success_message: str,
) -> IntegrationCheckResult:
    try:
        result = await factory()
    except Exception as exc:  # pragma: no cover - any provider error is a failed check
        return IntegrationCheckResult(name=name, success=False, message=str(exc))

    if result:
        return IntegrationCheckResult(name=name, success=True, message=success_message)
    return IntegrationCheckResult(
        name=name,
        success=False,
        message="Service responded with non-success status.",
    )


async def check_openai() -> IntegrationCheckResult:
    """Ping the OpenAI-compatible API with the configured key."""

    settings = get_settings()
    if not settings.openai_api_key:
        return IntegrationCheckResult(name="OpenAI", success=False, message="OPENAI_API_KEY is not set.")

    client = OpenAIClient(settings.openai_base_url, timeout=settings.ai_timeout)

    async def _ping() -> bool:
        try:
            return await client.ping(settings.openai_api_key)
        finally:
            await client.close()

    return await _run_check(
        name="OpenAI",
        factory=_ping,
        success_message="OpenAI API is reachable.",
    )


async def check_weather() -> IntegrationCheckResult:
    """Ping the weather provider."""

    settings = get_settings()
    client = GeoWeatherClient(
        ip_geolocation_url=settings.ip_geolocation_url,
        weather_url=settings.weather_url,
        reverse_geocode_url=settings.reverse_geocode_url,
        timeout=settings.weather_timeout,
    )

    async def _ping() -> bool:
        try:
            return await client.ping()
        finally:
            await client.close()

    return await _run_check(
        name="Open-Meteo",
        factory=_ping,
        success_message="Weather API is reachable.",
    )


async def check_remote() -> IntegrationCheckResult:
    """Ping the configured remote record store."""

    settings = get_settings()
    store = build_remote_store(settings)
    if store is None:
        return IntegrationCheckResult(name="Remote store", success=True, message="Not configured. Local-only mode.")

    async def _ping() -> bool:
        try:
            return await store.ping()
        finally:
            await store.close()

    return await _run_check(
        name="Remote store",
        factory=_ping,
        success_message=f"{settings.remote_backend} store is reachable.",
    )


async def run_all_checks() -> list[IntegrationCheckResult]:
    """Execute all integration checks concurrently."""

    return list(await asyncio.gather(check_openai(), check_weather(), check_remote()))
