"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _load_env_file(path: str = ".env") -> None:
    """Populate os.environ from the provided .env file if it exists."""

    env_path = Path(path)
    if not env_path.exists():
        return

    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


def _optional_float(value: str | None) -> float | None:
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError:
        return None


@dataclass(frozen=True, slots=True)
class Settings:
    """Centralised project settings based on OS environment variables."""

    environment: str = "dev"
    log_level: str = "INFO"

    cache_root: str = "data/cache"

    remote_backend: str = "none"
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_bucket: str = "wardrobe-images"
    database_url: str = "sqlite+aiosqlite:///./data/remote.db"
    media_root: str = "data/media"
    media_base_url: str = "/media"

    openai_base_url: str = "https://api.openai.com/v1"
    openai_api_key: str = ""
    openai_model: str = "gpt-4.1-mini"
    openai_fallback_model: str = "gpt-4.1"
    ai_timeout: float = 30.0

    geolocation_timeout: float = 8.0
    ip_geolocation_timeout: float = 8.0
    weather_timeout: float = 10.0
    reverse_geocode_timeout: float = 8.0
    remote_timeout: float = 10.0

    ip_geolocation_url: str = "https://ipapi.co/json/"
    weather_url: str = "https://api.open-meteo.com/v1/forecast"
    reverse_geocode_url: str = "https://geocoding-api.open-meteo.com/v1/reverse"

    latitude: float | None = None
    longitude: float | None = None

    dress_threshold: float = 0.6
    outerwear_max_temp_c: float = 16.0

    image_max_side: int = 1200
    image_quality: int = 82


def _build_settings() -> Settings:
    _load_env_file()

    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        cache_root=os.getenv("MYLOOK_CACHE_ROOT", "data/cache"),
        remote_backend=os.getenv("MYLOOK_REMOTE_BACKEND", "none").strip().lower(),
        supabase_url=os.getenv("SUPABASE_URL", ""),
        supabase_key=os.getenv("SUPABASE_KEY", ""),
        supabase_bucket=os.getenv("SUPABASE_BUCKET", "wardrobe-images"),
        database_url=os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./data/remote.db"),
        media_root=os.getenv("MEDIA_ROOT", "data/media"),
        media_base_url=os.getenv("MEDIA_BASE_URL", "/media"),
        openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"),
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4.1-mini"),
        openai_fallback_model=os.getenv("OPENAI_FALLBACK_MODEL", "gpt-4.1"),
        ai_timeout=float(os.getenv("MYLOOK_AI_TIMEOUT", "30")),
        geolocation_timeout=float(os.getenv("MYLOOK_GEOLOCATION_TIMEOUT", "8")),
        ip_geolocation_timeout=float(os.getenv("MYLOOK_IP_GEOLOCATION_TIMEOUT", "8")),
        weather_timeout=float(os.getenv("MYLOOK_WEATHER_TIMEOUT", "10")),
        reverse_geocode_timeout=float(os.getenv("MYLOOK_REVERSE_GEOCODE_TIMEOUT", "8")),
        remote_timeout=float(os.getenv("MYLOOK_REMOTE_TIMEOUT", "10")),
        ip_geolocation_url=os.getenv("MYLOOK_IP_GEOLOCATION_URL", "https://ipapi.co/json/"),
        weather_url=os.getenv("MYLOOK_WEATHER_URL", "https://api.open-meteo.com/v1/forecast"),
        reverse_geocode_url=os.getenv(
            "MYLOOK_REVERSE_GEOCODE_URL",
            "https://geocoding-api.open-meteo.com/v1/reverse",
        ),
        latitude=_optional_float(os.getenv("MYLOOK_LATITUDE")),
        longitude=_optional_float(os.getenv("MYLOOK_LONGITUDE")),
        dress_threshold=float(os.getenv("MYLOOK_DRESS_THRESHOLD", "0.6")),
        outerwear_max_temp_c=float(os.getenv("MYLOOK_OUTERWEAR_MAX_TEMP_C", "16")),
        image_max_side=int(os.getenv("MYLOOK_IMAGE_MAX_SIDE", "1200")),
        image_quality=int(os.getenv("MYLOOK_IMAGE_QUALITY", "82")),
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance to avoid re-reading configuration."""

    return _build_settings()
