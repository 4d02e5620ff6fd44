"""Helpers that coerce loosely-typed input into valid record fields."""

from __future__ import annotations

import random
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Sequence, TypeVar

from mylook.models import DEFAULT_ITEM_NAME, Category, Season

T = TypeVar("T")

MAX_STYLE_TAGS = 8

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)```", re.IGNORECASE)
_FENCED_ANY = re.compile(r"```\s*([\s\S]*?)```")


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def sanitize_name(value: Any, default: str = DEFAULT_ITEM_NAME) -> str:
    if not isinstance(value, str):
        return default
    cleaned = value.strip()
    return cleaned or default


def sanitize_category(value: Any) -> Category:
    """Return a known category, defaulting to ``tops``."""

    if isinstance(value, Category):
        return value
    if not isinstance(value, str):
        return Category.TOPS
    try:
        return Category(value.strip().lower())
    except ValueError:
        return Category.TOPS


def sanitize_season(value: Any) -> Season:
    """Return a known season, defaulting to ``all``."""

    if isinstance(value, Season):
        return value
    if not isinstance(value, str):
        return Season.ALL
    try:
        return Season(value.strip().lower())
    except ValueError:
        return Season.ALL


def sanitize_tags(value: Any) -> list[str]:
    """Trim tags, drop empty ones and keep at most eight."""

    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return []
    tags = [str(tag).strip() for tag in value if tag is not None]
    return [tag for tag in tags if tag][:MAX_STYLE_TAGS]


def sanitize_bool(value: Any) -> bool:
    return bool(value)


def sanitize_text(value: Any) -> str:
    if value is None:
        return ""
    return value.strip() if isinstance(value, str) else str(value)


def dedupe_by_id(items: Iterable[T]) -> list[T]:
    """Keep the first occurrence of every id, preserving order."""

    seen: set[str] = set()
    unique: list[T] = []
    for item in items:
        if item is None:
            continue
        item_id = getattr(item, "id")
        if item_id in seen:
            continue
        seen.add(item_id)
        unique.append(item)
    return unique


def random_pick(items: Sequence[T], rng: random.Random | None = None) -> T | None:
    if not items:
        return None
    return (rng or random).choice(items)


def normalize_json_text(text: str | None) -> str:
    """
    Extract the JSON object from free-form model output.

    Accepts raw JSON, JSON inside a code fence, or JSON surrounded by prose.
    Text with no recognisable object is returned trimmed so that parsing fails
    at the caller.
    """

    if not text:
        return ""
    trimmed = text.strip()
    if trimmed.startswith("{"):
        return trimmed
    fence = _FENCED_JSON.search(trimmed) or _FENCED_ANY.search(trimmed)
    if fence and fence.group(1).strip():
        return fence.group(1).strip()
    first = trimmed.find("{")
    last = trimmed.rfind("}")
    if first >= 0 and last > first:
        return trimmed[first : last + 1]
    return trimmed
