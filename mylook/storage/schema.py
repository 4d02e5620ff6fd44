"""Field mapping tables between remote rows, cache payloads and domain records."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Iterable, Mapping, TypeVar

from mylook.models import DEFAULT_LOOK_TYPE, HistoryEntry, OutfitItemSummary, WardrobeItem
from mylook.sanitize import (
    new_id,
    sanitize_bool,
    sanitize_category,
    sanitize_name,
    sanitize_season,
    sanitize_tags,
    sanitize_text,
    utc_now_iso,
)

T = TypeVar("T")


class Direction(str, Enum):
    """Where a field travels: to both stores, or only into the local cache."""

    BOTH = "both"
    LOCAL_ONLY = "local_only"


def _identity(value: Any) -> Any:
    return value


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def _empty() -> str:
    return ""


def _false() -> bool:
    return False


def _empty_list() -> list:
    return []


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One row of a mapping table."""

    attr: str
    column: str
    default: Callable[[], Any]
    coerce: Callable[[Any], Any] = _identity
    dump: Callable[[Any], Any] = _identity
    direction: Direction = Direction.BOTH


@dataclass(frozen=True, slots=True)
class CollectionSchema(Generic[T]):
    """Mapping table plus ordering contract for one collection."""

    name: str
    table: str
    cache_key: str
    order_by: str
    descending: bool
    factory: Callable[..., T]
    fields: tuple[FieldSpec, ...]

    def _build(self, source: Mapping[str, Any], *, remote: bool) -> T:
        values: dict[str, Any] = {}
        for spec in self.fields:
            if remote and spec.direction is Direction.LOCAL_ONLY:
                raw = None
            else:
                raw = source.get(spec.column if remote else spec.attr)
            values[spec.attr] = spec.default() if raw is None else spec.coerce(raw)
        return self.factory(**values)

    def from_row(self, row: Mapping[str, Any]) -> T:
        """Convert a remote row into a domain record, defaulting missing fields."""

        return self._build(row, remote=True)

    def to_row(self, record: T) -> dict[str, Any]:
        """Convert a domain record into a remote row; local-only fields are omitted."""

        return {
            spec.column: spec.dump(getattr(record, spec.attr))
            for spec in self.fields
            if spec.direction is Direction.BOTH
        }

    def from_cache(self, payload: Mapping[str, Any]) -> T:
        return self._build(payload, remote=False)

    def to_cache(self, record: T) -> dict[str, Any]:
        return {spec.attr: spec.dump(getattr(record, spec.attr)) for spec in self.fields}

    def load_cached(self, payload: Any) -> list[T]:
        """Decode a cached list, skipping entries that are not objects."""

        if not isinstance(payload, list):
            return []
        return [self.from_cache(entry) for entry in payload if isinstance(entry, Mapping)]

    def dump_cached(self, records: Iterable[T]) -> list[dict[str, Any]]:
        return [self.to_cache(record) for record in records]


def _outfit_from_raw(value: Any) -> list[OutfitItemSummary]:
    if not isinstance(value, list):
        return []
    summaries: list[OutfitItemSummary] = []
    for entry in value:
        if not isinstance(entry, Mapping) or entry.get("id") is None:
            continue
        summaries.append(
            OutfitItemSummary(
                id=str(entry["id"]),
                name=sanitize_name(entry.get("name")),
                category=sanitize_category(entry.get("category")).value,
                # rows written by the web client use camelCase
                image_url=sanitize_text(entry.get("image_url") or entry.get("imageUrl")),
            ),
        )
    return summaries


def _outfit_to_raw(value: list[OutfitItemSummary]) -> list[dict[str, str]]:
    return [
        {"id": summary.id, "name": summary.name, "category": summary.category, "image_url": summary.image_url}
        for summary in value
    ]


WARDROBE_SCHEMA: CollectionSchema[WardrobeItem] = CollectionSchema(
    name="wardrobe",
    table="wardrobe_items",
    cache_key="mylook.wardrobe",
    order_by="created_at",
    descending=True,
    factory=WardrobeItem,
    fields=(
        FieldSpec("id", "id", new_id, coerce=str),
        FieldSpec("name", "name", lambda: sanitize_name(None), coerce=sanitize_name),
        FieldSpec("category", "category", lambda: sanitize_category(None), sanitize_category, _enum_value),
        FieldSpec("style_tags", "style_tags", _empty_list, coerce=sanitize_tags),
        FieldSpec("season", "season", lambda: sanitize_season(None), sanitize_season, _enum_value),
        FieldSpec("image_data", "image_data", _empty, coerce=sanitize_text, direction=Direction.LOCAL_ONLY),
        FieldSpec("image_url", "image_url", _empty, coerce=sanitize_text),
        FieldSpec("image_path", "image_path", _empty, coerce=sanitize_text),
        FieldSpec("is_favorite", "is_favorite", _false, coerce=sanitize_bool),
        FieldSpec("created_at", "created_at", utc_now_iso, coerce=str),
    ),
)

HISTORY_SCHEMA: CollectionSchema[HistoryEntry] = CollectionSchema(
    name="history",
    table="history_entries",
    cache_key="mylook.history",
    order_by="accepted_at",
    descending=False,
    factory=HistoryEntry,
    fields=(
        FieldSpec("id", "id", new_id, coerce=str),
        FieldSpec("accepted_at", "accepted_at", utc_now_iso, coerce=str),
        FieldSpec(
            "look_type",
            "look_type",
            lambda: DEFAULT_LOOK_TYPE,
            coerce=lambda value: sanitize_name(value, DEFAULT_LOOK_TYPE),
        ),
        FieldSpec("outfit", "outfit", _empty_list, _outfit_from_raw, _outfit_to_raw),
        FieldSpec("context_summary", "context_summary", _empty, coerce=sanitize_text),
        FieldSpec("is_favorite", "is_favorite", _false, coerce=sanitize_bool),
    ),
)

SETTINGS_CACHE_KEY = "mylook.settings"
