"""Domain records shared by the context, suggestion and sync layers."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum


class Category(str, Enum):
    """Wardrobe categories in display order."""

    TOPS = "tops"
    BOTTOMS = "bottoms"
    OUTERWEAR = "outerwear"
    DRESSES = "dresses"
    SHOES = "shoes"
    ACCESSORIES = "accessories"


class Season(str, Enum):
    """Season an item is suitable for; ``all`` matches every season."""

    ALL = "all"
    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"
    WINTER = "winter"


class TimeOfDay(str, Enum):
    DAY = "day"
    NIGHT = "night"


class SuggestionSource(str, Enum):
    AI = "ai"
    FALLBACK = "fallback"


CATEGORY_ORDER: tuple[Category, ...] = tuple(Category)

PREDEFINED_LOOKS: tuple[str, ...] = (
    "Smart Casual",
    "Sport Casual",
    "Business",
    "Streetwear",
    "Date Night",
    "Formal",
)

DEFAULT_ITEM_NAME = "Untitled item"
DEFAULT_LOOK_TYPE = "Look"
UNKNOWN_CITY = "Unknown"


@dataclass(frozen=True, slots=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(slots=True)
class WardrobeItem:
    """A single digitized garment."""

    id: str
    name: str = DEFAULT_ITEM_NAME
    category: Category = Category.TOPS
    style_tags: list[str] = field(default_factory=list)
    season: Season = Season.ALL
    image_data: str = ""
    image_url: str = ""
    image_path: str = ""
    is_favorite: bool = False
    created_at: str = ""

    @property
    def image_ref(self) -> str:
        """Return the best available image reference (remote URL first)."""

        return self.image_url or self.image_data

    @property
    def needs_upload(self) -> bool:
        return bool(self.image_data) and not self.image_url


@dataclass(frozen=True, slots=True)
class OutfitItemSummary:
    """Lightweight copy of an item kept in history after the item may be deleted."""

    id: str
    name: str
    category: str
    image_url: str = ""

    @classmethod
    def from_item(cls, item: WardrobeItem) -> "OutfitItemSummary":
        return cls(
            id=item.id,
            name=item.name,
            category=item.category.value,
            image_url=item.image_ref,
        )


@dataclass(frozen=True, slots=True)
class Context:
    """Ambient context used to pick an outfit; replaced as a whole, never patched."""

    season: Season
    time_of_day: TimeOfDay
    city: str = UNKNOWN_CITY
    weather_label: str = "unknown"
    temperature_c: float | None = None
    source: str = "fallback"
    latitude: float | None = None
    longitude: float | None = None

    def with_time_of_day(self, time_of_day: TimeOfDay) -> "Context":
        """Return a copy with only the time of day overridden."""

        return replace(self, time_of_day=time_of_day)


@dataclass(slots=True)
class OutfitSuggestion:
    """Outfit proposed for a look request; ephemeral until accepted."""

    look_type: str
    source: SuggestionSource
    rationale: str
    outfit: list[WardrobeItem]
    context: Context

    @property
    def is_acceptable(self) -> bool:
        return bool(self.outfit)


@dataclass(slots=True)
class HistoryEntry:
    """Accepted outfit; only ``is_favorite`` changes after creation."""

    id: str
    accepted_at: str
    look_type: str = DEFAULT_LOOK_TYPE
    outfit: list[OutfitItemSummary] = field(default_factory=list)
    context_summary: str = ""
    is_favorite: bool = False


@dataclass(slots=True)
class UserSettings:
    """User-provided AI credentials stored in the local cache."""

    api_key: str = ""
    model: str = "gpt-4.1-mini"
