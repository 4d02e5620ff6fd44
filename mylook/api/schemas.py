"""Request and response bodies of the HTTP API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from mylook.models import Context, HistoryEntry, OutfitSuggestion, WardrobeItem


class ItemIn(BaseModel):
    name: str = ""
    category: str = "tops"
    style_tags: list[str] = Field(default_factory=list)
    season: str = "all"
    image_data: str = ""


class AnalyzeIn(BaseModel):
    image_data: str


class ItemOut(BaseModel):
    id: str
    name: str
    category: str
    style_tags: list[str]
    season: str
    image_url: str
    image_path: str
    is_favorite: bool
    created_at: str

    @classmethod
    def from_item(cls, item: WardrobeItem) -> "ItemOut":
        return cls(
            id=item.id,
            name=item.name,
            category=item.category.value,
            style_tags=list(item.style_tags),
            season=item.season.value,
            image_url=item.image_ref,
            image_path=item.image_path,
            is_favorite=item.is_favorite,
            created_at=item.created_at,
        )


class ContextOut(BaseModel):
    city: str
    season: str
    weather_label: str
    temperature_c: float | None
    time_of_day: str
    source: str

    @classmethod
    def from_context(cls, context: Context) -> "ContextOut":
        return cls(
            city=context.city,
            season=context.season.value,
            weather_label=context.weather_label,
            temperature_c=context.temperature_c,
            time_of_day=context.time_of_day.value,
            source=context.source,
        )


class SuggestionIn(BaseModel):
    look_type: str | None = None
    time_override: Literal["auto", "day", "night"] = "auto"


class SuggestionOut(BaseModel):
    look_type: str
    source: str
    rationale: str
    outfit: list[ItemOut]
    context: ContextOut
    acceptable: bool

    @classmethod
    def from_suggestion(cls, suggestion: OutfitSuggestion) -> "SuggestionOut":
        return cls(
            look_type=suggestion.look_type,
            source=suggestion.source.value,
            rationale=suggestion.rationale,
            outfit=[ItemOut.from_item(item) for item in suggestion.outfit],
            context=ContextOut.from_context(suggestion.context),
            acceptable=suggestion.is_acceptable,
        )


class AcceptIn(BaseModel):
    favorite: bool = False


class OutfitItemOut(BaseModel):
    id: str
    name: str
    category: str
    image_url: str


class HistoryOut(BaseModel):
    id: str
    accepted_at: str
    look_type: str
    outfit: list[OutfitItemOut]
    context_summary: str
    is_favorite: bool

    @classmethod
    def from_entry(cls, entry: HistoryEntry) -> "HistoryOut":
        return cls(
            id=entry.id,
            accepted_at=entry.accepted_at,
            look_type=entry.look_type,
            outfit=[
                OutfitItemOut(id=summary.id, name=summary.name, category=summary.category, image_url=summary.image_url)
                for summary in entry.outfit
            ],
            context_summary=entry.context_summary,
            is_favorite=entry.is_favorite,
        )


class ItemMutationOut(BaseModel):
    item: ItemOut
    status: str | None = None


class HistoryMutationOut(BaseModel):
    entry: HistoryOut
    status: str | None = None


class SettingsIn(BaseModel):
    api_key: str = ""
    model: str = ""


class SettingsOut(BaseModel):
    has_api_key: bool
    model: str


class SyncOut(BaseModel):
    status: str
