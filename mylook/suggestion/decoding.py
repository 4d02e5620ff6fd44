"""Decode free-form model output into typed results without raising."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from mylook.errors import ParseFailure
from mylook.models import Category, Season
from mylook.sanitize import (
    normalize_json_text,
    sanitize_category,
    sanitize_name,
    sanitize_season,
    sanitize_tags,
    sanitize_text,
)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class Err:
    error: ParseFailure


class ParsedSelection(BaseModel):
    """Outfit choice returned by the stylist model."""

    model_config = ConfigDict(populate_by_name=True)

    selected_item_ids: list[str] = Field(default_factory=list, alias="selectedItemIds")
    reason: str = ""

    @field_validator("selected_item_ids", mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [str(item) for item in value if item is not None and not isinstance(item, (dict, list))]

    @field_validator("reason", mode="before")
    @classmethod
    def _coerce_reason(cls, value: Any) -> str:
        return value.strip() if isinstance(value, str) else ""


class ItemAnalysis(BaseModel):
    """Garment attributes detected from a photo, already sanitised."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = sanitize_name(None)
    category: Category = Category.TOPS
    style_tags: list[str] = Field(default_factory=list, alias="styleTags")
    season: Season = Season.ALL
    reason: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> str:
        return sanitize_name(value)

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value: Any) -> Category:
        return sanitize_category(value)

    @field_validator("style_tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> list[str]:
        return sanitize_tags(value)

    @field_validator("season", mode="before")
    @classmethod
    def _coerce_season(cls, value: Any) -> Season:
        return sanitize_season(value)

    @field_validator("reason", mode="before")
    @classmethod
    def _coerce_reason(cls, value: Any) -> str:
        return sanitize_text(value) if isinstance(value, str) else ""


SelectionResult = Union[Ok[ParsedSelection], Err]
AnalysisResult = Union[Ok[ItemAnalysis], Err]


def decode_json_object(text: str | None) -> Union[Ok[dict[str, Any]], Err]:
    """Normalise ``text`` and parse it as a JSON object."""

    normalized = normalize_json_text(text)
    if not normalized:
        return Err(ParseFailure("No text response"))
    try:
        parsed = json.loads(normalized)
    except json.JSONDecodeError as exc:
        return Err(ParseFailure(f"Response is not valid JSON: {exc.msg}"))
    if not isinstance(parsed, dict):
        return Err(ParseFailure("Response JSON is not an object"))
    return Ok(parsed)


def decode_selection(text: str | None) -> SelectionResult:
    decoded = decode_json_object(text)
    if isinstance(decoded, Err):
        return decoded
    try:
        return Ok(ParsedSelection.model_validate(decoded.value))
    except ValidationError as exc:
        return Err(ParseFailure(f"Unexpected selection shape: {exc.error_count()} error(s)"))


def decode_item_analysis(text: str | None) -> AnalysisResult:
    decoded = decode_json_object(text)
    if isinstance(decoded, Err):
        return decoded
    try:
        return Ok(ItemAnalysis.model_validate(decoded.value))
    except ValidationError as exc:
        return Err(ParseFailure(f"Unexpected analysis shape: {exc.error_count()} error(s)"))
