"""Outfit suggestion engine: AI stylist first, deterministic picker as fallback."""

from __future__ import annotations

import json
import logging
import random
from dataclasses import dataclass
from typing import Any, Sequence

from mylook.clients.openai_client import OpenAIClient
from mylook.config.settings import Settings
from mylook.errors import NetworkFailure, PreconditionFailure
from mylook.models import (
    CATEGORY_ORDER,
    Category,
    Context,
    OutfitSuggestion,
    Season,
    SuggestionSource,
    UserSettings,
    WardrobeItem,
)
from mylook.monitoring.logging import log_failure
from mylook.sanitize import dedupe_by_id, random_pick
from mylook.suggestion.decoding import Err, ParsedSelection, decode_selection

logger = logging.getLogger(__name__)

DEFAULT_AI_RATIONALE = "AI-generated style suggestion."


@dataclass(frozen=True, slots=True)
class SuggestionParams:
    """Tunable constants of the fallback picker."""

    dress_threshold: float = 0.6
    outerwear_max_temp_c: float = 16.0
    max_output_tokens: int = 400

    @classmethod
    def from_settings(cls, settings: Settings) -> "SuggestionParams":
        return cls(
            dress_threshold=settings.dress_threshold,
            outerwear_max_temp_c=settings.outerwear_max_temp_c,
        )


@dataclass(frozen=True, slots=True)
class AiConfig:
    """Credential and ordered model list for the AI backend."""

    api_key: str = ""
    model: str = "gpt-4.1-mini"
    fallback_models: tuple[str, ...] = ()

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def backends(self) -> list[str]:
        """Models to try in order, without duplicates or blanks."""

        ordered: list[str] = []
        for model in (self.model, *self.fallback_models):
            if model and model not in ordered:
                ordered.append(model)
        return ordered

    @classmethod
    def from_settings(cls, user_settings: UserSettings, settings: Settings) -> "AiConfig":
        return cls(
            api_key=user_settings.api_key or settings.openai_api_key,
            model=user_settings.model or settings.openai_model,
            fallback_models=(settings.openai_fallback_model,),
        )


def context_payload(context: Context) -> dict[str, Any]:
    return {
        "city": context.city,
        "season": context.season.value,
        "weatherLabel": context.weather_label,
        "temperatureC": context.temperature_c,
        "timeOfDay": context.time_of_day.value,
    }


def build_outfit_prompt(wardrobe: Sequence[WardrobeItem], look_type: str, context: Context) -> str:
    """Compose the stylist prompt; images are never sent."""

    wardrobe_for_prompt = [
        {
            "id": item.id,
            "name": item.name,
            "category": item.category.value,
            "season": item.season.value,
            "styleTags": list(item.style_tags),
        }
        for item in wardrobe
    ]
    return "\n".join(
        [
            "You are a personal stylist.",
            "Choose one outfit from the user wardrobe.",
            "Return ONLY valid JSON:",
            '{"selectedItemIds":["id1","id2"],"reason":"..."}',
            "Constraints:",
            "- include shoes if available",
            "- include accessories if matching",
            "- use season/weather/time context",
            "- match requested look type",
            f"lookType: {look_type}",
            f"context: {json.dumps(context_payload(context), ensure_ascii=False)}",
            f"wardrobe: {json.dumps(wardrobe_for_prompt, ensure_ascii=False)}",
        ],
    )


def resolve_selection(selection: ParsedSelection, wardrobe: Sequence[WardrobeItem]) -> list[WardrobeItem]:
    """Map returned ids onto live items; unknown ids are dropped."""

    by_id = {item.id: item for item in wardrobe}
    resolved = [by_id[item_id] for item_id in selection.selected_item_ids if item_id in by_id]
    return dedupe_by_id(resolved)


def seasonal_pool(wardrobe: Sequence[WardrobeItem], season: Season) -> list[WardrobeItem]:
    return [item for item in wardrobe if item.season in (Season.ALL, season)]


def fallback_suggestion(
    wardrobe: Sequence[WardrobeItem],
    look_type: str,
    context: Context,
    *,
    params: SuggestionParams = SuggestionParams(),
    rng: random.Random | None = None,
) -> OutfitSuggestion:
    """Pick at most one item per category from the seasonal pool."""

    rng = rng or random.Random()
    seasonal = seasonal_pool(wardrobe, context.season)
    pools = {category: [item for item in seasonal if item.category == category] for category in CATEGORY_ORDER}

    picks: list[WardrobeItem | None] = []
    use_dress = bool(pools[Category.DRESSES]) and rng.random() > params.dress_threshold
    if use_dress:
        picks.append(random_pick(pools[Category.DRESSES], rng))
    else:
        picks.append(random_pick(pools[Category.TOPS], rng))
        picks.append(random_pick(pools[Category.BOTTOMS], rng))

    cold_or_unknown = context.temperature_c is None or context.temperature_c < params.outerwear_max_temp_c
    if pools[Category.OUTERWEAR] and cold_or_unknown:
        picks.append(random_pick(pools[Category.OUTERWEAR], rng))

    picks.append(random_pick(pools[Category.SHOES], rng))
    picks.append(random_pick(pools[Category.ACCESSORIES], rng))

    outfit = dedupe_by_id(picks)
    if outfit:
        rationale = (
            f"Generated locally for {look_type}, {context.season.value}, "
            f"{context.weather_label}, {context.time_of_day.value}."
        )
    else:
        rationale = f"No valid outfit for {context.season.value} in the current wardrobe."
    return OutfitSuggestion(
        look_type=look_type,
        source=SuggestionSource.FALLBACK,
        rationale=rationale,
        outfit=outfit,
        context=context,
    )


async def ai_suggestion(
    wardrobe: Sequence[WardrobeItem],
    look_type: str,
    context: Context,
    ai_config: AiConfig,
    *,
    client: OpenAIClient,
    params: SuggestionParams = SuggestionParams(),
) -> OutfitSuggestion | None:
    """Ask the stylist model once; ``None`` means the AI tier failed."""

    try:
        text = await client.create_response(
            api_key=ai_config.api_key,
            model=ai_config.model,
            input=build_outfit_prompt(wardrobe, look_type, context),
            max_output_tokens=params.max_output_tokens,
        )
    except NetworkFailure as exc:
        log_failure(logger, "generate_look_failed", exc, look_type=look_type)
        return None

    decoded = decode_selection(text)
    if isinstance(decoded, Err):
        log_failure(logger, "generate_look_parse_failed", decoded.error, look_type=look_type)
        return None

    outfit = resolve_selection(decoded.value, wardrobe)
    if not outfit:
        logger.warning("generate_look_failed: AI returned no valid items (look_type=%s)", look_type)
        return None

    return OutfitSuggestion(
        look_type=look_type,
        source=SuggestionSource.AI,
        rationale=decoded.value.reason or DEFAULT_AI_RATIONALE,
        outfit=outfit,
        context=context,
    )


async def generate_suggestion(
    wardrobe: Sequence[WardrobeItem],
    look_type: str,
    context: Context,
    ai_config: AiConfig,
    *,
    client: OpenAIClient | None = None,
    params: SuggestionParams = SuggestionParams(),
    rng: random.Random | None = None,
) -> OutfitSuggestion:
    """
    Produce an outfit suggestion for ``look_type``.

    The AI tier runs only when a credential is configured and a client is
    available; any AI failure resolves to the fallback picker. Raises
    :class:`PreconditionFailure` only for an empty wardrobe.
    """

    if not wardrobe:
        raise PreconditionFailure("Add wardrobe items first.")

    if ai_config.enabled and client is not None:
        suggestion = await ai_suggestion(
            wardrobe,
            look_type,
            context,
            ai_config,
            client=client,
            params=params,
        )
        if suggestion is not None:
            return suggestion

    return fallback_suggestion(wardrobe, look_type, context, params=params, rng=rng)
