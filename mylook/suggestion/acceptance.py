"""Turn an accepted suggestion into a history entry."""

from __future__ import annotations

from typing import Callable

from mylook.models import UNKNOWN_CITY, Context, HistoryEntry, OutfitItemSummary, OutfitSuggestion
from mylook.sanitize import new_id, utc_now_iso


def summarize_context(context: Context) -> str:
    temperature = "?" if context.temperature_c is None else f"{context.temperature_c:g}"
    return (
        f"{context.city or UNKNOWN_CITY}, {context.season.value}, {context.weather_label}, "
        f"{temperature}C, {context.time_of_day.value}"
    )


def accept_suggestion(
    suggestion: OutfitSuggestion,
    favorite: bool = False,
    *,
    now: Callable[[], str] = utc_now_iso,
    id_factory: Callable[[], str] = new_id,
) -> HistoryEntry | None:
    """Return a new history entry, or ``None`` when the outfit is empty."""

    if not suggestion.is_acceptable:
        return None
    return HistoryEntry(
        id=id_factory(),
        accepted_at=now(),
        look_type=suggestion.look_type,
        outfit=[OutfitItemSummary.from_item(item) for item in suggestion.outfit],
        context_summary=summarize_context(suggestion.context),
        is_favorite=bool(favorite),
    )
