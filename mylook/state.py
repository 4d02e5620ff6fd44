"""Explicit application state owned by the top-level assistant."""

from __future__ import annotations

from dataclasses import dataclass, field

from mylook.context.pipeline import fallback_context
from mylook.models import Context, HistoryEntry, OutfitSuggestion, UserSettings, WardrobeItem


@dataclass(slots=True)
class AppState:
    """Wardrobe, history and session data for one running assistant."""

    wardrobe: list[WardrobeItem] = field(default_factory=list)
    # items that failed to migrate; cached but not shown until the next sync
    pending_wardrobe: list[WardrobeItem] = field(default_factory=list)
    history: list[HistoryEntry] = field(default_factory=list)
    settings: UserSettings = field(default_factory=UserSettings)
    context: Context = field(default_factory=fallback_context)
    latest_suggestion: OutfitSuggestion | None = None
    sync_status: str = "Remote sync: not started."

    def find_item(self, item_id: str) -> WardrobeItem | None:
        return next((item for item in self.wardrobe if item.id == item_id), None)

    def find_entry(self, entry_id: str) -> HistoryEntry | None:
        return next((entry for entry in self.history if entry.id == entry_id), None)
