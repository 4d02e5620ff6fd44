"""High-level business logic tying context, suggestions, history and sync together."""

from __future__ import annotations

import logging
import random
from pathlib import Path

from mylook.clients.geo_weather import GeoWeatherClient
from mylook.clients.openai_client import OpenAIClient
from mylook.config.settings import Settings
from mylook.context.locator import DeviceLocator, locator_from_settings
from mylook.context.pipeline import ContextTimeouts, resolve_context
from mylook.errors import PreconditionFailure
from mylook.imgproc.normalize import ImageNormalizer
from mylook.models import (
    PREDEFINED_LOOKS,
    Context,
    HistoryEntry,
    OutfitSuggestion,
    TimeOfDay,
    UserSettings,
    WardrobeItem,
)
from mylook.remote import RemoteStore, build_remote_store
from mylook.services.wardrobe import ItemDraft, MutationResult, WardrobeService
from mylook.state import AppState
from mylook.storage.repository import LocalCache
from mylook.suggestion.acceptance import accept_suggestion
from mylook.suggestion.analyzer import analyze_item_photo
from mylook.suggestion.decoding import ItemAnalysis
from mylook.suggestion.engine import AiConfig, SuggestionParams, generate_suggestion
from mylook.sync.reconciliation import STATUS_NOT_CONFIGURED, STATUS_SYNCED, Reconciler

logger = logging.getLogger(__name__)


class OutfitAssistant:
    """Owns the application state and exposes every user-facing operation."""

    def __init__(
        self,
        settings: Settings,
        cache: LocalCache,
        *,
        remote: RemoteStore | None,
        geo_client: GeoWeatherClient,
        ai_client: OpenAIClient,
        locator: DeviceLocator,
        rng: random.Random | None = None,
    ) -> None:
        self._settings = settings
        self._cache = cache
        self._remote = remote
        self._geo_client = geo_client
        self._ai_client = ai_client
        self._locator = locator
        self._rng = rng
        self._normalizer = ImageNormalizer(settings.image_max_side, settings.image_quality)
        self._wardrobe_service = WardrobeService(cache, remote, self._normalizer)
        self._reconciler = Reconciler(remote, cache) if remote is not None else None
        self._params = SuggestionParams.from_settings(settings)
        self.state = AppState()

    @classmethod
    def from_settings(cls, settings: Settings) -> "OutfitAssistant":
        """Wire real clients from configuration."""

        return cls(
            settings,
            LocalCache(Path(settings.cache_root)),
            remote=build_remote_store(settings),
            geo_client=GeoWeatherClient(
                ip_geolocation_url=settings.ip_geolocation_url,
                weather_url=settings.weather_url,
                reverse_geocode_url=settings.reverse_geocode_url,
                timeout=settings.weather_timeout,
            ),
            ai_client=OpenAIClient(settings.openai_base_url, timeout=settings.ai_timeout),
            locator=locator_from_settings(settings.latitude, settings.longitude),
        )

    @property
    def ai_config(self) -> AiConfig:
        return AiConfig.from_settings(self.state.settings, self._settings)

    async def close(self) -> None:
        """Release HTTP and database resources."""

        await self._geo_client.close()
        await self._ai_client.close()
        if self._remote is not None:
            await self._remote.close()

    async def start(self) -> None:
        """Load the cache, reconcile with the remote store and resolve context."""

        await self.load_local()
        await self.sync()
        await self.refresh_context()

    async def load_local(self) -> None:
        self.state.wardrobe = await self._cache.load_wardrobe()
        self.state.pending_wardrobe = []
        self.state.history = await self._cache.load_history()
        self.state.settings = await self._cache.load_settings()

    async def sync(self) -> str:
        """Reconcile both collections; the returned status is also kept in state."""

        if self._reconciler is None:
            self.state.sync_status = STATUS_NOT_CONFIGURED
            return self.state.sync_status

        local_wardrobe = await self._cache.load_wardrobe()
        local_history = await self._cache.load_history()
        wardrobe_result, history_result = await self._reconciler.reconcile_all(local_wardrobe, local_history)
        self.state.wardrobe = wardrobe_result.records
        self.state.pending_wardrobe = wardrobe_result.unmigrated
        self.state.history = history_result.records

        problems = [result.status for result in (wardrobe_result, history_result) if result.status != STATUS_SYNCED]
        self.state.sync_status = problems[0] if problems else STATUS_SYNCED
        return self.state.sync_status

    async def refresh_context(self) -> Context:
        self.state.context = await resolve_context(
            self._locator,
            self._geo_client,
            timeouts=ContextTimeouts.from_settings(self._settings),
        )
        return self.state.context

    async def generate(self, look_type: str | None = None, time_override: TimeOfDay | None = None) -> OutfitSuggestion:
        """Suggest an outfit for ``look_type`` in the current context."""

        if not self.state.wardrobe:
            raise PreconditionFailure("Add wardrobe items first.")

        look = (look_type or "").strip() or PREDEFINED_LOOKS[0]
        context = self.state.context
        if time_override is not None:
            context = context.with_time_of_day(time_override)

        suggestion = await generate_suggestion(
            list(self.state.wardrobe),
            look,
            context,
            self.ai_config,
            client=self._ai_client,
            params=self._params,
            rng=self._rng,
        )
        self.state.latest_suggestion = suggestion
        return suggestion

    async def accept(self, favorite: bool = False) -> MutationResult | None:
        """Record the latest suggestion in history; ``None`` when nothing can be accepted."""

        suggestion = self.state.latest_suggestion
        if suggestion is None:
            return None
        entry = accept_suggestion(suggestion, favorite)
        if entry is None:
            return None
        result = await self._wardrobe_service.record_history(self.state, entry)
        self.state.latest_suggestion = None
        return result

    async def add_item(self, draft: ItemDraft) -> MutationResult:
        return await self._wardrobe_service.add_item(self.state, draft)

    async def analyze_item(self, image_data: str) -> ItemAnalysis:
        return await analyze_item_photo(
            image_data,
            self.ai_config,
            client=self._ai_client,
            normalizer=self._normalizer,
        )

    async def toggle_item_favorite(self, item_id: str) -> MutationResult:
        return await self._wardrobe_service.toggle_item_favorite(self.state, item_id)

    async def toggle_history_favorite(self, entry_id: str) -> MutationResult:
        return await self._wardrobe_service.toggle_history_favorite(self.state, entry_id)

    async def delete_item(self, item_id: str) -> MutationResult:
        return await self._wardrobe_service.delete_item(self.state, item_id)

    async def update_settings(self, api_key: str, model: str) -> UserSettings:
        self.state.settings = UserSettings(
            api_key=api_key.strip(),
            model=model.strip() or UserSettings().model,
        )
        await self._cache.save_settings(self.state.settings)
        return self.state.settings

    def history_newest_first(self) -> list[HistoryEntry]:
        return list(reversed(self.state.history))

    def list_wardrobe(
        self,
        query: str = "",
        category: str = "all",
        favorites_only: bool = False,
    ) -> list[WardrobeItem]:
        """Wardrobe items matching a free-text search, a category and the favorite flag."""

        needle = query.strip().lower()
        wanted = category.strip().lower() or "all"
        matches = []
        for item in self.state.wardrobe:
            if wanted != "all" and item.category.value != wanted:
                continue
            if favorites_only and not item.is_favorite:
                continue
            haystack = " ".join([item.name, item.category.value, item.season.value, " ".join(item.style_tags)])
            if needle and needle not in haystack.lower():
                continue
            matches.append(item)
        return matches

    def list_history(self, look: str = "", favorites_only: bool = False) -> list[HistoryEntry]:
        """History newest first, narrowed by look type substring and favorite flag."""

        needle = look.strip().lower()
        return [
            entry
            for entry in self.history_newest_first()
            if (not favorites_only or entry.is_favorite) and needle in entry.look_type.lower()
        ]
