"""FastAPI entrypoint and HTTP routes."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from mylook.api.schemas import (
    AcceptIn,
    AnalyzeIn,
    ContextOut,
    HistoryMutationOut,
    HistoryOut,
    ItemIn,
    ItemMutationOut,
    ItemOut,
    SettingsIn,
    SettingsOut,
    SuggestionIn,
    SuggestionOut,
    SyncOut,
)
from mylook.config.settings import get_settings
from mylook.errors import NetworkFailure, ParseFailure, PreconditionFailure, RecordNotFound
from mylook.logic import OutfitAssistant
from mylook.models import TimeOfDay
from mylook.monitoring.logging import configure_logging
from mylook.services.wardrobe import ItemDraft
from mylook.suggestion.decoding import ItemAnalysis


def _default_factory() -> OutfitAssistant:
    return OutfitAssistant.from_settings(get_settings())


def get_assistant(request: Request) -> OutfitAssistant:
    return request.app.state.assistant


def create_app(assistant_factory: Callable[[], OutfitAssistant] | None = None) -> FastAPI:
    """Initialise the FastAPI application."""

    factory = assistant_factory or _default_factory

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        assistant = factory()
        await assistant.start()
        app.state.assistant = assistant
        try:
            yield
        finally:
            await assistant.close()

    settings = get_settings()
    app = FastAPI(
        title="MyLook API",
        version="0.1.0",
        docs_url="/docs" if settings.environment != "prod" else None,
        redoc_url="/redoc" if settings.environment != "prod" else None,
        lifespan=lifespan,
    )

    @app.exception_handler(RecordNotFound)
    async def _not_found(request: Request, exc: RecordNotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(PreconditionFailure)
    async def _precondition(request: Request, exc: PreconditionFailure) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(NetworkFailure)
    @app.exception_handler(ParseFailure)
    async def _upstream(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": f"AI analysis failed: {exc}"})

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple health endpoint used for readiness probes."""

        return {"status": "ok"}

    @app.get("/context", tags=["context"])
    async def read_context(assistant: OutfitAssistant = Depends(get_assistant)) -> ContextOut:
        return ContextOut.from_context(assistant.state.context)

    @app.post("/context/refresh", tags=["context"])
    async def refresh_context(assistant: OutfitAssistant = Depends(get_assistant)) -> ContextOut:
        return ContextOut.from_context(await assistant.refresh_context())

    @app.get("/wardrobe", tags=["wardrobe"])
    async def list_wardrobe(
        q: str = Query("", max_length=200),
        category: str = Query("all"),
        favorites_only: bool = Query(False),
        assistant: OutfitAssistant = Depends(get_assistant),
    ) -> list[ItemOut]:
        items = assistant.list_wardrobe(q, category, favorites_only)
        return [ItemOut.from_item(item) for item in items]

    @app.post("/wardrobe", tags=["wardrobe"], status_code=201)
    async def add_item(body: ItemIn, assistant: OutfitAssistant = Depends(get_assistant)) -> ItemMutationOut:
        result = await assistant.add_item(ItemDraft(**body.model_dump()))
        return ItemMutationOut(item=ItemOut.from_item(result.record), status=result.status)

    @app.post("/wardrobe/analyze", tags=["wardrobe"])
    async def analyze_item(body: AnalyzeIn, assistant: OutfitAssistant = Depends(get_assistant)) -> ItemAnalysis:
        return await assistant.analyze_item(body.image_data)

    @app.post("/wardrobe/{item_id}/favorite", tags=["wardrobe"])
    async def toggle_item_favorite(
        item_id: str,
        assistant: OutfitAssistant = Depends(get_assistant),
    ) -> ItemMutationOut:
        result = await assistant.toggle_item_favorite(item_id)
        return ItemMutationOut(item=ItemOut.from_item(result.record), status=result.status)

    @app.delete("/wardrobe/{item_id}", tags=["wardrobe"])
    async def delete_item(item_id: str, assistant: OutfitAssistant = Depends(get_assistant)) -> ItemMutationOut:
        result = await assistant.delete_item(item_id)
        return ItemMutationOut(item=ItemOut.from_item(result.record), status=result.status)

    @app.post("/suggestions", tags=["suggestions"])
    async def generate(body: SuggestionIn, assistant: OutfitAssistant = Depends(get_assistant)) -> SuggestionOut:
        override = None if body.time_override == "auto" else TimeOfDay(body.time_override)
        suggestion = await assistant.generate(body.look_type, override)
        return SuggestionOut.from_suggestion(suggestion)

    @app.get("/history", tags=["history"])
    async def list_history(
        look: str = Query("", max_length=200),
        favorites_only: bool = Query(False),
        assistant: OutfitAssistant = Depends(get_assistant),
    ) -> list[HistoryOut]:
        return [HistoryOut.from_entry(entry) for entry in assistant.list_history(look, favorites_only)]

    @app.post("/history", tags=["history"], status_code=201)
    async def accept(body: AcceptIn, assistant: OutfitAssistant = Depends(get_assistant)) -> HistoryMutationOut:
        result = await assistant.accept(body.favorite)
        if result is None:
            raise PreconditionFailure("No acceptable suggestion to save.")
        return HistoryMutationOut(entry=HistoryOut.from_entry(result.record), status=result.status)

    @app.post("/history/{entry_id}/favorite", tags=["history"])
    async def toggle_history_favorite(
        entry_id: str,
        assistant: OutfitAssistant = Depends(get_assistant),
    ) -> HistoryMutationOut:
        result = await assistant.toggle_history_favorite(entry_id)
        return HistoryMutationOut(entry=HistoryOut.from_entry(result.record), status=result.status)

    @app.get("/settings", tags=["settings"])
    async def read_settings(assistant: OutfitAssistant = Depends(get_assistant)) -> SettingsOut:
        current = assistant.state.settings
        return SettingsOut(has_api_key=bool(current.api_key), model=current.model)

    @app.put("/settings", tags=["settings"])
    async def save_settings(body: SettingsIn, assistant: OutfitAssistant = Depends(get_assistant)) -> SettingsOut:
        saved = await assistant.update_settings(body.api_key, body.model)
        return SettingsOut(has_api_key=bool(saved.api_key), model=saved.model)

    @app.post("/sync", tags=["system"])
    async def sync(assistant: OutfitAssistant = Depends(get_assistant)) -> SyncOut:
        return SyncOut(status=await assistant.sync())

    @app.get("/sync", tags=["system"])
    async def sync_status(assistant: OutfitAssistant = Depends(get_assistant)) -> SyncOut:
        return SyncOut(status=assistant.state.sync_status)

    return app


app = create_app()
