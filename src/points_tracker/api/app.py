"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import FastAPI, HTTPException, Request, status

from points_tracker.api.models import (
    AdvisoryView,
    DraftUpdate,
    DraftView,
    LogEntryView,
    LogView,
    SuggestionView,
    SuggestRequest,
)
from points_tracker.app_logging import configure_logging
from points_tracker.containers import AppContainer
from points_tracker.services.advisor import AdvisoryPanel
from points_tracker.services.lookup import NutrientLookupService
from points_tracker.services.points import compute_points
from points_tracker.services.session import TrackerSession


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        try:
            async with state_container.session:
                yield
        finally:
            try:
                await state_container.close_resources()
            except Exception:
                logger.exception("Failed to close resources")

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/message")
    async def message(request: Request) -> dict[str, str | None]:
        """Return the active transient message, if any."""
        return {"message": _session(request).messages.current}

    @app.get("/log")
    async def food_log(request: Request) -> LogView:
        """Return the mirrored food log, newest first."""
        store = _session(request).store
        return LogView(
            loaded=store.loaded,
            loading=store.loading,
            state=store.state.value,
            total_points=store.total_points,
            entries=[
                LogEntryView(
                    id=item.id,
                    name=item.name,
                    quantity=item.quantity,
                    unit=item.unit.value,
                    calories=item.calories,
                    protein=item.protein,
                    carbs=item.carbs,
                    fat=item.fat,
                    fiber=item.fiber,
                    is_zero_point=item.is_zero_point,
                    created_at=item.created_at,
                    points=compute_points(item),
                )
                for item in store.entries
            ],
        )

    @app.delete("/log")
    async def clear_log(request: Request) -> dict[str, str]:
        """Delete every entry in the log."""
        cleared = await _session(request).store.clear()
        return {"status": "ok" if cleared else "failed"}

    @app.delete("/log/{entry_id}")
    async def delete_entry(entry_id: UUID, request: Request) -> dict[str, str]:
        """Delete a single log entry."""
        removed = await _session(request).store.remove(entry_id)
        return {"status": "ok" if removed else "failed"}

    @app.get("/draft")
    async def get_draft(request: Request) -> DraftView:
        """Return the draft entry."""
        return _draft_view(_session(request).lookup)

    @app.put("/draft")
    async def update_draft(update: DraftUpdate, request: Request) -> DraftView:
        """Update the draft's name, quantity or unit."""
        lookup = _session(request).lookup
        if update.unit is not None:
            try:
                lookup.set_unit(update.unit)
            except ValueError as exc:
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail=f"Unknown unit: {update.unit}",
                ) from exc
        if update.name is not None:
            lookup.set_name(update.name)
        if update.quantity is not None:
            lookup.set_quantity(update.quantity)
        return _draft_view(lookup)

    @app.post("/draft/lookup")
    async def lookup_draft(request: Request) -> DraftView:
        """Look up nutrient facts for the draft food."""
        lookup = _session(request).lookup
        await lookup.lookup()
        return _draft_view(lookup)

    @app.post("/draft/commit")
    async def commit_draft(request: Request) -> dict[str, object]:
        """Commit the draft to the food log."""
        item = await _session(request).lookup.commit()
        if item is None:
            return {"status": "rejected", "id": None}
        return {"status": "ok", "id": str(item.id)}

    @app.get("/advisor")
    async def advisor_panel(request: Request) -> AdvisoryView:
        """Return the advisory panel."""
        return _advisory_view(_session(request).advisor.panel)

    @app.delete("/advisor")
    async def close_advisor(request: Request) -> AdvisoryView:
        """Close the advisory panel."""
        advisor = _session(request).advisor
        advisor.close_panel()
        return _advisory_view(advisor.panel)

    @app.post("/advisor/suggest")
    async def suggest_meal(body: SuggestRequest, request: Request) -> AdvisoryView:
        """Suggest meals for a meal type."""
        advisor = _session(request).advisor
        await advisor.suggest_meal(body.meal_type)
        return _advisory_view(advisor.panel)

    @app.post("/advisor/analyze")
    async def analyze_day(request: Request) -> AdvisoryView:
        """Analyze today's log."""
        advisor = _session(request).advisor
        await advisor.analyze_day()
        return _advisory_view(advisor.panel)

    return app


def _session(request: Request) -> TrackerSession:
    container: AppContainer = request.app.state.container
    return container.session


def _draft_view(lookup: NutrientLookupService) -> DraftView:
    draft = lookup.draft
    return DraftView(
        name=draft.name,
        quantity=draft.quantity,
        unit=draft.unit.value,
        calories=draft.calories,
        protein=draft.protein,
        carbs=draft.carbs,
        fat=draft.fat,
        fiber=draft.fiber,
        is_zero_point=draft.is_zero_point,
        lookup_state=lookup.state.value,
        lookup_succeeded=draft.lookup_succeeded,
        preview_points=lookup.preview_points(),
    )


def _advisory_view(panel: AdvisoryPanel) -> AdvisoryView:
    return AdvisoryView(
        is_open=panel.is_open,
        title=panel.title,
        status=panel.status.value,
        body=panel.body,
        suggestions=[
            SuggestionView(name=item.name, description=item.description)
            for item in panel.suggestions
        ],
    )
