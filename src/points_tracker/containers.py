"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import AsyncClient

from points_tracker.adapters.gemini_oracle_client import HttpxGeminiOracleClient
from points_tracker.adapters.openai_oracle_client import OpenAIOracleClient
from points_tracker.adapters.supabase_food_log_repository import (
    SupabaseFoodLogRepository,
)
from points_tracker.adapters.supabase_identity_provider import (
    SupabaseIdentityProvider,
)
from points_tracker.config import Settings
from points_tracker.services.advisor import AdvisorService
from points_tracker.services.food_log import FoodLogStore
from points_tracker.services.lookup import NutrientLookupService
from points_tracker.services.messages import TransientMessageChannel
from points_tracker.services.oracle import OracleService
from points_tracker.services.session import TrackerSession


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session: TrackerSession
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = AsyncClient(
        resolved_settings.supabase_url, resolved_settings.supabase_key
    )
    oracle_client = _build_oracle_client(resolved_settings)
    oracle_service = OracleService(
        client=oracle_client,
        model=(
            resolved_settings.gemini_model
            if resolved_settings.oracle_provider == "gemini"
            else resolved_settings.openai_model
        ),
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    messages = TransientMessageChannel(
        ttl_seconds=resolved_settings.message_ttl_seconds
    )
    store = FoodLogStore(
        repository=SupabaseFoodLogRepository(
            supabase_client, table=resolved_settings.food_log_table
        ),
        messages=messages,
    )
    session = TrackerSession(
        app_id=resolved_settings.app_id,
        identity=SupabaseIdentityProvider(
            supabase_client, user_id=resolved_settings.user_id
        ),
        store=store,
        lookup=NutrientLookupService(oracle_service, store, messages),
        advisor=AdvisorService(oracle_service, store, messages),
        messages=messages,
    )

    async def close_resources() -> None:
        await oracle_client.close()

    return AppContainer(
        settings=resolved_settings,
        session=session,
        close_resources=close_resources,
    )


def _build_oracle_client(
    settings: Settings,
) -> OpenAIOracleClient | HttpxGeminiOracleClient:
    if settings.oracle_provider == "gemini":
        if not settings.gemini_api_key:
            raise ValueError("GEMINI_API_KEY is required for the gemini provider")
        return HttpxGeminiOracleClient.create(
            api_key=settings.gemini_api_key,
            base_url=settings.gemini_base_url,
        )
    if settings.oracle_provider != "openai":
        raise ValueError(f"Unknown oracle provider: {settings.oracle_provider}")
    if not settings.openai_api_key:
        raise ValueError("OPENAI_API_KEY is required for the openai provider")
    return OpenAIOracleClient.create(settings.openai_api_key)
