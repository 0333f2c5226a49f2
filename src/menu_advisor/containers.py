"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from menu_advisor.adapters.file_preferences_repository import (
    FilePreferencesRepository,
)
from menu_advisor.adapters.openai_search_client import OpenAISearchClient
from menu_advisor.adapters.supabase_preferences_repository import (
    SupabasePreferencesRepository,
)
from menu_advisor.config import Settings
from menu_advisor.services.advisor import AdvisorService
from menu_advisor.services.location import LocationTracker
from menu_advisor.services.preferences import (
    PreferencesRepository,
    PreferencesService,
)
from menu_advisor.services.retry import RetryPolicy
from menu_advisor.services.workflow import WorkflowController


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    advisor_service: AdvisorService
    preferences_service: PreferencesService
    location_tracker: LocationTracker
    workflow: WorkflowController
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    openai_client = OpenAISearchClient.create(resolved_settings.openai_api_key)
    advisor_service = AdvisorService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
        default_location=resolved_settings.default_search_context,
    )
    preferences_service = PreferencesService(
        _build_preferences_repository(resolved_settings)
    )
    preferences_service.load()
    workflow = WorkflowController(
        advisor=advisor_service,
        retry_policy=RetryPolicy(
            max_attempts=resolved_settings.retry_max_attempts,
            delay_seconds=resolved_settings.retry_delay_seconds,
        ),
        show_error_details=resolved_settings.show_error_details,
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        advisor_service=advisor_service,
        preferences_service=preferences_service,
        location_tracker=LocationTracker(advisor_service),
        workflow=workflow,
        close_resources=close_resources,
    )


def _build_preferences_repository(settings: Settings) -> PreferencesRepository:
    """Use Supabase when configured, otherwise a local JSON file."""
    if settings.uses_supabase:
        supabase_client = create_client(
            settings.supabase_url, settings.supabase_service_key
        )
        return SupabasePreferencesRepository(
            client=supabase_client, owner_id=settings.preferences_owner_id
        )
    return FilePreferencesRepository(Path(settings.preferences_path))
