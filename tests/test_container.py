"""Tests for container wiring."""

import asyncio

from menu_advisor.adapters.file_preferences_repository import (
    FilePreferencesRepository,
)
from menu_advisor.config import DEFAULT_SEARCH_CONTEXT
from menu_advisor.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.workflow.advisor is container.advisor_service
    assert container.location_tracker.geocoder is container.advisor_service
    assert container.advisor_service.default_location == DEFAULT_SEARCH_CONTEXT
    assert isinstance(
        container.preferences_service.repository, FilePreferencesRepository
    )
    assert container.workflow.retry_policy.max_attempts == 4
    assert container.workflow.show_error_details is False
    asyncio.run(container.close_resources())


def test_build_container_loads_saved_preferences(settings, tmp_path) -> None:
    (tmp_path / "preferences.json").write_text(
        '{"restrictions": "{\\"keto\\": true}", "theme": "dark"}', encoding="utf-8"
    )

    container = build_container(settings)

    assert container.preferences_service.profile.keto is True
    assert container.preferences_service.theme == "dark"
    asyncio.run(container.close_resources())
