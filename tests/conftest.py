"""Shared test fixtures."""

import json
from dataclasses import dataclass, field

import pytest

from menu_advisor.config import Settings
from menu_advisor.containers import AppContainer
from menu_advisor.services.advisor import AdvisorService, GroundedModelClient
from menu_advisor.services.location import LocationTracker
from menu_advisor.services.preferences import (
    PreferencesRepository,
    PreferencesService,
)
from menu_advisor.services.retry import RetryPolicy
from menu_advisor.services.workflow import WorkflowController

LOOKUP_RESPONSE = (
    "Here is what I found:\n```json\n"
    + json.dumps(
        {
            "restaurant": {
                "name": "Joe's Diner",
                "address": "12 Main St, Atlanta, GA",
                "website": "https://joes.example",
            },
            "menu": [
                {
                    "category": "Mains",
                    "items": [
                        {"name": "Grilled Chicken", "description": "With rice"},
                        {"name": "Bacon Burger", "description": "Brioche bun"},
                    ],
                }
            ],
        }
    )
    + "\n```\nLet me know if you need anything else."
)

RECOMMENDATION_RESPONSE = json.dumps(
    {
        "safe": [
            {
                "name": "Grilled Chicken",
                "description": "With rice",
                "reason": "Lean protein",
                "url": "https://joes.example/menu",
            },
            {"name": "Baked Cod", "description": "Lemon", "reason": "White fish"},
        ],
        "caution": [],
        "avoid": [
            {"name": "Bacon Burger", "description": "Brioche bun", "reason": "Fatty"}
        ],
        "ingredientsFound": False,
    }
)

NEARBY_RESPONSE = json.dumps(
    [
        {"name": "Joe's Diner", "address": "12 Main St, Atlanta, GA"},
        {"name": "Green Bowl", "address": "4 Elm St, Atlanta, GA"},
    ]
)


@dataclass
class ScriptedModelClient(GroundedModelClient):
    """Fake model client replaying canned responses or raising errors."""

    responses: list[object] = field(default_factory=list)
    calls: list[dict[str, object]] = field(default_factory=list)

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        image_data_url: str | None = None,
        web_search: bool = True,
    ) -> str:
        self.calls.append(
            {
                "model": model,
                "prompt": prompt,
                "image_data_url": image_data_url,
                "web_search": web_search,
            }
        )
        if not self.responses:
            raise AssertionError("Unexpected model call")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return str(response)


@dataclass
class RecordingSleep:
    """Sleep replacement that records delays instead of waiting."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@dataclass
class InMemoryPreferencesRepository(PreferencesRepository):
    """In-memory preference store for tests."""

    records: dict[str, str] = field(default_factory=dict)
    writes: list[str] = field(default_factory=list)

    def get(self, key: str) -> str | None:
        return self.records.get(key)

    def set(self, key: str, value: str) -> None:
        self.records[key] = value
        self.writes.append(key)


def build_advisor(client: GroundedModelClient) -> AdvisorService:
    return AdvisorService(
        client=client, model="gpt-5.2", reasoning_effort="low", store=False
    )


def build_controller(
    client: ScriptedModelClient, sleep: RecordingSleep | None = None
) -> WorkflowController:
    return WorkflowController(
        advisor=build_advisor(client),
        retry_policy=RetryPolicy(
            max_attempts=4, delay_seconds=1.0, sleep=sleep or RecordingSleep()
        ),
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        openai_api_key="openai-key",
        preferences_path=str(tmp_path / "preferences.json"),
        environment="test",
    )


@pytest.fixture
def model_client() -> ScriptedModelClient:
    return ScriptedModelClient()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def preferences_repository() -> InMemoryPreferencesRepository:
    return InMemoryPreferencesRepository()


@pytest.fixture
def container(
    settings: Settings,
    model_client: ScriptedModelClient,
    sleep: RecordingSleep,
    preferences_repository: InMemoryPreferencesRepository,
) -> AppContainer:
    advisor_service = build_advisor(model_client)
    preferences_service = PreferencesService(preferences_repository)
    preferences_service.load()
    workflow = WorkflowController(
        advisor=advisor_service,
        retry_policy=RetryPolicy(max_attempts=2, delay_seconds=0.0, sleep=sleep),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        advisor_service=advisor_service,
        preferences_service=preferences_service,
        location_tracker=LocationTracker(advisor_service),
        workflow=workflow,
        close_resources=close_resources,
    )
