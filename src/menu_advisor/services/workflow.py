"""Workflow state machine: discover a restaurant, load its menu, analyze it.

Each trigger is accepted only from the states listed in its docstring and
launches at most one model call, so there is never more than one call in
flight. Every transition bumps ``generation``; a call captures the generation
it was launched under and its result is dropped if the workflow has moved on
by the time it completes (for example after ``search_again``).
"""

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TypeVar

from menu_advisor.domain.errors import (
    AnalysisUnavailableError,
    CaptureCancelledError,
    InputValidationError,
    InvalidTransitionError,
    MenuAdvisorError,
    RestaurantNotFoundError,
)
from menu_advisor.domain.menu_input import MenuImage, MenuInput, MenuText
from menu_advisor.domain.profile import DietaryProfile
from menu_advisor.domain.recommendations import RecommendationSet
from menu_advisor.domain.restaurants import MenuSnapshot, Restaurant
from menu_advisor.services.advisor import AdvisorService
from menu_advisor.services.retry import RetryPolicy

T = TypeVar("T")

_logger = logging.getLogger(__name__)

MISSING_LOCATION = "Please enter a location or detect your current one."
MISSING_NAME = "Please enter a restaurant name."
MISSING_RESTAURANT = "Find a restaurant before analyzing its menu."


class WorkflowState(StrEnum):
    """States of the advisor workflow."""

    IDLE = "IDLE"
    SEARCHING_NEARBY = "SEARCHING_NEARBY"
    LOADING_MENU = "LOADING_MENU"
    CONFIRMING_RESTAURANT = "CONFIRMING_RESTAURANT"
    ANALYZING_MENU = "ANALYZING_MENU"
    SHOWING_RESULTS = "SHOWING_RESULTS"


BUSY_STATES = frozenset(
    {
        WorkflowState.SEARCHING_NEARBY,
        WorkflowState.LOADING_MENU,
        WorkflowState.ANALYZING_MENU,
    }
)


@dataclass(frozen=True)
class LastQuery:
    """The (name, location) pair of the last successful lookup."""

    name: str
    location: str


@dataclass(frozen=True)
class WorkflowSnapshot:
    """Read-only view of the workflow for a presentation layer."""

    state: WorkflowState
    generation: int
    state_entered_at: float
    restaurant: Restaurant | None
    menu: MenuSnapshot | None
    results: RecommendationSet | None
    nearby: list[Restaurant]
    last_query: LastQuery | None
    error: str | None

    @property
    def busy(self) -> bool:
        """Return True while a model call is in flight."""
        return self.state in BUSY_STATES


CaptureFn = Callable[[], Awaitable[MenuImage | None]]


@dataclass
class WorkflowController:
    """Drives restaurant lookup and menu analysis against the advisor."""

    advisor: AdvisorService
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    show_error_details: bool = False
    clock: Callable[[], float] = time.monotonic
    state: WorkflowState = WorkflowState.IDLE
    generation: int = 0
    state_entered_at: float = 0.0
    restaurant: Restaurant | None = None
    menu: MenuSnapshot | None = None
    results: RecommendationSet | None = None
    nearby: list[Restaurant] = field(default_factory=list)
    last_query: LastQuery | None = None
    error: str | None = None

    def snapshot(self) -> WorkflowSnapshot:
        """Return the current state and results."""
        return WorkflowSnapshot(
            state=self.state,
            generation=self.generation,
            state_entered_at=self.state_entered_at,
            restaurant=self.restaurant,
            menu=self.menu,
            results=self.results,
            nearby=list(self.nearby),
            last_query=self.last_query,
            error=self.error,
        )

    async def search_nearby(
        self, location: str, radius_miles: float, profile: DietaryProfile
    ) -> WorkflowSnapshot:
        """Find restaurants near a location. Accepted from IDLE."""
        self._require("search nearby", WorkflowState.IDLE)
        try:
            location = _required(location, MISSING_LOCATION)
        except InputValidationError as exc:
            return self._reject(exc)

        self.error = None
        generation = self._enter(WorkflowState.SEARCHING_NEARBY)
        try:
            found = await self._call(
                lambda: self.advisor.search_nearby(location, radius_miles, profile),
                action="search_nearby",
            )
        except Exception as exc:
            if self._is_current(generation, "search_nearby"):
                self._fail(WorkflowState.IDLE, exc, "Failed to search restaurants.")
            return self.snapshot()

        if self._is_current(generation, "search_nearby"):
            self.nearby = found
            self._enter(WorkflowState.IDLE)
        return self.snapshot()

    async def select_restaurant(
        self, candidate: Restaurant, location: str = ""
    ) -> WorkflowSnapshot:
        """Load the menu of a nearby result. Accepted from IDLE."""
        self._require("select a restaurant", WorkflowState.IDLE)
        try:
            query = _validated_query(candidate.name, candidate.address or location)
        except InputValidationError as exc:
            return self._reject(exc)
        await self._lookup(query, "Could not find menu for this restaurant.")
        return self.snapshot()

    async def start_search(self, name: str, location: str) -> WorkflowSnapshot:
        """Look up a restaurant by name.

        Accepted from IDLE and CONFIRMING_RESTAURANT. Repeating the last
        successful (name, location) pair reuses the cached restaurant and
        menu without a model call.
        """
        self._require(
            "search", WorkflowState.IDLE, WorkflowState.CONFIRMING_RESTAURANT
        )
        try:
            query = _validated_query(name, location)
        except InputValidationError as exc:
            return self._reject(exc)

        if self.restaurant is not None and self.last_query == query:
            _logger.info("Reusing cached lookup: name=%s", query.name)
            self.error = None
            self._enter(WorkflowState.CONFIRMING_RESTAURANT)
            return self.snapshot()

        await self._lookup(query, "Could not find restaurant or menu.")
        return self.snapshot()

    async def analyze(self, profile: DietaryProfile) -> WorkflowSnapshot:
        """Classify the fetched menu. Accepted from CONFIRMING_RESTAURANT."""
        self._require("analyze", WorkflowState.CONFIRMING_RESTAURANT)
        if self.restaurant is None or self.menu is None:
            return self._reject(InputValidationError(MISSING_RESTAURANT))
        await self._classify(MenuText(self.menu), profile, "Analysis failed.")
        return self.snapshot()

    async def capture_and_analyze(
        self, capture: CaptureFn, profile: DietaryProfile
    ) -> WorkflowSnapshot:
        """Classify a photographed menu. Accepted from CONFIRMING_RESTAURANT.

        ``capture`` yields the photo, or raises ``CaptureCancelledError`` when
        the user dismisses the camera; a cancel leaves everything unchanged.
        A photo that arrives after the workflow has moved on is dropped.
        """
        self._require("analyze a photo", WorkflowState.CONFIRMING_RESTAURANT)
        if self.restaurant is None:
            return self._reject(InputValidationError(MISSING_RESTAURANT))
        generation = self.generation
        try:
            image = await capture()
        except CaptureCancelledError:
            _logger.info("Photo capture cancelled")
            return self.snapshot()
        except Exception as exc:
            _logger.exception("Photo capture failed")
            if self._is_current(generation, "capture"):
                self.error = self._user_message(exc, "Could not capture the photo.")
            return self.snapshot()
        if not self._is_current(generation, "capture"):
            return self.snapshot()
        if image is None or not image.data:
            return self.snapshot()

        await self._classify(
            image,
            profile,
            "Image analysis failed. Please try again or use text analysis.",
        )
        return self.snapshot()

    def restart(self) -> WorkflowSnapshot:
        """Return to IDLE from SHOWING_RESULTS, forgetting the last query."""
        self._require("start over", WorkflowState.SHOWING_RESULTS)
        self.last_query = None
        self.error = None
        self._enter(WorkflowState.IDLE)
        return self.snapshot()

    def search_again(self) -> WorkflowSnapshot:
        """Return to IDLE from any state, dropping restaurant, menu and results."""
        self.restaurant = None
        self.menu = None
        self.results = None
        self.last_query = None
        self.error = None
        self._enter(WorkflowState.IDLE)
        return self.snapshot()

    async def _lookup(self, query: LastQuery, not_found: str) -> None:
        self.restaurant = None
        self.menu = None
        self.results = None
        self.last_query = None
        self.error = None
        generation = self._enter(WorkflowState.LOADING_MENU)
        try:
            lookup = await self._call(
                lambda: self.advisor.find_restaurant_and_menu(
                    query.name, query.location
                ),
                action="find_restaurant_and_menu",
            )
            if lookup is None:
                raise RestaurantNotFoundError(not_found)
        except Exception as exc:
            if self._is_current(generation, "find_restaurant_and_menu"):
                self._fail(WorkflowState.IDLE, exc, "Failed to find menu.")
            return

        if self._is_current(generation, "find_restaurant_and_menu"):
            self.restaurant = lookup.restaurant
            self.menu = lookup.menu
            self.last_query = query
            self._enter(WorkflowState.CONFIRMING_RESTAURANT)

    async def _classify(
        self, menu_input: MenuInput, profile: DietaryProfile, fallback: str
    ) -> None:
        restaurant = self.restaurant
        self.error = None
        generation = self._enter(WorkflowState.ANALYZING_MENU)
        try:
            results = await self._call(
                lambda: self.advisor.classify_menu_items(
                    restaurant, menu_input, profile
                ),
                action="classify_menu_items",
            )
            if results is None or results.is_empty():
                raise AnalysisUnavailableError(
                    "Could not analyze this menu. Please try again."
                )
        except Exception as exc:
            if self._is_current(generation, "classify_menu_items"):
                self._fail(WorkflowState.CONFIRMING_RESTAURANT, exc, fallback)
            return

        if self._is_current(generation, "classify_menu_items"):
            self.results = results
            self._enter(WorkflowState.SHOWING_RESULTS)

    async def _call(self, operation: Callable[[], Awaitable[T]], *, action: str) -> T:
        return await self.retry_policy.run(operation, action=action)

    def _reject(self, exc: InputValidationError) -> WorkflowSnapshot:
        _logger.info("Rejected input: %s", exc)
        self.error = str(exc)
        return self.snapshot()

    def _require(self, action: str, *allowed: WorkflowState) -> None:
        if self.state not in allowed:
            raise InvalidTransitionError(f"Cannot {action} while {self.state}")

    def _enter(self, state: WorkflowState) -> int:
        self.state = state
        self.state_entered_at = self.clock()
        self.generation += 1
        return self.generation

    def _is_current(self, generation: int, action: str) -> bool:
        if generation == self.generation:
            return True
        _logger.info("Discarding stale %s result", action)
        return False

    def _fail(self, state: WorkflowState, exc: Exception, fallback: str) -> None:
        if isinstance(exc, MenuAdvisorError):
            _logger.warning("%s", exc)
        else:
            _logger.error("Workflow call failed: %s", exc, exc_info=exc)
        self.error = self._user_message(exc, fallback)
        self._enter(state)

    def _user_message(self, exc: Exception, fallback: str) -> str:
        if isinstance(exc, MenuAdvisorError):
            return str(exc)
        if self.show_error_details:
            detail = f"{type(exc).__name__}: {exc}".strip()
            return f"{fallback} (debug: {detail})"
        return fallback


def _required(value: str, message: str) -> str:
    value = value.strip()
    if not value:
        raise InputValidationError(message)
    return value


def _validated_query(name: str, location: str) -> LastQuery:
    return LastQuery(
        name=_required(name, MISSING_NAME),
        location=_required(location, MISSING_LOCATION),
    )
