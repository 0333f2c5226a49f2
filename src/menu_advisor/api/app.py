"""FastAPI application factory."""

import base64
import binascii
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from menu_advisor.api.models import (
    CoordinatesRequest,
    FavoriteToggleRequest,
    GeolocationErrorRequest,
    LocationView,
    ManualLocationRequest,
    NearbySearchRequest,
    OtherRestrictionRequest,
    PhotoAnalysisRequest,
    RestaurantSearchRequest,
    SelectRestaurantRequest,
    ThemeRequest,
    WorkflowStateResponse,
)
from menu_advisor.app_logging import configure_logging
from menu_advisor.containers import AppContainer
from menu_advisor.domain.errors import CaptureCancelledError, InvalidTransitionError
from menu_advisor.domain.menu_input import MenuImage
from menu_advisor.domain.profile import ALLERGY_OPTIONS, DietaryProfile
from menu_advisor.services.loading import loading_message


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(InvalidTransitionError)
    async def invalid_transition(
        request: Request, exc: InvalidTransitionError
    ) -> JSONResponse:
        logger.info("Rejected trigger: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)}
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/state")
    async def get_state(request: Request) -> WorkflowStateResponse:
        """Return the workflow state, including the current loading message."""
        return _state_response(request.app.state.container)

    @app.get("/profile")
    async def get_profile(request: Request) -> dict[str, object]:
        """Return the dietary profile and the allergy choices."""
        state_container: AppContainer = request.app.state.container
        return {
            "profile": state_container.preferences_service.profile.model_dump(
                by_alias=True
            ),
            "allergy_options": list(ALLERGY_OPTIONS),
            "theme": state_container.preferences_service.theme,
        }

    @app.put("/profile")
    async def replace_profile(
        profile: DietaryProfile, request: Request
    ) -> DietaryProfile:
        """Replace the dietary profile."""
        state_container: AppContainer = request.app.state.container
        return state_container.preferences_service.update_profile(profile)

    @app.post("/profile/flags/{flag}")
    async def toggle_flag(flag: str, request: Request) -> DietaryProfile:
        """Flip one restriction flag."""
        state_container: AppContainer = request.app.state.container
        try:
            return state_container.preferences_service.toggle_flag(flag)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

    @app.post("/profile/allergies/{allergy}")
    async def toggle_allergy(allergy: str, request: Request) -> DietaryProfile:
        """Add or remove an allergy."""
        state_container: AppContainer = request.app.state.container
        return state_container.preferences_service.toggle_allergy(allergy)

    @app.put("/profile/other")
    async def set_other(
        body: OtherRestrictionRequest, request: Request
    ) -> DietaryProfile:
        """Replace the free-text restriction note."""
        state_container: AppContainer = request.app.state.container
        return state_container.preferences_service.set_other(body.text)

    @app.put("/theme")
    async def set_theme(body: ThemeRequest, request: Request) -> dict[str, str]:
        """Persist the display theme."""
        state_container: AppContainer = request.app.state.container
        state_container.preferences_service.set_theme(body.theme)
        return {"theme": body.theme}

    @app.post("/location/manual")
    async def set_manual_location(
        body: ManualLocationRequest, request: Request
    ) -> LocationView:
        """Use a location typed by the user."""
        state_container: AppContainer = request.app.state.container
        state_container.location_tracker.set_manual(body.location)
        return _location_view(state_container)

    @app.post("/location/coordinates")
    async def resolve_coordinates(
        body: CoordinatesRequest, request: Request
    ) -> LocationView:
        """Apply a device geolocation fix unless a manual location is set."""
        state_container: AppContainer = request.app.state.container
        await state_container.location_tracker.resolve_coordinates(
            body.latitude, body.longitude
        )
        return _location_view(state_container)

    @app.post("/location/error")
    async def geolocation_error(
        body: GeolocationErrorRequest, request: Request
    ) -> LocationView:
        """Record that device geolocation failed."""
        state_container: AppContainer = request.app.state.container
        state_container.location_tracker.report_unavailable(body.reason)
        return _location_view(state_container)

    @app.post("/nearby")
    async def search_nearby(
        body: NearbySearchRequest, request: Request
    ) -> WorkflowStateResponse:
        """Find restaurants near the current or given location."""
        state_container: AppContainer = request.app.state.container
        location = body.location or state_container.location_tracker.location
        await state_container.workflow.search_nearby(
            location,
            body.radius_miles,
            state_container.preferences_service.profile,
        )
        return _state_response(state_container)

    @app.post("/restaurants/search")
    async def start_search(
        body: RestaurantSearchRequest, request: Request
    ) -> WorkflowStateResponse:
        """Look up a restaurant by name."""
        state_container: AppContainer = request.app.state.container
        location = body.location or state_container.location_tracker.location
        await state_container.workflow.start_search(body.name, location)
        return _state_response(state_container)

    @app.post("/restaurants/select")
    async def select_restaurant(
        body: SelectRestaurantRequest, request: Request
    ) -> WorkflowStateResponse:
        """Load the menu of a nearby result."""
        state_container: AppContainer = request.app.state.container
        await state_container.workflow.select_restaurant(
            body.restaurant, state_container.location_tracker.location
        )
        return _state_response(state_container)

    @app.post("/analyze")
    async def analyze(request: Request) -> WorkflowStateResponse:
        """Classify the fetched menu against the dietary profile."""
        state_container: AppContainer = request.app.state.container
        await state_container.workflow.analyze(
            state_container.preferences_service.profile
        )
        return _state_response(state_container)

    @app.post("/analyze/photo")
    async def analyze_photo(
        body: PhotoAnalysisRequest, request: Request
    ) -> WorkflowStateResponse:
        """Classify a photographed menu; a cancelled capture changes nothing."""
        state_container: AppContainer = request.app.state.container
        image = None if body.cancelled else _decode_image(body.image_base64)

        async def capture() -> MenuImage | None:
            if body.cancelled:
                raise CaptureCancelledError("User cancelled photos app")
            return image

        await state_container.workflow.capture_and_analyze(
            capture, state_container.preferences_service.profile
        )
        return _state_response(state_container)

    @app.post("/restart")
    async def restart(request: Request) -> WorkflowStateResponse:
        """Start over from the results screen."""
        state_container: AppContainer = request.app.state.container
        state_container.workflow.restart()
        return _state_response(state_container)

    @app.post("/search-again")
    async def search_again(request: Request) -> WorkflowStateResponse:
        """Drop the current restaurant and go back to searching."""
        state_container: AppContainer = request.app.state.container
        state_container.workflow.search_again()
        return _state_response(state_container)

    @app.get("/favorites")
    async def list_favorites(
        request: Request, limit: int | None = None
    ) -> dict[str, object]:
        """Return saved favorites, or the most recent ones when limited."""
        state_container: AppContainer = request.app.state.container
        preferences = state_container.preferences_service
        favorites = (
            preferences.favorites
            if limit is None
            else preferences.recent_favorites(limit)
        )
        return {"favorites": [entry.model_dump(by_alias=True) for entry in favorites]}

    @app.post("/favorites/toggle")
    async def toggle_favorite(
        body: FavoriteToggleRequest, request: Request
    ) -> dict[str, object]:
        """Save or unsave a recommendation."""
        state_container: AppContainer = request.app.state.container
        restaurant = state_container.workflow.restaurant
        restaurant_name = body.restaurant_name or (
            restaurant.name if restaurant else None
        )
        if not restaurant_name:
            raise HTTPException(
                status_code=422,
                detail="restaurant_name is required when no restaurant is selected",
            )
        saved = state_container.preferences_service.toggle_favorite(
            body.item, restaurant_name
        )
        return {"saved": saved, "restaurant_name": restaurant_name}

    return app


def _decode_image(image_base64: str | None) -> MenuImage | None:
    """Decode a base64 photo, accepting an optional data URL prefix."""
    if not image_base64:
        return None
    _, _, payload = image_base64.rpartition(",")
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(
            status_code=422,
            detail="image_base64 is not valid base64",
        ) from exc
    return MenuImage.from_bytes(data)


def _location_view(state_container: AppContainer) -> LocationView:
    tracker = state_container.location_tracker
    return LocationView(
        location=tracker.location,
        detected=tracker.detected,
        manual=tracker.manual,
        detecting=tracker.detecting,
        error=tracker.error,
    )


def _state_response(state_container: AppContainer) -> WorkflowStateResponse:
    workflow = state_container.workflow
    snapshot = workflow.snapshot()
    elapsed = workflow.clock() - snapshot.state_entered_at
    return WorkflowStateResponse(
        state=snapshot.state.value,
        generation=snapshot.generation,
        busy=snapshot.busy,
        loading_message=loading_message(snapshot.state, elapsed),
        restaurant=snapshot.restaurant,
        menu=snapshot.menu,
        results=snapshot.results,
        nearby=snapshot.nearby,
        error=snapshot.error,
        location=_location_view(state_container),
    )
