"""Pydantic models for the HTTP API."""

from typing import Literal

from pydantic import BaseModel, Field

from menu_advisor.domain.recommendations import RecommendationItem, RecommendationSet
from menu_advisor.domain.restaurants import MenuCategory, Restaurant
from menu_advisor.services.preferences import Theme


class LocationView(BaseModel):
    """Current search location."""

    location: str
    detected: str | None = None
    manual: bool
    detecting: bool
    error: str | None = None


class WorkflowStateResponse(BaseModel):
    """Workflow state with everything a client needs to render it."""

    state: str
    generation: int
    busy: bool
    loading_message: str | None = None
    restaurant: Restaurant | None = None
    menu: list[MenuCategory] | None = None
    results: RecommendationSet | None = None
    nearby: list[Restaurant] = Field(default_factory=list)
    error: str | None = None
    location: LocationView


class ManualLocationRequest(BaseModel):
    """Location typed by the user."""

    location: str


class CoordinatesRequest(BaseModel):
    """Device geolocation fix."""

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class GeolocationErrorRequest(BaseModel):
    """Device geolocation failure."""

    reason: Literal["permission_denied", "unavailable"]


class NearbySearchRequest(BaseModel):
    """Nearby restaurant search."""

    location: str | None = None
    radius_miles: float = Field(default=5, gt=0)


class RestaurantSearchRequest(BaseModel):
    """Search for a restaurant by name."""

    name: str
    location: str | None = None


class SelectRestaurantRequest(BaseModel):
    """Pick one of the nearby results."""

    restaurant: Restaurant


class PhotoAnalysisRequest(BaseModel):
    """Result of the client's photo capture."""

    image_base64: str | None = None
    cancelled: bool = False


class OtherRestrictionRequest(BaseModel):
    """Free-text restriction note."""

    text: str


class ThemeRequest(BaseModel):
    """Display theme preference."""

    theme: Theme


class FavoriteToggleRequest(BaseModel):
    """Save or unsave a recommendation."""

    item: RecommendationItem
    restaurant_name: str | None = None
