"""Grounded model operations for restaurant discovery and menu analysis."""

import logging
from dataclasses import dataclass
from typing import Protocol, assert_never

from pydantic import ValidationError

from menu_advisor.config import DEFAULT_SEARCH_CONTEXT
from menu_advisor.domain.menu_input import MenuImage, MenuInput, MenuText
from menu_advisor.domain.profile import DietaryProfile, restriction_string
from menu_advisor.domain.recommendations import RecommendationSet
from menu_advisor.domain.restaurants import Restaurant, RestaurantLookup
from menu_advisor.services import prompts
from menu_advisor.services.extraction import extract_json

_logger = logging.getLogger(__name__)


class GroundedModelClient(Protocol):
    """Interface for a text model call with optional web-search grounding."""

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
        """Return the raw text produced by the model."""


@dataclass
class AdvisorService:
    """Builds grounded prompts and normalizes the model's answers."""

    client: GroundedModelClient
    model: str
    reasoning_effort: str | None
    store: bool
    default_location: str = DEFAULT_SEARCH_CONTEXT

    async def reverse_geocode(self, lat: float, lng: float) -> str:
        """Return a "City, State" string for coordinates, as the model wrote it."""
        text = await self._generate(prompts.reverse_geocode_prompt(lat, lng))
        return text.strip()

    async def find_restaurant_and_menu(
        self, name: str, location: str | None = None
    ) -> RestaurantLookup | None:
        """Look up a restaurant and its menu; None when nothing usable came back."""
        prompt = prompts.restaurant_lookup_prompt(
            name, location or self.default_location
        )
        payload = extract_json(await self._generate(prompt))
        if not isinstance(payload, dict) or not payload.get("restaurant"):
            _logger.info("Restaurant lookup returned no match: name=%s", name)
            return None
        if payload.get("menu") is None:
            payload = {**payload, "menu": []}
        try:
            return RestaurantLookup.model_validate(payload)
        except ValidationError as exc:
            _logger.warning("Restaurant lookup payload rejected: %s", exc)
            return None

    async def search_nearby(
        self, location: str, radius_miles: float, profile: DietaryProfile
    ) -> list[Restaurant]:
        """Return restaurants near ``location``; empty when none or unparseable."""
        prompt = prompts.nearby_search_prompt(
            location, radius_miles, restriction_string(profile)
        )
        payload = extract_json(await self._generate(prompt))
        if isinstance(payload, dict):
            payload = payload.get("restaurants")
        if not isinstance(payload, list):
            return []
        restaurants: list[Restaurant] = []
        for entry in payload:
            try:
                restaurants.append(Restaurant.model_validate(entry))
            except ValidationError:
                _logger.debug("Skipping invalid nearby entry: %r", entry)
        return restaurants

    async def classify_menu_items(
        self,
        restaurant: Restaurant,
        menu_input: MenuInput,
        profile: DietaryProfile,
    ) -> RecommendationSet | None:
        """Classify a menu or menu photo into safe, caution and avoid buckets."""
        restrictions = restriction_string(profile)
        guidance = condition_guidance(profile)
        if isinstance(menu_input, MenuText):
            prompt = prompts.classification_prompt(
                restaurant.name, restrictions, guidance, menu_input.menu
            )
            image_data_url = None
        elif isinstance(menu_input, MenuImage):
            prompt = prompts.classification_prompt(
                restaurant.name, restrictions, guidance, None
            )
            image_data_url = menu_input.to_data_url()
        else:
            assert_never(menu_input)

        payload = extract_json(
            await self._generate(prompt, image_data_url=image_data_url)
        )
        if not isinstance(payload, dict):
            _logger.info("Classification output unparseable for %s", restaurant.name)
            return None
        try:
            return RecommendationSet.model_validate(payload)
        except ValidationError as exc:
            _logger.warning("Classification payload rejected: %s", exc)
            return None

    async def _generate(self, prompt: str, image_data_url: str | None = None) -> str:
        return await self.client.generate(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            prompt=prompt,
            image_data_url=image_data_url,
            web_search=True,
        )


def condition_guidance(profile: DietaryProfile) -> list[str]:
    """Return the extra guidance blocks selected by the profile's flags."""
    blocks: list[str] = []
    if profile.gastroparesis:
        blocks.append(prompts.GASTROPARESIS_CONTEXT)
    if profile.diabetic:
        blocks.append(prompts.DIABETIC_CONTEXT)
    return blocks
