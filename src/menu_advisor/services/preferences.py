"""Persisted user preferences: dietary profile, favorites and theme."""

import logging
from dataclasses import dataclass, field
from typing import Literal, Protocol, get_args

from pydantic import TypeAdapter, ValidationError

from menu_advisor.domain.profile import DietaryProfile
from menu_advisor.domain.recommendations import FavoriteEntry, RecommendationItem

_logger = logging.getLogger(__name__)

PROFILE_KEY = "restrictions"
FAVORITES_KEY = "favorites"
THEME_KEY = "theme"

Theme = Literal["light", "dark", "system"]

_favorites_adapter = TypeAdapter(list[FavoriteEntry])


class PreferencesRepository(Protocol):
    """Key-value persistence for preference records stored as JSON text."""

    def get(self, key: str) -> str | None:
        """Return the stored text for ``key``, if any."""

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""


@dataclass
class PreferencesService:
    """Loads preferences once at startup and saves on every mutation."""

    repository: PreferencesRepository
    profile: DietaryProfile = field(default_factory=DietaryProfile)
    favorites: list[FavoriteEntry] = field(default_factory=list)
    theme: Theme = "system"

    def load(self) -> None:
        """Read all records from the store, falling back to defaults."""
        self.profile = _load_profile(self.repository.get(PROFILE_KEY))
        self.favorites = _load_favorites(self.repository.get(FAVORITES_KEY))
        self.theme = _load_theme(self.repository.get(THEME_KEY))

    def save(self) -> None:
        """Write all records to the store."""
        self._save_profile()
        self._save_favorites()
        self.repository.set(THEME_KEY, self.theme)

    def update_profile(self, profile: DietaryProfile) -> DietaryProfile:
        """Replace the profile and persist it."""
        self.profile = profile
        self._save_profile()
        return profile

    def toggle_flag(self, flag: str) -> DietaryProfile:
        """Flip a restriction flag and persist the profile."""
        return self.update_profile(self.profile.toggle_flag(flag))

    def toggle_allergy(self, allergy: str) -> DietaryProfile:
        """Add or remove an allergy and persist the profile."""
        return self.update_profile(self.profile.toggle_allergy(allergy))

    def set_other(self, text: str) -> DietaryProfile:
        """Replace the free-text restriction note and persist the profile."""
        return self.update_profile(self.profile.with_other(text))

    def is_favorite(self, item_name: str, restaurant_name: str) -> bool:
        """Return True when the item is saved for that restaurant."""
        key = (item_name, restaurant_name)
        return any(entry.key() == key for entry in self.favorites)

    def toggle_favorite(self, item: RecommendationItem, restaurant_name: str) -> bool:
        """Save or unsave a recommendation; returns True when now saved."""
        key = (item.name, restaurant_name)
        remaining = [entry for entry in self.favorites if entry.key() != key]
        added = len(remaining) == len(self.favorites)
        if added:
            remaining.append(FavoriteEntry.from_item(item, restaurant_name))
        self.favorites = remaining
        self._save_favorites()
        return added

    def recent_favorites(self, limit: int = 5) -> list[FavoriteEntry]:
        """Return the most recently saved favorites, newest first."""
        if limit <= 0:
            return []
        return list(reversed(self.favorites[-limit:]))

    def set_theme(self, theme: Theme) -> None:
        """Persist the display theme."""
        if theme not in get_args(Theme):
            raise ValueError(f"Unknown theme: {theme}")
        self.theme = theme
        self.repository.set(THEME_KEY, theme)

    def _save_profile(self) -> None:
        self.repository.set(
            PROFILE_KEY, self.profile.model_dump_json(by_alias=True)
        )

    def _save_favorites(self) -> None:
        self.repository.set(
            FAVORITES_KEY,
            _favorites_adapter.dump_json(self.favorites, by_alias=True).decode(),
        )


def _load_profile(raw: str | None) -> DietaryProfile:
    if not raw:
        return DietaryProfile()
    try:
        return DietaryProfile.model_validate_json(raw)
    except ValidationError:
        _logger.warning("Stored dietary profile is unreadable, using defaults")
        return DietaryProfile()


def _load_favorites(raw: str | None) -> list[FavoriteEntry]:
    if not raw:
        return []
    try:
        entries = _favorites_adapter.validate_json(raw)
    except ValidationError:
        _logger.warning("Stored favorites are unreadable, starting empty")
        return []
    unique: dict[tuple[str, str], FavoriteEntry] = {}
    for entry in entries:
        unique.setdefault(entry.key(), entry)
    return list(unique.values())


def _load_theme(raw: str | None) -> Theme:
    if raw in get_args(Theme):
        return raw  # type: ignore[return-value]
    return "system"
