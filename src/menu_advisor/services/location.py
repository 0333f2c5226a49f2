"""Search location: manual entry versus device geolocation."""

import logging
from dataclasses import dataclass
from typing import Protocol

_logger = logging.getLogger(__name__)

_UNAVAILABLE_MESSAGES = {
    "permission_denied": "Location permission denied. Please enter your city manually.",
    "unavailable": "Geolocation is not available. Please enter your city manually.",
}
_GEOCODE_FAILED = "Could not identify your city. Please enter it manually."


class ReverseGeocoder(Protocol):
    """Anything that can turn coordinates into a place name."""

    async def reverse_geocode(self, lat: float, lng: float) -> str:
        """Return a "City, State" string for coordinates."""


@dataclass
class LocationTracker:
    """Tracks the search location; manual input wins over late geolocation."""

    geocoder: ReverseGeocoder
    location: str = ""
    detected: str | None = None
    manual: bool = False
    detecting: bool = False
    error: str | None = None

    def set_manual(self, text: str) -> None:
        """Record a location typed by the user."""
        self.location = text.strip()
        self.manual = True
        self.error = None

    async def resolve_coordinates(self, lat: float, lng: float) -> bool:
        """Apply a geolocation fix; returns False when it was discarded."""
        if self.manual:
            _logger.info("Ignoring geolocation fix, location was entered manually")
            return False
        self.detecting = True
        try:
            place = await self.geocoder.reverse_geocode(lat, lng)
        except Exception:
            _logger.exception("Reverse geocoding failed")
            if not self.manual:
                self.error = _GEOCODE_FAILED
            return False
        finally:
            self.detecting = False
        if self.manual:
            _logger.info("Discarding late geolocation result: %s", place)
            return False
        self.detected = place
        self.location = place
        self.error = None
        return True

    def report_unavailable(self, reason: str) -> None:
        """Map a device geolocation error to a prompt for manual entry."""
        _logger.info("Geolocation unavailable: %s", reason)
        self.detecting = False
        if self.manual:
            return
        self.error = _UNAVAILABLE_MESSAGES.get(
            reason, _UNAVAILABLE_MESSAGES["unavailable"]
        )
