"""Error types raised by the advisor workflow."""


class MenuAdvisorError(Exception):
    """Base class for recoverable workflow errors."""


class InputValidationError(MenuAdvisorError):
    """A required input was missing before any model call."""


class RestaurantNotFoundError(MenuAdvisorError):
    """The lookup returned nothing usable."""


class AnalysisUnavailableError(MenuAdvisorError):
    """Classification produced no usable recommendations."""


class InvalidTransitionError(MenuAdvisorError):
    """A trigger was issued from a state that does not accept it."""


class CaptureCancelledError(MenuAdvisorError):
    """The user dismissed the photo capture."""
