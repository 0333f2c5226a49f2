"""Rotating status messages shown while the workflow is busy."""

from menu_advisor.services.workflow import WorkflowState

LOADING_MESSAGE_INTERVAL_SECONDS = 2.5

LOCATION_MESSAGES: tuple[str, ...] = (
    "Scouring the culinary digital landscape...",
    "Locating the restaurant entrance...",
    "Retrieving the latest menu specials...",
    "Checking nearby kitchens...",
)

ANALYSIS_MESSAGES: tuple[str, ...] = (
    "Scanning ingredients for safety...",
    "Running dietary restriction checks...",
    "Consulting the AI chef...",
    "Almost ready to serve your advice...",
)

_MESSAGES_BY_STATE = {
    WorkflowState.SEARCHING_NEARBY: LOCATION_MESSAGES,
    WorkflowState.LOADING_MENU: LOCATION_MESSAGES,
    WorkflowState.ANALYZING_MENU: ANALYSIS_MESSAGES,
}


def loading_message(state: WorkflowState, elapsed_seconds: float) -> str | None:
    """Return the message to show after ``elapsed_seconds`` in a busy state."""
    messages = _MESSAGES_BY_STATE.get(state)
    if not messages:
        return None
    index = int(max(elapsed_seconds, 0.0) // LOADING_MESSAGE_INTERVAL_SECONDS)
    return messages[index % len(messages)]
