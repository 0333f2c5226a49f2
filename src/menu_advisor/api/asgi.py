"""ASGI entrypoint for the menu advisor API."""

from menu_advisor.api.app import create_app
from menu_advisor.containers import build_container

app = create_app(build_container())
