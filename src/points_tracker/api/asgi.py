"""ASGI entrypoint for the points tracker API."""

from points_tracker.api.app import create_app
from points_tracker.containers import build_container

app = create_app(build_container())
