"""ASGI entrypoint for the FleetFox API."""

from fleetfox.api.app import create_app
from fleetfox.containers import build_container

app = create_app(build_container())
