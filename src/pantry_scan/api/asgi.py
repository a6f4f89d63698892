"""ASGI entrypoint for the pantry scan API."""

from pantry_scan.api.app import create_app
from pantry_scan.containers import build_container

app = create_app(build_container())
