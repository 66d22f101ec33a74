"""ASGI entrypoint for the fieldforce API."""

from fieldforce.api.app import create_app
from fieldforce.containers import build_container

app = create_app(build_container())
