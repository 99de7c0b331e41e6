"""ASGI entrypoint for the NutriLens API."""

from nutrilens.api.app import create_app
from nutrilens.containers import build_container

app = create_app(build_container())
