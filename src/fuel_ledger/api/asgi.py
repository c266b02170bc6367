"""ASGI entrypoint for the food search API."""

from fuel_ledger.api.app import create_app
from fuel_ledger.config import Settings
from fuel_ledger.containers import build_container

settings = Settings()
app = create_app(build_container(settings))
