"""ASGI entry point: ``uvicorn coach_api.main:app``."""

from coach_api.core.app_factory import create_app

app = create_app()
