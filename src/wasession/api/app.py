"""ASGI entry point (``uvicorn wasession.api.app:app``)."""

from .factory import create_app

app = create_app()
