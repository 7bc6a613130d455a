"""ASGI entrypoint: ``uvicorn spendwise.app:app``."""

from .frontend.app import create_app

app = create_app()
