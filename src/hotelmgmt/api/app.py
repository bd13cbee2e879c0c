"""FastAPI application (ASGI entry point)."""

from hotelmgmt.api.factory import create_app

app = create_app()
