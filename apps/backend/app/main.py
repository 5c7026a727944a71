"""
Name: Backend ASGI Entrypoint (app.main)

Responsibilities:
  - Re-export the FastAPI app for ASGI servers and tooling
  - Keep the import path `app.main:app` stable for uvicorn and tests

Collaborators:
  - app.api.main: builds the app via create_app()
  - app.server: process entry point that serves it

Notes/Constraints:
  - No configuration or IO should live here; keep it thin and predictable
"""

from app.api.main import app, create_app

__all__ = ["app", "create_app"]
