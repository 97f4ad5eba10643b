"""
FastAPI application entry point for the backup API.
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from fitbackup.config import Settings, get_settings
from fitbackup.db import DbClient
from fitbackup.dependencies import build_db_client
from fitbackup.routes import router


def create_app(
    settings: Optional[Settings] = None, db: Optional[DbClient] = None
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Fitness App Backup API", version="0.1.0")
    app.state.settings = settings
    app.state.db = db if db is not None else build_db_client(settings)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
