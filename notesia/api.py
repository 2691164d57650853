"""
FastAPI app exposing the timer list, timer creation and the numeric keypad.
Serve with `uvicorn notesia.api:app`.
"""
from __future__ import annotations

import logging
import sqlite3
from contextlib import asynccontextmanager

from fastapi import FastAPI

from . import __version__
from .errors import StoreError
from .logs import ensure_log_schema, LogContext
from .services.timer_svc import open_default_store


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    try:
        ensure_log_schema()
    except (StoreError, sqlite3.Error):
        logger.exception("operation log unavailable")
    try:
        open_default_store()
    except StoreError as e:
        LogContext("STARTUP").write_safe("ERROR", f"open_store_failed: {e}")
    yield


app = FastAPI(title="notesia-api", version=__version__, lifespan=lifespan)


from .routes import base as base_routes
from .routes import timers as timers_routes
from .routes import logs as logs_routes

app.include_router(base_routes.router)
app.include_router(timers_routes.router)
app.include_router(logs_routes.router)
