"""
FastAPI app entry point aggregating the routers under wordstore/routes.
Keep as `uvicorn wordstore.api:app`.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI

from . import __version__
from .errors import StorageFailure
from .logs import ensure_log_schema
from .services.word_svc import get_store, reset_store

logger = logging.getLogger(__name__)

app = FastAPI(title="wordstore-api", version=__version__)


@app.on_event("startup")
def on_startup():
    ensure_log_schema()
    try:
        get_store()
    except StorageFailure as e:
        # routes retry the open on each request
        logger.error("word store unavailable at startup: %s", e)


@app.on_event("shutdown")
def on_shutdown():
    reset_store()


from .routes import base as base_routes
from .routes import words as words_routes
from .routes import logs as logs_routes

app.include_router(base_routes.router)
app.include_router(words_routes.router)
app.include_router(logs_routes.router)
