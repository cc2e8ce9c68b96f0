"""
FastAPI application factory for the Random Users service.

The lifespan handler connects to MongoDB, verifies the server answers, makes
sure the unique email index exists, and closes the client on shutdown. Tests
inject a collection instead, which skips the connection steps.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src import __version__
from src.api.routes import router
from src.config import Settings, get_settings
from src.infrastructure.db_factory import (
    MongoClientManager,
    ensure_indexes,
    get_client,
    get_users_collection,
    ping,
)
from src.operations.abstract import UserCollection
from src.utils.logging import get_logger

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings
    owns_client = app.state.collection is None

    if owns_client:
        client = get_client(settings)
        try:
            await ping(client)
        except Exception:
            log.exception("Unable to connect to MongoDB")
            await MongoClientManager().close()
            raise
        log.info("MongoDB is connected")
        app.state.collection = get_users_collection(client, settings)

    try:
        await ensure_indexes(app.state.collection)
        yield
    finally:
        if owns_client:
            await MongoClientManager().close()
            app.state.collection = None
            log.info("MongoDB connection closed")


def create_app(settings: Optional[Settings] = None, collection: Optional[UserCollection] = None) -> FastAPI:
    """
    Build the application.

    Parameters
    ----------
    settings : Settings, optional
        Defaults to the cached environment settings.
    collection : UserCollection, optional
        Pre-built users collection; when given, no MongoDB client is created.
    """
    settings = settings or get_settings()
    app = FastAPI(title="Random Users", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.collection = collection

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


__all__ = ["create_app", "lifespan"]
