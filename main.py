#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Main FastAPI application setup for mediaquery.

Initializes the FastAPI application, wires the Invidious client and engine
into the dependency module during the lifespan, and includes the API routes.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from version import __version__

from api import dependencies, routes
from cache_manager import LRUMetadataCache
from config import config
from services.engine import MediaQueryEngine
from services.invidious import InvidiousClient
from logging_config import StructuredLogger

logger = StructuredLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the client and engine on startup and close them on shutdown.

    A missing instance is not fatal: the service starts and every lookup
    answers 503 until INVIDIOUS_INSTANCE is set.
    """
    logger.info("Starting mediaquery application lifespan...")

    if not config.INVIDIOUS_INSTANCE:
        logger.warning(f"{config.INSTANCE_ENV_VAR} is not defined. Lookups will fail until it is set.")

    cache = LRUMetadataCache(
        maxsize=config.METADATA_CACHE_SIZE,
        ttl_seconds=config.METADATA_CACHE_TTL_SECONDS,
    )
    dependencies.invidious_client = InvidiousClient.from_config(config, cache=cache)
    dependencies.query_engine = MediaQueryEngine(dependencies.invidious_client)
    logger.info("mediaquery services initialized.", instance=config.INVIDIOUS_INSTANCE or None)

    yield

    logger.info("Shutting down mediaquery application lifespan...")
    if dependencies.query_engine:
        await dependencies.query_engine.shutdown()
    dependencies.query_engine = None
    dependencies.invidious_client = None
    logger.info("Lifespan cleanup finished.")


app = FastAPI(
    lifespan=lifespan,
    title="mediaquery API",
    description="Resolve videos, searches and playlists to media descriptors through an Invidious instance.",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"]
)

app.include_router(routes.router)
logger.debug("FastAPI application setup complete.")
