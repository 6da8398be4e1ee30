#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
FastAPI dependency injection functions for mediaquery services.

The application lifespan populates the module-level instances below; route
handlers receive them through these functions.
"""

from typing import Optional

from fastapi import HTTPException, status

from services.engine import MediaQueryEngine
from services.invidious import InvidiousClient
from logging_config import StructuredLogger

logger = StructuredLogger(__name__)

# Populated during application startup, cleared on shutdown.
invidious_client: Optional[InvidiousClient] = None
query_engine: Optional[MediaQueryEngine] = None


def get_invidious_client() -> InvidiousClient:
    """Dependency function returning the initialized InvidiousClient.

    Raises:
        HTTPException: 503 Service Unavailable if the client is not initialized.
    """
    if not invidious_client:
        logger.critical("Dependency Error: Invidious client not initialized.")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service Initialization Error: Invidious client is not available.",
            headers={"X-Error-Code": "SERVICE_UNAVAILABLE_CLIENT"}
        )
    return invidious_client


def get_query_engine() -> MediaQueryEngine:
    """Dependency function returning the initialized MediaQueryEngine.

    Raises:
        HTTPException: 503 Service Unavailable if the engine is not initialized.
    """
    if not query_engine:
        logger.critical("Dependency Error: query engine not initialized.")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service Initialization Error: query engine is not available.",
            headers={"X-Error-Code": "SERVICE_UNAVAILABLE_ENGINE"}
        )
    return query_engine
