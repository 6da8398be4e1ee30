#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
API Routes for the mediaquery application using FastAPI.

Exposes single-video lookups, searches, playlist resolution and free-form
resolution, plus health and cache maintenance endpoints.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from exceptions import handle_exception
from models import ErrorResponse, MediaDescriptor, ResolveRequest, ResolveResponse, SearchPage
from services.engine import MediaQueryEngine
from services.invidious import InvidiousClient
from api.dependencies import get_invidious_client, get_query_engine
from logging_config import StructuredLogger

from version import __version__ as app_version

logger = StructuredLogger(__name__)

router = APIRouter()

ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Invalid input parameters"},
    403: {"model": ErrorResponse, "description": "Video or playlist is private"},
    404: {"model": ErrorResponse, "description": "Video or playlist is unavailable"},
    422: {"model": ErrorResponse, "description": "Playlist too long or invalid item"},
    429: {"model": ErrorResponse, "description": "Instance rate limit reached"},
    502: {"model": ErrorResponse, "description": "Unexpected answer from the instance"},
    503: {"model": ErrorResponse, "description": "Instance not configured or service not initialized"},
}


def _raise_mapped(e: Exception, what: str) -> None:
    if hasattr(e, "error_code"):
        logger.error(f"{type(e).__name__} while handling {what}: {e}")
    else:
        logger.critical(f"Unexpected error while handling {what}: {e}", exc_info=True)
    raise handle_exception(e)


@router.get(
    "/api/videos/{video_id}",
    response_model=MediaDescriptor,
    responses=ERROR_RESPONSES,
    summary="Look up one video",
)
async def get_video(video_id: str, client: InvidiousClient = Depends(get_invidious_client)):
    try:
        return await client.lookup(video_id)
    except Exception as e:
        _raise_mapped(e, f"video {video_id}")


@router.get(
    "/api/search",
    response_model=SearchPage,
    responses=ERROR_RESPONSES,
    summary="Search videos",
)
async def search_videos(
    q: str = Query(..., min_length=1, max_length=1000, description="Search terms."),
    page: Optional[int] = Query(None, ge=1, description="Page number, starting at 1."),
    client: InvidiousClient = Depends(get_invidious_client),
):
    try:
        return await client.search(q, page)
    except Exception as e:
        _raise_mapped(e, f"search '{q[:50]}'")


@router.get(
    "/api/playlists/{playlist_id}",
    response_model=List[MediaDescriptor],
    responses=ERROR_RESPONSES,
    summary="Resolve every playable item of a playlist",
)
async def get_playlist(playlist_id: str, client: InvidiousClient = Depends(get_invidious_client)):
    try:
        return await client.lookup_playlist(playlist_id)
    except Exception as e:
        _raise_mapped(e, f"playlist {playlist_id}")


@router.post(
    "/api/resolve",
    response_model=ResolveResponse,
    responses=ERROR_RESPONSES,
    summary="Resolve a URL or search term",
    description="Accepts a watch URL, a playlist URL, or free text and returns the matching descriptors."
)
async def resolve(request: ResolveRequest, engine: MediaQueryEngine = Depends(get_query_engine)):
    try:
        return await engine.resolve(request.query, request.page)
    except Exception as e:
        _raise_mapped(e, f"resolve '{request.query[:50]}'")


@router.get("/health", summary="Health Check")
async def health_check(engine: MediaQueryEngine = Depends(get_query_engine)):
    """Report service readiness and basic statistics."""
    health_data: Dict[str, Any] = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service_version": app_version,
        "instance_configured": bool(engine.client.instance),
    }

    try:
        health_data["statistics"] = await engine.get_global_stats()
    except Exception as e:
        logger.error(f"Error collecting statistics for /health endpoint: {e}", exc_info=True)
        health_data["statistics"] = {"error": f"Failed to collect detailed stats: {e}"}

    return Response(
        content=json.dumps(health_data, default=str),
        status_code=status.HTTP_200_OK,
        media_type="application/json"
    )


@router.post("/clear-caches", summary="Clear All Caches", status_code=status.HTTP_200_OK)
async def clear_all_caches(engine: MediaQueryEngine = Depends(get_query_engine)):
    logger.warning("Received request to clear all caches via /clear-caches endpoint.")
    try:
        results = await engine.clear_caches()
    except Exception as e:
        _raise_mapped(e, "clear-caches")
    return {
        "status": "success",
        "message": "All caches cleared successfully.",
        "details": results,
    }
