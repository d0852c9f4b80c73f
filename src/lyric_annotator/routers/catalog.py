"""
Catalog router for the Lyric Annotator.

Read-only endpoints serving the static documents verbatim:
- GET /api/tags - Tag vocabulary (facet -> ordered tag list)
- GET /api/tracks - Full track corpus
"""

import json
import logging

from fastapi import APIRouter, HTTPException

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/tags")
async def get_tags():
    """Get the tag vocabulary."""
    from ..api import get_catalog

    c = get_catalog()
    try:
        return c.load_tags()
    except (OSError, json.JSONDecodeError):
        logger.exception("Error loading tags")
        raise HTTPException(status_code=500, detail="Failed to load tags")


@router.get("/tracks")
async def get_tracks():
    """Get the full track corpus."""
    from ..api import get_catalog

    c = get_catalog()
    try:
        return c.load_tracks()
    except (OSError, json.JSONDecodeError):
        logger.exception("Error loading tracks")
        raise HTTPException(status_code=500, detail="Failed to load tracks")
