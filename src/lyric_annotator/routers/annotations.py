"""
Annotations router for the Lyric Annotator.

- POST /api/annotate - Save (or overwrite) the annotation for a track
- GET /api/annotation/{track_id} - Stored annotation, or null if none
"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException

from ..schemas import AnnotateRequest, AnnotateResponse, AnnotationRecordResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["annotations"])


@router.post("/annotate", response_model=AnnotateResponse)
async def annotate(request: AnnotateRequest):
    """
    Persist an annotation.

    Writes the per-track record and updates the shared index. Saving the
    same track again overwrites its record and keeps the index total.
    """
    from ..api import get_storage

    if not request.track_id or request.selections is None:
        raise HTTPException(status_code=400, detail="track_id and selections required")

    track_id = str(request.track_id)
    st = get_storage()
    try:
        st.save_annotation(track_id, request.selections)
    except (OSError, TypeError, json.JSONDecodeError):
        # JSONDecodeError subclasses ValueError, so it must be caught first
        logger.exception(f"Error saving annotation for {track_id}")
        raise HTTPException(status_code=500, detail="Failed to save annotation")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return AnnotateResponse(ok=True)


@router.get("/annotation/{track_id}", response_model=Optional[AnnotationRecordResponse])
async def get_annotation(track_id: str):
    """Get the stored annotation for a track, or null if it has none."""
    from ..api import get_storage

    st = get_storage()
    try:
        record = st.get_annotation(track_id)
    except (OSError, KeyError, ValueError, json.JSONDecodeError):
        logger.exception(f"Error reading annotation for {track_id}")
        raise HTTPException(status_code=500, detail="Failed to read annotation")

    if record is None:
        return None

    return AnnotationRecordResponse(
        track_id=record.track_id,
        selections=record.selections,
        saved_at=record.saved_at.isoformat(),
    )
