"""
Pydantic models for the Lyric Annotator API.

Request/response schemas for the annotation endpoints. The vocabulary and
corpus endpoints return their documents verbatim and have no schema.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field


class AnnotateRequest(BaseModel):
    """
    Body of POST /api/annotate.

    Both fields are optional at the schema level so that a missing field is
    reported as 400 by the handler rather than a 422 validation error.
    Numeric track ids are accepted and stored under their string form.
    """
    track_id: Optional[Union[str, int]] = None
    selections: Optional[Dict[str, List[str]]] = Field(
        None, description="Facet name to list of selected tags"
    )


class AnnotateResponse(BaseModel):
    """Acknowledgement of a persisted annotation."""
    ok: bool = True


class AnnotationRecordResponse(BaseModel):
    """A stored annotation record."""
    track_id: str
    selections: Dict[str, List[str]]
    saved_at: str
