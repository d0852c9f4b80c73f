"""
Lyric Annotator API routers.

- catalog: tag vocabulary and track corpus
- annotations: save and read per-track annotations
"""

from .annotations import router as annotations_router
from .catalog import router as catalog_router

__all__ = [
    "annotations_router",
    "catalog_router",
]
