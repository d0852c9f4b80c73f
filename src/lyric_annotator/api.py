"""
FastAPI backend for the Lyric Annotator.

Minimal server for:
- Serving the tag vocabulary and the track corpus
- Persisting per-track annotations and the annotation index
- Serving the static client from a public root
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .config import AnnotatorConfig
from .routers import annotations_router, catalog_router
from .storage import AnnotationStorage
from .store import CatalogStore

logger = logging.getLogger(__name__)

# Global instances (initialized on startup)
catalog: Optional[CatalogStore] = None
storage: Optional[AnnotationStorage] = None

app = FastAPI(
    title="Lyric Annotator",
    description="Backend for manual lyric tagging across four facets",
    version="0.1.0",
)

# Enable CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(catalog_router)
app.include_router(annotations_router)


def get_catalog() -> CatalogStore:
    """Get the catalog store instance."""
    if catalog is None:
        raise HTTPException(
            status_code=500,
            detail="Application not initialized. Start server with --data-dir flag."
        )
    return catalog


def get_storage() -> AnnotationStorage:
    """Get the annotation storage instance."""
    if storage is None:
        raise HTTPException(status_code=500, detail="Storage not initialized")
    return storage


def _mount_public(public_dir: Path) -> None:
    """Serve static files from the public root, once."""
    if any(getattr(route, "name", None) == "public" for route in app.routes):
        return
    app.mount("/", StaticFiles(directory=str(public_dir), html=True), name="public")
    logger.info(f"Serving static files from {public_dir}")


def init_app(config: AnnotatorConfig) -> None:
    """
    Initialize the application with a data directory.

    Creates the annotations directory and an empty index on first run.

    Args:
        config: Annotator configuration
    """
    global catalog, storage

    catalog = CatalogStore(config.tags_path, config.tracks_path)
    storage = AnnotationStorage(config.annotations_dir)

    if config.public_dir is not None and Path(config.public_dir).is_dir():
        _mount_public(Path(config.public_dir))

    logger.info(f"Initialized annotator with data from {config.data_dir}")
