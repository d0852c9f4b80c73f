"""
Annotation Storage Layer

JSON-backed persistence for per-track annotation records and the shared
annotation index.

## Layout

    <annotations_dir>/<track_id>.json   one record per track, overwritten on re-save
    <annotations_dir>/_index.json       {"by_track": {...}, "total": N}

## Single-User Assumption

Saving a record is a read-modify-write of _index.json with no locking.
Concurrent writers can lose index entries (last writer wins). The record
files themselves are unaffected.

If multi-session correctness becomes a requirement, the index would need:
- A file lock around the read-modify-write, or
- A single writer process, or
- An append-only log from which `total` is derived
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import ANNOTATIONS_DIRNAME, INDEX_FILENAME
from .models import AnnotationIndex, AnnotationRecord

logger = logging.getLogger(__name__)

INDEX_STEM = Path(INDEX_FILENAME).stem


def is_storable_track_id(track_id: str) -> bool:
    """
    Check whether a track id can name a record file inside the annotations
    directory.

    Rejects empty ids, path components, separators and the index file name.
    """
    if not track_id or track_id in (".", ".."):
        return False
    if "/" in track_id or "\\" in track_id or "\x00" in track_id:
        return False
    return track_id != INDEX_STEM


class AnnotationStorage:
    """
    Flat-file annotation persistence.

    The index file is created empty on first use so that readers never
    see a missing index.
    """

    def __init__(self, annotations_dir: Path):
        """
        Initialize storage, creating the directory and empty index if needed.

        Args:
            annotations_dir: Directory holding record files and the index
        """
        self.annotations_dir = Path(annotations_dir)
        self.index_path = self.annotations_dir / INDEX_FILENAME
        self._ensure_storage()

    def _ensure_storage(self) -> None:
        """Ensure the annotations directory and index file exist."""
        self.annotations_dir.mkdir(parents=True, exist_ok=True)

        if not self.index_path.exists():
            self._write_json(self.index_path, AnnotationIndex().to_dict())
            logger.info(f"Initialized empty annotation index at {self.index_path}")

    def _write_json(self, path: Path, data: Dict[str, Any]) -> None:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)

    def _record_path(self, track_id: str) -> Path:
        return self.annotations_dir / f"{track_id}.json"

    def read_index(self) -> AnnotationIndex:
        """Read and parse the index file."""
        with open(self.index_path, 'r', encoding='utf-8') as f:
            return AnnotationIndex.from_dict(json.load(f))

    def save_annotation(self, track_id: str, selections: Dict[str, List[str]]) -> AnnotationRecord:
        """
        Persist an annotation and update the index.

        Writes the record first, then re-reads the index, upserts the entry
        for this track and writes the index back. Replays overwrite both.

        Args:
            track_id: Track being annotated
            selections: Facet name to list of tags

        Returns:
            The persisted record

        Raises:
            ValueError: If track_id cannot name a record file
            OSError: If a file cannot be written
        """
        if not is_storable_track_id(track_id):
            raise ValueError(f"Invalid track_id: {track_id!r}")

        record = AnnotationRecord.create(track_id, selections)
        self._write_json(self._record_path(track_id), record.to_dict())

        index = self.read_index()
        index.upsert(
            track_id,
            path=f"{ANNOTATIONS_DIRNAME}/{track_id}.json",
            saved_at=record.saved_at.isoformat(),
        )
        self._write_json(self.index_path, index.to_dict())

        logger.info(f"Saved annotation for track {track_id} (index total: {index.total})")
        return record

    def get_annotation(self, track_id: str) -> Optional[AnnotationRecord]:
        """
        Read the stored record for a track.

        Returns:
            The record, or None if the track has not been annotated
        """
        if not is_storable_track_id(track_id):
            return None

        path = self._record_path(track_id)
        if not path.exists():
            return None

        with open(path, 'r', encoding='utf-8') as f:
            return AnnotationRecord.from_dict(json.load(f))
