"""
Tag vocabulary and track corpus store.

Both documents are static JSON files read fresh from disk on every call.
There is no caching layer; the files are small and requests are rare.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class CatalogStore:
    """Read-only access to the vocabulary and corpus documents."""

    def __init__(self, tags_path: Path, tracks_path: Path):
        """
        Args:
            tags_path: JSON document mapping facet name to ordered tag list
            tracks_path: JSON array of track entries
        """
        self.tags_path = Path(tags_path)
        self.tracks_path = Path(tracks_path)

    def _read_json(self, path: Path) -> Any:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def load_tags(self) -> Dict[str, List[str]]:
        """
        Load the tag vocabulary.

        Raises:
            OSError: If the file cannot be read
            json.JSONDecodeError: If the file is not valid JSON
        """
        return self._read_json(self.tags_path)

    def load_tracks(self) -> List[Dict[str, Any]]:
        """
        Load the full track corpus, including entries that are not eligible
        for annotation. Filtering is the client's job.

        Raises:
            OSError: If the file cannot be read
            json.JSONDecodeError: If the file is not valid JSON
        """
        tracks = self._read_json(self.tracks_path)
        logger.debug(f"Loaded {len(tracks)} tracks from {self.tracks_path}")
        return tracks
