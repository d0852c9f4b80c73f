"""
Configuration for the lyric annotator.

Defines the file layout of the data directory and the behavioural
constants shared by the server and the annotation client.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# Data directory layout
TAGS_FILENAME = "all_unique_tags_cleaned_human_reviewed.json"
TRACKS_FILENAME = "eval.json"
ANNOTATIONS_DIRNAME = "annotations"
INDEX_FILENAME = "_index.json"

# Client-local snapshot files
SESSION_SNAPSHOT_FILENAME = "resonote-session.json"
FONT_SCALE_FILENAME = "resonote-font-scale.json"

DEFAULT_QUEUE_SIZE = 50
DEFAULT_PORT = 3000

# Local snapshot expiry
SESSION_MAX_AGE_HOURS = 24
FONT_SCALE_MAX_AGE_DAYS = 7


@dataclass
class AnnotatorConfig:
    """Settings for one annotator deployment."""

    data_dir: Path = field(default_factory=lambda: Path("data"))
    public_dir: Optional[Path] = None

    # Session behaviour
    queue_size: int = DEFAULT_QUEUE_SIZE
    search_score_cutoff: float = 65.0   # 0-100, higher is stricter
    save_display_delay: float = 0.8     # Seconds the success notice stays up before advancing
    autosave_interval: float = 30.0

    # Local persistence expiry
    session_snapshot_max_age_hours: int = SESSION_MAX_AGE_HOURS
    font_scale_max_age_days: int = FONT_SCALE_MAX_AGE_DAYS

    @property
    def tags_path(self) -> Path:
        return self.data_dir / TAGS_FILENAME

    @property
    def tracks_path(self) -> Path:
        return self.data_dir / TRACKS_FILENAME

    @property
    def annotations_dir(self) -> Path:
        return self.data_dir / ANNOTATIONS_DIRNAME

    @property
    def index_path(self) -> Path:
        return self.annotations_dir / INDEX_FILENAME

    @classmethod
    def from_env(cls) -> 'AnnotatorConfig':
        """
        Build configuration from environment variables.

        Recognised variables:
            ANNOTATOR_DATA_DIR: data directory (default: ./data)
            ANNOTATOR_PUBLIC_DIR: static files root (default: ./public if present)
            ANNOTATOR_QUEUE_SIZE: tracks assigned per session (default: 50)
        """
        data_dir = Path(os.environ.get("ANNOTATOR_DATA_DIR", "data"))

        public_env = os.environ.get("ANNOTATOR_PUBLIC_DIR")
        if public_env:
            public_dir = Path(public_env)
        else:
            public_dir = Path("public") if Path("public").is_dir() else None

        queue_size = int(os.environ.get("ANNOTATOR_QUEUE_SIZE", DEFAULT_QUEUE_SIZE))

        return cls(data_dir=data_dir, public_dir=public_dir, queue_size=queue_size)
