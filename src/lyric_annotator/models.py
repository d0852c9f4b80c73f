"""
Data Models for Lyric Annotation

Defines the facets, tracks, persisted annotation records and the
derived annotation index.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List


class Facet(str, Enum):
    """The four fixed annotation categories."""
    EMOTIONAL_TONE = "Emotional_Tone"
    THEMATIC_CONTENT = "Thematic_Content"
    NARRATIVE_STRUCTURE = "Narrative_Structure"
    LYRICAL_STYLE = "Lyrical_Style"


# Display order for facets
FACETS: List[Facet] = list(Facet)


@dataclass
class Track:
    """A song entry from the corpus."""
    track_id: str
    track_name: str = ""
    artist_name: str = ""
    lyrics: str = ""

    @property
    def is_eligible(self) -> bool:
        """A track can be annotated only with an id and non-empty lyrics."""
        return bool(self.track_id) and bool(self.lyrics)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            'track_id': self.track_id,
            'track_name': self.track_name,
            'artist_name': self.artist_name,
            'lyrics': self.lyrics,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Track':
        """Deserialize from a corpus entry. Missing or null fields become empty."""
        track_id = data.get('track_id')
        return cls(
            track_id=str(track_id) if track_id is not None else "",
            track_name=data.get('track_name') or "",
            artist_name=data.get('artist_name') or "",
            lyrics=data.get('lyrics') or "",
        )


@dataclass
class AnnotationRecord:
    """
    One persisted annotation.

    Exactly one record exists per track; a re-save overwrites it.
    """
    track_id: str
    selections: Dict[str, List[str]]
    saved_at: datetime

    @classmethod
    def create(cls, track_id: str, selections: Dict[str, List[str]]) -> 'AnnotationRecord':
        """Factory method stamping the current UTC time."""
        return cls(
            track_id=track_id,
            selections=selections,
            saved_at=datetime.now(timezone.utc),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'track_id': self.track_id,
            'selections': self.selections,
            'saved_at': self.saved_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnnotationRecord':
        return cls(
            track_id=data['track_id'],
            selections=data.get('selections', {}),
            saved_at=datetime.fromisoformat(data['saved_at']),
        )


@dataclass
class IndexEntry:
    """Save metadata for one annotated track."""
    path: str
    saved_at: str

    def to_dict(self) -> Dict[str, str]:
        return {'path': self.path, 'saved_at': self.saved_at}


@dataclass
class AnnotationIndex:
    """
    Summary of every annotated track.

    Derived data: `total` is always recomputed from `by_track` and is
    never an independent source of truth.
    """
    by_track: Dict[str, IndexEntry] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.by_track)

    def upsert(self, track_id: str, path: str, saved_at: str) -> None:
        self.by_track[track_id] = IndexEntry(path=path, saved_at=saved_at)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'by_track': {k: v.to_dict() for k, v in self.by_track.items()},
            'total': self.total,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnnotationIndex':
        by_track = {
            track_id: IndexEntry(path=entry.get('path', ''), saved_at=entry.get('saved_at', ''))
            for track_id, entry in data.get('by_track', {}).items()
        }
        return cls(by_track=by_track)
