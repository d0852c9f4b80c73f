"""
Annotation Session State Machine

Owns the client side of an annotation run: the randomized track queue,
the cursor, per-facet selections, skip/requeue and completion.

States:
    LOADING -> READY(track) -> REVIEWING(track, selections) -> SAVING
            -> READY(next track) ... -> COMPLETED

Each user action is a method on AnnotationSession. Methods only change
state; network I/O, delays and notices live in SessionController.

## Skip / requeue

Skipped tracks go to a pending list. When the cursor runs off the end of
the queue the pending list is appended in skip order and cleared. A track
skipped again during that second pass is dropped, so every track is shown
at most twice and the session always terminates.
"""

import random
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set

from .config import DEFAULT_QUEUE_SIZE
from .models import FACETS, Track


class SessionState(str, Enum):
    """Lifecycle state of an annotation session."""
    LOADING = "loading"
    READY = "ready"            # Track shown, nothing selected
    REVIEWING = "reviewing"    # Track shown, at least one tag selected
    SAVING = "saving"          # Save in flight, save control disabled
    COMPLETED = "completed"


def generate_session_id() -> str:
    """Session id of the form session-<epoch ms>-<9 hex chars>."""
    return f"session-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


def eligible_tracks(entries: Iterable[Dict[str, Any]]) -> List[Track]:
    """Keep only corpus entries with both an id and non-empty lyrics."""
    tracks = (Track.from_dict(entry) for entry in entries)
    return [t for t in tracks if t.is_eligible]


def shuffle_tracks(tracks: List[Track], rng: Optional[random.Random] = None) -> List[Track]:
    """
    Return a uniformly shuffled copy using Fisher-Yates.

    Args:
        tracks: Tracks to shuffle (left untouched)
        rng: Random source; pass a seeded random.Random for reproducibility
    """
    rng = rng or random.Random()
    shuffled = list(tracks)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def build_queue(tracks: List[Track], size: int = DEFAULT_QUEUE_SIZE,
                rng: Optional[random.Random] = None) -> List[Track]:
    """Shuffle eligible tracks and keep the first `size`."""
    return shuffle_tracks(tracks, rng)[:size]


@dataclass
class AnnotationSession:
    """
    State of one annotation run.

    The cursor indexes `queue`; the track under the cursor is the only
    track on screen. Selections and display filters are per facet and
    independent of each other: filtering a tag out of view keeps it selected.
    """
    session_id: str
    created_at: datetime
    state: SessionState = SessionState.LOADING
    vocabulary: Dict[str, List[str]] = field(default_factory=dict)
    queue: List[Track] = field(default_factory=list)
    cursor: int = 0
    pending: List[Track] = field(default_factory=list)
    requeued_ids: Set[str] = field(default_factory=set)
    dropped: List[Track] = field(default_factory=list)
    assigned_count: int = 0
    selections: Dict[str, Set[str]] = field(
        default_factory=lambda: {f.value: set() for f in FACETS}
    )
    filtered: Dict[str, List[str]] = field(default_factory=dict)
    queries: Dict[str, str] = field(default_factory=dict)
    progress: int = 0
    completed_annotations: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def create(cls) -> 'AnnotationSession':
        """Factory method for a fresh session in the LOADING state."""
        return cls(
            session_id=generate_session_id(),
            created_at=datetime.now(timezone.utc),
        )

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def current(self) -> Optional[Track]:
        """Track under the cursor, or None when loading or completed."""
        if self.state in (SessionState.LOADING, SessionState.COMPLETED):
            return None
        if self.cursor < len(self.queue):
            return self.queue[self.cursor]
        return None

    @property
    def selection_count(self) -> int:
        return sum(len(tags) for tags in self.selections.values())

    @property
    def remaining(self) -> int:
        """Tracks not yet consumed, including the current one and pending skips."""
        total = len(self.queue) + len(self.pending)
        return max(0, total - self.cursor)

    @property
    def is_completed(self) -> bool:
        return self.state == SessionState.COMPLETED

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, vocabulary: Dict[str, List[str]], corpus: Iterable[Dict[str, Any]],
             queue_size: int = DEFAULT_QUEUE_SIZE, rng: Optional[random.Random] = None) -> None:
        """
        Leave LOADING with a freshly assigned queue.

        An empty eligible corpus completes the session immediately.
        """
        self.set_vocabulary(vocabulary)
        self.queue = build_queue(eligible_tracks(corpus), queue_size, rng)
        self.assigned_count = len(self.queue)
        self.cursor = 0
        self.pending = []
        self.requeued_ids = set()
        self.state = SessionState.READY
        self._settle()

    def set_vocabulary(self, vocabulary: Dict[str, List[str]]) -> None:
        """Install the facet vocabulary and reset display filters."""
        self.vocabulary = {f.value: list(vocabulary.get(f.value, [])) for f in FACETS}
        self.reset_filters()

    def reset_filters(self) -> None:
        self.filtered = {facet: list(tags) for facet, tags in self.vocabulary.items()}
        self.queries = {facet: "" for facet in self.vocabulary}

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def _check_facet(self, facet: str) -> None:
        if facet not in self.selections:
            raise ValueError(f"Unknown facet: {facet}")

    def toggle_tag(self, facet: str, tag: str) -> bool:
        """
        Flip a tag's membership in a facet's selection.

        Returns:
            True if the tag is now selected

        Raises:
            ValueError: If the facet is unknown or the tag is not in its vocabulary
        """
        self._check_facet(facet)
        if tag not in self.vocabulary.get(facet, []):
            raise ValueError(f"Tag {tag!r} is not in the {facet} vocabulary")

        selected = self.selections[facet]
        if tag in selected:
            selected.discard(tag)
        else:
            selected.add(tag)

        if self.state in (SessionState.READY, SessionState.REVIEWING):
            self.state = SessionState.REVIEWING if self.selection_count else SessionState.READY
        return tag in selected

    def apply_filter(self, facet: str, query: str, results: List[str]) -> None:
        """Replace a facet's displayed tags with search results."""
        self._check_facet(facet)
        self.queries[facet] = query
        self.filtered[facet] = list(results)

    def clear_selections(self) -> None:
        """Empty every selection and reset queries and display filters."""
        for tags in self.selections.values():
            tags.clear()
        self.reset_filters()
        if self.state == SessionState.REVIEWING:
            self.state = SessionState.READY

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _settle(self) -> bool:
        """
        Resolve a cursor at the end of the queue.

        Returns:
            True if pending tracks were appended for their second pass
        """
        if self.cursor < len(self.queue):
            return False
        if self.pending:
            self.queue.extend(self.pending)
            self.requeued_ids.update(t.track_id for t in self.pending)
            self.pending = []
            return True
        self.state = SessionState.COMPLETED
        return False

    def advance(self) -> bool:
        """
        Move past the current track, clearing selections.

        Returns:
            True if skipped tracks were requeued by this step
        """
        self.clear_selections()
        self.cursor += 1
        self.state = SessionState.READY
        return self._settle()

    def skip(self) -> Optional[Track]:
        """
        Defer the current track to the pending list and advance.

        A track already on its second pass is dropped instead. Nothing is
        persisted.

        Returns:
            The skipped track, or None if there is no current track
        """
        track = self.current
        if track is None or self.state == SessionState.SAVING:
            return None

        if track.track_id in self.requeued_ids:
            self.dropped.append(track)
        else:
            self.pending.append(track)

        self.advance()
        return track

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def save_refusal(self) -> Optional[str]:
        """Reason a save cannot start, or None if it may proceed."""
        if self.state == SessionState.SAVING:
            return "Save already in progress"
        if self.current is None:
            return "No track selected"
        if self.selection_count == 0:
            return "Please select at least one tag"
        return None

    def begin_save(self) -> Dict[str, Any]:
        """
        Enter SAVING and build the request payload.

        Callers must check save_refusal() first.

        Returns:
            {"track_id": ..., "selections": {facet: [tags, ...]}} with a
            list for every facet, sorted for stable output
        """
        track = self.current
        if track is None:
            raise ValueError("No track selected")

        self.state = SessionState.SAVING
        return {
            'track_id': track.track_id,
            'selections': {facet: sorted(tags) for facet, tags in self.selections.items()},
        }

    def complete_save(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Record a successful save locally.

        The session stays in SAVING until advance() so that the success
        notice is visible before the next track appears.

        Returns:
            The local annotation copy kept for export
        """
        track = self.current
        annotation = {
            'track_id': payload['track_id'],
            'track_name': track.track_name if track else "",
            'artist_name': track.artist_name if track else "",
            'selections': payload['selections'],
            'annotated_at': datetime.now(timezone.utc).isoformat(),
            'session_id': self.session_id,
        }
        self.completed_annotations.append(annotation)
        self.progress += 1
        return annotation

    def fail_save(self) -> None:
        """Return to the pre-save state with selections intact."""
        if self.state == SessionState.SAVING:
            self.state = SessionState.REVIEWING if self.selection_count else SessionState.READY

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def to_snapshot(self) -> Dict[str, Any]:
        """Serialize the resumable parts of the session."""
        return {
            'session_id': self.session_id,
            'created_at': self.created_at.isoformat(),
            'completed_annotations': self.completed_annotations,
            'assigned_tracks': [t.to_dict() for t in self.queue],
            'assigned_count': self.assigned_count,
            'pending_tracks': [t.to_dict() for t in self.pending],
            'requeued_ids': sorted(self.requeued_ids),
            'current_index': self.cursor,
            'progress': self.progress,
        }

    def restore(self, vocabulary: Dict[str, List[str]], snapshot: Dict[str, Any]) -> None:
        """
        Resume from a snapshot instead of assigning a new queue.

        Raises:
            ValueError: If the cursor is not a non-negative integer
            AttributeError, TypeError: If track entries are not objects
        """
        cursor = snapshot.get('current_index', 0)
        if not isinstance(cursor, int) or isinstance(cursor, bool) or cursor < 0:
            raise ValueError(f"Invalid current_index in snapshot: {cursor!r}")

        self.session_id = snapshot.get('session_id') or self.session_id
        if snapshot.get('created_at'):
            self.created_at = datetime.fromisoformat(snapshot['created_at'])
        self.set_vocabulary(vocabulary)
        self.queue = [Track.from_dict(t) for t in snapshot.get('assigned_tracks', [])]
        self.assigned_count = snapshot.get('assigned_count', len(self.queue))
        self.pending = [Track.from_dict(t) for t in snapshot.get('pending_tracks', [])]
        self.requeued_ids = set(snapshot.get('requeued_ids', []))
        self.cursor = cursor
        self.progress = snapshot.get('progress', 0)
        self.completed_annotations = list(snapshot.get('completed_annotations', []))
        self.state = SessionState.READY
        self._settle()
