"""
Session Controller

Drives an AnnotationSession against the API: loads the vocabulary and
corpus, performs saves, waits out the success notice, keeps local
snapshots and emits user-visible notices.

All failures a user can act on are reported as Notice objects rather
than exceptions:
- load failures: error notice, session stays LOADING
- save failures: error notice, selections kept for a retry
- refused actions: warning notice, no request issued
"""

import asyncio
import contextlib
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from .client import AnnotatorClient
from .config import AnnotatorConfig
from .export import write_export
from .search import FacetSearch
from .session import AnnotationSession, SessionState
from .snapshot import (
    FONT_SCALE_DEFAULT,
    SnapshotStore,
    decrease_font_scale,
    increase_font_scale,
)

logger = logging.getLogger(__name__)


@dataclass
class Notice:
    """A transient user-visible message."""
    message: str
    icon: str = "Info"
    level: str = "info"     # "info" | "success" | "warning" | "error"


def _is_unfinished(snapshot: Dict[str, Any]) -> bool:
    """Whether a snapshot still has tracks left to annotate."""
    cursor = snapshot.get('current_index', 0)
    return cursor < len(snapshot.get('assigned_tracks', [])) or bool(snapshot.get('pending_tracks'))


class SessionController:
    """
    Orchestrates one annotation session.

    Holds no module-level state: the session, client and snapshot store
    are all passed in or created per instance.
    """

    def __init__(
        self,
        client: AnnotatorClient,
        config: Optional[AnnotatorConfig] = None,
        snapshots: Optional[SnapshotStore] = None,
        rng: Optional[random.Random] = None,
        session: Optional[AnnotationSession] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            client: API client
            config: Behavioural settings (queue size, delays, thresholds)
            snapshots: Local snapshot store; snapshots are skipped if None
            rng: Random source for queue assignment
            session: Existing session to drive; a new one is created if None
            sleep: Awaitable delay, replaceable in tests
        """
        self.client = client
        self.config = config or AnnotatorConfig()
        self.snapshots = snapshots
        self.rng = rng or random.Random()
        self.session = session or AnnotationSession.create()
        self._sleep = sleep

        self.searchers: Dict[str, FacetSearch] = {}
        self.notices: List[Notice] = []
        self._listeners: List[Callable[[Notice], None]] = []
        self.font_scale = FONT_SCALE_DEFAULT
        self.export_enabled = False
        self._autosave_task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Notices
    # ------------------------------------------------------------------

    def on_notice(self, callback: Callable[[Notice], None]) -> None:
        """Register a callback invoked for every notice."""
        self._listeners.append(callback)

    def notify(self, message: str, icon: str = "Info", level: str = "info") -> Notice:
        notice = Notice(message=message, icon=icon, level=level)
        self.notices.append(notice)
        for callback in self._listeners:
            callback(notice)
        return notice

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def initialize(self, restore: bool = True) -> bool:
        """
        Fetch vocabulary and corpus concurrently and assign the queue.

        With restore=True an unexpired, unfinished local snapshot is resumed
        instead of assigning a new queue.

        Returns:
            True if the session left LOADING
        """
        self._load_font_scale()

        try:
            tags, corpus = await asyncio.gather(
                self.client.fetch_tags(),
                self.client.fetch_tracks(),
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error loading data: {e}")
            self.notify("Failed to load data. Please refresh.", "Error", "error")
            return False

        resumed = self._resume(tags) if (restore and self.snapshots) else None
        if resumed is not None:
            self.session = resumed
            logger.info(f"Resumed session {self.session.session_id} at track {self.session.cursor}")
            self.notify("Resumed previous session", "Resume", "info")
        else:
            self.session.load(tags, corpus, self.config.queue_size, self.rng)
            logger.info(
                f"Session {self.session.session_id}: assigned {len(self.session.queue)} "
                f"of {len(corpus)} tracks"
            )

        self.searchers = {
            facet: FacetSearch(vocabulary, self.config.search_score_cutoff)
            for facet, vocabulary in self.session.vocabulary.items()
        }

        self.notify("Data loaded successfully!", "Success", "success")
        if self.session.is_completed:
            self._complete()
        self.snapshot()
        return True

    def _resume(self, tags: Dict[str, List[str]]) -> Optional[AnnotationSession]:
        """
        Rebuild a session from an unfinished local snapshot.

        A snapshot that cannot be restored is discarded and None is
        returned, so a fresh queue is assigned instead.
        """
        snapshot = self.snapshots.load_session()
        if not snapshot:
            return None

        resumed = AnnotationSession.create()
        try:
            if not _is_unfinished(snapshot):
                return None
            resumed.restore(tags, snapshot)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding unusable session snapshot: {e}")
            self.snapshots.clear_session()
            return None
        return resumed

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def toggle(self, facet: str, tag: str) -> Optional[bool]:
        """
        Toggle a tag for the current track.

        Returns:
            New selected state, or None if the toggle was refused
        """
        if self.session.current is None:
            self.notify("No track selected", "Warning", "warning")
            return None
        if self.session.state == SessionState.SAVING:
            self.notify("Save in progress", "Warning", "warning")
            return None
        return self.session.toggle_tag(facet, tag)

    def search(self, facet: str, query: str) -> List[str]:
        """Filter a facet's displayed tags. Selections are untouched."""
        searcher = self.searchers.get(facet)
        if searcher is None:
            searcher = FacetSearch(self.session.vocabulary.get(facet, []), self.config.search_score_cutoff)
            self.searchers[facet] = searcher
        results = searcher.search(query)
        self.session.apply_filter(facet, query, results)
        return results

    def clear(self) -> None:
        self.session.clear_selections()
        self.notify("All selections cleared", "Clear", "info")

    def skip(self) -> bool:
        requeued_before = len(self.session.requeued_ids)
        track = self.session.skip()
        if track is None:
            return False

        logger.info(f"Skipped track {track.track_id}")
        self.notify("Track skipped", "Skip", "info")
        self._after_advance(len(self.session.requeued_ids) > requeued_before)
        return True

    async def confirm(self) -> bool:
        """
        Save the current selections.

        Returns:
            True if the annotation was persisted
        """
        refusal = self.session.save_refusal()
        if refusal:
            self.notify(refusal, "Warning", "warning")
            return False

        total = self.session.selection_count
        payload = self.session.begin_save()

        try:
            await self.client.save_annotation(payload)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Save failed for track {payload['track_id']}: {e}")
            self.session.fail_save()
            self.notify("Failed to save annotations", "Error", "error")
            return False

        self.session.complete_save(payload)
        self.notify(f"Annotations saved! ({total} tags)", "Success", "success")

        # Let the success notice show before the next track replaces it
        await self._sleep(self.config.save_display_delay)

        requeued = self.session.advance()
        self._after_advance(requeued)
        return True

    def _after_advance(self, requeued: bool) -> None:
        if requeued:
            self.notify("Showing skipped tracks", "Info", "info")
        if self.session.is_completed:
            self._complete()
        self.snapshot()

    def _complete(self) -> None:
        self.export_enabled = True
        logger.info(f"Session {self.session.session_id} completed with {self.session.progress} annotations")
        self.notify("All tracks completed! You can now download your annotations.", "Success", "success")

    def export(self, output_dir: Path) -> Optional[Path]:
        """Write the session export; refused until the session completes."""
        if not self.export_enabled:
            self.notify("Export is available once all tracks are completed", "Warning", "warning")
            return None
        path = write_export(self.session, output_dir)
        self.notify("Annotations downloaded successfully!", "Success", "success")
        return path

    async def stored_annotation(self) -> Optional[Dict[str, Any]]:
        """Server copy of the current track's annotation, if any."""
        track = self.session.current
        if track is None:
            return None
        try:
            return await self.client.get_annotation(track.track_id)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error reading annotation for {track.track_id}: {e}")
            self.notify("Failed to read annotation", "Error", "error")
            return None

    # ------------------------------------------------------------------
    # Text size
    # ------------------------------------------------------------------

    def _load_font_scale(self) -> None:
        if self.snapshots is None:
            return
        scale = self.snapshots.load_font_scale()
        if scale is not None:
            self.font_scale = scale

    def _set_font_scale(self, scale: float, message: str, icon: str) -> None:
        self.font_scale = scale
        if self.snapshots is not None:
            self.snapshots.save_font_scale(scale)
        self.notify(message, icon, "info")

    def increase_text_size(self) -> None:
        scale = increase_font_scale(self.font_scale)
        self._set_font_scale(scale, f"Text size: {round(scale * 100)}%", "Text")

    def decrease_text_size(self) -> None:
        scale = decrease_font_scale(self.font_scale)
        self._set_font_scale(scale, f"Text size: {round(scale * 100)}%", "Text")

    def reset_text_size(self) -> None:
        self._set_font_scale(FONT_SCALE_DEFAULT, "Text size reset to 100%", "Reset")

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def snapshot(self) -> None:
        """
        Write a best-effort local snapshot of the session.

        Skipped while a save is in flight: progress already counts the saved
        track but the cursor has not moved past it yet.
        """
        if self.snapshots is None:
            return
        if self.session.state in (SessionState.LOADING, SessionState.SAVING):
            return
        self.snapshots.save_session(self.session.to_snapshot())

    async def _autosave_loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.autosave_interval)
            self.snapshot()

    def start_autosave(self) -> None:
        """Snapshot periodically until close() is awaited."""
        if self._autosave_task is None:
            self._autosave_task = asyncio.create_task(self._autosave_loop())

    async def close(self) -> None:
        """Stop autosave and write a final snapshot."""
        if self._autosave_task is not None:
            self._autosave_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._autosave_task
            self._autosave_task = None
        self.snapshot()
