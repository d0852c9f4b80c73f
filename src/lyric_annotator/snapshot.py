"""
Client-local persistence.

Best-effort snapshots that let an annotator resume after a restart:

    resonote-session.json      session id, annotations, queue, cursor, progress
    resonote-font-scale.json   text scale preference

Each file carries a millisecond timestamp and is discarded on load once it
is older than its expiry window. Failures are logged and never interrupt
the session.
"""

import json
import logging
import math
import time
from pathlib import Path
from typing import Any, Dict, Optional

from .config import (
    FONT_SCALE_FILENAME,
    FONT_SCALE_MAX_AGE_DAYS,
    SESSION_MAX_AGE_HOURS,
    SESSION_SNAPSHOT_FILENAME,
)

logger = logging.getLogger(__name__)

FONT_SCALE_MIN = 0.5
FONT_SCALE_MAX = 2.0
FONT_SCALE_STEP = 0.1
FONT_SCALE_DEFAULT = 1.0


def _now_ms() -> int:
    return int(time.time() * 1000)


def increase_font_scale(scale: float) -> float:
    """One step larger, capped at FONT_SCALE_MAX."""
    if scale < FONT_SCALE_MAX:
        scale = round(scale + FONT_SCALE_STEP, 1)
    return min(scale, FONT_SCALE_MAX)


def decrease_font_scale(scale: float) -> float:
    """One step smaller, floored at FONT_SCALE_MIN."""
    if scale > FONT_SCALE_MIN:
        scale = round(scale - FONT_SCALE_STEP, 1)
    return max(scale, FONT_SCALE_MIN)


class SnapshotStore:
    """Reads and writes snapshot files in a local directory."""

    def __init__(
        self,
        snapshot_dir: Path,
        session_max_age_hours: int = SESSION_MAX_AGE_HOURS,
        font_scale_max_age_days: int = FONT_SCALE_MAX_AGE_DAYS,
    ):
        self.snapshot_dir = Path(snapshot_dir)
        self.session_path = self.snapshot_dir / SESSION_SNAPSHOT_FILENAME
        self.font_scale_path = self.snapshot_dir / FONT_SCALE_FILENAME
        self.session_max_age_ms = session_max_age_hours * 60 * 60 * 1000
        self.font_scale_max_age_ms = font_scale_max_age_days * 24 * 60 * 60 * 1000

    def _write(self, path: Path, data: Dict[str, Any]) -> bool:
        try:
            self.snapshot_dir.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            return True
        except (OSError, TypeError) as e:
            logger.warning(f"Failed to write snapshot {path}: {e}")
            return False

    def _read_fresh(self, path: Path, max_age_ms: int, now_ms: Optional[int]) -> Optional[Dict[str, Any]]:
        """Read a snapshot, deleting it if it has expired."""
        if not path.exists():
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load snapshot {path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Discarding malformed snapshot {path}: expected an object")
            path.unlink(missing_ok=True)
            return None

        try:
            timestamp = int(data.get('timestamp', 0))
        except (TypeError, ValueError) as e:
            logger.warning(f"Discarding malformed snapshot {path}: bad timestamp ({e})")
            path.unlink(missing_ok=True)
            return None

        now_ms = _now_ms() if now_ms is None else now_ms
        if now_ms - timestamp < max_age_ms:
            return data

        logger.info(f"Discarding expired snapshot {path}")
        path.unlink(missing_ok=True)
        return None

    def save_session(self, snapshot: Dict[str, Any], now_ms: Optional[int] = None) -> bool:
        """Write a session snapshot stamped with the current time."""
        data = dict(snapshot)
        data['timestamp'] = _now_ms() if now_ms is None else now_ms
        return self._write(self.session_path, data)

    def load_session(self, now_ms: Optional[int] = None) -> Optional[Dict[str, Any]]:
        """Return the session snapshot if it exists and has not expired."""
        return self._read_fresh(self.session_path, self.session_max_age_ms, now_ms)

    def clear_session(self) -> None:
        self.session_path.unlink(missing_ok=True)

    def save_font_scale(self, scale: float, now_ms: Optional[int] = None) -> bool:
        data = {'scale': scale, 'timestamp': _now_ms() if now_ms is None else now_ms}
        return self._write(self.font_scale_path, data)

    def load_font_scale(self, now_ms: Optional[int] = None) -> Optional[float]:
        """
        Return the saved text scale if it exists and has not expired.

        The value is clamped to [FONT_SCALE_MIN, FONT_SCALE_MAX]; a
        non-numeric scale counts as missing.
        """
        data = self._read_fresh(self.font_scale_path, self.font_scale_max_age_ms, now_ms)
        if data is None:
            return None

        try:
            scale = float(data.get('scale', FONT_SCALE_DEFAULT))
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non-numeric text scale in {self.font_scale_path}")
            return None
        if not math.isfinite(scale):
            logger.warning(f"Ignoring non-finite text scale in {self.font_scale_path}")
            return None
        return min(max(scale, FONT_SCALE_MIN), FONT_SCALE_MAX)
