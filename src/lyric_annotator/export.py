"""
Session export.

Bundles the annotations saved during this session with session metadata.
Built entirely from local state: it never reads back from the server, so
saves from earlier sessions are not included.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .session import AnnotationSession

logger = logging.getLogger(__name__)


def export_filename(session: AnnotationSession) -> str:
    return f"resonote-annotations-{session.session_id}.json"


def build_export(session: AnnotationSession, completed_at: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Build the export document.

    `assigned_tracks` lists the original assignment once each, without the
    copies appended for the skip pass.
    """
    completed_at = completed_at or datetime.now(timezone.utc)
    assigned = session.queue[:session.assigned_count]
    return {
        'session_id': session.session_id,
        'completed_at': completed_at.isoformat(),
        'total_tracks': session.assigned_count,
        'completed_tracks': session.progress,
        'annotations': list(session.completed_annotations),
        'assigned_tracks': [
            {
                'track_id': t.track_id,
                'track_name': t.track_name,
                'artist_name': t.artist_name,
            }
            for t in assigned
        ],
    }


def write_export(session: AnnotationSession, output_dir: Path) -> Path:
    """
    Write the export document to output_dir.

    Returns:
        Path to the written file
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / export_filename(session)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(build_export(session), f, indent=2)

    logger.info(f"Exported {session.progress} annotations to {output_path}")
    return output_path
