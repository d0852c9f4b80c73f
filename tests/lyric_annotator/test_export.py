"""
Tests for the session export document.
"""

import json
import random
from datetime import datetime, timezone

from conftest import make_track
from src.lyric_annotator.export import build_export, export_filename, write_export
from src.lyric_annotator.session import AnnotationSession


def finished_session(vocabulary):
    """Three tracks: save, skip twice, save."""
    session = AnnotationSession.create()
    session.load(vocabulary, [make_track(i) for i in range(3)], 50, random.Random(4))

    session.toggle_tag("Emotional_Tone", "Hopeful")
    session.complete_save(session.begin_save())
    session.advance()

    session.skip()

    session.toggle_tag("Thematic_Content", "Love")
    session.complete_save(session.begin_save())
    session.advance()

    session.skip()      # requeued track skipped again: dropped
    return session


class TestBuildExport:
    """Tests for build_export()."""

    def test_document_fields(self, vocabulary):
        session = finished_session(vocabulary)
        completed_at = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

        doc = build_export(session, completed_at)

        assert session.is_completed
        assert doc["session_id"] == session.session_id
        assert doc["completed_at"] == "2024-05-01T12:00:00+00:00"
        assert doc["total_tracks"] == 3
        assert doc["completed_tracks"] == 2
        assert [a["selections"]["Emotional_Tone"] for a in doc["annotations"]] == [["Hopeful"], []]

    def test_assigned_tracks_listed_once(self, vocabulary):
        doc = build_export(finished_session(vocabulary))

        ids = [t["track_id"] for t in doc["assigned_tracks"]]
        assert sorted(ids) == ["TR0000", "TR0001", "TR0002"]
        assert set(doc["assigned_tracks"][0]) == {"track_id", "track_name", "artist_name"}

    def test_annotations_carry_session_id(self, vocabulary):
        session = finished_session(vocabulary)
        for annotation in build_export(session)["annotations"]:
            assert annotation["session_id"] == session.session_id
            assert annotation["annotated_at"]


class TestWriteExport:
    """Tests for write_export()."""

    def test_writes_named_file(self, vocabulary, temp_dir):
        session = finished_session(vocabulary)

        path = write_export(session, temp_dir / "exports")

        assert path.name == export_filename(session)
        assert path.name.startswith("resonote-annotations-session-")
        with open(path) as f:
            assert json.load(f)["completed_tracks"] == 2
