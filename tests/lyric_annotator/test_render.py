"""
Tests for the session view projection and its text rendering.
"""

import random

from conftest import make_track
from src.lyric_annotator.render import project, render_text
from src.lyric_annotator.session import AnnotationSession, SessionState


def loaded_session(vocabulary, tracks):
    session = AnnotationSession.create()
    session.load(vocabulary, tracks, 50, random.Random(0))
    return session


class TestProject:
    """Tests for project()."""

    def test_projection_is_idempotent(self, vocabulary, corpus):
        session = loaded_session(vocabulary, corpus)
        session.toggle_tag("Emotional_Tone", "Joyful")

        assert project(session) == project(session)
        assert session.state == SessionState.REVIEWING
        assert session.selection_count == 1

    def test_track_header(self, vocabulary):
        session = loaded_session(vocabulary, [make_track(3)])
        view = project(session)

        assert view.title == "Song 3"
        assert view.subtitle == "Artist 3 • TR0003"
        assert view.lyrics == "verse 3\nchorus 3"

    def test_missing_name_falls_back(self, vocabulary):
        session = loaded_session(vocabulary, [make_track(1, track_name="", artist_name="")])
        view = project(session)

        assert view.title == "Unknown Track"
        assert view.subtitle == "TR0001"

    def test_selected_flag_survives_filtering(self, vocabulary):
        session = loaded_session(vocabulary, [make_track(1)])
        session.toggle_tag("Emotional_Tone", "Melancholic")
        session.apply_filter("Emotional_Tone", "joy", ["Joyful"])

        tone = project(session).facets[0]
        assert tone.query == "joy"
        assert [(t.tag, t.selected) for t in tone.tags] == [("Joyful", False)]

        session.apply_filter("Emotional_Tone", "", vocabulary["Emotional_Tone"])
        tone = project(session).facets[0]
        assert ("Melancholic", True) in [(t.tag, t.selected) for t in tone.tags]

    def test_facets_in_fixed_order(self, vocabulary):
        view = project(loaded_session(vocabulary, [make_track(1)]))
        assert [f.facet for f in view.facets] == [
            "Emotional_Tone", "Thematic_Content", "Narrative_Structure", "Lyrical_Style",
        ]

    def test_progress_counts(self, vocabulary):
        session = loaded_session(vocabulary, [make_track(i) for i in range(4)])
        session.advance()
        session.skip()

        view = project(session)
        assert view.remaining == 3       # two left in the queue plus the skipped one
        assert view.percentage == 40     # cursor 2 of 4 assigned + 1 pending

    def test_completed_view(self, vocabulary):
        session = loaded_session(vocabulary, [])
        view = project(session, export_enabled=True)

        assert view.title == "All tracks completed"
        assert view.lyrics == ""
        assert view.percentage == 0
        assert not view.save_enabled
        assert view.export_enabled

    def test_loading_view(self):
        view = project(AnnotationSession.create())
        assert view.title == "Loading..."
        assert not view.save_enabled

    def test_save_disabled_while_saving(self, vocabulary):
        session = loaded_session(vocabulary, [make_track(1)])
        session.toggle_tag("Emotional_Tone", "Joyful")
        session.begin_save()
        assert not project(session).save_enabled


class TestRenderText:
    """Tests for render_text()."""

    def test_marks_selected_tags(self, vocabulary):
        session = loaded_session(vocabulary, [make_track(1)])
        session.toggle_tag("Lyrical_Style", "Minimalist")

        text = render_text(project(session))
        assert "2.*Minimalist" in text
        assert "1. Metaphorical" in text

    def test_empty_filter_message(self, vocabulary):
        session = loaded_session(vocabulary, [make_track(1)])
        session.apply_filter("Thematic_Content", "zzz", [])

        assert "(no matching tags)" in render_text(project(session))

    def test_font_scale_narrows_lyrics(self, vocabulary):
        long_line = " ".join(["word"] * 40)
        session = loaded_session(vocabulary, [make_track(1, lyrics=long_line)])

        normal = render_text(project(session, font_scale=1.0), width=80)
        large = render_text(project(session, font_scale=2.0), width=80)
        assert len(large.splitlines()) > len(normal.splitlines())

    def test_zero_font_scale_does_not_crash(self, vocabulary):
        session = loaded_session(vocabulary, [make_track(1)])
        assert "Song 1" in render_text(project(session, font_scale=0))

    def test_export_hint_when_complete(self, vocabulary):
        session = loaded_session(vocabulary, [])
        assert "export" in render_text(project(session, export_enabled=True))
