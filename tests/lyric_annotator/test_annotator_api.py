"""
Tests for Lyric Annotator API.
"""

import json

import pytest
from fastapi.testclient import TestClient

from src.lyric_annotator import api
from src.lyric_annotator.api import app, init_app
from src.lyric_annotator.config import AnnotatorConfig, TAGS_FILENAME, TRACKS_FILENAME


@pytest.fixture
def config(data_dir):
    return AnnotatorConfig(data_dir=data_dir)


@pytest.fixture
def client(config):
    """Create test client with initialized app."""
    # Reset global state
    api.catalog = None
    api.storage = None

    init_app(config)

    with TestClient(app) as client:
        yield client


class TestUninitialized:
    """Requests before init_app report a server error."""

    def test_tags_before_init(self):
        api.catalog = None
        api.storage = None
        with TestClient(app) as client:
            response = client.get("/api/tags")
        assert response.status_code == 500


class TestTagsEndpoint:
    """Tests for /api/tags endpoint."""

    def test_returns_vocabulary_verbatim(self, client, vocabulary):
        response = client.get("/api/tags")
        assert response.status_code == 200
        assert response.json() == vocabulary

    def test_read_fresh_from_disk(self, client, config):
        """Edits to the document show up without a restart."""
        with open(config.tags_path, "w") as f:
            json.dump({"Emotional_Tone": ["Serene"]}, f)

        response = client.get("/api/tags")
        assert response.json() == {"Emotional_Tone": ["Serene"]}

    def test_missing_file_is_500(self, client, config):
        config.tags_path.unlink()
        response = client.get("/api/tags")
        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to load tags"

    def test_corrupt_file_is_500(self, client, config):
        config.tags_path.write_text("{not json")
        response = client.get("/api/tags")
        assert response.status_code == 500


class TestTracksEndpoint:
    """Tests for /api/tracks endpoint."""

    def test_returns_full_corpus(self, client, corpus):
        """Ineligible tracks are served too; filtering is client-side."""
        response = client.get("/api/tracks")
        assert response.status_code == 200
        assert response.json() == corpus

    def test_empty_corpus(self, client, config):
        config.tracks_path.write_text("[]")
        response = client.get("/api/tracks")
        assert response.status_code == 200
        assert response.json() == []

    def test_corrupt_file_is_500(self, client, config):
        config.tracks_path.write_text("[{")
        response = client.get("/api/tracks")
        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to load tracks"


class TestAnnotateEndpoint:
    """Tests for POST /api/annotate."""

    def test_save_returns_ok(self, client, config):
        response = client.post("/api/annotate", json={
            "track_id": "TR0001",
            "selections": {"Emotional_Tone": ["Joyful"]},
        })
        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert (config.annotations_dir / "TR0001.json").exists()

    @pytest.mark.parametrize("body", [
        {},
        {"track_id": "TR0001"},
        {"selections": {"Emotional_Tone": ["Joyful"]}},
        {"track_id": "", "selections": {"Emotional_Tone": ["Joyful"]}},
    ])
    def test_missing_fields_are_400(self, client, config, body):
        response = client.post("/api/annotate", json=body)
        assert response.status_code == 400
        assert response.json()["detail"] == "track_id and selections required"

        with open(config.index_path) as f:
            assert json.load(f)["total"] == 0

    def test_empty_selections_object_is_accepted(self, client):
        """Presence check only: an empty mapping still counts as present."""
        response = client.post("/api/annotate", json={"track_id": "TR0001", "selections": {}})
        assert response.status_code == 200

    def test_path_like_track_id_is_400(self, client):
        response = client.post("/api/annotate", json={
            "track_id": "../outside",
            "selections": {"Emotional_Tone": ["Joyful"]},
        })
        assert response.status_code == 400

    def test_numeric_track_id_is_stored_as_string(self, client, config):
        response = client.post("/api/annotate", json={
            "track_id": 123,
            "selections": {"Emotional_Tone": ["Joyful"]},
        })
        assert response.status_code == 200
        assert (config.annotations_dir / "123.json").exists()

        record = client.get("/api/annotation/123").json()
        assert record["track_id"] == "123"

        with open(config.index_path) as f:
            assert "123" in json.load(f)["by_track"]

    def test_zero_track_id_is_400(self, client):
        """Presence check treats a falsy id as missing."""
        response = client.post("/api/annotate", json={
            "track_id": 0,
            "selections": {"Emotional_Tone": ["Joyful"]},
        })
        assert response.status_code == 400

    def test_two_tracks_total_two(self, client, config):
        client.post("/api/annotate", json={"track_id": "TR0001", "selections": {"Emotional_Tone": ["Joyful"]}})
        client.post("/api/annotate", json={"track_id": "TR0002", "selections": {"Thematic_Content": ["Love"]}})

        with open(config.index_path) as f:
            index = json.load(f)

        assert index["total"] == 2
        assert index["by_track"]["TR0002"]["path"] == "annotations/TR0002.json"
        records = sorted(p.name for p in config.annotations_dir.glob("TR*.json"))
        assert records == ["TR0001.json", "TR0002.json"]

    def test_resave_keeps_total(self, client, config):
        client.post("/api/annotate", json={"track_id": "TR0001", "selections": {"Emotional_Tone": ["Joyful"]}})
        client.post("/api/annotate", json={"track_id": "TR0001", "selections": {"Emotional_Tone": ["Angry"]}})

        with open(config.index_path) as f:
            assert json.load(f)["total"] == 1

        record = client.get("/api/annotation/TR0001").json()
        assert record["selections"] == {"Emotional_Tone": ["Angry"]}

    def test_corrupt_index_is_500(self, client, config):
        config.index_path.write_text("not json")
        response = client.post("/api/annotate", json={
            "track_id": "TR0001",
            "selections": {"Emotional_Tone": ["Joyful"]},
        })
        assert response.status_code == 500


class TestAnnotationEndpoint:
    """Tests for GET /api/annotation/{track_id}."""

    def test_absent_is_null(self, client):
        response = client.get("/api/annotation/TR0005")
        assert response.status_code == 200
        assert response.json() is None

    def test_round_trip(self, client):
        selections = {
            "Emotional_Tone": ["Hopeful", "Nostalgic"],
            "Thematic_Content": [],
            "Narrative_Structure": ["Dialogue"],
            "Lyrical_Style": [],
        }
        client.post("/api/annotate", json={"track_id": "TR0003", "selections": selections})

        record = client.get("/api/annotation/TR0003").json()
        assert record["track_id"] == "TR0003"
        assert record["selections"] == selections
        assert record["saved_at"]

    def test_corrupt_record_is_500(self, client, config):
        (config.annotations_dir / "TR0004.json").write_text("{")
        response = client.get("/api/annotation/TR0004")
        assert response.status_code == 500


class TestFirstRun:
    """Tests for data directory bootstrapping."""

    def test_init_creates_empty_index(self, temp_dir):
        (temp_dir / TAGS_FILENAME).write_text("{}")
        (temp_dir / TRACKS_FILENAME).write_text("[]")

        init_app(AnnotatorConfig(data_dir=temp_dir))

        with open(temp_dir / "annotations" / "_index.json") as f:
            assert json.load(f) == {"by_track": {}, "total": 0}
