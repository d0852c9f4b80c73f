"""
Shared test fixtures and helpers for lyric annotator tests.
"""

import json
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, List

import pytest

from src.lyric_annotator.config import TAGS_FILENAME, TRACKS_FILENAME


def make_track(index: int, lyrics: str = None, **overrides) -> Dict[str, Any]:
    """Helper to create a corpus entry for testing.

    Args:
        index: Used to derive a unique id, name and artist
        lyrics: Lyrics text (defaults to a short verse mentioning the index)
        **overrides: Replace any field, e.g. track_id=None

    Returns:
        Dict shaped like an entry of the corpus document
    """
    entry = {
        "track_id": f"TR{index:04d}",
        "track_name": f"Song {index}",
        "artist_name": f"Artist {index % 7}",
        "lyrics": lyrics if lyrics is not None else f"verse {index}\nchorus {index}",
    }
    entry.update(overrides)
    return entry


SAMPLE_VOCABULARY: Dict[str, List[str]] = {
    "Emotional_Tone": ["Melancholic", "Joyful", "Angry", "Hopeful", "Nostalgic"],
    "Thematic_Content": ["Love", "Loss", "Rebellion", "Friendship"],
    "Narrative_Structure": ["First-person narrative", "Dialogue", "Non-linear"],
    "Lyrical_Style": ["Metaphorical", "Minimalist", "Storytelling"],
}


@pytest.fixture
def vocabulary() -> Dict[str, List[str]]:
    return {facet: list(tags) for facet, tags in SAMPLE_VOCABULARY.items()}


@pytest.fixture
def corpus() -> List[Dict[str, Any]]:
    """Ten eligible tracks plus two ineligible ones."""
    tracks = [make_track(i) for i in range(10)]
    tracks.append(make_track(98, lyrics=""))
    tracks.append(make_track(99, track_id=""))
    return tracks


@pytest.fixture
def temp_dir():
    """Create temporary directory."""
    path = tempfile.mkdtemp()
    yield Path(path)
    shutil.rmtree(path)


@pytest.fixture
def data_dir(temp_dir, vocabulary, corpus) -> Path:
    """Data directory holding the vocabulary and corpus documents."""
    with open(temp_dir / TAGS_FILENAME, "w") as f:
        json.dump(vocabulary, f)
    with open(temp_dir / TRACKS_FILENAME, "w") as f:
        json.dump(corpus, f)
    return temp_dir
