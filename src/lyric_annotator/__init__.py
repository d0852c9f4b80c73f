"""
Lyric Annotator Module

Manual labeling of song lyrics across four facets: emotional tone,
thematic content, narrative structure and lyrical style.

Key components:
- CatalogStore: Tag vocabulary and track corpus, read from disk per request
- AnnotationStorage: Per-track record files plus the derived index
- AnnotationSession: Client-side queue, selections and skip/requeue
- SessionController: Drives a session against the HTTP API
- FacetSearch: Fuzzy filtering of a facet's vocabulary
"""

from .models import Facet, Track, AnnotationRecord, AnnotationIndex
from .store import CatalogStore
from .storage import AnnotationStorage
from .search import FacetSearch
from .session import AnnotationSession, SessionState
from .controller import SessionController, Notice

__all__ = [
    'Facet',
    'Track',
    'AnnotationRecord',
    'AnnotationIndex',
    'CatalogStore',
    'AnnotationStorage',
    'FacetSearch',
    'AnnotationSession',
    'SessionState',
    'SessionController',
    'Notice',
]
