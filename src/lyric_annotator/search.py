"""
Fuzzy search over a facet's tag vocabulary.

Each facet gets its own FacetSearch built once from its static vocabulary.
Matching is approximate: a query matches a tag when the best-aligned
substring of the tag scores at or above the cutoff, so typos and partial
words still find their tag.
"""

from typing import List, Sequence

from rapidfuzz import fuzz, process, utils

DEFAULT_SCORE_CUTOFF = 65.0


class FacetSearch:
    """Approximate string matching over one facet's vocabulary."""

    def __init__(self, vocabulary: Sequence[str], score_cutoff: float = DEFAULT_SCORE_CUTOFF):
        """
        Args:
            vocabulary: Ordered tag list for the facet
            score_cutoff: Minimum similarity (0-100) for a tag to match
        """
        self.vocabulary: List[str] = list(vocabulary)
        self.score_cutoff = score_cutoff

    def search(self, query: str) -> List[str]:
        """
        Rank vocabulary tags against a query, best match first.

        An empty or whitespace-only query returns the full vocabulary in its
        original order. Ties between equal scores have no guaranteed order.
        """
        q = query.strip()
        if not q:
            return list(self.vocabulary)

        results = process.extract(
            q,
            self.vocabulary,
            scorer=fuzz.partial_ratio,
            processor=utils.default_process,
            score_cutoff=self.score_cutoff,
            limit=None,
        )
        return [choice for choice, _score, _index in results]


def search(query: str, vocabulary: Sequence[str],
           score_cutoff: float = DEFAULT_SCORE_CUTOFF) -> List[str]:
    """One-shot search without keeping an index around."""
    return FacetSearch(vocabulary, score_cutoff).search(query)
