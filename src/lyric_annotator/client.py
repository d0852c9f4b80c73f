"""
Async HTTP client for the Lyric Annotator API.

Thin wrapper over httpx.AsyncClient. Every call raises httpx.HTTPError
(including HTTPStatusError for non-2xx responses) on failure.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://127.0.0.1:3000"


class AnnotatorClient:
    """API client used by the annotation session controller."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL,
                 http_client: Optional[httpx.AsyncClient] = None):
        """
        Args:
            base_url: Server root URL
            http_client: Preconfigured client (e.g. with a mock transport);
                         created on demand if omitted
        """
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(base_url=base_url)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> 'AnnotatorClient':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def fetch_tags(self) -> Dict[str, List[str]]:
        response = await self._client.get("/api/tags")
        response.raise_for_status()
        return response.json()

    async def fetch_tracks(self) -> List[Dict[str, Any]]:
        response = await self._client.get("/api/tracks")
        response.raise_for_status()
        return response.json()

    async def save_annotation(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST a {track_id, selections} payload."""
        response = await self._client.post("/api/annotate", json=payload)
        response.raise_for_status()
        return response.json()

    async def get_annotation(self, track_id: str) -> Optional[Dict[str, Any]]:
        """Stored record for a track, or None if it has not been annotated."""
        response = await self._client.get(f"/api/annotation/{quote(track_id, safe='')}")
        response.raise_for_status()
        return response.json()
