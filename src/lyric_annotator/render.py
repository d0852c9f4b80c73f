"""
Presentation layer.

`project` turns session state into a SessionView. It reads state only, so
calling it any number of times yields the same view. `render_text` draws a
view for the terminal client.
"""

import textwrap
from dataclasses import dataclass, field
from typing import List

from .models import FACETS
from .session import AnnotationSession, SessionState
from .snapshot import FONT_SCALE_MIN

BASE_WIDTH = 80


@dataclass
class TagView:
    tag: str
    selected: bool


@dataclass
class FacetView:
    facet: str
    query: str
    tags: List[TagView] = field(default_factory=list)


@dataclass
class SessionView:
    """Everything the screen shows for one session state."""
    state: SessionState
    title: str
    subtitle: str
    lyrics: str
    progress: int               # Annotations saved this session
    remaining: int
    percentage: int
    selection_count: int
    facets: List[FacetView]
    save_enabled: bool
    export_enabled: bool
    font_scale: float = 1.0


def project(session: AnnotationSession, font_scale: float = 1.0,
            export_enabled: bool = False) -> SessionView:
    """Project session state to a view model."""
    track = session.current

    total = len(session.queue) + len(session.pending)
    percentage = round(session.cursor / total * 100) if total > 0 else 0

    facets = []
    for facet in FACETS:
        name = facet.value
        selected = session.selections.get(name, set())
        facets.append(FacetView(
            facet=name,
            query=session.queries.get(name, ""),
            tags=[TagView(tag=t, selected=t in selected) for t in session.filtered.get(name, [])],
        ))

    if track is not None:
        title = track.track_name or "Unknown Track"
        subtitle = " • ".join(x for x in (track.artist_name, track.track_id) if x)
        lyrics = track.lyrics or "No lyrics available"
    else:
        title = "All tracks completed" if session.is_completed else "Loading..."
        subtitle = ""
        lyrics = ""

    return SessionView(
        state=session.state,
        title=title,
        subtitle=subtitle,
        lyrics=lyrics,
        progress=session.progress,
        remaining=session.remaining,
        percentage=min(percentage, 100),
        selection_count=session.selection_count,
        facets=facets,
        save_enabled=session.state in (SessionState.READY, SessionState.REVIEWING),
        export_enabled=export_enabled,
        font_scale=font_scale,
    )


def _wrap_lyrics(lyrics: str, width: int) -> List[str]:
    lines = []
    for line in lyrics.splitlines():
        lines.extend(textwrap.wrap(line, width=width) or [""])
    return lines


def render_text(view: SessionView, width: int = BASE_WIDTH) -> str:
    """Draw a view as plain text. Larger font scales wrap lyrics narrower."""
    lyrics_width = max(20, int(width / max(view.font_scale, FONT_SCALE_MIN)))
    rule = "=" * width

    out = [rule, view.title]
    if view.subtitle:
        out.append(view.subtitle)
    out.append(
        f"Saved: {view.progress}  Remaining: {view.remaining}  "
        f"Done: {view.percentage}%  Selected: {view.selection_count}"
    )
    out.append(rule)
    out.extend(_wrap_lyrics(view.lyrics, lyrics_width))

    for number, facet in enumerate(view.facets, start=1):
        header = f"[{number}] {facet.facet}"
        if facet.query:
            header += f"  (search: {facet.query})"
        out.append("")
        out.append(header)
        chips = [
            f"{i}.{'*' if tv.selected else ' '}{tv.tag}"
            for i, tv in enumerate(facet.tags, start=1)
        ]
        out.extend(textwrap.wrap("  ".join(chips), width=width) or ["(no matching tags)"])

    if view.export_enabled:
        out.append("")
        out.append("Session complete. Type 'e' to export your annotations.")
    return "\n".join(out)
