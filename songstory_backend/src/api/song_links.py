"""
Classify a song search input as a provider link or free text.

Precedence is fixed: YouTube, then Spotify, then Apple Music. The first
pattern that matches wins and short-circuits full text search.
"""

from __future__ import annotations

import re
from typing import NamedTuple, Optional

_YOUTUBE_RE = re.compile(
    r"(?:youtu\.be/|youtube(?:-nocookie)?\.com/(?:watch\?(?:[^#]*&)?v=|embed/|v/|shorts/))"
    r"([A-Za-z0-9_-]{11})(?![A-Za-z0-9_-])"
)
_SPOTIFY_RE = re.compile(
    r"spotify:track:([A-Za-z0-9]+)|open\.spotify\.com/(?:intl-[a-z-]+/)?track/([A-Za-z0-9]+)"
)
# album/<slug>/<albumId>?i=<trackId> or song/<slug>/<trackId>; the ?i= track id wins
_APPLE_MUSIC_RE = re.compile(
    r"music\.apple\.com/[a-z]{2}/(?:album/[^/]+/)?(?:song/(?:[^/?]+/)?)?([0-9]+)(?:\?(?:[^#]*&)?i=([0-9]+))?"
)


class SongQuery(NamedTuple):
    kind: str  # "youtube" | "spotify" | "apple_music" | "search"
    value: str


def extract_youtube_id(text: str) -> Optional[str]:
    match = _YOUTUBE_RE.search(text)
    return match.group(1) if match else None


def extract_spotify_id(text: str) -> Optional[str]:
    match = _SPOTIFY_RE.search(text)
    if not match:
        return None
    return match.group(1) or match.group(2)


def extract_apple_music_id(text: str) -> Optional[str]:
    match = _APPLE_MUSIC_RE.search(text)
    if not match:
        return None
    return match.group(2) or match.group(1)


# PUBLIC_INTERFACE
def classify_song_query(text: str) -> SongQuery:
    """Return the provider and id a pasted link points at, or ("search", text)."""
    text = text.strip()
    for kind, extract in (
        ("youtube", extract_youtube_id),
        ("spotify", extract_spotify_id),
        ("apple_music", extract_apple_music_id),
    ):
        external_id = extract(text)
        if external_id:
            return SongQuery(kind, external_id)
    return SongQuery("search", text)
