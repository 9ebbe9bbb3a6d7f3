"""
Song resolution: turn a search box input into canonical Song rows.

A pasted Spotify, Apple Music or YouTube link resolves to exactly that track
(local row first, provider lookup on a miss). Anything else is a free text
search against the configured provider, one page at a time. Every provider
result is persisted through `Storage.create_song`, which returns the existing
row when the provider id is already known.

Provider failures never surface to the caller: search degrades to an empty
list so the UI can show "no results" instead of an error.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from src.api import apple_music, settings, spotify, youtube
from src.api.errors import ProviderError
from src.api.models import Song
from src.api.song_links import SongQuery, classify_song_query
from src.api.storage import Storage

logger = logging.getLogger(__name__)


def _lookup_link(query: SongQuery) -> Optional[dict]:
    if query.kind == "spotify":
        return spotify.get_track(query.value)
    if query.kind == "apple_music":
        return apple_music.get_track(query.value)
    if query.kind == "youtube":
        return youtube.get_video(query.value)
    raise ValueError(f"not a link query: {query.kind}")


def _resolve_link(storage: Storage, query: SongQuery) -> List[Song]:
    song = storage.get_song_by_provider_id(query.kind, query.value)
    if song is not None:
        return [song]

    data = _lookup_link(query)
    if data is None:
        logger.info("song_link_not_found: provider=%s id=%s", query.kind, query.value)
        return []
    return [storage.create_song(data)]


def _search_provider(text: str, limit: int, offset: int) -> List[dict]:
    if settings.song_search_provider() == "spotify":
        return spotify.search_tracks(text, limit=limit, offset=offset)
    return apple_music.search_tracks(text, limit=limit, offset=offset)


def _search_text(storage: Storage, text: str, offset: int, limit: int) -> List[Song]:
    songs: List[Song] = []
    seen = set()
    for data in _search_provider(text, limit, offset):
        song = storage.create_song(data)
        if song.id not in seen:
            seen.add(song.id)
            songs.append(song)
    return songs


# PUBLIC_INTERFACE
def resolve_songs(
    storage: Storage,
    query: str,
    offset: int = 0,
    limit: int = settings.SEARCH_PAGE_SIZE,
) -> List[Song]:
    """
    Resolve a search input to songs.

    Pagination is offset based with no total count; callers treat a page
    shorter than `limit` as the last one. Link inputs ignore `offset`.
    """
    parsed = classify_song_query(query)
    try:
        if parsed.kind == "search":
            songs = _search_text(storage, parsed.value, offset, limit)
        else:
            songs = _resolve_link(storage, parsed)
    except ProviderError as exc:
        logger.warning("song_search_provider_failed: kind=%s query=%r error=%s", parsed.kind, query, exc)
        return []

    logger.info("song_search: kind=%s query=%r offset=%s results=%s", parsed.kind, query, offset, len(songs))
    return songs
