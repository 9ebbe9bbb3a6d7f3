"""
Apple Music adapter backed by the public iTunes Search and Lookup APIs (no key).
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

import requests

from src.api import settings
from src.api.errors import ProviderError

logger = logging.getLogger(__name__)

ITUNES_SEARCH_URL = "https://itunes.apple.com/search"
ITUNES_LOOKUP_URL = "https://itunes.apple.com/lookup"


def _get_json(url: str, params: Dict[str, Any]) -> Dict[str, Any]:
    try:
        r = requests.get(url, params=params, timeout=settings.provider_timeout())
        r.raise_for_status()
        return r.json()
    except (requests.RequestException, ValueError) as exc:
        raise ProviderError("apple_music", f"request to {url} failed: {str(exc)[:120]}") from exc


def _is_song(item: Dict[str, Any]) -> bool:
    return item.get("kind", "song") == "song" and bool(item.get("trackId"))


# PUBLIC_INTERFACE
def track_to_song(track: Dict[str, Any]) -> Dict[str, Any]:
    """Translate an iTunes track result into song column values."""
    release_date = track.get("releaseDate") or ""
    artwork = track.get("artworkUrl100") or track.get("artworkUrl60")
    return {
        "title": track.get("trackName") or "",
        "artist": track.get("artistName") or "",
        "album": track.get("collectionName"),
        "year": int(release_date[:4]) if release_date[:4].isdigit() else None,
        "genre": track.get("primaryGenreName"),
        "apple_music_id": str(track["trackId"]),
        "album_art": artwork.replace("100x100", "500x500") if artwork else None,
        "preview_url": track.get("previewUrl"),
        "external_url": track.get("trackViewUrl"),
    }


# PUBLIC_INTERFACE
def search_tracks(query: str, limit: int = 10, offset: int = 0) -> List[Dict[str, Any]]:
    """Search songs; returns song dicts in iTunes ranking order."""
    data = _get_json(
        ITUNES_SEARCH_URL,
        {"term": query, "media": "music", "entity": "song", "limit": limit, "offset": offset},
    )
    results = [t for t in data.get("results") or [] if _is_song(t)]
    logger.info(
        "apple_music_search: query=%r offset=%s results=%s with_preview=%s",
        query,
        offset,
        len(results),
        sum(1 for t in results if t.get("previewUrl")),
    )
    return [track_to_song(t) for t in results]


# PUBLIC_INTERFACE
def get_track(track_id: str) -> Optional[Dict[str, Any]]:
    """Look up one song by iTunes track id; None when nothing matches."""
    data = _get_json(ITUNES_LOOKUP_URL, {"id": track_id, "entity": "song"})
    for item in data.get("results") or []:
        if _is_song(item):
            return track_to_song(item)
    return None


def _clean(text: str) -> str:
    return re.sub(r"[()\[\]]", "", text).strip()


# PUBLIC_INTERFACE
def find_preview_url(title: str, artist: str) -> Optional[str]:
    """
    Find a 30 second preview for a song that has none.

    Tries "title artist", "artist title" and "title" in turn. Within each result
    page an exact title match with a preview wins, then a title substring match,
    then the first result that has any preview.
    """
    clean_title = _clean(title)
    clean_artist = _clean(artist)
    wanted = clean_title.lower()

    for term in (f"{clean_title} {clean_artist}", f"{clean_artist} {clean_title}", clean_title):
        try:
            data = _get_json(
                ITUNES_SEARCH_URL,
                {"term": term, "media": "music", "entity": "song", "limit": 10, "country": "US"},
            )
        except ProviderError as exc:
            logger.warning("apple_music_preview_search_failed: term=%r error=%s", term, exc)
            continue

        with_preview = [t for t in data.get("results") or [] if t.get("previewUrl")]
        if not with_preview:
            continue

        for track in with_preview:
            if (track.get("trackName") or "").lower().strip() == wanted:
                return track["previewUrl"]
        for track in with_preview:
            if wanted in (track.get("trackName") or "").lower():
                return track["previewUrl"]
        return with_preview[0]["previewUrl"]

    logger.info("apple_music_preview_not_found: title=%r artist=%r", clean_title, clean_artist)
    return None
