"""
Spotify adapter: track search and single-track lookup.

Authenticates with the client-credentials flow; spotipy caches and refreshes
the app token. Tracks are translated to song dicts ready for `Storage.create_song`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests
import spotipy
from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyClientCredentials, SpotifyOauthError

from src.api import settings
from src.api.errors import ProviderError

logger = logging.getLogger(__name__)

_client: Optional[spotipy.Spotify] = None
_client_credentials: Optional[tuple] = None


def _spotify() -> spotipy.Spotify:
    global _client, _client_credentials
    creds = settings.spotify_credentials()
    if creds is None:
        raise ProviderError("spotify", "Spotify credentials not configured")
    if _client is None or creds != _client_credentials:
        client_id, client_secret = creds
        _client = spotipy.Spotify(
            auth_manager=SpotifyClientCredentials(client_id=client_id, client_secret=client_secret),
            requests_timeout=settings.provider_timeout(),
            retries=0,
        )
        _client_credentials = creds
    return _client


def _year(release_date: Optional[str]) -> Optional[int]:
    if not release_date or len(release_date) < 4 or not release_date[:4].isdigit():
        return None
    return int(release_date[:4])


# PUBLIC_INTERFACE
def track_to_song(track: Dict[str, Any]) -> Dict[str, Any]:
    """Translate a Spotify track object into song column values."""
    album = track.get("album") or {}
    images = album.get("images") or []
    return {
        "title": track.get("name") or "",
        "artist": ", ".join(a.get("name") for a in (track.get("artists") or []) if a.get("name")),
        "album": album.get("name"),
        "year": _year(album.get("release_date")),
        "genre": None,  # not present on track objects
        "spotify_id": track.get("id"),
        "album_art": images[0].get("url") if images else None,
        "preview_url": track.get("preview_url"),
        "external_url": (track.get("external_urls") or {}).get("spotify"),
    }


# PUBLIC_INTERFACE
def search_tracks(query: str, limit: int = 10, offset: int = 0) -> List[Dict[str, Any]]:
    """Search Spotify tracks; returns song dicts in Spotify's ranking order."""
    sp = _spotify()
    try:
        resp = sp.search(q=query, type="track", limit=limit, offset=offset)
    except (SpotifyException, SpotifyOauthError, requests.RequestException) as exc:
        raise ProviderError("spotify", f"search failed: {exc}") from exc

    items = ((resp or {}).get("tracks") or {}).get("items") or []
    logger.info("spotify_search: query=%r offset=%s results=%s", query, offset, len(items))
    return [track_to_song(t) for t in items if t and t.get("id")]


# PUBLIC_INTERFACE
def get_track(track_id: str) -> Optional[Dict[str, Any]]:
    """Fetch one track by id; None when Spotify does not know it."""
    sp = _spotify()
    try:
        track = sp.track(track_id)
    except SpotifyException as exc:
        if exc.http_status in (400, 404):
            return None
        raise ProviderError("spotify", f"track lookup failed: {exc}") from exc
    except (SpotifyOauthError, requests.RequestException) as exc:
        raise ProviderError("spotify", f"track lookup failed: {exc}") from exc

    if not track or not track.get("id"):
        return None
    return track_to_song(track)
