"""
YouTube adapter using the keyless oEmbed endpoint.

oEmbed only gives the video title, channel name and thumbnail, so the song
title and artist are split out of "Artist - Title (Official Video)" style titles.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

import requests

from src.api import settings
from src.api.errors import ProviderError

logger = logging.getLogger(__name__)

YOUTUBE_OEMBED_URL = "https://www.youtube.com/oembed"

_NOISE_RE = re.compile(
    r"\s*[\(\[][^\)\]]*(official|video|audio|lyrics?|visualizer|hd|4k|remaster(ed)?)[^\)\]]*[\)\]]",
    re.I,
)


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


# PUBLIC_INTERFACE
def video_to_song(video_id: str, oembed: Dict[str, Any]) -> Dict[str, Any]:
    """Translate an oEmbed payload into song column values."""
    raw_title = (oembed.get("title") or "").strip()
    channel = (oembed.get("author_name") or "").strip()
    if channel.endswith(" - Topic"):
        channel = channel[: -len(" - Topic")]

    title = _NOISE_RE.sub("", raw_title).strip()
    artist = channel
    if " - " in title:
        artist, title = (part.strip() for part in title.split(" - ", 1))

    return {
        "title": title or raw_title or video_id,
        "artist": artist or "Unknown Artist",
        "youtube_id": video_id,
        "album_art": oembed.get("thumbnail_url"),
        "external_url": watch_url(video_id),
    }


# PUBLIC_INTERFACE
def get_video(video_id: str) -> Optional[Dict[str, Any]]:
    """Look up a video; None when it is missing, private or not embeddable."""
    try:
        r = requests.get(
            YOUTUBE_OEMBED_URL,
            params={"url": watch_url(video_id), "format": "json"},
            timeout=settings.provider_timeout(),
        )
    except requests.RequestException as exc:
        raise ProviderError("youtube", f"oembed request failed: {exc}") from exc

    if r.status_code in (400, 401, 403, 404):
        logger.info("youtube_video_unavailable: video_id=%s status=%s", video_id, r.status_code)
        return None
    try:
        r.raise_for_status()
        return video_to_song(video_id, r.json())
    except (requests.RequestException, ValueError) as exc:
        raise ProviderError("youtube", f"oembed request failed: {exc}") from exc
