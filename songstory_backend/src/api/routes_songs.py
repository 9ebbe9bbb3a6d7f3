"""
Song endpoints:
- GET|POST /api/songs/search?q=&offset= (free text or a pasted provider link)
- POST /api/songs (create or return existing by provider id)
- GET /api/songs/{id}
- GET /api/songs/{id}/preview (fill a missing preview URL from iTunes)
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND

from src.api import apple_music
from src.api.errors import ProviderError
from src.api.schemas import SongCreate, SongResponse
from src.api.song_search import resolve_songs
from src.api.storage import Storage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/songs", tags=["Songs"])


def _search(q: Optional[str], offset: int, storage: Storage) -> List[SongResponse]:
    if not q or not q.strip():
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Query parameter is required")
    return [SongResponse.model_validate(s) for s in resolve_songs(storage, q, offset=offset)]


@router.get(
    "/search",
    response_model=List[SongResponse],
    summary="Search songs",
    description=(
        "Resolves a Spotify, Apple Music or YouTube link to one song, or searches the "
        "configured provider for free text, 10 results per page. Provider failures "
        "return an empty list."
    ),
    operation_id="search_songs",
)
def search_songs(
    q: Optional[str] = Query(None, description="Search text or provider URL."),
    offset: int = Query(0, ge=0, description="Result offset, in steps of the page size."),
    storage: Storage = Depends(get_storage),
) -> List[SongResponse]:
    """Search or resolve songs, persisting newly discovered tracks."""
    return _search(q, offset, storage)


@router.post(
    "/search",
    response_model=List[SongResponse],
    summary="Search songs (POST)",
    description="Same as GET /api/songs/search; parameters are read from the query string.",
    operation_id="search_songs_post",
)
def search_songs_post(
    q: Optional[str] = Query(None),
    offset: int = Query(0, ge=0),
    storage: Storage = Depends(get_storage),
) -> List[SongResponse]:
    return _search(q, offset, storage)


@router.post(
    "",
    response_model=SongResponse,
    summary="Create a song",
    description="Creates a song. When a provider id is already known the existing song is returned.",
    operation_id="create_song",
)
def create_song(req: SongCreate, storage: Storage = Depends(get_storage)) -> SongResponse:
    song = storage.create_song(req.model_dump())
    return SongResponse.model_validate(song)


@router.get(
    "/{song_id}",
    response_model=SongResponse,
    summary="Get a song",
    operation_id="get_song",
)
def get_song(song_id: int, storage: Storage = Depends(get_storage)) -> SongResponse:
    song = storage.get_song(song_id)
    if song is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Song not found.")
    return SongResponse.model_validate(song)


@router.get(
    "/{song_id}/preview",
    response_model=SongResponse,
    summary="Ensure a song has a preview",
    description="Looks up a 30 second iTunes preview for songs stored without one.",
    operation_id="ensure_song_preview",
)
def ensure_song_preview(song_id: int, storage: Storage = Depends(get_storage)) -> SongResponse:
    song = storage.get_song(song_id)
    if song is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Song not found.")

    if not song.preview_url:
        try:
            preview_url = apple_music.find_preview_url(song.title, song.artist)
        except ProviderError as exc:
            logger.warning("song_preview_lookup_failed: song_id=%s error=%s", song_id, exc)
            preview_url = None
        if preview_url:
            song = storage.update_song(song_id, {"preview_url": preview_url})

    return SongResponse.model_validate(song)
