"""
Story endpoints:
- GET /api/stories?userId=&published=&viewerId=
- GET|PUT|DELETE /api/stories/{id}, POST /api/stories
- POST /api/stories/{id}/publish, /unpublish (admin), /share
- POST /api/stories/{id}/like (toggle), POST|GET /api/stories/{id}/comments
- POST /api/stories/generate, POST /api/stories/enhance, POST /api/transcribe-story
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from src.api import ai
from src.api.auth import require_admin
from src.api.errors import ProviderError
from src.api.schemas import (
    CommentCreate,
    CommentWithUser,
    EnhanceStoryRequest,
    GenerateStoryRequest,
    GeneratedStoryResponse,
    LikeRequest,
    LikeToggleResponse,
    MessageResponse,
    StoryCreate,
    StoryResponse,
    StoryUpdate,
    StoryWithDetails,
    TranscriptionResponse,
)
from src.api.storage import Storage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Stories"])

# Whisper rejects uploads above 25MB.
_MAX_AUDIO_BYTES = 25 * 1024 * 1024

_NOT_NULL_STORY_FIELDS = {"song_id", "title", "content", "author_name", "is_ai_generated", "is_published"}


def _parse_published(value: Optional[str]) -> Optional[bool]:
    if value == "true":
        return True
    if value == "false":
        return False
    return None


def _require_story(storage: Storage, story_id: int):
    story = storage.get_story_row(story_id)
    if story is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Story not found.")
    return story


@router.get(
    "/stories",
    response_model=List[StoryWithDetails],
    summary="List stories",
    description=(
        "Stories with their author, song and comments, newest first. `userId` and "
        "`published` filters combine with AND. No pagination."
    ),
    operation_id="list_stories",
)
def list_stories(
    user_id: Optional[int] = Query(None, alias="userId"),
    published: Optional[str] = Query(None, description="'true' or 'false'; anything else means no filter."),
    viewer_id: Optional[int] = Query(None, alias="viewerId", description="Fill isLiked for this user."),
    storage: Storage = Depends(get_storage),
) -> List[StoryWithDetails]:
    return storage.get_stories(user_id=user_id, published=_parse_published(published), viewer_id=viewer_id)


@router.get(
    "/stories/{story_id}",
    response_model=StoryWithDetails,
    summary="Get a story",
    operation_id="get_story",
)
def get_story(
    story_id: int,
    viewer_id: Optional[int] = Query(None, alias="viewerId"),
    storage: Storage = Depends(get_storage),
) -> StoryWithDetails:
    story = storage.get_story(story_id, viewer_id=viewer_id)
    if story is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Story not found.")
    return story


@router.post(
    "/stories",
    response_model=StoryResponse,
    summary="Create a story",
    description="Creates a draft, or a published story when `isPublished` is true.",
    operation_id="create_story",
)
def create_story(req: StoryCreate, storage: Storage = Depends(get_storage)) -> StoryResponse:
    if storage.get_user(req.user_id) is None:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Unknown userId")
    if storage.get_song(req.song_id) is None:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Unknown songId")

    story = storage.create_story(req.model_dump())
    logger.info(
        "story_created: id=%s user_id=%s song_id=%s published=%s",
        story.id,
        story.user_id,
        story.song_id,
        story.is_published,
    )
    return StoryResponse.model_validate(story)


@router.put(
    "/stories/{story_id}",
    response_model=StoryResponse,
    summary="Update a story",
    description=(
        "Partial update; only fields present in the body change. A published story "
        "cannot be returned to draft here; that goes through the admin unpublish route."
    ),
    operation_id="update_story",
)
def update_story(story_id: int, req: StoryUpdate, storage: Storage = Depends(get_storage)) -> StoryResponse:
    current = _require_story(storage, story_id)
    changes = {
        k: v
        for k, v in req.model_dump(exclude_unset=True).items()
        if not (v is None and k in _NOT_NULL_STORY_FIELDS)
    }
    if changes.get("is_published") is False and current.is_published:
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Only an admin can unpublish a story.")
    if "song_id" in changes and storage.get_song(changes["song_id"]) is None:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Unknown songId")

    story = storage.update_story(story_id, changes)
    return StoryResponse.model_validate(story)


@router.delete(
    "/stories/{story_id}",
    response_model=MessageResponse,
    summary="Delete a story",
    description="Hard delete, including the story's likes and comments.",
    operation_id="delete_story",
)
def delete_story(story_id: int, storage: Storage = Depends(get_storage)) -> MessageResponse:
    if not storage.delete_story(story_id):
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Story not found.")
    logger.info("story_deleted: id=%s", story_id)
    return MessageResponse(message="Story deleted successfully")


@router.post(
    "/stories/{story_id}/publish",
    response_model=StoryResponse,
    summary="Publish a story",
    operation_id="publish_story",
)
def publish_story(story_id: int, storage: Storage = Depends(get_storage)) -> StoryResponse:
    story = storage.publish_story(story_id)
    if story is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Story not found.")
    return StoryResponse.model_validate(story)


@router.post(
    "/stories/{story_id}/unpublish",
    response_model=StoryResponse,
    summary="Return a story to draft (admin)",
    operation_id="unpublish_story",
)
def unpublish_story(
    story_id: int,
    storage: Storage = Depends(get_storage),
    admin: dict = Depends(require_admin),
) -> StoryResponse:
    story = storage.unpublish_story(story_id)
    if story is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Story not found.")
    logger.info("story_unpublished: id=%s by=%s", story_id, admin.get("sub"))
    return StoryResponse.model_validate(story)


@router.post(
    "/stories/{story_id}/share",
    response_model=StoryResponse,
    summary="Record a share",
    operation_id="share_story",
)
def share_story(story_id: int, storage: Storage = Depends(get_storage)) -> StoryResponse:
    story = storage.share_story(story_id)
    if story is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Story not found.")
    return StoryResponse.model_validate(story)


@router.post(
    "/stories/{story_id}/like",
    response_model=LikeToggleResponse,
    summary="Like or unlike a story",
    description="Toggles the like of `userId`; the story's likesCount follows in the same transaction.",
    operation_id="toggle_like",
)
def toggle_like(story_id: int, req: LikeRequest, storage: Storage = Depends(get_storage)) -> LikeToggleResponse:
    _require_story(storage, story_id)
    if storage.get_user(req.user_id) is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found.")
    return LikeToggleResponse(liked=storage.toggle_like(req.user_id, story_id))


@router.post(
    "/stories/{story_id}/comments",
    response_model=CommentWithUser,
    summary="Comment on a story",
    operation_id="add_comment",
)
def add_comment(story_id: int, req: CommentCreate, storage: Storage = Depends(get_storage)) -> CommentWithUser:
    _require_story(storage, story_id)
    if storage.get_user(req.user_id) is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found.")

    comment = storage.add_comment(story_id, req.user_id, req.content, req.commenter_name)
    return storage.get_comment(comment.id)


@router.get(
    "/stories/{story_id}/comments",
    response_model=List[CommentWithUser],
    summary="List a story's comments",
    description="Newest first.",
    operation_id="list_comments",
)
def list_comments(story_id: int, storage: Storage = Depends(get_storage)) -> List[CommentWithUser]:
    return storage.list_comments(story_id)


@router.post(
    "/stories/generate",
    response_model=GeneratedStoryResponse,
    summary="Draft a story with AI",
    description="Writes a short first-person story from the supplied prompt answers.",
    operation_id="generate_story",
)
def generate_story(req: GenerateStoryRequest) -> GeneratedStoryResponse:
    try:
        content = ai.generate_story(req.prompts, req.tone, req.song_title, req.artist)
    except ProviderError as exc:
        logger.warning("story_generation_failed: error=%s", exc)
        raise HTTPException(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Story generation failed: {exc.message}",
        )
    return GeneratedStoryResponse(content=content)


@router.post(
    "/stories/enhance",
    response_model=GeneratedStoryResponse,
    summary="Revise a story with AI",
    operation_id="enhance_story",
)
def enhance_story(req: EnhanceStoryRequest) -> GeneratedStoryResponse:
    try:
        content = ai.enhance_story(req.content, req.suggestions)
    except ProviderError as exc:
        logger.warning("story_enhancement_failed: error=%s", exc)
        raise HTTPException(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Story enhancement failed: {exc.message}",
        )
    return GeneratedStoryResponse(content=content)


@router.post(
    "/transcribe-story",
    response_model=TranscriptionResponse,
    summary="Turn a voice recording into story fields",
    description="Multipart upload with an `audio` file and optional `songTitle`/`artist` fields.",
    operation_id="transcribe_story",
)
def transcribe_story(
    audio: UploadFile = File(..., description="Recorded audio (wav, webm, mp3, m4a)."),
    song_title: Optional[str] = Form(None, alias="songTitle"),
    artist: Optional[str] = Form(None),
) -> TranscriptionResponse:
    content = audio.file.read()
    if not content:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Empty audio file.")
    if len(content) > _MAX_AUDIO_BYTES:
        raise HTTPException(status_code=413, detail="Audio file too large.")

    try:
        result = ai.transcribe_story(content, audio.filename or "audio.wav", song_title, artist)
    except ProviderError as exc:
        logger.warning("story_transcription_failed: error=%s", exc)
        raise HTTPException(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to transcribe audio: {exc.message}",
        )
    return TranscriptionResponse(**result)
