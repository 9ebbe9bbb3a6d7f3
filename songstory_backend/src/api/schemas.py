"""
Pydantic models (request/response shapes) for API endpoints.

Field names are snake_case in Python and camelCase on the wire, matching the
JSON the frontend sends and expects.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MessageResponse(ApiModel):
    message: str = Field(..., description="Human readable result message.")


# ---- users -----------------------------------------------------------------


class UserCreate(ApiModel):
    username: str = Field(..., min_length=1, description="Unique handle.")
    email: EmailStr = Field(..., description="Unique email address.")
    display_name: str = Field(..., min_length=1, description="Name shown on stories.")
    avatar: Optional[str] = Field(None, description="Avatar image URL.")


class UserUpdate(ApiModel):
    username: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    display_name: Optional[str] = Field(None, min_length=1)
    avatar: Optional[str] = None


class UserResponse(ApiModel):
    id: int
    username: str
    email: str
    display_name: str
    avatar: Optional[str] = None
    created_at: datetime


class UserSummary(ApiModel):
    id: int
    username: str
    display_name: str


class UserStats(ApiModel):
    stories_count: int = 0
    total_likes: int = 0
    followers: int = 0
    following: int = 0


class FollowRequest(ApiModel):
    follower_id: int = Field(..., description="User doing the following.")


class FollowToggleResponse(ApiModel):
    following: bool


# ---- songs -----------------------------------------------------------------


class SongCreate(ApiModel):
    title: str = Field(..., min_length=1)
    artist: str = Field(..., min_length=1)
    album: Optional[str] = None
    year: Optional[int] = None
    genre: Optional[str] = None
    spotify_id: Optional[str] = None
    apple_music_id: Optional[str] = None
    youtube_id: Optional[str] = None
    album_art: Optional[str] = None
    preview_url: Optional[str] = None
    external_url: Optional[str] = None


class SongResponse(SongCreate):
    id: int


# ---- stories ---------------------------------------------------------------


class StoryPrompts(ApiModel):
    """Optional narrative prompt answers shared by story create/update/response shapes."""

    age: Optional[str] = None
    life_context: Optional[str] = None
    discovery_moment: Optional[str] = None
    core_memory: Optional[str] = None
    emotional_connection: Optional[str] = None
    tone: Optional[str] = None
    the_scene: Optional[str] = None
    soundtrack_moment: Optional[str] = None
    seasonal_connection: Optional[str] = None
    shared_experience: Optional[str] = None
    musical_introduction: Optional[str] = None
    generational_bridge: Optional[str] = None
    before_after: Optional[str] = None
    life_transition: Optional[str] = None
    comfort_healing: Optional[str] = None
    identity_marker: Optional[str] = None
    the_hook: Optional[str] = None
    lyrical_resonance: Optional[str] = None
    musical_discovery: Optional[str] = None
    cultural_moment: Optional[str] = None
    unexpected_connection: Optional[str] = None
    legacy_impact: Optional[str] = None
    sharing_passing_on: Optional[str] = None
    message_to_past_self: Optional[str] = None
    song_as_compass: Optional[str] = None
    future_connection: Optional[str] = None


class StoryCreate(StoryPrompts):
    user_id: int
    song_id: int
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    author_name: str = Field(..., min_length=1)
    is_ai_generated: bool = False
    is_published: bool = False


class StoryUpdate(StoryPrompts):
    song_id: Optional[int] = None
    title: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = Field(None, min_length=1)
    author_name: Optional[str] = Field(None, min_length=1)
    is_ai_generated: Optional[bool] = None
    is_published: Optional[bool] = None


class StoryResponse(StoryPrompts):
    id: int
    user_id: int
    song_id: int
    title: str
    content: str
    author_name: str
    is_ai_generated: bool
    is_published: bool
    likes_count: int
    comments_count: int
    shares_count: int
    created_at: datetime
    updated_at: datetime


class CommentCreate(ApiModel):
    user_id: int
    content: str
    commenter_name: Optional[str] = None

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Comment content is required")
        return value

    @field_validator("commenter_name")
    @classmethod
    def _blank_name_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None


class CommentWithUser(ApiModel):
    id: int
    story_id: int
    user_id: int
    content: str
    commenter_name: Optional[str] = None
    created_at: datetime
    user: Optional[UserSummary] = None


class StoryWithDetails(StoryResponse):
    user: UserResponse
    song: SongResponse
    comments: List[CommentWithUser] = Field(default_factory=list)
    is_liked: Optional[bool] = None


class LikeRequest(ApiModel):
    user_id: int = Field(..., description="User toggling the like.")


class LikeToggleResponse(ApiModel):
    liked: bool


# ---- analytics -------------------------------------------------------------


class GenreStats(ApiModel):
    name: str
    count: int
    percentage: int


class DecadeStats(ApiModel):
    decade: str
    count: int


class AgeStats(ApiModel):
    age: str
    count: int
    description: str


class UserAnalytics(ApiModel):
    genres: List[GenreStats]
    decades: List[DecadeStats]
    ages: List[AgeStats]


# ---- AI --------------------------------------------------------------------


class GenerateStoryRequest(ApiModel):
    prompts: Dict[str, Optional[str]] = Field(..., description="Prompt answers keyed by camelCase field name.")
    tone: str = Field(..., min_length=1)
    song_title: Optional[str] = None
    artist: Optional[str] = None


class EnhanceStoryRequest(ApiModel):
    content: str = Field(..., min_length=1, description="Story text to revise.")
    suggestions: str = Field(..., min_length=1, description="What the author wants changed.")


class GeneratedStoryResponse(ApiModel):
    content: str


class TranscriptionResponse(ApiModel):
    raw_transcript: str
    extracted_data: Dict[str, Any]


# ---- feedback / admin ------------------------------------------------------


class FeedbackRequest(ApiModel):
    type: str = Field(..., min_length=1, description="bug, feature, general ...")
    subject: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    email: Optional[str] = None
    priority: Optional[str] = None
    device: Optional[str] = None
    browser: Optional[str] = None


class AdminLoginRequest(ApiModel):
    password: str = Field(..., min_length=1)


class AdminTokenResponse(ApiModel):
    token: str = Field(..., description="JWT access token.")
    token_type: str = Field("bearer", description="Token type for Authorization header.")
