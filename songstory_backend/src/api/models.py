"""
SQLAlchemy models for users, songs, stories and the social join tables.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class User(Base):
    """User account row. There is no password; identity is supplied per request."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(Text, nullable=False, unique=True, index=True)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True, index=True)
    display_name: Mapped[str] = mapped_column(Text, nullable=False)
    avatar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    stories: Mapped[list["Story"]] = relationship("Story", back_populates="user")


class Song(Base):
    """Song metadata resolved from a provider or entered by hand.

    Provider ids are unique so that concurrent resolvers of the same track
    converge on a single row.
    """

    __tablename__ = "songs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    artist: Mapped[str] = mapped_column(Text, nullable=False)
    album: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    genre: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    spotify_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True, unique=True)
    apple_music_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True, unique=True)
    youtube_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True, unique=True)

    album_art: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    preview_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    external_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    stories: Mapped[list["Story"]] = relationship("Story", back_populates="song")


# Optional narrative prompts a story can carry, in the order the create form asks them.
STORY_PROMPT_FIELDS = (
    # core
    "age",
    "life_context",
    "discovery_moment",
    "core_memory",
    "emotional_connection",
    "tone",
    # sensory & setting
    "the_scene",
    "soundtrack_moment",
    "seasonal_connection",
    # relationships & people
    "shared_experience",
    "musical_introduction",
    "generational_bridge",
    # personal growth & change
    "before_after",
    "life_transition",
    "comfort_healing",
    "identity_marker",
    # musical elements
    "the_hook",
    "lyrical_resonance",
    "musical_discovery",
    # broader context
    "cultural_moment",
    "unexpected_connection",
    "legacy_impact",
    "sharing_passing_on",
    # reflection
    "message_to_past_self",
    "song_as_compass",
    "future_connection",
)


class Story(Base):
    """A user's memory tied to one song. Draft until `is_published` is set."""

    __tablename__ = "stories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    song_id: Mapped[int] = mapped_column(Integer, ForeignKey("songs.id"), nullable=False, index=True)

    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_name: Mapped[str] = mapped_column(Text, nullable=False)

    age: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    life_context: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    discovery_moment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    core_memory: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    emotional_connection: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    the_scene: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    soundtrack_moment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    seasonal_connection: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    shared_experience: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    musical_introduction: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    generational_bridge: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    before_after: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    life_transition: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    comfort_healing: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    identity_marker: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    the_hook: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    lyrical_resonance: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    musical_discovery: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    cultural_moment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    unexpected_connection: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    legacy_impact: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sharing_passing_on: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    message_to_past_self: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    song_as_compass: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    future_connection: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    is_ai_generated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Cached counts of the join tables, maintained in the same transaction as the join rows.
    likes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comments_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    shares_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    user: Mapped[User] = relationship("User", back_populates="stories")
    song: Mapped[Song] = relationship("Song", back_populates="stories")

    likes: Mapped[list["Like"]] = relationship(
        "Like",
        back_populates="story",
        cascade="all, delete-orphan",
    )
    comments: Mapped[list["Comment"]] = relationship(
        "Comment",
        back_populates="story",
        cascade="all, delete-orphan",
    )


class Like(Base):
    """A user's like on a story. Existence of the row means 'liked'."""

    __tablename__ = "likes"
    __table_args__ = (UniqueConstraint("user_id", "story_id", name="uq_likes_user_story"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    story_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("stories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    story: Mapped[Story] = relationship("Story", back_populates="likes")


class Comment(Base):
    """Comment on a story. `commenter_name` overrides the user's display name when set."""

    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    story_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("stories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    commenter_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    story: Mapped[Story] = relationship("Story", back_populates="comments")
    user: Mapped[User] = relationship("User")


class Follow(Base):
    """Directed follow edge between two users."""

    __tablename__ = "follows"
    __table_args__ = (UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    follower_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    following_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
