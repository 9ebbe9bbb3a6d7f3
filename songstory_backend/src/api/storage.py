"""
Persistence layer: a thin repository over the ORM.

`Storage` wraps one request-scoped Session. Methods flush but never commit;
the session dependency commits once per request, so a join-row mutation and
its counter update land in the same transaction.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Depends
from sqlalchemy import case, delete, desc, func, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.api.db import db_session_dep
from src.api.models import Comment, Follow, Like, Song, Story, User
from src.api.schemas import (
    AgeStats,
    CommentWithUser,
    DecadeStats,
    GenreStats,
    SongResponse,
    StoryResponse,
    StoryWithDetails,
    UserResponse,
    UserStats,
    UserSummary,
)

logger = logging.getLogger(__name__)

# provider name -> Song column holding that provider's track id
PROVIDER_ID_FIELDS = {
    "spotify": "spotify_id",
    "apple_music": "apple_music_id",
    "youtube": "youtube_id",
}

AGE_DESCRIPTIONS = {
    "childhood": "Early memories and formative experiences",
    "teenage": "Adolescent years and coming of age",
    "young-adult": "College years and early independence",
    "adult": "Career building and major life decisions",
    "middle-age": "Established life and family responsibilities",
    "senior": "Wisdom years and life reflection",
}
DEFAULT_AGE_DESCRIPTION = "Life experiences and memories"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
def age_description(age: str) -> str:
    """Human readable description for an age bucket key."""
    return AGE_DESCRIPTIONS.get(age, DEFAULT_AGE_DESCRIPTION)


# PUBLIC_INTERFACE
def percentage(count: int, total: int) -> int:
    """Share of `total` as a whole percent, rounding halves up."""
    if total <= 0:
        return 0
    return int(math.floor(count * 100 / total + 0.5))


# PUBLIC_INTERFACE
def decade_label(year: int) -> str:
    """1994 -> '1990s'."""
    return f"{(year // 10) * 10}s"


class Storage:
    """Repository for users, songs, stories, interactions and analytics."""

    def __init__(self, db: Session):
        self.db = db

    def _insert_ignoring_conflict(self, model, values: Dict[str, Any]) -> bool:
        """INSERT that skips rows hitting a unique constraint. Returns True when a row was written."""
        dialect = self.db.get_bind().dialect.name
        if dialect in ("postgresql", "sqlite"):
            insert = pg_insert if dialect == "postgresql" else sqlite_insert
            result = self.db.execute(insert(model).values(**values).on_conflict_do_nothing())
            return result.rowcount > 0

        try:
            with self.db.begin_nested():
                self.db.add(model(**values))
        except IntegrityError:
            return False
        return True

    # ---- users -------------------------------------------------------------

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.db.execute(select(User).where(User.username == username)).scalar_one_or_none()

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.execute(select(User).where(User.email == email)).scalar_one_or_none()

    def create_user(self, data: Dict[str, Any]) -> User:
        user = User(**data)
        self.db.add(user)
        self.db.flush()
        return user

    def update_user(self, user_id: int, changes: Dict[str, Any]) -> Optional[User]:
        user = self.get_user(user_id)
        if user is None:
            return None
        for key, value in changes.items():
            setattr(user, key, value)
        self.db.flush()
        return user

    # ---- songs -------------------------------------------------------------

    def get_song(self, song_id: int) -> Optional[Song]:
        return self.db.get(Song, song_id)

    def get_song_by_provider_id(self, provider: str, external_id: str) -> Optional[Song]:
        column = getattr(Song, PROVIDER_ID_FIELDS[provider])
        return self.db.execute(select(Song).where(column == external_id)).scalar_one_or_none()

    def search_songs(self, query: str) -> List[Song]:
        """Case-insensitive substring match on title, artist or album."""
        pattern = f"%{query}%"
        stmt = (
            select(Song)
            .where(or_(Song.title.ilike(pattern), Song.artist.ilike(pattern), Song.album.ilike(pattern)))
            .order_by(Song.id)
        )
        return list(self.db.execute(stmt).scalars())

    def create_song(self, data: Dict[str, Any]) -> Song:
        """
        Insert a song, or return the existing row when one of its provider ids is taken.

        Provider ids carry unique constraints; the insert uses ON CONFLICT DO NOTHING
        so two requests resolving the same track at once end up with one row.
        """
        provider_ids = [
            (provider, data[field]) for provider, field in PROVIDER_ID_FIELDS.items() if data.get(field)
        ]
        if not provider_ids:
            song = Song(**data)
            self.db.add(song)
            self.db.flush()
            return song

        existing = self._find_by_any_provider_id(provider_ids)
        if existing is not None:
            return existing

        self._insert_ignoring_conflict(Song, data)
        song = self._find_by_any_provider_id(provider_ids)
        if song is None:
            # Only possible if the conflicting row vanished between insert and select.
            raise LookupError(f"song insert for {provider_ids!r} produced no row")
        logger.info("song_created: id=%s provider_ids=%s", song.id, provider_ids)
        return song

    def _find_by_any_provider_id(self, provider_ids) -> Optional[Song]:
        for provider, external_id in provider_ids:
            song = self.get_song_by_provider_id(provider, external_id)
            if song is not None:
                return song
        return None

    def update_song(self, song_id: int, changes: Dict[str, Any]) -> Optional[Song]:
        song = self.get_song(song_id)
        if song is None:
            return None
        for key, value in changes.items():
            setattr(song, key, value)
        self.db.flush()
        return song

    def get_all_songs(self) -> List[Song]:
        return list(self.db.execute(select(Song).order_by(Song.id)).scalars())

    # ---- stories -----------------------------------------------------------

    def _story_rows(self):
        # Inner joins: a story whose user or song does not resolve is left out.
        return (
            select(Story, User, Song)
            .join(User, Story.user_id == User.id)
            .join(Song, Story.song_id == Song.id)
        )

    def _with_details(self, story: Story, user: User, song: Song, viewer_id: Optional[int]) -> StoryWithDetails:
        base = StoryResponse.model_validate(story).model_dump()
        return StoryWithDetails(
            **base,
            user=UserResponse.model_validate(user),
            song=SongResponse.model_validate(song),
            comments=self.get_comments(story.id),
            is_liked=self.is_story_liked(viewer_id, story.id) if viewer_id is not None else None,
        )

    def get_story(self, story_id: int, viewer_id: Optional[int] = None) -> Optional[StoryWithDetails]:
        row = self.db.execute(self._story_rows().where(Story.id == story_id)).first()
        if row is None:
            return None
        story, user, song = row
        return self._with_details(story, user, song, viewer_id)

    def get_stories(
        self,
        user_id: Optional[int] = None,
        published: Optional[bool] = None,
        viewer_id: Optional[int] = None,
    ) -> List[StoryWithDetails]:
        stmt = self._story_rows()
        if user_id is not None:
            stmt = stmt.where(Story.user_id == user_id)
        if published is not None:
            stmt = stmt.where(Story.is_published == published)
        stmt = stmt.order_by(desc(Story.created_at), desc(Story.id))

        return [self._with_details(story, user, song, viewer_id) for story, user, song in self.db.execute(stmt)]

    def get_story_row(self, story_id: int) -> Optional[Story]:
        return self.db.get(Story, story_id)

    def create_story(self, data: Dict[str, Any]) -> Story:
        story = Story(**data)
        self.db.add(story)
        self.db.flush()
        return story

    def update_story(self, story_id: int, changes: Dict[str, Any]) -> Optional[Story]:
        story = self.get_story_row(story_id)
        if story is None:
            return None
        for key, value in changes.items():
            setattr(story, key, value)
        story.updated_at = _utcnow()
        self.db.flush()
        return story

    def delete_story(self, story_id: int) -> bool:
        """Hard delete; likes and comments go with it."""
        story = self.get_story_row(story_id)
        if story is None:
            return False
        self.db.delete(story)
        self.db.flush()
        return True

    def publish_story(self, story_id: int) -> Optional[Story]:
        return self.update_story(story_id, {"is_published": True})

    def unpublish_story(self, story_id: int) -> Optional[Story]:
        return self.update_story(story_id, {"is_published": False})

    def share_story(self, story_id: int) -> Optional[Story]:
        story = self.get_story_row(story_id)
        if story is None:
            return None
        self._bump(story_id, Story.shares_count, 1)
        self.db.refresh(story)
        return story

    def _bump(self, story_id: int, column, delta: int) -> None:
        if delta >= 0:
            new_value = column + delta
        else:
            new_value = case((column + delta > 0, column + delta), else_=0)
        self.db.execute(
            update(Story)
            .where(Story.id == story_id)
            .values({column.key: new_value})
            .execution_options(synchronize_session=False)
        )

    # ---- likes -------------------------------------------------------------

    def is_story_liked(self, user_id: int, story_id: int) -> bool:
        stmt = select(Like.id).where(Like.user_id == user_id, Like.story_id == story_id)
        return self.db.execute(stmt).first() is not None

    def toggle_like(self, user_id: int, story_id: int) -> bool:
        """
        Like the story if the user has not, otherwise remove the like. Returns the new state.

        A concurrent request that already made the same change leaves the counter
        alone, so likesCount keeps matching the like rows.
        """
        if self.is_story_liked(user_id, story_id):
            removed = self.db.execute(
                delete(Like).where(Like.user_id == user_id, Like.story_id == story_id)
            ).rowcount
            if removed:
                self._bump(story_id, Story.likes_count, -1)
            return False

        if self._insert_ignoring_conflict(Like, {"user_id": user_id, "story_id": story_id}):
            self._bump(story_id, Story.likes_count, 1)
        return True

    # ---- comments ----------------------------------------------------------

    def add_comment(
        self,
        story_id: int,
        user_id: int,
        content: str,
        commenter_name: Optional[str] = None,
    ) -> Comment:
        comment = Comment(story_id=story_id, user_id=user_id, content=content, commenter_name=commenter_name)
        self.db.add(comment)
        self.db.flush()
        self._bump(story_id, Story.comments_count, 1)
        return comment

    def _comments(self, story_id: int, include_orphans: bool) -> List[CommentWithUser]:
        stmt = select(Comment, User)
        if include_orphans:
            stmt = stmt.outerjoin(User, Comment.user_id == User.id)
        else:
            stmt = stmt.join(User, Comment.user_id == User.id)
        stmt = stmt.where(Comment.story_id == story_id).order_by(desc(Comment.created_at), desc(Comment.id))

        out: List[CommentWithUser] = []
        for comment, user in self.db.execute(stmt):
            out.append(
                CommentWithUser(
                    id=comment.id,
                    story_id=comment.story_id,
                    user_id=comment.user_id,
                    content=comment.content,
                    commenter_name=comment.commenter_name,
                    created_at=comment.created_at,
                    user=UserSummary.model_validate(user) if user is not None else None,
                )
            )
        return out

    def get_comments(self, story_id: int) -> List[CommentWithUser]:
        """Comments whose author resolves, newest first."""
        return self._comments(story_id, include_orphans=False)

    def list_comments(self, story_id: int) -> List[CommentWithUser]:
        """All comments newest first; `user` is None when the author row is gone."""
        return self._comments(story_id, include_orphans=True)

    def get_comment(self, comment_id: int) -> Optional[CommentWithUser]:
        comment = self.db.get(Comment, comment_id)
        if comment is None:
            return None
        user = self.get_user(comment.user_id)
        return CommentWithUser(
            id=comment.id,
            story_id=comment.story_id,
            user_id=comment.user_id,
            content=comment.content,
            commenter_name=comment.commenter_name,
            created_at=comment.created_at,
            user=UserSummary.model_validate(user) if user is not None else None,
        )

    # ---- follows -----------------------------------------------------------

    def is_user_following(self, follower_id: int, following_id: int) -> bool:
        stmt = select(Follow.id).where(Follow.follower_id == follower_id, Follow.following_id == following_id)
        return self.db.execute(stmt).first() is not None

    def toggle_follow(self, follower_id: int, following_id: int) -> bool:
        if self.is_user_following(follower_id, following_id):
            self.db.execute(
                delete(Follow).where(Follow.follower_id == follower_id, Follow.following_id == following_id)
            )
            return False
        self._insert_ignoring_conflict(Follow, {"follower_id": follower_id, "following_id": following_id})
        return True

    # ---- analytics ---------------------------------------------------------

    def get_user_stats(self, user_id: int) -> UserStats:
        stories_count, total_likes = self.db.execute(
            select(func.count(Story.id), func.coalesce(func.sum(Story.likes_count), 0)).where(
                Story.user_id == user_id
            )
        ).one()
        followers = self.db.execute(
            select(func.count(Follow.id)).where(Follow.following_id == user_id)
        ).scalar_one()
        following = self.db.execute(
            select(func.count(Follow.id)).where(Follow.follower_id == user_id)
        ).scalar_one()
        return UserStats(
            stories_count=int(stories_count or 0),
            total_likes=int(total_likes or 0),
            followers=int(followers or 0),
            following=int(following or 0),
        )

    def get_user_genre_stats(self, user_id: int) -> List[GenreStats]:
        count = func.count(Story.id)
        rows = self.db.execute(
            select(Song.genre, count)
            .select_from(Story)
            .join(Song, Story.song_id == Song.id)
            .where(Story.user_id == user_id, Song.genre.is_not(None))
            .group_by(Song.genre)
        ).all()

        total = sum(n for _, n in rows)
        rows = sorted(rows, key=lambda r: (-r[1], r[0]))
        return [GenreStats(name=genre, count=n, percentage=percentage(n, total)) for genre, n in rows]

    def get_user_decade_stats(self, user_id: int) -> List[DecadeStats]:
        rows = self.db.execute(
            select(Song.year, func.count(Story.id))
            .select_from(Story)
            .join(Song, Story.song_id == Song.id)
            .where(Story.user_id == user_id, Song.year.is_not(None))
            .group_by(Song.year)
        ).all()

        decades: Counter = Counter()
        for year, n in rows:
            decades[(year // 10) * 10] += n
        ordered = sorted(decades.items(), key=lambda item: (-item[1], item[0]))
        return [DecadeStats(decade=decade_label(decade), count=n) for decade, n in ordered]

    def get_user_age_stats(self, user_id: int) -> List[AgeStats]:
        rows = self.db.execute(
            select(Story.age, func.count(Story.id))
            .where(Story.user_id == user_id, Story.age.is_not(None))
            .group_by(Story.age)
        ).all()
        rows = sorted(rows, key=lambda r: (-r[1], r[0]))
        return [AgeStats(age=age, count=n, description=age_description(age)) for age, n in rows]


# PUBLIC_INTERFACE
def get_storage(db: Session = Depends(db_session_dep)) -> Storage:
    """FastAPI dependency: a Storage bound to the request's session."""
    return Storage(db)
