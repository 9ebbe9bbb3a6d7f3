import pytest
from sqlalchemy import func, select

from src.api.db import get_db_session, init_db
from src.api.models import Follow, Like, Song, Story
from src.api.storage import Storage


@pytest.fixture
def storage():
    init_db()
    with get_db_session() as db:
        yield Storage(db)


def _story(storage, username="author"):
    user = storage.create_user({"username": username, "email": f"{username}@example.com", "display_name": username})
    song = storage.create_song({"title": "Hey Ya!", "artist": "OutKast"})
    story = storage.create_story(
        {"user_id": user.id, "song_id": song.id, "title": "T", "content": "C", "author_name": username}
    )
    return user, story


def _count(storage, column):
    return storage.db.execute(select(func.count(column))).scalar_one()


def test_create_song_converges_on_row_inserted_concurrently(storage, monkeypatch):
    existing = storage.create_song({"title": "Existing", "artist": "Queen", "spotify_id": "sp-race"})

    real_find = Storage._find_by_any_provider_id
    calls = []

    def first_lookup_misses(self, provider_ids):
        # the other resolver commits between our lookup and our insert
        calls.append(provider_ids)
        if len(calls) == 1:
            return None
        return real_find(self, provider_ids)

    monkeypatch.setattr(Storage, "_find_by_any_provider_id", first_lookup_misses)
    song = storage.create_song({"title": "Incoming", "artist": "Queen", "spotify_id": "sp-race"})

    assert len(calls) == 2
    assert song.id == existing.id
    assert song.title == "Existing"
    assert _count(storage, Song.id) == 1


def test_insert_ignoring_conflict_reports_skipped_row(storage):
    assert storage._insert_ignoring_conflict(Song, {"title": "A", "artist": "B", "apple_music_id": "42"}) is True
    assert storage._insert_ignoring_conflict(Song, {"title": "C", "artist": "D", "apple_music_id": "42"}) is False


def test_counter_decrement_stops_at_zero(storage):
    _, story = _story(storage)
    assert story.likes_count == 0

    storage._bump(story.id, Story.likes_count, -1)
    storage.db.refresh(story)
    assert story.likes_count == 0

    storage._bump(story.id, Story.comments_count, 2)
    storage._bump(story.id, Story.comments_count, -3)
    storage.db.refresh(story)
    assert story.comments_count == 0


def test_like_already_made_by_concurrent_request(storage, monkeypatch):
    user, story = _story(storage)
    assert storage.toggle_like(user.id, story.id) is True

    # our existence check ran before the other request's like landed
    monkeypatch.setattr(Storage, "is_story_liked", lambda self, user_id, story_id: False)
    assert storage.toggle_like(user.id, story.id) is True

    storage.db.refresh(story)
    assert story.likes_count == 1
    assert _count(storage, Like.id) == 1


def test_unlike_already_made_by_concurrent_request(storage, monkeypatch):
    user, story = _story(storage)

    monkeypatch.setattr(Storage, "is_story_liked", lambda self, user_id, story_id: True)
    assert storage.toggle_like(user.id, story.id) is False

    storage.db.refresh(story)
    assert story.likes_count == 0


def test_follow_already_made_by_concurrent_request(storage, monkeypatch):
    alice, _ = _story(storage, "alice")
    bob = storage.create_user({"username": "bob", "email": "bob@example.com", "display_name": "Bob"})
    assert storage.toggle_follow(alice.id, bob.id) is True

    monkeypatch.setattr(Storage, "is_user_following", lambda self, follower_id, following_id: False)
    assert storage.toggle_follow(alice.id, bob.id) is True
    assert _count(storage, Follow.id) == 1
