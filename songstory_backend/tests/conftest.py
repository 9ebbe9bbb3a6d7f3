import pytest
from fastapi.testclient import TestClient

from src.api import apple_music, db, spotify, youtube


@pytest.fixture(autouse=True)
def _env(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    for name in (
        "POSTGRES_URL",
        "SPOTIFY_CLIENT_ID",
        "SPOTIFY_CLIENT_SECRET",
        "SONG_SEARCH_PROVIDER",
        "OPENAI_API_KEY",
        "OPENAI_KEY",
        "SENDGRID_API_KEY",
        "ADMIN_PASSWORD",
        "ADMIN_PASSWORD_HASH",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    db.dispose_engine()
    yield
    db.dispose_engine()


@pytest.fixture
def no_network(monkeypatch):
    """Providers that fail loudly if a test reaches them without patching."""

    def _unexpected(*args, **kwargs):
        raise AssertionError("unexpected provider call")

    for module, names in (
        (spotify, ("search_tracks", "get_track")),
        (apple_music, ("search_tracks", "get_track", "find_preview_url")),
        (youtube, ("get_video",)),
    ):
        for name in names:
            monkeypatch.setattr(module, name, _unexpected)


@pytest.fixture
def client(no_network):
    from src.api.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(client):
    counter = {"n": 0}

    def _make(username=None, display_name="Test User"):
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        r = client.post(
            "/api/users",
            json={"username": username, "email": f"{username}@example.com", "displayName": display_name},
        )
        assert r.status_code == 200, r.text
        return r.json()

    return _make


@pytest.fixture
def make_song(client):
    def _make(title="Song", artist="Artist", **extra):
        r = client.post("/api/songs", json={"title": title, "artist": artist, **extra})
        assert r.status_code == 200, r.text
        return r.json()

    return _make


@pytest.fixture
def make_story(client, make_user, make_song):
    def _make(user=None, song=None, **extra):
        user = user or make_user()
        song = song or make_song()
        body = {
            "userId": user["id"],
            "songId": song["id"],
            "title": "A memory",
            "content": "It happened.",
            "authorName": user["displayName"],
        }
        body.update(extra)
        r = client.post("/api/stories", json=body)
        assert r.status_code == 200, r.text
        return r.json()

    return _make
