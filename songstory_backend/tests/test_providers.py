import pytest

from src.api import apple_music, spotify, youtube
from src.api.errors import ProviderError


def test_spotify_track_to_song():
    track = {
        "id": "3n3Ppam7vgaVa1iaRUc9Lp",
        "name": "Mr. Brightside",
        "artists": [{"name": "The Killers"}, {"name": "Guest"}],
        "album": {
            "name": "Hot Fuss",
            "release_date": "2004-06-07",
            "images": [{"url": "https://i.scdn.co/image/large"}, {"url": "https://i.scdn.co/image/small"}],
        },
        "preview_url": None,
        "external_urls": {"spotify": "https://open.spotify.com/track/3n3Ppam7vgaVa1iaRUc9Lp"},
    }
    song = spotify.track_to_song(track)
    assert song["title"] == "Mr. Brightside"
    assert song["artist"] == "The Killers, Guest"
    assert song["year"] == 2004
    assert song["spotify_id"] == "3n3Ppam7vgaVa1iaRUc9Lp"
    assert song["album_art"] == "https://i.scdn.co/image/large"
    assert song["genre"] is None


def test_spotify_without_credentials_raises():
    with pytest.raises(ProviderError) as info:
        spotify.search_tracks("anything")
    assert info.value.provider == "spotify"


def test_apple_music_track_to_song():
    track = {
        "kind": "song",
        "trackId": 1440806768,
        "trackName": "Bohemian Rhapsody",
        "artistName": "Queen",
        "collectionName": "A Night at the Opera",
        "releaseDate": "1975-10-31T12:00:00Z",
        "primaryGenreName": "Rock",
        "artworkUrl100": "https://is1-ssl.mzstatic.com/image/thumb/100x100bb.jpg",
        "previewUrl": "https://audio-ssl.itunes.apple.com/preview.m4a",
        "trackViewUrl": "https://music.apple.com/us/album/x/1?i=1440806768",
    }
    song = apple_music.track_to_song(track)
    assert song["apple_music_id"] == "1440806768"
    assert song["year"] == 1975
    assert song["genre"] == "Rock"
    assert song["album_art"].endswith("500x500bb.jpg")
    assert song["preview_url"] == "https://audio-ssl.itunes.apple.com/preview.m4a"


def test_apple_music_preview_prefers_exact_title(monkeypatch):
    results = [
        {"trackName": "Wonderwall (Live)", "previewUrl": "live"},
        {"trackName": "Wonderwall", "previewUrl": "studio"},
    ]
    monkeypatch.setattr(apple_music, "_get_json", lambda url, params: {"results": results})
    assert apple_music.find_preview_url("Wonderwall", "Oasis") == "studio"


def test_apple_music_preview_none_when_no_previews(monkeypatch):
    monkeypatch.setattr(apple_music, "_get_json", lambda url, params: {"results": [{"trackName": "X"}]})
    assert apple_music.find_preview_url("X", "Y") is None


def test_youtube_video_to_song_splits_artist_and_title():
    song = youtube.video_to_song(
        "dQw4w9WgXcQ",
        {
            "title": "Rick Astley - Never Gonna Give You Up (Official Music Video)",
            "author_name": "Rick Astley",
            "thumbnail_url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/hqdefault.jpg",
        },
    )
    assert song["artist"] == "Rick Astley"
    assert song["title"] == "Never Gonna Give You Up"
    assert song["youtube_id"] == "dQw4w9WgXcQ"
    assert song["external_url"] == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def test_youtube_topic_channel_is_artist():
    song = youtube.video_to_song("abcdefghijk", {"title": "Wonderwall", "author_name": "Oasis - Topic"})
    assert song["artist"] == "Oasis"
    assert song["title"] == "Wonderwall"


def test_provider_error_str():
    assert str(ProviderError("openai", "boom")) == "openai: boom"
