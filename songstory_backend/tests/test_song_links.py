import pytest

from src.api.song_links import (
    SongQuery,
    classify_song_query,
    extract_apple_music_id,
    extract_spotify_id,
    extract_youtube_id,
)


@pytest.mark.parametrize(
    "text",
    [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ",
        "https://www.youtube.com/watch?list=PL1&v=dQw4w9WgXcQ&t=10",
        "https://www.youtube.com/embed/dQw4w9WgXcQ",
        "https://youtube.com/shorts/dQw4w9WgXcQ",
    ],
)
def test_youtube_links(text):
    assert extract_youtube_id(text) == "dQw4w9WgXcQ"
    assert classify_song_query(text) == SongQuery("youtube", "dQw4w9WgXcQ")


@pytest.mark.parametrize(
    "text",
    [
        "https://open.spotify.com/track/3n3Ppam7vgaVa1iaRUc9Lp",
        "https://open.spotify.com/track/3n3Ppam7vgaVa1iaRUc9Lp?si=abc123",
        "https://open.spotify.com/intl-de/track/3n3Ppam7vgaVa1iaRUc9Lp",
        "spotify:track:3n3Ppam7vgaVa1iaRUc9Lp",
    ],
)
def test_spotify_links(text):
    assert extract_spotify_id(text) == "3n3Ppam7vgaVa1iaRUc9Lp"
    assert classify_song_query(text) == SongQuery("spotify", "3n3Ppam7vgaVa1iaRUc9Lp")


def test_apple_music_track_param_wins_over_album_id():
    url = "https://music.apple.com/us/album/bohemian-rhapsody/1440806041?i=1440806768"
    assert extract_apple_music_id(url) == "1440806768"
    assert classify_song_query(url) == SongQuery("apple_music", "1440806768")


def test_apple_music_song_url():
    url = "https://music.apple.com/gb/song/wonderwall/1440809211"
    assert classify_song_query(url) == SongQuery("apple_music", "1440809211")


def test_spotify_album_link_is_not_a_track():
    assert extract_spotify_id("https://open.spotify.com/album/4LH4d3cOWNNsVw41Gqt2kv") is None


def test_youtube_takes_precedence_over_spotify():
    text = "https://youtu.be/dQw4w9WgXcQ spotify:track:3n3Ppam7vgaVa1iaRUc9Lp"
    assert classify_song_query(text).kind == "youtube"


def test_free_text_is_trimmed_search():
    assert classify_song_query("  bohemian rhapsody  ") == SongQuery("search", "bohemian rhapsody")
