"""
Runtime configuration read from environment variables.

A `.env` file in the working directory is loaded once on import, so local
development can keep provider keys out of the shell profile. Values are read
lazily through small helper functions so tests can override them with
`monkeypatch.setenv` after import.
"""

from __future__ import annotations

import os
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

_DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

SEARCH_PAGE_SIZE = 10


def _get(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _get_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


# PUBLIC_INTERFACE
def cors_origins() -> List[str]:
    """Return the allowed CORS origins (local dev URLs plus any configured extras)."""
    raw = os.getenv("CORS_ALLOW_ORIGINS") or os.getenv("ALLOWED_ORIGINS", "")
    extra = [o.strip() for o in raw.split(",") if o.strip()]
    return _DEFAULT_CORS_ORIGINS + extra


def log_level() -> str:
    return (os.getenv("LOG_LEVEL") or "INFO").upper()


def spotify_credentials() -> Optional[tuple]:
    client_id = _get("SPOTIFY_CLIENT_ID")
    client_secret = _get("SPOTIFY_CLIENT_SECRET")
    if not (client_id and client_secret):
        return None
    return client_id, client_secret


def song_search_provider() -> str:
    """Provider used for free-text song search: 'apple_music' (default) or 'spotify'."""
    provider = (os.getenv("SONG_SEARCH_PROVIDER") or "apple_music").strip().lower()
    if provider not in ("apple_music", "spotify"):
        return "apple_music"
    return provider


def provider_timeout() -> float:
    return float(_get_int("PROVIDER_TIMEOUT_SECONDS", 10))


def openai_api_key() -> Optional[str]:
    return _get("OPENAI_API_KEY") or _get("OPENAI_KEY")


def openai_story_model() -> str:
    return _get("OPENAI_STORY_MODEL") or "gpt-4o"


def openai_extraction_model() -> str:
    return _get("OPENAI_EXTRACTION_MODEL") or "gpt-4o"


def openai_transcription_model() -> str:
    return _get("OPENAI_TRANSCRIPTION_MODEL") or "whisper-1"


def sendgrid_api_key() -> Optional[str]:
    return _get("SENDGRID_API_KEY")


def feedback_to_email() -> str:
    return _get("FEEDBACK_TO_EMAIL") or "feedback@thissongthattime.com"


def feedback_from_email() -> str:
    return _get("FEEDBACK_FROM_EMAIL") or "noreply@thissongthattime.com"


def admin_password_hash() -> Optional[str]:
    return _get("ADMIN_PASSWORD_HASH")


def admin_password() -> Optional[str]:
    return _get("ADMIN_PASSWORD")


def jwt_secret() -> Optional[str]:
    return _get("JWT_SECRET")


def jwt_algorithm() -> str:
    return _get("JWT_ALGORITHM") or "HS256"


def jwt_exp_minutes() -> int:
    return _get_int("JWT_EXPIRES_MINUTES", 720)
