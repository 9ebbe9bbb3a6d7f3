"""
Exceptions shared by the provider adapters and route handlers.
"""

from __future__ import annotations


class ProviderError(Exception):
    """An external provider (Spotify, iTunes, YouTube, OpenAI, SendGrid) failed or is not configured."""

    def __init__(self, provider: str, message: str):
        super().__init__(message)
        self.provider = provider
        self.message = message

    def __str__(self) -> str:
        return f"{self.provider}: {self.message}"
