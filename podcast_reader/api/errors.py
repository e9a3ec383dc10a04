"""Exception hierarchy for upstream service failures.

WHY: The HTTP routes and the session need to tell apart "the audio URL
is a web page", "the API key was rejected", and "the feed is not XML"
to pick the right status code or user message. One base class lets the
session catch every upstream failure in a single place.

HOW: UpstreamError wraps a status code and a human-readable message,
like the HTTP errors of the clients it is raised from. Subclasses name
the specific failure and pin the status code the routes report.

RULES:
- Every client error derives from UpstreamError
- status_code is the code the HTTP layer should answer with
- message is safe to show to the user
"""

from __future__ import annotations

from typing import Optional


class UpstreamError(Exception):
    """Raised when an external service fails or returns unusable data."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        if status_code is not None:
            self.status_code = status_code
        self.message = message
        super().__init__(message)


# ---------------------------------------------------------------------------
# Transcription
# ---------------------------------------------------------------------------


class TranscriptionAPIError(UpstreamError):
    """The transcription service answered with an error or an unusable body."""


class InvalidCredentialsError(TranscriptionAPIError):
    status_code = 401


class AudioFetchError(UpstreamError):
    """The episode audio could not be downloaded."""


class HTMLInsteadOfAudioError(AudioFetchError):
    status_code = 400


class TooManyRedirectsError(AudioFetchError):
    status_code = 400


class EmptyAudioError(AudioFetchError):
    """The audio URL answered with an empty body."""


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


class ChatAPIError(UpstreamError):
    """The chat service answered with an error status."""


class EmptyCompletionError(ChatAPIError):
    """The chat service answered without any text."""


# ---------------------------------------------------------------------------
# RSS
# ---------------------------------------------------------------------------


class FeedFetchError(UpstreamError):
    """The feed URL could not be fetched."""


class FeedParseError(UpstreamError):
    """The feed body is not a parseable RSS document."""
