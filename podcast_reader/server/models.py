"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation.

HOW: Each endpoint has its own request and response model. Required
inputs are declared Optional so the routes can answer a missing value
with a 400 and a readable message instead of a generic 422.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Times are float seconds
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from podcast_reader.api.models import ChatType


# ---------------------------------------------------------------------------
# RSS
# ---------------------------------------------------------------------------


class FeedRequest(BaseModel):
    feed_url: Optional[str] = Field(default=None, description="URL of the RSS or Atom feed.")


class EnclosureModel(BaseModel):
    url: str = Field(description="Media URL of the episode audio.")
    type: Optional[str] = Field(default=None, description="MIME type, e.g. 'audio/mpeg'.")
    length: Optional[str] = Field(default=None, description="Size in bytes as published.")


class FeedItemModel(BaseModel):
    id: str = Field(description="Item guid, or its link when no guid is published.")
    title: str = Field(description="Episode title.")
    description: str = Field(description="Short description.")
    content: str = Field(description="Full HTML content (content:encoded or description).")
    date: Optional[str] = Field(default=None, description="Publication date as published.")
    link: Optional[str] = Field(default=None, description="Episode web page.")
    enclosure: Optional[EnclosureModel] = Field(default=None, description="Episode media.")
    feed_name: Optional[str] = Field(
        default=None, description="Subscription name, set on merged listings."
    )


class FeedResponse(BaseModel):
    title: str = Field(description="Feed title.")
    description: str = Field(description="Feed description.")
    items: List[FeedItemModel] = Field(description="Up to 25 most recent items.")


class FeedItemsResponse(BaseModel):
    items: List[FeedItemModel] = Field(
        description="Items from all subscriptions, newest first, at most 25."
    )


# ---------------------------------------------------------------------------
# Subscriptions
# ---------------------------------------------------------------------------


class SubscriptionModel(BaseModel):
    id: str = Field(description="Subscription identifier (the feed URL for added feeds).")
    name: str = Field(description="Display name, taken from the feed title.")
    url: str = Field(description="Feed URL.")


class SubscribeRequest(BaseModel):
    url: Optional[str] = Field(default=None, description="Feed URL to subscribe to.")


# ---------------------------------------------------------------------------
# Transcription
# ---------------------------------------------------------------------------


class TranscribeRequest(BaseModel):
    audio_url: Optional[str] = Field(default=None, description="Episode audio URL.")


class WordModel(BaseModel):
    text: str = Field(description="Word as displayed (punctuated form).")
    start: float = Field(description="Start time in seconds.")
    end: float = Field(description="End time in seconds.")
    confidence: Optional[float] = Field(default=None, description="Recognition confidence 0–1.")
    speaker: Optional[int] = Field(default=None, description="Diarized speaker index.")


class TranscribeResponse(BaseModel):
    text: str = Field(description="Plain transcript text.")
    words: List[WordModel] = Field(description="Word-level timings.")


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


class ChatRequest(BaseModel):
    message: Optional[str] = Field(default=None, description="Question or instruction.")
    type: Optional[ChatType] = Field(
        default=None,
        description="'summary' or 'qa'. Inferred from the message when omitted.",
    )
    transcript: Optional[str] = Field(default=None, description="Plain transcript text.")


class BulletPointModel(BaseModel):
    text: str = Field(description="Point text without its timestamp marker.")
    timestamp: float = Field(description="Cited moment in seconds.")


class ChatResponse(BaseModel):
    message: str = Field(description="Answer with blank lines between points.")
    type: ChatType = Field(description="Prompt used for the answer.")
    bullet_points: List[BulletPointModel] = Field(
        description="Lines that carried a [MM:SS] or [HH:MM:SS] marker."
    )


# ---------------------------------------------------------------------------
# Misc
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
