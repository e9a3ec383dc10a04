"""Typed results returned by the service clients.

WHY: The RSS, transcription, and chat services return loosely shaped
JSON or XML. Typed dataclasses make the fields explicit at the boundary
so nothing downstream has to guess at shapes.

HOW: One dataclass per result. to_dict() produces the JSON shape the
HTTP routes answer with; transcripts reuse core.ir.Transcript.

RULES:
- FeedItem.id is the item guid, falling back to its link
- FeedItem.published is the parsed date (None when absent or malformed),
  FeedItem.date keeps the raw string as published
- ChatReply.message is the formatted answer, bullet_points the subset of
  lines carrying a timestamp marker
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from podcast_reader.core.citations import BulletPoint


class ChatType(str, enum.Enum):
    """Which system prompt the chat service is given."""

    SUMMARY = "summary"
    QA = "qa"


@dataclass
class Enclosure:
    url: str
    type: Optional[str] = None
    length: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.url, "type": self.type, "length": self.length}


@dataclass
class FeedItem:
    """One episode (RSS item or Atom entry)."""

    id: str
    title: str
    description: str
    content: str
    date: Optional[str]
    link: Optional[str]
    enclosure: Optional[Enclosure] = None
    published: Optional[datetime] = None
    feed_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "content": self.content,
            "date": self.date,
            "link": self.link,
            "enclosure": self.enclosure.to_dict() if self.enclosure else None,
            "feed_name": self.feed_name,
        }


@dataclass
class FeedDocument:
    """A parsed feed: channel metadata plus its most recent items."""

    title: str
    description: str
    items: list[FeedItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass
class ChatReply:
    message: str
    type: ChatType
    bullet_points: list[BulletPoint] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "type": self.type.value,
            "bullet_points": [
                {"text": p.text, "timestamp": p.timestamp_s} for p in self.bullet_points
            ],
        }
