"""Transcript data model: words, chunks, transcripts, and sync state.

WHY: The transcription service returns a flat list of timed words. The
reader view needs those words grouped into screen-sized chunks, and the
sync controller needs a snapshot type it can hand to observers. These
dataclasses are the contract between the API layer, the chunker, the
controller, and whatever renders the transcript.

HOW: Four dataclasses:
  Word      : one spoken word with timing and optional metadata
  Chunk     : a contiguous, sentence-respecting group of words
  Transcript: the full word list plus the service's plain text
  SyncState : an immutable snapshot of the controller's cursors

RULES:
- All times are float seconds
- Word and Chunk are frozen; chunks are recomputed, never mutated
- start_s <= end_s for every word; overlaps between neighbours are allowed
- Chunk.text is the words joined by a single space
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Word:
    """A single word from the transcription service.

    RULES:
    - text: the punctuated form when the service provides one
    - start_s / end_s: float seconds, start_s <= end_s
    - confidence: 0.0–1.0, None when not reported
    - speaker: diarization index, None when diarization is off
    """

    text: str
    start_s: float
    end_s: float
    confidence: Optional[float] = None
    speaker: Optional[int] = None

    def contains(self, time_s: float) -> bool:
        """Whether time_s lies inside [start_s, end_s] (both inclusive)."""
        return self.start_s <= time_s <= self.end_s

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Word:
        """Parse a word from a service or client payload.

        WHY: Deepgram names the fields word/punctuated_word/start/end,
        while the HTTP API of this app uses text/start/end. Both shapes
        reach this constructor.

        RULES:
        - punctuated_word wins over word; text is accepted as well
        - start/end are coerced to float, speaker to int
        - A missing end falls back to start
        - end earlier than start is clamped up to start
        """
        text = data.get("punctuated_word") or data.get("word") or data.get("text") or ""
        start = float(data.get("start", 0.0))
        end = float(data.get("end", start))
        speaker = data.get("speaker")
        confidence = data.get("confidence")
        return cls(
            text=text,
            start_s=start,
            end_s=max(start, end),
            confidence=float(confidence) if confidence is not None else None,
            speaker=int(speaker) if speaker is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "start": self.start_s,
            "end": self.end_s,
            "confidence": self.confidence,
            "speaker": self.speaker,
        }


@dataclass(frozen=True)
class Chunk:
    """A display page: a non-empty run of consecutive words.

    RULES:
    - words is never empty
    - text, start_s, end_s are derived from words
    """

    words: Tuple[Word, ...]

    @property
    def text(self) -> str:
        return " ".join(w.text for w in self.words)

    @property
    def start_s(self) -> float:
        return self.words[0].start_s

    @property
    def end_s(self) -> float:
        return self.words[-1].end_s

    def contains(self, time_s: float) -> bool:
        return self.start_s <= time_s <= self.end_s


@dataclass
class Transcript:
    """The result of one successful transcription.

    WHY: The chat surface needs the plain text, the reader view needs the
    timed words. Both arrive together and are replaced together.

    RULES:
    - text: the service's plain transcript (used as chat context)
    - words: ordered by start time as delivered by the service
    - A new transcription replaces the whole Transcript, never patches it
    """

    text: str
    words: list[Word] = field(default_factory=list)


@dataclass(frozen=True)
class SyncState:
    """Snapshot of the sync controller's cursors.

    RULES:
    - active_chunk_index is 0 when there are no chunks
    - active_word_index indexes into the active chunk's words, or is None
      when the current time falls between words
    """

    current_time_s: float = 0.0
    active_chunk_index: int = 0
    active_word_index: Optional[int] = None
    is_playing: bool = False
