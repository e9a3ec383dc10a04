"""Shared test fixtures for the podcast_reader test suite.

WHY: Several test modules need the same sample transcript, the same
Deepgram response body, and a stand-in for the browser audio player.
Centralizing them keeps every module testing against identical data.

HOW: Pytest fixtures provide the sample words, the raw Deepgram JSON
that produces them, a FakePlayer that records commands, and a factory
for word sequences of arbitrary length.

RULES:
- Sample timings are float seconds, ordered, non-overlapping
- FakePlayer starts paused; play() un-pauses it
"""

from __future__ import annotations

from typing import Any, Dict, List

import pytest

from podcast_reader.core.ir import Word


# ---------------------------------------------------------------------------
# Sample transcript
# ---------------------------------------------------------------------------

SAMPLE_WORDS: List[Word] = [
    Word(text="How",        start_s=0.12, end_s=0.25, confidence=0.97, speaker=0),
    Word(text="are",        start_s=0.26, end_s=0.38, confidence=0.95, speaker=0),
    Word(text="you",        start_s=0.39, end_s=0.51, confidence=0.96, speaker=0),
    Word(text="doing",      start_s=0.52, end_s=0.72, confidence=0.93, speaker=0),
    Word(text="today?",     start_s=0.73, end_s=0.94, confidence=0.91, speaker=0),
    Word(text="I",          start_s=1.20, end_s=1.26, confidence=0.98, speaker=1),
    Word(text="am",         start_s=1.27, end_s=1.38, confidence=0.97, speaker=1),
    Word(text="fantastic,", start_s=1.39, end_s=1.80, confidence=0.90, speaker=1),
    Word(text="thank",      start_s=1.81, end_s=1.95, confidence=0.96, speaker=1),
    Word(text="you.",       start_s=1.96, end_s=2.12, confidence=0.97, speaker=1),
]

SAMPLE_TEXT = "How are you doing today? I am fantastic, thank you."


def make_words(count: int, terminal_at=(), step: float = 0.5) -> List[Word]:
    """Build count words; 1-based positions in terminal_at end with a period."""
    terminal = set(terminal_at)
    words = []
    for position in range(1, count + 1):
        text = "w{}".format(position)
        if position in terminal:
            text += "."
        start = (position - 1) * step
        words.append(Word(text=text, start_s=start, end_s=start + step * 0.8))
    return words


class FakePlayer:
    """Records the commands an audio element would receive."""

    def __init__(self, paused: bool = True) -> None:
        self.paused = paused
        self.seeks: List[float] = []
        self.play_calls = 0

    def seek(self, time_s: float) -> None:
        self.seeks.append(time_s)

    def play(self) -> None:
        self.play_calls += 1
        self.paused = False


@pytest.fixture
def sample_words() -> List[Word]:
    return list(SAMPLE_WORDS)


@pytest.fixture
def player() -> FakePlayer:
    return FakePlayer()


@pytest.fixture
def deepgram_response() -> Dict[str, Any]:
    """Deepgram pre-recorded response producing SAMPLE_WORDS."""
    words = []
    for w in SAMPLE_WORDS:
        words.append({
            "word": w.text.rstrip("?,.").lower(),
            "punctuated_word": w.text,
            "start": w.start_s,
            "end": w.end_s,
            "confidence": w.confidence,
            "speaker": w.speaker,
        })
    return {
        "metadata": {"request_id": "a1b2c3"},
        "results": {
            "channels": [
                {"alternatives": [{"transcript": SAMPLE_TEXT, "confidence": 0.95, "words": words}]}
            ]
        },
    }
