"""Extraction of timestamped bullet points from chat answers.

WHY: The chat service is prompted to start each point with a
"[MM:SS]" or "[HH:MM:SS]" marker. Those markers become clickable
moments that seek the player, so they must be parsed reliably and
lines without a well-formed marker must not become seek targets.

HOW: Each line of the answer is matched against an anchored pattern.
Matching lines become BulletPoint(text, timestamp_s); the raw answer is
separately reformatted with blank lines between non-empty lines.

RULES:
- The marker must open the line: no leading whitespace or text
- Minutes and seconds fields are 00–59; hours are one or two digits
- Lines whose text is empty after the marker are dropped
- Non-matching lines stay in the formatted message only
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_MARKER_RE = re.compile(r"^\[((\d{1,2}:)?[0-5]?\d:[0-5]\d)\]")
_LEADING_BRACKET_RE = re.compile(r"^\[.*?\]")


@dataclass(frozen=True)
class BulletPoint:
    text: str
    timestamp_s: float


def parse_timestamp(value: str) -> Optional[float]:
    """Convert "MM:SS" or "HH:MM:SS" to seconds, or None if malformed."""
    parts = value.split(":")
    try:
        numbers = [int(p) for p in parts]
    except ValueError:
        return None
    if len(numbers) == 3:
        return float(numbers[0] * 3600 + numbers[1] * 60 + numbers[2])
    if len(numbers) == 2:
        return float(numbers[0] * 60 + numbers[1])
    return None


def parse_bullet_points(response_text: str) -> list[BulletPoint]:
    points: list[BulletPoint] = []
    for line in response_text.split("\n"):
        if not line.strip():
            continue
        match = _MARKER_RE.match(line)
        if match is None:
            continue
        timestamp = parse_timestamp(match.group(1))
        text = _LEADING_BRACKET_RE.sub("", line, count=1).strip()
        if timestamp is None or not text:
            continue
        points.append(BulletPoint(text=text, timestamp_s=timestamp))
    return points


def format_message(response_text: str) -> str:
    """Keep every non-blank line, separated by one blank line."""
    return "\n\n".join(line for line in response_text.split("\n") if line.strip())
