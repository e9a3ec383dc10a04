"""Sentence-respecting pagination of a word list.

WHY: A full episode transcript is thousands of words. The reader shows
one page at a time, and a page that ends mid-sentence is hard to read,
so pages close only at a sentence boundary once they are big enough.

HOW: Single pass over the words, accumulating into the current chunk.
The chunk is closed when the sequence ends, or when it holds at least
target_size words and the current word ends with terminal punctuation.

RULES:
- Terminal punctuation is ".", "!" or "?" at the end of the word text
- A chunk may exceed target_size while waiting for a sentence end
- The last chunk may be shorter than target_size and unpunctuated
- Empty input → empty list; the function is pure and deterministic
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from podcast_reader.config import WORDS_PER_CHUNK
from podcast_reader.core.ir import Chunk, Word

# Word text ending in a sentence terminator.
_TERMINAL_RE = re.compile(r"[.!?]$")


def ends_sentence(word: Word) -> bool:
    """Whether the word closes a sentence."""
    return bool(_TERMINAL_RE.search(word.text))


def chunk_words(words: Sequence[Word], target_size: int = WORDS_PER_CHUNK) -> list[Chunk]:
    """Group words into display chunks.

    Args:
        words: Ordered words of one transcript.
        target_size: Minimum word count before a sentence end may close
            a chunk. Values below 1 behave like 1.

    Returns:
        Chunks whose concatenated words equal the input exactly.
    """
    chunks: list[Chunk] = []
    current: list[Word] = []
    last_index = len(words) - 1

    for index, word in enumerate(words):
        current.append(word)
        if index == last_index or (len(current) >= target_size and ends_sentence(word)):
            chunks.append(Chunk(words=tuple(current)))
            current = []

    return chunks
