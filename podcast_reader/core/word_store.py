"""Holder for the words of the currently loaded transcript.

WHY: Chunks and sync cursors are derived from the word list. Keeping the
list in one place with an explicit "contents replaced" signal lets every
derived view invalidate itself at the same moment.

HOW: load() swaps in a new tuple and notifies listeners synchronously.
get() returns the current tuple.

RULES:
- Contents are replaced all-or-nothing; there is no partial update
- get() returns an empty tuple before the first load
- Listeners run in registration order, after the swap
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from podcast_reader.core.ir import Word

logger = logging.getLogger(__name__)


class WordStore:
    def __init__(self) -> None:
        self._words: tuple[Word, ...] = ()
        self._listeners: list[Callable[[tuple[Word, ...]], None]] = []

    def load(self, words: Iterable[Word]) -> None:
        self._words = tuple(words)
        logger.debug("Word store loaded %d words", len(self._words))
        for listener in list(self._listeners):
            listener(self._words)

    def get(self) -> tuple[Word, ...]:
        return self._words

    def subscribe(
        self, listener: Callable[[tuple[Word, ...]], None]
    ) -> Callable[[], None]:
        """Register an invalidation listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe
