"""State machine keeping playback, highlighted word, and visible page in sync.

WHY: Three things move independently while someone listens and reads:
the audio position (driven by the player), the highlighted word
(derived from the position), and the visible page (driven by the
position while playing, and by the reader when they flip pages). The
controller is the single owner of those cursors so they cannot drift
apart.

HOW: Two states, EMPTY (nothing loaded) and READY (chunks computed).
The controller listens to a WordStore for invalidation and to a
PlaybackClockAdapter for player events. Explicit navigation moves the
page first and then seeks the player to the page start, so navigating
pages moves playback and not the other way round. Every state change
is published to observers as an immutable SyncState snapshot.

RULES:
- load_transcript() recomputes chunks and resets all cursors
- tick() always updates current time and the active word; it changes
  the page only while playing, moving forward, and outside the
  active page, and only to the first page containing the time
- navigate() and goto_chunk() never wrap; out-of-range requests are
  ignored without a seek
- word_clicked() seeks only when the modifier key is held
- Every operation other than load_transcript() is a no-op while EMPTY,
  and tick/navigation/seeks are no-ops while there are no chunks
- Nothing here raises for bad input
"""

from __future__ import annotations

import dataclasses
import enum
import logging
from collections.abc import Callable, Iterable
from typing import Any, Optional

from podcast_reader.config import WORDS_PER_CHUNK
from podcast_reader.core.chunker import chunk_words
from podcast_reader.core.clock import PlaybackClockAdapter
from podcast_reader.core.ir import Chunk, SyncState, Word
from podcast_reader.core.word_store import WordStore

logger = logging.getLogger(__name__)


class ControllerStatus(str, enum.Enum):
    EMPTY = "empty"
    READY = "ready"


class SyncController:
    """Owner of the chunk list and the SyncState cursors.

    Args:
        clock: Adapter used to receive player events and issue seeks.
        target_size: Chunk size threshold passed to the chunker.
        store: Word store to bind to; a private one is created if omitted.
    """

    def __init__(
        self,
        clock: PlaybackClockAdapter,
        target_size: int = WORDS_PER_CHUNK,
        store: Optional[WordStore] = None,
    ) -> None:
        self._clock = clock
        self._target_size = target_size
        self._store = store if store is not None else WordStore()
        self._status = ControllerStatus.EMPTY
        self._chunks: list[Chunk] = []
        self._state = SyncState()
        self._observers: list[Callable[[SyncState], None]] = []

        self._store.subscribe(self._on_words_replaced)
        self._clock.subscribe(self)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def status(self) -> ControllerStatus:
        return self._status

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def chunks(self) -> list[Chunk]:
        return list(self._chunks)

    @property
    def page_count(self) -> int:
        return len(self._chunks)

    @property
    def active_chunk(self) -> Optional[Chunk]:
        if not self._chunks:
            return None
        return self._chunks[self._state.active_chunk_index]

    @property
    def active_word(self) -> Optional[Word]:
        chunk = self.active_chunk
        if chunk is None or self._state.active_word_index is None:
            return None
        return chunk.words[self._state.active_word_index]

    def subscribe(self, observer: Callable[[SyncState], None]) -> Callable[[], None]:
        """Register a state-change observer; returns an unsubscribe callable."""
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def load_transcript(self, words: Iterable[Word]) -> None:
        self._store.load(words)

    def tick(self, time_s: float) -> None:
        if not self._chunks:
            return

        previous_time = self._state.current_time_s
        index = self._state.active_chunk_index

        if (
            self._state.is_playing
            and time_s >= previous_time
            and not self._chunks[index].contains(time_s)
        ):
            candidate = self._find_chunk(time_s)
            if candidate is not None and candidate != index:
                logger.debug("Auto-advancing to chunk %d at %.2fs", candidate, time_s)
                index = candidate

        self._update(
            current_time_s=time_s,
            active_chunk_index=index,
            active_word_index=_find_word(self._chunks[index], time_s),
        )

    def navigate(self, direction: int) -> None:
        """Move one page back (-1) or forward (+1) and seek to its start."""
        if not self._chunks:
            return
        target = self._state.active_chunk_index + direction
        if not 0 <= target < len(self._chunks):
            return
        self._go_to_chunk(target)

    def goto_chunk(self, page_number: int) -> None:
        """Jump to a 1-based page number; out-of-range numbers are ignored."""
        if not self._chunks:
            return
        if not 1 <= page_number <= len(self._chunks):
            logger.debug("Ignoring page %d of %d", page_number, len(self._chunks))
            return
        self._go_to_chunk(page_number - 1)

    def word_clicked(self, word: Word, modifier_held: bool) -> None:
        if not self._chunks or not modifier_held:
            return
        self._clock.seek(word.start_s)

    def seek(self, time_s: float) -> None:
        """Move playback to time_s (used for cited moments from the chat)."""
        if not self._chunks:
            return
        self._clock.seek(time_s)

    # ------------------------------------------------------------------
    # Player events (ClockListener)
    # ------------------------------------------------------------------

    def set_playing(self, is_playing: bool) -> None:
        if self._status is ControllerStatus.EMPTY:
            return
        self._update(is_playing=is_playing)

    def playback_ended(self) -> None:
        if self._status is ControllerStatus.EMPTY:
            return
        word_index = None
        if self._chunks:
            word_index = _find_word(self._chunks[self._state.active_chunk_index], 0.0)
        self._update(is_playing=False, current_time_s=0.0, active_word_index=word_index)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _on_words_replaced(self, words: tuple[Word, ...]) -> None:
        self._chunks = chunk_words(words, self._target_size)
        self._status = ControllerStatus.READY
        self._state = SyncState()
        logger.info(
            "Transcript loaded: %d words in %d chunks", len(words), len(self._chunks)
        )
        self._notify()

    def _go_to_chunk(self, index: int) -> None:
        chunk = self._chunks[index]
        self._update(
            active_chunk_index=index,
            active_word_index=_find_word(chunk, self._state.current_time_s),
        )
        self._clock.seek(chunk.start_s)

    def _find_chunk(self, time_s: float) -> Optional[int]:
        for index, chunk in enumerate(self._chunks):
            if chunk.contains(time_s):
                return index
        return None

    def _update(self, **changes: Any) -> None:
        new_state = dataclasses.replace(self._state, **changes)
        if new_state == self._state:
            return
        self._state = new_state
        self._notify()

    def _notify(self) -> None:
        for observer in list(self._observers):
            observer(self._state)


def _find_word(chunk: Chunk, time_s: float) -> Optional[int]:
    """Index of the first word in chunk whose interval contains time_s."""
    for index, word in enumerate(chunk.words):
        if word.contains(time_s):
            return index
    return None
