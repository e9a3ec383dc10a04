"""Bridge between an external audio player and the sync controller.

WHY: The sync controller must be testable without a real audio element.
The adapter is the only object that knows about the player: it turns
player events into controller calls and controller seeks into player
commands.

HOW: Player events (time update, play, pause, ended) arrive through the
on_* methods and are forwarded to subscribed listeners. seek() moves the
player and starts it if it was paused.

RULES:
- No computation here; events are forwarded as received
- seek() without an attached player is a no-op
- Listeners implement ClockListener (the sync controller does)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class Player(Protocol):
    """The subset of an audio element the adapter drives."""

    @property
    def paused(self) -> bool: ...

    def seek(self, time_s: float) -> None: ...

    def play(self) -> None: ...


class ClockListener(Protocol):
    def tick(self, time_s: float) -> None: ...

    def set_playing(self, is_playing: bool) -> None: ...

    def playback_ended(self) -> None: ...


class PlaybackClockAdapter:
    def __init__(self, player: Optional[Player] = None) -> None:
        self._player = player
        self._listeners: list[ClockListener] = []

    def attach_player(self, player: Optional[Player]) -> None:
        """Swap the driven player, e.g. when another episode is selected."""
        self._player = player

    def subscribe(self, listener: ClockListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Player → engine
    # ------------------------------------------------------------------

    def on_tick(self, time_s: float) -> None:
        for listener in list(self._listeners):
            listener.tick(time_s)

    def on_play(self) -> None:
        for listener in list(self._listeners):
            listener.set_playing(True)

    def on_pause(self) -> None:
        for listener in list(self._listeners):
            listener.set_playing(False)

    def on_ended(self) -> None:
        for listener in list(self._listeners):
            listener.playback_ended()

    def resync(self) -> None:
        """Re-announce the player's play/pause state to listeners.

        Needed after a listener resets its own view of the player, e.g.
        when a transcript finishes loading while audio is already playing.
        """
        if self._player is None:
            return
        if self._player.paused:
            self.on_pause()
        else:
            self.on_play()

    # ------------------------------------------------------------------
    # Engine → player
    # ------------------------------------------------------------------

    def seek(self, time_s: float) -> None:
        if self._player is None:
            logger.debug("Seek to %.2fs dropped: no player attached", time_s)
            return
        self._player.seek(time_s)
        if self._player.paused:
            self._player.play()
