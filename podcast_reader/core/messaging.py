"""Typed message bus between the chat surface and the player surface.

WHY: The chat panel must not hold a reference to the player, and the
player must not know the chat panel exists. They only need to exchange
two facts: "a transcript is ready" and "play from this moment".

HOW: MessageBus keeps handlers per message class. publish() delivers a
message synchronously to the handlers registered for its exact class.
One bus instance is created by the session (the composition root) and
handed to both surfaces.

RULES:
- Delivery is best-effort and at most once per publish
- A message with no handlers is dropped silently
- A failing handler is logged and does not stop delivery to the others
- No ordering guarantee between different message kinds
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Dict, List, Type, TypeVar, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TranscriptReady:
    """Published once per successful transcription."""

    transcript: str


@dataclass(frozen=True)
class PlayAudioAt:
    """Published when the reader selects a cited moment in a chat answer."""

    timestamp_s: float


Message = Union[TranscriptReady, PlayAudioAt]

M = TypeVar("M", TranscriptReady, PlayAudioAt)


class MessageBus:
    def __init__(self) -> None:
        self._handlers: Dict[Type[Any], List[Callable[[Any], None]]] = defaultdict(list)

    def subscribe(
        self, message_type: Type[M], handler: Callable[[M], None]
    ) -> Callable[[], None]:
        """Register handler for message_type; returns an unsubscribe callable."""
        self._handlers[message_type].append(handler)

        def _unsubscribe() -> None:
            handlers = self._handlers.get(message_type, [])
            if handler in handlers:
                handlers.remove(handler)

        return _unsubscribe

    def publish(self, message: Message) -> int:
        """Deliver message to its handlers and return how many ran cleanly."""
        handlers = list(self._handlers.get(type(message), []))
        if not handlers:
            logger.debug("Dropping %s: no listeners", type(message).__name__)
            return 0

        delivered = 0
        for handler in handlers:
            try:
                handler(message)
            except Exception:
                logger.exception("Handler failed for %s", type(message).__name__)
                continue
            delivered += 1
        return delivered
