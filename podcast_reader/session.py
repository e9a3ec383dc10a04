"""Composition root for one listening session.

WHY: The player surface (sync controller) and the Q&A surface (chat
panel) must cooperate without referencing each other, and upstream
failures must reach the UI as messages rather than exceptions. Something
has to own the shared pieces and make those conversions once.

HOW: ReaderSession creates the message bus, the playback clock adapter,
the sync controller, and the chat panel, and wires them:
  transcribe() → Ok: controller.load_transcript + TranscriptReady
  PlayAudioAt  → controller.seek
  ChatPanel.submit() → ask() → Ok/Err appended to the chat history
Service clients are built per call from injectable factories.

RULES:
- Upstream exceptions (and missing API keys) become Err results here;
  nothing above this layer sees a client exception
- Only Ok transcripts reach the controller
- Overlapping transcribe() calls are not cancelled: the last one to
  finish wins
- The chat panel stays locked until a TranscriptReady arrives
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, List, Optional

from podcast_reader.api.chat import GeminiClient
from podcast_reader.api.errors import UpstreamError
from podcast_reader.api.models import ChatReply
from podcast_reader.api.transcription import DeepgramClient
from podcast_reader.config import WORDS_PER_CHUNK
from podcast_reader.core.citations import BulletPoint
from podcast_reader.core.clock import PlaybackClockAdapter, Player
from podcast_reader.core.ir import Transcript
from podcast_reader.core.messaging import MessageBus, PlayAudioAt, TranscriptReady
from podcast_reader.core.result import Err, Ok, Result
from podcast_reader.core.sync import SyncController

logger = logging.getLogger(__name__)


class ChatRole(str, enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class ChatMessage:
    role: ChatRole
    content: str
    type: Optional[str] = None
    bullet_points: List[BulletPoint] = field(default_factory=list)


class ChatPanel:
    """State of the Q&A surface.

    WHY: Questions only make sense once a transcript exists, and cited
    moments must reach the player through the bus, not a direct call.

    RULES:
    - submit() is ignored while locked or for blank input
    - A failed answer becomes an assistant message with the error text
    - The bullet-point cursor spans all messages and is clamped, never wraps
    """

    def __init__(
        self,
        bus: MessageBus,
        answer: Callable[[str, str], Awaitable[Result[ChatReply]]],
    ) -> None:
        self._bus = bus
        self._answer = answer
        self.transcript: Optional[str] = None
        self.messages: List[ChatMessage] = []
        self.selected_bullet_point: Optional[int] = None
        bus.subscribe(TranscriptReady, self._on_transcript_ready)

    @property
    def locked(self) -> bool:
        return not self.transcript

    @property
    def bullet_points(self) -> List[BulletPoint]:
        return [p for m in self.messages for p in m.bullet_points]

    def _on_transcript_ready(self, message: TranscriptReady) -> None:
        self.transcript = message.transcript

    async def submit(self, text: str) -> Optional[ChatMessage]:
        question = text.strip()
        if not question or not self.transcript:
            return None

        self.messages.append(ChatMessage(role=ChatRole.USER, content=question))
        result = await self._answer(question, self.transcript)

        if isinstance(result, Ok):
            reply = result.value
            response = ChatMessage(
                role=ChatRole.ASSISTANT,
                content=reply.message,
                type=reply.type.value,
                bullet_points=list(reply.bullet_points),
            )
        else:
            response = ChatMessage(role=ChatRole.ASSISTANT, content=result.message)

        self.messages.append(response)
        return response

    def move_selection(self, delta: int) -> Optional[int]:
        """Move the bullet-point cursor by delta (arrow keys)."""
        count = len(self.bullet_points)
        if count == 0:
            return self.selected_bullet_point
        if self.selected_bullet_point is None:
            self.selected_bullet_point = 0
        else:
            self.selected_bullet_point = max(
                0, min(self.selected_bullet_point + delta, count - 1)
            )
        return self.selected_bullet_point

    def select_bullet_point(self, index: int) -> bool:
        """Play from the cited moment of bullet point index."""
        points = self.bullet_points
        if not 0 <= index < len(points):
            return False
        self.selected_bullet_point = index
        self._bus.publish(PlayAudioAt(timestamp_s=points[index].timestamp_s))
        return True

    def clear(self) -> None:
        self.messages = []
        self.selected_bullet_point = None


class ReaderSession:
    """Owns the bus, clock, controller, and chat panel for one reader.

    Args:
        transcription_factory: Zero-arg callable returning an async
            context manager with transcribe_url() (DeepgramClient).
        chat_factory: Zero-arg callable returning an async context
            manager with ask() (GeminiClient).
        target_size: Chunk size threshold for the controller.
    """

    def __init__(
        self,
        transcription_factory: Callable[[], Any] = DeepgramClient,
        chat_factory: Callable[[], Any] = GeminiClient,
        target_size: int = WORDS_PER_CHUNK,
    ) -> None:
        self._transcription_factory = transcription_factory
        self._chat_factory = chat_factory

        self.bus = MessageBus()
        self.clock = PlaybackClockAdapter()
        self.controller = SyncController(self.clock, target_size=target_size)
        self.chat = ChatPanel(self.bus, self.ask)
        self.audio_url: Optional[str] = None
        self.transcript: Optional[Transcript] = None

        self.bus.subscribe(PlayAudioAt, self._on_play_audio_at)

    def _on_play_audio_at(self, message: PlayAudioAt) -> None:
        self.controller.seek(message.timestamp_s)

    def select_episode(self, audio_url: Optional[str], player: Optional[Player] = None) -> None:
        """Switch to another episode: new player, no transcript."""
        self.audio_url = audio_url
        self.clock.attach_player(player)
        self.transcript = None
        self.controller.load_transcript([])

    async def transcribe(self, audio_url: Optional[str] = None) -> Result[Transcript]:
        url = audio_url or self.audio_url
        if not url:
            return Err(UpstreamError("Audio URL is required", status_code=400))

        try:
            async with self._transcription_factory() as client:
                transcript = await client.transcribe_url(url)
        except UpstreamError as exc:
            logger.warning("Transcription failed for %s: %s", url, exc.message)
            return Err(exc)
        except ValueError as exc:
            logger.warning("Transcription unavailable: %s", exc)
            return Err(UpstreamError(str(exc)))

        self._apply_transcript(transcript)
        return Ok(transcript)

    def _apply_transcript(self, transcript: Transcript) -> None:
        self.transcript = transcript
        self.controller.load_transcript(transcript.words)
        self.clock.resync()
        self.bus.publish(TranscriptReady(transcript=transcript.text))

    async def ask(self, message: str, transcript: str) -> Result[ChatReply]:
        try:
            async with self._chat_factory() as client:
                reply = await client.ask(message, transcript)
        except UpstreamError as exc:
            logger.warning("Chat request failed: %s", exc.message)
            return Err(exc)
        except ValueError as exc:
            logger.warning("Chat request rejected: %s", exc)
            return Err(UpstreamError(str(exc)))
        return Ok(reply)
