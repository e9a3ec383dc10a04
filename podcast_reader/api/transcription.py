"""Async HTTP client for episode audio download and Deepgram transcription.

WHY: Podcast enclosure URLs often go through tracking redirects, and
some hosts answer with an HTML landing page instead of the audio. The
transcription service needs the audio bytes themselves, so this module
resolves the URL, validates that the body is audio, and only then sends
it for word-level transcription.

HOW: DeepgramClient is an async context manager holding two
httpx.AsyncClient instances: one for the audio host (browser-like
headers, redirects followed) and one for the Deepgram API (token auth).
The workflow is fetch_audio → transcribe_audio, combined in
transcribe_url.

RULES:
- Always use the async context manager (async with DeepgramClient() as client:)
- Redirects are bounded by AUDIO_MAX_REDIRECTS (default 5)
- An HTML body is rejected with HTMLInsteadOfAudioError, unless it links
  an .mp3 and fewer than AUDIO_MAX_REDIRECTS such links have been
  followed, in which case that link is tried
- An empty body is rejected with EmptyAudioError
- 401/403 from Deepgram → InvalidCredentialsError
- Words use punctuated_word when Deepgram provides it
- The API key is never sent to the audio host
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Any, Dict, Optional

import httpx

from podcast_reader.api.errors import (
    AudioFetchError,
    EmptyAudioError,
    HTMLInsteadOfAudioError,
    InvalidCredentialsError,
    TooManyRedirectsError,
    TranscriptionAPIError,
)
from podcast_reader.config import (
    AUDIO_ACCEPT,
    AUDIO_MAX_REDIRECTS,
    AUDIO_USER_AGENT,
    DEEPGRAM_BASE_URL,
    DEEPGRAM_LANGUAGE,
    DEEPGRAM_MODEL,
    load_deepgram_api_key,
)
from podcast_reader.core.ir import Transcript, Word

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_HTML_SNIFF_BYTES = 100
_HTML_LINK_SCAN_BYTES = 64 * 1024
_MP3_LINK_RE = re.compile(r"https?://[^\"'\s<>]*\.mp3", re.IGNORECASE)


def looks_like_html(body: bytes) -> bool:
    """Whether the first bytes of body are an HTML document."""
    head = body[:_HTML_SNIFF_BYTES].decode("utf-8", errors="ignore").strip().lower()
    return "<!doctype" in head or "<html" in head


class DeepgramClient:
    """Async client for audio download plus Deepgram pre-recorded transcription.

    RULES:
    - Use as: async with DeepgramClient() as client: ...
    - api_key defaults to load_deepgram_api_key() from .env
    - transport is passed to both httpx clients (tests use MockTransport)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        language: Optional[str] = None,
        max_redirects: int = AUDIO_MAX_REDIRECTS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key or load_deepgram_api_key()
        self._base_url = (base_url or DEEPGRAM_BASE_URL).rstrip("/")
        self._model = model or DEEPGRAM_MODEL
        self._language = language or DEEPGRAM_LANGUAGE
        self._max_redirects = max_redirects
        self._transport = transport
        self._api: Optional[httpx.AsyncClient] = None
        self._audio: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> DeepgramClient:
        self._api = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Token {self._api_key}"},
            timeout=httpx.Timeout(600.0, connect=30.0),
            transport=self._transport,
        )
        self._audio = httpx.AsyncClient(
            headers={"User-Agent": AUDIO_USER_AGENT, "Accept": AUDIO_ACCEPT},
            follow_redirects=True,
            max_redirects=self._max_redirects,
            timeout=httpx.Timeout(300.0, connect=30.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        for client in (self._api, self._audio):
            if client:
                await client.aclose()
        self._api = None
        self._audio = None

    def _ensure_clients(self) -> tuple[httpx.AsyncClient, httpx.AsyncClient]:
        if self._api is None or self._audio is None:
            raise RuntimeError(
                "DeepgramClient must be used as an async context manager: "
                "async with DeepgramClient() as client: ..."
            )
        return self._api, self._audio

    # ------------------------------------------------------------------
    # Step 1: Fetch audio
    # ------------------------------------------------------------------

    async def fetch_audio(self, url: str) -> bytes:
        """Download the audio behind url, following redirects.

        WHY: Enclosure URLs usually pass through analytics redirectors
        before reaching the file, and some point at an episode web page.

        HOW: httpx follows HTTP redirects up to the budget. If the body
        is HTML and embeds an .mp3 link, that link is fetched next and
        counts as one more hop.

        Raises:
            TooManyRedirectsError: redirect budget exhausted.
            HTMLInsteadOfAudioError: the final body is a web page.
            EmptyAudioError: the body is empty.
            AudioFetchError: network failure or non-2xx status.
        """
        _, audio = self._ensure_clients()
        current_url = url
        hops = 0

        while True:
            logger.info("Fetching audio: %s", current_url)
            try:
                resp = await audio.get(current_url)
            except httpx.TooManyRedirects as exc:
                raise TooManyRedirectsError(
                    "Could not reach the audio file: too many redirects"
                ) from exc
            except httpx.HTTPError as exc:
                raise AudioFetchError(f"Failed to fetch audio: {exc}") from exc

            if not resp.is_success:
                raise AudioFetchError(f"Failed to fetch audio: {resp.reason_phrase}")

            body = resp.content
            logger.debug("Content-Type: %s", resp.headers.get("content-type"))

            if looks_like_html(body):
                scan = body[:_HTML_LINK_SCAN_BYTES].decode("utf-8", errors="ignore")
                match = _MP3_LINK_RE.search(scan)
                if match and hops < self._max_redirects:
                    logger.info("Found audio URL in HTML: %s", match.group(0))
                    current_url = match.group(0)
                    hops += 1
                    continue
                raise HTMLInsteadOfAudioError(
                    "Invalid audio URL: URL points to a webpage instead of an audio file"
                )

            if not body:
                raise EmptyAudioError("Empty audio file received")

            logger.info("Fetched audio file, size: %d bytes", len(body))
            return body

    # ------------------------------------------------------------------
    # Step 2: Transcribe
    # ------------------------------------------------------------------

    async def transcribe_audio(
        self,
        audio: bytes,
        mimetype: str = "audio/mpeg",
    ) -> Transcript:
        """Send audio bytes to Deepgram and return the word-timed transcript.

        RULES:
        - Diarization, punctuation, and smart formatting are always on
        - 401/403 → InvalidCredentialsError
        - Network failure, other non-2xx, or a non-JSON body → TranscriptionAPIError
        - A response without channels[0].alternatives[0] → TranscriptionAPIError
        """
        api, _ = self._ensure_clients()
        params = {
            "model": self._model,
            "smart_format": "true",
            "punctuate": "true",
            "diarize": "true",
            "paragraphs": "true",
            "utterances": "true",
            "language": self._language,
        }
        try:
            resp = await api.post(
                "/listen",
                params=params,
                content=audio,
                headers={"Content-Type": mimetype},
            )
        except httpx.HTTPError as exc:
            raise TranscriptionAPIError(f"Could not reach Deepgram: {exc}") from exc

        if resp.status_code in (401, 403):
            raise InvalidCredentialsError(
                "Invalid Deepgram API key. Please check your configuration."
            )
        if not resp.is_success:
            raise TranscriptionAPIError(
                f"Deepgram error {resp.status_code}: {resp.text}"
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise TranscriptionAPIError("Deepgram returned a non-JSON response") from exc

        logger.info("Transcription response received")
        return parse_transcription_response(data)

    async def transcribe_url(
        self,
        audio_url: str,
        on_status: Optional[Callable[[str], None]] = None,
    ) -> Transcript:
        """Fetch the audio at audio_url and transcribe it."""
        if on_status:
            on_status("Fetching audio...")
        audio = await self.fetch_audio(audio_url)
        if on_status:
            on_status("Transcribing...")
        transcript = await self.transcribe_audio(audio)
        if on_status:
            on_status("Transcription complete.")
        return transcript


def parse_transcription_response(data: Dict[str, Any]) -> Transcript:
    """Extract text and words from a Deepgram pre-recorded response body."""
    try:
        alternative = data["results"]["channels"][0]["alternatives"][0]
    except (KeyError, IndexError, TypeError) as exc:
        raise TranscriptionAPIError("No transcription results available") from exc

    words = [Word.from_dict(w) for w in alternative.get("words") or []]
    return Transcript(text=alternative.get("transcript", ""), words=words)
