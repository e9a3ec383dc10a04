"""Async HTTP client for transcript summaries and Q&A via Gemini.

WHY: Listeners want to ask what an episode said about something and
jump straight to that moment. The chat service is prompted to answer in
timestamped points so each point can become a seek target.

HOW: GeminiClient is an async context manager around httpx.AsyncClient.
ask() picks the system prompt for the chat type, builds a single prompt
from system prompt + transcript + question + format reminder, posts it
to generateContent, and parses the answer into a ChatReply.

RULES:
- Always use the async context manager (async with GeminiClient() as client:)
- An empty message or transcript is rejected with ValueError before any call
- Network failure, non-2xx, or a non-JSON body → ChatAPIError; an answer
  without text → EmptyCompletionError
- Chat type is "summary" when the question contains "summarize"
  (case-insensitive), otherwise "qa"
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

import httpx

from podcast_reader.api.errors import ChatAPIError, EmptyCompletionError
from podcast_reader.api.models import ChatReply, ChatType
from podcast_reader.config import GEMINI_BASE_URL, GEMINI_MODEL, load_gemini_api_key
from podcast_reader.core.citations import format_message, parse_bullet_points

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

SUMMARY_PROMPT = """You are an AI assistant that provides insightful summaries of podcast content. Your task is to:

1. Create clear, concise bullet points highlighting the most important insights from the transcript
2. Each bullet point MUST start with a timestamp in [MM:SS] or [HH:MM:SS] format
3. Focus on extracting meaningful, specific insights rather than generic summaries
4. Include direct quotes or key statements when relevant
5. Organize points chronologically based on when they appear in the podcast
6. Keep each bullet point focused on a single, clear insight

Format each point exactly like this:
[timestamp] Key insight or quote here

Example:
[02:15] Host discusses the impact of AI on healthcare, highlighting the breakthrough in diagnostic accuracy
[05:30] "AI models are now achieving 95% accuracy in early detection" - Dr. Smith explains the significance
[08:45] Three key challenges in AI implementation are discussed: data privacy, training costs, and integration"""

QA_PROMPT = """You are an AI assistant that answers questions about podcast content. Your task is to:

1. Provide detailed answers based on the transcript
2. Include relevant timestamps in [MM:SS] or [HH:MM:SS] format for each key point
3. Use bullet points to structure your response when appropriate
4. Quote directly from the transcript when relevant
5. Keep your answers focused and specific to the question
6. Highlight the exact moments in the podcast where the information appears

Format each point exactly like this:
[timestamp] Answer point or relevant quote

Example:
[03:20] The speaker directly addresses this topic, stating that...
[07:15] Additional context is provided when they discuss...
[12:30] "Direct quote from the transcript" - provides supporting evidence"""

_FORMAT_REMINDER = (
    "Remember to format ALL responses with proper timestamps in [MM:SS] or "
    "[HH:MM:SS] format at the start of each point."
)


def infer_chat_type(message: str) -> ChatType:
    return ChatType.SUMMARY if "summarize" in message.lower() else ChatType.QA


def build_prompt(message: str, chat_type: ChatType, transcript: str) -> str:
    system_prompt = SUMMARY_PROMPT if chat_type is ChatType.SUMMARY else QA_PROMPT
    return (
        f"{system_prompt}\n\nTranscript: {transcript}\n\n"
        f"User Query: {message}\n\n{_FORMAT_REMINDER}"
    )


class GeminiClient:
    """Async client for the Gemini generateContent endpoint.

    RULES:
    - Use as: async with GeminiClient() as client: ...
    - api_key defaults to load_gemini_api_key() from .env
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key or load_gemini_api_key()
        self._base_url = (base_url or GEMINI_BASE_URL).rstrip("/")
        self._model = model or GEMINI_MODEL
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> GeminiClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"x-goog-api-key": self._api_key},
            timeout=httpx.Timeout(120.0, connect=30.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError(
                "GeminiClient must be used as an async context manager: "
                "async with GeminiClient() as client: ..."
            )
        return self._client

    async def generate(self, prompt: str) -> str:
        """Send one prompt and return the answer text."""
        client = self._ensure_client()
        body = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

        logger.info("Sending request to Gemini (%d prompt chars)", len(prompt))
        try:
            resp = await client.post(f"/models/{self._model}:generateContent", json=body)
        except httpx.HTTPError as exc:
            raise ChatAPIError(f"Could not reach Gemini API: {exc}") from exc
        if not resp.is_success:
            raise ChatAPIError(
                f"Failed to process request with Gemini API ({resp.status_code}). "
                "Please try again."
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise ChatAPIError("Gemini API returned a non-JSON response") from exc

        text = _extract_text(data)
        if not text:
            raise EmptyCompletionError("No response content from Gemini")
        logger.info("Received response from Gemini (%d chars)", len(text))
        return text

    async def ask(
        self,
        message: str,
        transcript: str,
        chat_type: Union[ChatType, str, None] = None,
    ) -> ChatReply:
        """Ask a question about transcript and parse the timestamped answer.

        Args:
            message: The listener's question or instruction.
            transcript: Plain transcript text used as context.
            chat_type: Prompt to use; inferred from message when omitted.

        Raises:
            ValueError: message or transcript is empty.
            ChatAPIError: the service failed or returned no text.
        """
        if not message:
            raise ValueError("Message is required")
        if not transcript:
            raise ValueError("Transcript is required")

        resolved = ChatType(chat_type) if chat_type else infer_chat_type(message)
        response_text = await self.generate(build_prompt(message, resolved, transcript))

        bullet_points = parse_bullet_points(response_text)
        logger.info("Parsed %d bullet points", len(bullet_points))
        return ChatReply(
            message=format_message(response_text),
            type=resolved,
            bullet_points=bullet_points,
        )


def _extract_text(data: Dict[str, Any]) -> str:
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts)
