"""Service clients: async HTTP interfaces to the RSS, transcription, and chat services.

WHY: The reader depends on three external services. Keeping each behind
its own client class keeps HTTP details out of the session and the
routes, and gives every failure a typed exception.

HOW: Each client wraps httpx.AsyncClient and is used as an async context
manager. Results are parsed into the dataclasses in models.py (and
core.ir.Transcript for transcriptions). Failures raise subclasses of
errors.UpstreamError.

RULES:
- All HTTP calls go through these clients (no direct httpx usage elsewhere)
- Clients accept an optional httpx transport so tests never touch the network
"""

from podcast_reader.api.chat import GeminiClient
from podcast_reader.api.errors import UpstreamError
from podcast_reader.api.rss import RSSClient
from podcast_reader.api.transcription import DeepgramClient

__all__ = ["DeepgramClient", "GeminiClient", "RSSClient", "UpstreamError"]
