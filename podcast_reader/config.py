"""Configuration constants, default feeds, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Service endpoints, chunk sizing, feed storage
location, and the default subscriptions are plain data, not buried in
logic.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values read from the environment with defaults. The
load_*_api_key() functions provide a clear error when a key is missing.

RULES:
- API keys are loaded from .env via python-dotenv, never hardcoded
- All defaults can be overridden via environment variables
- DEFAULT_FEEDS seeds the subscription list on first run only
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the app is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Transcription service (Deepgram pre-recorded API)
# ---------------------------------------------------------------------------

DEEPGRAM_BASE_URL = os.getenv("DEEPGRAM_BASE_URL", "https://api.deepgram.com/v1")
DEEPGRAM_MODEL = os.getenv("DEEPGRAM_MODEL", "nova-2")
DEEPGRAM_LANGUAGE = os.getenv("DEEPGRAM_LANGUAGE", "en-US")

AUDIO_MAX_REDIRECTS = int(os.getenv("AUDIO_MAX_REDIRECTS", "5"))
"""Upper bound on hops followed while resolving an episode's audio URL."""

AUDIO_USER_AGENT = os.getenv(
    "AUDIO_USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
)
AUDIO_ACCEPT = "audio/mpeg,audio/*;q=0.9,*/*;q=0.8"

# ---------------------------------------------------------------------------
# Chat service (Gemini generateContent API)
# ---------------------------------------------------------------------------

GEMINI_BASE_URL = os.getenv(
    "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
)
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-pro")

# ---------------------------------------------------------------------------
# Transcript display and feeds
# ---------------------------------------------------------------------------

WORDS_PER_CHUNK = int(os.getenv("WORDS_PER_CHUNK", "100"))
RSS_MAX_ITEMS = 25

FEEDS_STORAGE_PATH = os.getenv("FEEDS_STORAGE_PATH", "feeds.json")
FEEDS_STORAGE_KEY = "smartRssFeedFeeds"

DEFAULT_FEEDS: list[dict[str, str]] = [
    {
        "id": "sans-daily-podcast",
        "name": "SANS Internet Storm Center Daily Podcast",
        "url": "https://isc.sans.edu/dailypodcast.xml",
    },
    {
        "id": "buzzsprout-feed",
        "name": "Buzzsprout Feed",
        "url": "https://feeds.buzzsprout.com/2407084.rss",
    },
    {
        "id": "megaphone-glt",
        "name": "Megaphone GLT",
        "url": "https://feeds.megaphone.fm/GLT1412515089",
    },
    {
        "id": "diary-of-a-ceo",
        "name": "The Diary Of A CEO",
        "url": "https://feeds.megaphone.fm/thediaryofaceo",
    },
    {
        "id": "how-i-built-this",
        "name": "How I Built This",
        "url": "https://rss.art19.com/how-i-built-this",
    },
]


def load_deepgram_api_key() -> str:
    """Load the Deepgram API key from the environment.

    RULES:
    - Raises ValueError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = os.getenv("DEEPGRAM_API_KEY", "").strip()
    if not key:
        raise ValueError(
            "Transcription service configuration error. "
            "Add DEEPGRAM_API_KEY to the .env file."
        )
    return key


def load_gemini_api_key() -> str:
    """Load the Google Gemini API key from the environment.

    RULES:
    - Raises ValueError if the key is missing or empty
    """
    key = os.getenv("GOOGLE_GEMINI_API_KEY", "").strip()
    if not key:
        raise ValueError(
            "Google Gemini API key is not configured. "
            "Add GOOGLE_GEMINI_API_KEY to the .env file."
        )
    return key
