"""FastAPI application exposing feeds, transcription, and chat to the UI.

WHY: The browser UI cannot call the RSS hosts (CORS), and must not hold
the transcription or chat API keys. These routes proxy those services,
keep the subscription list on the server, and turn upstream failures
into status codes the UI can show.

HOW: A single FastAPI app with endpoints grouped by tags. Each route
builds its service client through a module-level factory (patched in
tests), calls it, and maps UpstreamError subclasses onto HTTPException.
The subscription store is a singleton; default feeds are seeded at
startup on first run.

RULES:
- Missing required input → 400 with a readable detail
- Unconfigured API key → 500
- Rejected credentials → 401; web page instead of audio or too many
  redirects → 400; other upstream failures → 500
- Error responses use the ErrorResponse schema ({"detail": ...})
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response

from podcast_reader import __version__
from podcast_reader.api.chat import GeminiClient
from podcast_reader.api.errors import UpstreamError
from podcast_reader.api.models import FeedItem
from podcast_reader.api.rss import RSSClient
from podcast_reader.api.transcription import DeepgramClient
from podcast_reader.feeds import FeedStore, seed_default_feeds, subscribe_url
from podcast_reader.server.models import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    FeedItemModel,
    FeedItemsResponse,
    FeedRequest,
    FeedResponse,
    HealthResponse,
    SubscribeRequest,
    SubscriptionModel,
    TranscribeRequest,
    TranscribeResponse,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

feed_store = FeedStore()


def _rss_client() -> RSSClient:
    return RSSClient()


def _transcription_client() -> DeepgramClient:
    return DeepgramClient()


def _chat_client() -> GeminiClient:
    return GeminiClient()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seed the default subscriptions on first run."""
    if not feed_store.has_stored_value:
        async with _rss_client() as client:
            feeds = await seed_default_feeds(feed_store, client)
        logger.info("Seeded %d default feeds", len(feeds))
    yield


app = FastAPI(
    lifespan=lifespan,
    title="Podcast Reader API",
    description=(
        "Fetch podcast RSS feeds, transcribe episode audio into word-timed "
        "transcripts, and ask questions about a transcript with answers that "
        "cite timestamps."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _item_to_model(item: FeedItem) -> FeedItemModel:
    return FeedItemModel(**item.to_dict())


# ---------------------------------------------------------------------------
# Endpoints: RSS
# ---------------------------------------------------------------------------


@app.post(
    "/api/rss",
    response_model=FeedResponse,
    tags=["feeds"],
    summary="Fetch and parse a feed",
    description="Fetch an RSS or Atom feed and return its title, description, and 25 most recent items.",
    responses={
        400: {"model": ErrorResponse, "description": "Missing feed URL"},
        500: {"model": ErrorResponse, "description": "Feed could not be fetched or parsed"},
    },
)
async def fetch_rss(request: FeedRequest) -> FeedResponse:
    if not request.feed_url:
        raise HTTPException(status_code=400, detail="Invalid feed URL")

    try:
        async with _rss_client() as client:
            document = await client.fetch_feed(request.feed_url)
    except UpstreamError:
        logger.exception("Failed to fetch RSS feed %s", request.feed_url)
        raise HTTPException(status_code=500, detail="Failed to fetch RSS feed")

    return FeedResponse(
        title=document.title,
        description=document.description,
        items=[_item_to_model(i) for i in document.items],
    )


# ---------------------------------------------------------------------------
# Endpoints: Subscriptions
# ---------------------------------------------------------------------------


@app.get(
    "/feeds",
    response_model=List[SubscriptionModel],
    tags=["subscriptions"],
    summary="List subscriptions",
    description="Return the stored feed subscriptions in the order they were added.",
)
async def list_feeds() -> List[SubscriptionModel]:
    return [SubscriptionModel(**f.to_dict()) for f in feed_store.feeds]


@app.post(
    "/feeds",
    response_model=SubscriptionModel,
    status_code=201,
    tags=["subscriptions"],
    summary="Subscribe to a feed",
    description=(
        "Validate a feed by fetching it, then store it using its URL as id "
        "and its title as name."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Missing URL or feed could not be fetched"},
        409: {"model": ErrorResponse, "description": "Feed already subscribed"},
    },
)
async def add_feed(request: SubscribeRequest) -> SubscriptionModel:
    if not request.url:
        raise HTTPException(status_code=400, detail="Feed URL is required")

    try:
        async with _rss_client() as client:
            feed = await subscribe_url(feed_store, client, request.url)
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except UpstreamError:
        logger.exception("Failed to add feed %s", request.url)
        raise HTTPException(
            status_code=400,
            detail="Failed to add feed. Please check the URL and try again.",
        )

    return SubscriptionModel(**feed.to_dict())


@app.delete(
    "/feeds/{feed_id:path}",
    status_code=204,
    tags=["subscriptions"],
    summary="Unsubscribe from a feed",
    description="Remove a subscription by id. Feed ids may be URLs.",
    responses={404: {"model": ErrorResponse, "description": "Feed not found"}},
)
async def delete_feed(feed_id: str) -> Response:
    if not feed_store.delete(feed_id):
        raise HTTPException(status_code=404, detail="Feed not found: {}".format(feed_id))
    return Response(status_code=204)


@app.get(
    "/feeds/items",
    response_model=FeedItemsResponse,
    tags=["subscriptions"],
    summary="List episodes from all subscriptions",
    description=(
        "Fetch every subscribed feed concurrently and return the 25 most "
        "recent items overall. Feeds that fail are skipped."
    ),
)
async def list_all_items() -> FeedItemsResponse:
    async with _rss_client() as client:
        items = await client.merge_feeds((f.name, f.url) for f in feed_store.feeds)
    return FeedItemsResponse(items=[_item_to_model(i) for i in items])


# ---------------------------------------------------------------------------
# Endpoints: Transcription
# ---------------------------------------------------------------------------


@app.post(
    "/api/transcribe",
    response_model=TranscribeResponse,
    tags=["transcription"],
    summary="Transcribe episode audio",
    description=(
        "Download the audio at audio_url (following redirects) and return "
        "the transcript text with word-level timings."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Missing URL, web page instead of audio, or too many redirects"},
        401: {"model": ErrorResponse, "description": "Transcription API key rejected"},
        500: {"model": ErrorResponse, "description": "Transcription failed or is not configured"},
    },
)
async def transcribe(request: TranscribeRequest) -> TranscribeResponse:
    if not request.audio_url:
        raise HTTPException(status_code=400, detail="Audio URL is required")

    try:
        client = _transcription_client()
    except ValueError:
        logger.error("Deepgram API key not found in environment variables")
        raise HTTPException(
            status_code=500,
            detail="Transcription service configuration error. Please check API key.",
        )

    try:
        async with client:
            transcript = await client.transcribe_url(request.audio_url)
    except UpstreamError as exc:
        logger.exception("Transcription error for %s", request.audio_url)
        if exc.status_code != 500:
            raise HTTPException(status_code=exc.status_code, detail=exc.message)
        raise HTTPException(
            status_code=500, detail="Transcription failed: {}".format(exc.message)
        )

    return TranscribeResponse(
        text=transcript.text,
        words=[w.to_dict() for w in transcript.words],
    )


# ---------------------------------------------------------------------------
# Endpoints: Chat
# ---------------------------------------------------------------------------


@app.post(
    "/api/chat",
    response_model=ChatResponse,
    tags=["chat"],
    summary="Ask about a transcript",
    description=(
        "Summarize a transcript or answer a question about it. Answer lines "
        "starting with [MM:SS] or [HH:MM:SS] are returned as bullet points."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Missing message or transcript"},
        500: {"model": ErrorResponse, "description": "Chat service failed or is not configured"},
    },
)
async def chat(request: ChatRequest) -> ChatResponse:
    try:
        client = _chat_client()
    except ValueError as exc:
        logger.error("API key validation failed: %s", exc)
        raise HTTPException(
            status_code=500,
            detail=(
                "Google Gemini API key is not configured. "
                "Please add it to your environment variables."
            ),
        )

    if not request.message:
        raise HTTPException(status_code=400, detail="Message is required")
    if not request.transcript:
        raise HTTPException(status_code=400, detail="Transcript is required")

    try:
        async with client:
            reply = await client.ask(request.message, request.transcript, request.type)
    except UpstreamError:
        logger.exception("Gemini API error")
        raise HTTPException(
            status_code=500,
            detail="Failed to process request with Gemini API. Please try again.",
        )

    return ChatResponse(**reply.to_dict())


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness and readiness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api():
    """Entry point for the podcast-reader-api console script."""
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
