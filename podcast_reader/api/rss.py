"""RSS/Atom feed fetching, parsing, and multi-feed merging.

WHY: Episodes come from feeds published by many hosts, in RSS 2.0 or
Atom, with inconsistent dates and optional fields. The reader needs one
item shape, one date ordering, and an episode list that survives a
single broken feed.

HOW: parse_feed() turns XML bytes into a FeedDocument using defusedxml.
RSSClient wraps httpx.AsyncClient for fetching; merge_feeds() fetches
all subscriptions concurrently and sorts the combined items.

RULES:
- Always use the async context manager (async with RSSClient() as client:)
- Items are capped at RSS_MAX_ITEMS (25) per feed and per merge
- Item id is the guid (Atom: id), falling back to the link
- content is content:encoded (Atom: content), falling back to description
- Unparseable dates sort last; naive dates are taken as UTC
- Network failure or non-2xx → FeedFetchError; bad XML → FeedParseError
- merge_feeds() skips feeds that raise either error and logs a warning
"""

from __future__ import annotations

import asyncio
import logging
import xml.etree.ElementTree as ET  # nosec B405
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Iterable, List, Optional

import httpx
from defusedxml.ElementTree import ParseError as DefusedXMLParseError
from defusedxml.ElementTree import fromstring as safe_fromstring

from podcast_reader.api.errors import FeedFetchError, FeedParseError
from podcast_reader.api.models import Enclosure, FeedDocument, FeedItem
from podcast_reader.config import RSS_MAX_ITEMS

logger = logging.getLogger(__name__)

CONTENT_ENCODED = "{http://purl.org/rss/1.0/modules/content/}encoded"
ATOM_NS = "{http://www.w3.org/2005/Atom}"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _text(elem: Optional[ET.Element]) -> str:
    if elem is None or elem.text is None:
        return ""
    return elem.text.strip()


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 822 (RSS) or ISO 8601 (Atom) date; None if malformed.

    Naive results are taken as UTC so every date is comparable.
    """
    if not value:
        return None
    value = value.strip()
    parsed: Optional[datetime] = None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        parsed = None
    if parsed is None:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _rss_item(item: ET.Element) -> FeedItem:
    link = _text(item.find("link")) or None
    guid = _text(item.find("guid"))
    description = _text(item.find("description"))
    content = _text(item.find(CONTENT_ENCODED)) or description
    date = _text(item.find("pubDate")) or None

    enclosure = None
    enclosure_elem = item.find("enclosure")
    if enclosure_elem is not None and enclosure_elem.attrib.get("url"):
        enclosure = Enclosure(
            url=enclosure_elem.attrib["url"].strip(),
            type=enclosure_elem.attrib.get("type") or None,
            length=enclosure_elem.attrib.get("length") or None,
        )

    return FeedItem(
        id=guid or link or "",
        title=_text(item.find("title")),
        description=description,
        content=content,
        date=date,
        link=link,
        enclosure=enclosure,
        published=parse_date(date),
    )


def _atom_entry(entry: ET.Element) -> FeedItem:
    link = None
    enclosure = None
    for link_elem in entry.findall(f"{ATOM_NS}link"):
        rel = link_elem.attrib.get("rel", "alternate")
        href = link_elem.attrib.get("href")
        if not href:
            continue
        if rel == "enclosure" and enclosure is None:
            enclosure = Enclosure(
                url=href,
                type=link_elem.attrib.get("type") or None,
                length=link_elem.attrib.get("length") or None,
            )
        elif rel == "alternate" and link is None:
            link = href

    summary = _text(entry.find(f"{ATOM_NS}summary"))
    date = _text(entry.find(f"{ATOM_NS}published")) or _text(entry.find(f"{ATOM_NS}updated")) or None
    return FeedItem(
        id=_text(entry.find(f"{ATOM_NS}id")) or link or "",
        title=_text(entry.find(f"{ATOM_NS}title")),
        description=summary,
        content=_text(entry.find(f"{ATOM_NS}content")) or summary,
        date=date,
        link=link,
        enclosure=enclosure,
        published=parse_date(date),
    )


def parse_feed(xml_bytes: bytes, max_items: int = RSS_MAX_ITEMS) -> FeedDocument:
    """Parse RSS 2.0 or Atom XML into a FeedDocument.

    Items are kept in document order and capped at max_items.

    Raises:
        FeedParseError: the body is not XML, or has no channel/feed root.
    """
    try:
        root = safe_fromstring(xml_bytes)
    except (DefusedXMLParseError, ValueError) as exc:
        raise FeedParseError(f"Failed to parse RSS feed: {exc}") from exc

    if root.tag == f"{ATOM_NS}feed":
        entries = root.findall(f"{ATOM_NS}entry")[:max_items]
        return FeedDocument(
            title=_text(root.find(f"{ATOM_NS}title")),
            description=_text(root.find(f"{ATOM_NS}subtitle")),
            items=[_atom_entry(e) for e in entries],
        )

    channel = root.find("channel")
    if channel is None:
        raise FeedParseError("Failed to parse RSS feed: no <channel> element")

    items = channel.findall("item")[:max_items]
    return FeedDocument(
        title=_text(channel.find("title")),
        description=_text(channel.find("description")),
        items=[_rss_item(i) for i in items],
    )


def sort_items_newest_first(items: Iterable[FeedItem], limit: int = RSS_MAX_ITEMS) -> List[FeedItem]:
    """Sort by published date, newest first; undated items go last."""
    ordered = sorted(items, key=lambda i: i.published or _EPOCH, reverse=True)
    return ordered[:limit]


class RSSClient:
    """Async feed fetcher.

    Use as: async with RSSClient() as client: ...
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> RSSClient:
        self._client = httpx.AsyncClient(
            follow_redirects=True,
            timeout=httpx.Timeout(30.0, connect=10.0),
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
                "RSSClient must be used as an async context manager: "
                "async with RSSClient() as client: ..."
            )
        return self._client

    async def fetch_feed(self, feed_url: str) -> FeedDocument:
        client = self._ensure_client()
        try:
            resp = await client.get(feed_url)
        except httpx.HTTPError as exc:
            raise FeedFetchError(f"Failed to fetch RSS feed: {exc}") from exc
        if not resp.is_success:
            raise FeedFetchError(
                f"Failed to fetch RSS feed: {resp.status_code} {resp.reason_phrase}"
            )
        return parse_feed(resp.content)

    async def merge_feeds(self, feeds: Iterable[tuple[str, str]]) -> List[FeedItem]:
        """Fetch (name, url) feeds concurrently and merge their items.

        A feed that fails is logged and contributes no items.
        """
        feeds = list(feeds)
        results = await asyncio.gather(
            *(self.fetch_feed(url) for _, url in feeds), return_exceptions=True
        )

        merged: List[FeedItem] = []
        for (name, url), result in zip(feeds, results):
            if isinstance(result, BaseException):
                if not isinstance(result, (FeedFetchError, FeedParseError)):
                    raise result
                logger.warning("Error fetching feed %s (%s): %s", name, url, result)
                continue
            for item in result.items:
                item.feed_name = name
                merged.append(item)

        return sort_items_newest_first(merged)
