"""Persisted feed subscriptions.

WHY: The subscription list must survive restarts, and on first run the
reader should start with a useful set of podcasts rather than nothing.

HOW: FeedStore keeps the list in memory and persists it as a JSON file
holding one well-known key. The file is read once in the constructor and
rewritten wholesale after every add or delete. seed_default_feeds() and
subscribe_url() validate feeds by fetching them through an RSSClient
before they are stored.

RULES:
- Storage shape: {FEEDS_STORAGE_KEY: [{"id", "name", "url"}, ...]}
- Other keys in the storage file are preserved on rewrite
- Feed ids are unique; adding a duplicate id raises ValueError
- A subscription added by URL uses the URL as its id and the feed title
  (or "Unnamed Feed") as its name
- Defaults are seeded only when nothing has ever been stored; defaults
  that fail to fetch are dropped
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from podcast_reader.api.errors import UpstreamError
from podcast_reader.api.rss import RSSClient
from podcast_reader.config import DEFAULT_FEEDS, FEEDS_STORAGE_KEY, FEEDS_STORAGE_PATH

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedSubscription:
    id: str
    name: str
    url: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> FeedSubscription:
        return cls(id=str(data["id"]), name=str(data["name"]), url=str(data["url"]))

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


class FeedStore:
    """Subscription list backed by a JSON file.

    Args:
        path: Storage file location.
        key: Key under which the list is stored.
    """

    def __init__(
        self,
        path: Union[str, Path] = FEEDS_STORAGE_PATH,
        key: str = FEEDS_STORAGE_KEY,
    ) -> None:
        self._path = Path(path)
        self._key = key
        self._feeds: List[FeedSubscription] = []
        self._has_stored_value = False
        self._read()

    @property
    def has_stored_value(self) -> bool:
        """False until a list has been stored at least once (first run)."""
        return self._has_stored_value

    @property
    def feeds(self) -> List[FeedSubscription]:
        return list(self._feeds)

    def get(self, feed_id: str) -> Optional[FeedSubscription]:
        for feed in self._feeds:
            if feed.id == feed_id:
                return feed
        return None

    def replace(self, feeds: List[FeedSubscription]) -> None:
        self._feeds = list(feeds)
        self._write()

    def add(self, feed: FeedSubscription) -> None:
        if self.get(feed.id) is not None:
            raise ValueError("Feed already subscribed: {}".format(feed.id))
        self._feeds.append(feed)
        self._write()
        logger.info("Added feed %s (%s)", feed.name, feed.url)

    def delete(self, feed_id: str) -> bool:
        remaining = [f for f in self._feeds if f.id != feed_id]
        if len(remaining) == len(self._feeds):
            return False
        self._feeds = remaining
        self._write()
        logger.info("Deleted feed %s", feed_id)
        return True

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def _read_document(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable feed storage: %s", self._path)
            return {}
        return document if isinstance(document, dict) else {}

    def _read(self) -> None:
        document = self._read_document()
        stored = document.get(self._key)
        if stored is None:
            return
        self._has_stored_value = True
        self._feeds = [FeedSubscription.from_dict(item) for item in stored]

    def _write(self) -> None:
        document = self._read_document()
        document[self._key] = [f.to_dict() for f in self._feeds]

        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".feeds_")
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(document, fh, indent=2)
        os.replace(tmp_name, self._path)
        self._has_stored_value = True


async def seed_default_feeds(store: FeedStore, client: RSSClient) -> List[FeedSubscription]:
    """On first run, store the default feeds that can actually be fetched.

    Each default is renamed to the title its feed reports. Returns the
    store's feeds (unchanged when a list was already stored).
    """
    if store.has_stored_value:
        return store.feeds

    async def _validate(default: Dict[str, str]) -> Optional[FeedSubscription]:
        try:
            document = await client.fetch_feed(default["url"])
        except UpstreamError as exc:
            logger.warning("Failed to validate feed %s: %s", default["name"], exc)
            return None
        return FeedSubscription(
            id=default["id"],
            name=document.title or default["name"],
            url=default["url"],
        )

    validated = await asyncio.gather(*(_validate(d) for d in DEFAULT_FEEDS))
    store.replace([f for f in validated if f is not None])
    return store.feeds


async def subscribe_url(store: FeedStore, client: RSSClient, url: str) -> FeedSubscription:
    """Validate the feed at url and add it to the store.

    Raises:
        UpstreamError: the feed cannot be fetched or parsed.
        ValueError: the feed is already subscribed.
    """
    if store.get(url) is not None:
        raise ValueError("Feed already subscribed: {}".format(url))
    document = await client.fetch_feed(url)
    feed = FeedSubscription(id=url, name=document.title or "Unnamed Feed", url=url)
    store.add(feed)
    return feed
