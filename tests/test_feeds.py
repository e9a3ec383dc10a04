"""Tests for the persisted subscription list.

WHY: Subscriptions are the only state the reader keeps across restarts.
Losing them, duplicating them, or clobbering other data in the storage
file would all be user-visible.

HOW: FeedStore writes into pytest's tmp_path. Feed validation goes
through an AsyncMock standing in for RSSClient.fetch_feed.
"""

from __future__ import annotations

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from podcast_reader.api.errors import FeedFetchError, FeedParseError
from podcast_reader.api.models import FeedDocument
from podcast_reader.config import DEFAULT_FEEDS, FEEDS_STORAGE_KEY
from podcast_reader.feeds import FeedStore, FeedSubscription, seed_default_feeds, subscribe_url


@pytest.fixture
def storage(tmp_path):
    return tmp_path / "feeds.json"


@pytest.fixture
def store(storage):
    return FeedStore(storage)


def _rss_client(fetch):
    client = MagicMock()
    client.fetch_feed = AsyncMock(side_effect=fetch)
    return client


SHOW = FeedSubscription(id="show", name="Show", url="https://show.test/feed.xml")


class TestFeedStore:
    def test_new_store_is_empty_and_unseeded(self, store):
        assert store.feeds == []
        assert store.has_stored_value is False

    def test_add_persists_under_storage_key(self, store, storage):
        store.add(SHOW)
        document = json.loads(storage.read_text())
        assert document == {FEEDS_STORAGE_KEY: [SHOW.to_dict()]}
        assert store.has_stored_value is True

    def test_reload_from_disk(self, store, storage):
        store.add(SHOW)
        reloaded = FeedStore(storage)
        assert reloaded.feeds == [SHOW]
        assert reloaded.get("show") == SHOW

    def test_duplicate_id_rejected(self, store):
        store.add(SHOW)
        with pytest.raises(ValueError, match="already subscribed"):
            store.add(SHOW)
        assert len(store.feeds) == 1

    def test_delete(self, store, storage):
        store.add(SHOW)
        assert store.delete("show") is True
        assert store.delete("show") is False
        assert FeedStore(storage).feeds == []
        assert FeedStore(storage).has_stored_value is True

    def test_other_keys_preserved(self, storage):
        storage.write_text(json.dumps({"theme": "dark"}))
        store = FeedStore(storage)
        assert store.has_stored_value is False
        store.add(SHOW)
        assert json.loads(storage.read_text())["theme"] == "dark"

    def test_unreadable_file_ignored(self, storage):
        storage.write_text("{not json")
        store = FeedStore(storage)
        assert store.feeds == []
        assert store.has_stored_value is False

    def test_feeds_returns_copy(self, store):
        store.add(SHOW)
        store.feeds.clear()
        assert store.feeds == [SHOW]

    def test_order_preserved(self, store):
        for n in range(3):
            store.add(FeedSubscription(id=str(n), name=str(n), url=f"https://{n}.test/"))
        assert [f.id for f in store.feeds] == ["0", "1", "2"]


class TestSeedDefaults:
    def test_seeds_reachable_defaults_with_feed_titles(self, store):
        failing = DEFAULT_FEEDS[1]["url"]

        async def fetch(url):
            if url == failing:
                raise FeedFetchError("Failed to fetch RSS feed: 404 Not Found")
            return FeedDocument(title=f"Title of {url}", description="")

        feeds = asyncio.run(seed_default_feeds(store, _rss_client(fetch)))

        expected = [d for d in DEFAULT_FEEDS if d["url"] != failing]
        assert [f.id for f in feeds] == [d["id"] for d in expected]
        assert feeds[0].name == "Title of {}".format(expected[0]["url"])
        assert store.has_stored_value is True

    def test_untitled_default_keeps_its_name(self, store):
        async def fetch(url):
            return FeedDocument(title="", description="")

        feeds = asyncio.run(seed_default_feeds(store, _rss_client(fetch)))
        assert [f.name for f in feeds] == [d["name"] for d in DEFAULT_FEEDS]

    def test_all_defaults_failing_stores_empty_list(self, store, storage):
        async def fetch(url):
            raise FeedParseError("bad")

        assert asyncio.run(seed_default_feeds(store, _rss_client(fetch))) == []
        assert FeedStore(storage).has_stored_value is True

    def test_not_reseeded_once_stored(self, store):
        store.replace([])
        client = _rss_client(AssertionError("should not fetch"))
        assert asyncio.run(seed_default_feeds(store, client)) == []
        client.fetch_feed.assert_not_called()


class TestSubscribeUrl:
    URL = "https://new.test/rss"

    def test_uses_url_as_id_and_title_as_name(self, store):
        async def fetch(url):
            return FeedDocument(title="New Show", description="")

        feed = asyncio.run(subscribe_url(store, _rss_client(fetch), self.URL))
        assert feed == FeedSubscription(id=self.URL, name="New Show", url=self.URL)
        assert store.get(self.URL) == feed

    def test_untitled_feed(self, store):
        async def fetch(url):
            return FeedDocument(title="", description="")

        feed = asyncio.run(subscribe_url(store, _rss_client(fetch), self.URL))
        assert feed.name == "Unnamed Feed"

    def test_fetch_failure_stores_nothing(self, store):
        async def fetch(url):
            raise FeedFetchError("down")

        with pytest.raises(FeedFetchError):
            asyncio.run(subscribe_url(store, _rss_client(fetch), self.URL))
        assert store.feeds == []

    def test_duplicate_rejected_without_fetch(self, store):
        store.add(FeedSubscription(id=self.URL, name="x", url=self.URL))
        client = _rss_client(AssertionError("should not fetch"))
        with pytest.raises(ValueError):
            asyncio.run(subscribe_url(store, client, self.URL))
        client.fetch_feed.assert_not_called()
