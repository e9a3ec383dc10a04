"""Tests for the sync controller and the word store it listens to.

WHY: The controller is the single owner of the page, word, and time
cursors. Regressions show up as a page that flips back while reading,
a highlight on the wrong word, or a seek that fires when it should not.

HOW: A nine-word transcript in three pages of three words, driven through
a real PlaybackClockAdapter attached to a FakePlayer. Tests call the
controller directly and through clock events, and assert on the
SyncState snapshot and the seeks the player received.

Layout used throughout (step 0.5s, each word 0.4s long):
  page 1: 0.0–1.4   page 2: 1.5–2.9   page 3: 3.0–4.4
"""

from __future__ import annotations

import pytest

from podcast_reader.core.clock import PlaybackClockAdapter
from podcast_reader.core.ir import SyncState, Word
from podcast_reader.core.sync import ControllerStatus, SyncController
from podcast_reader.core.word_store import WordStore

from conftest import FakePlayer, make_words


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def player():
    return FakePlayer()


@pytest.fixture
def clock(player):
    return PlaybackClockAdapter(player)


@pytest.fixture
def controller(clock):
    return SyncController(clock, target_size=3)


@pytest.fixture
def loaded(controller):
    controller.load_transcript(make_words(9, terminal_at=(3, 6, 9)))
    return controller


@pytest.fixture
def states(loaded):
    """Record every snapshot published after loading."""
    received = []
    loaded.subscribe(received.append)
    return received


# ---------------------------------------------------------------------------
# Word store
# ---------------------------------------------------------------------------


class TestWordStore:
    def test_empty_before_first_load(self):
        assert WordStore().get() == ()

    def test_load_replaces_contents(self):
        store = WordStore()
        store.load([Word("a", 0, 1)])
        store.load([Word("b", 1, 2), Word("c", 2, 3)])
        assert [w.text for w in store.get()] == ["b", "c"]

    def test_listeners_see_new_contents(self):
        store = WordStore()
        seen = []
        store.subscribe(lambda words: seen.append(len(store.get())))
        store.load([Word("a", 0, 1)])
        assert seen == [1]

    def test_unsubscribe(self):
        store = WordStore()
        seen = []
        unsubscribe = store.subscribe(seen.append)
        unsubscribe()
        store.load([Word("a", 0, 1)])
        assert seen == []


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


class TestLoadTranscript:
    def test_starts_empty(self, controller):
        assert controller.status is ControllerStatus.EMPTY
        assert controller.page_count == 0
        assert controller.active_chunk is None

    def test_load_computes_pages(self, loaded):
        assert loaded.status is ControllerStatus.READY
        assert loaded.page_count == 3
        assert loaded.state == SyncState()
        assert loaded.active_chunk.text == "w1 w2 w3."

    def test_reload_resets_cursors(self, loaded):
        loaded.set_playing(True)
        loaded.tick(2.0)
        loaded.load_transcript(make_words(4, terminal_at=(4,)))
        assert loaded.state == SyncState()
        assert loaded.page_count == 1

    def test_empty_transcript_is_ready_with_no_pages(self, controller, player):
        controller.load_transcript([])
        assert controller.status is ControllerStatus.READY
        controller.tick(1.0)
        controller.navigate(1)
        controller.goto_chunk(1)
        assert controller.state == SyncState()
        assert player.seeks == []

    def test_store_load_drives_controller(self, clock):
        store = WordStore()
        controller = SyncController(clock, target_size=3, store=store)
        store.load(make_words(3, terminal_at=(3,)))
        assert controller.page_count == 1

    def test_observers_notified_on_load(self, controller):
        received = []
        controller.subscribe(received.append)
        controller.load_transcript(make_words(3))
        assert received == [SyncState()]


# ---------------------------------------------------------------------------
# Ticks
# ---------------------------------------------------------------------------


class TestTick:
    def test_tick_sets_time_and_active_word(self, loaded):
        loaded.tick(0.6)
        assert loaded.state.current_time_s == 0.6
        assert loaded.state.active_word_index == 1
        assert loaded.active_word.text == "w2"

    def test_tick_between_words_clears_active_word(self, loaded):
        loaded.tick(0.6)
        loaded.tick(0.45)
        assert loaded.state.active_word_index is None
        assert loaded.active_word is None

    def test_word_boundaries_inclusive(self, loaded):
        loaded.tick(0.4)
        assert loaded.state.active_word_index == 0
        loaded.tick(0.5)
        assert loaded.state.active_word_index == 1

    def test_overlapping_words_pick_first_match(self, controller):
        controller.load_transcript([Word("a", 0.0, 1.0), Word("b", 0.5, 1.5)])
        controller.tick(0.7)
        assert controller.state.active_word_index == 0
        controller.tick(1.2)
        assert controller.state.active_word_index == 1

    def test_paused_tick_does_not_change_page(self, loaded):
        loaded.tick(2.0)
        assert loaded.state.active_chunk_index == 0
        assert loaded.state.current_time_s == 2.0
        assert loaded.state.active_word_index is None

    def test_playing_forward_auto_advances(self, loaded):
        loaded.set_playing(True)
        loaded.tick(1.2)
        loaded.tick(2.0)
        assert loaded.state.active_chunk_index == 1
        assert loaded.state.active_word_index == 1

    def test_auto_advance_can_skip_pages(self, loaded):
        loaded.set_playing(True)
        loaded.tick(3.6)
        assert loaded.state.active_chunk_index == 2

    def test_backward_tick_keeps_page(self, loaded):
        loaded.set_playing(True)
        loaded.tick(3.2)
        loaded.tick(0.2)
        assert loaded.state.active_chunk_index == 2
        assert loaded.state.current_time_s == 0.2
        assert loaded.state.active_word_index is None

    def test_tick_in_gap_between_pages_keeps_page(self, loaded):
        loaded.set_playing(True)
        loaded.tick(1.45)
        assert loaded.state.active_chunk_index == 0

    def test_tick_past_end_keeps_page(self, loaded):
        loaded.set_playing(True)
        loaded.tick(3.2)
        loaded.tick(10.0)
        assert loaded.state.active_chunk_index == 2

    def test_unchanged_tick_does_not_notify(self, loaded, states):
        loaded.tick(0.6)
        loaded.tick(0.6)
        assert len(states) == 1

    def test_unsubscribed_observer_not_notified(self, loaded):
        received = []
        unsubscribe = loaded.subscribe(received.append)
        unsubscribe()
        loaded.tick(0.6)
        assert received == []


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------


class TestNavigate:
    def test_next_page_seeks_to_its_start(self, loaded, player):
        loaded.navigate(1)
        assert loaded.state.active_chunk_index == 1
        assert player.seeks == [1.5]

    def test_seek_starts_paused_player(self, loaded, player):
        loaded.navigate(1)
        assert player.play_calls == 1
        assert player.paused is False

    def test_seek_on_playing_player_does_not_call_play(self, loaded, player):
        player.paused = False
        loaded.navigate(1)
        assert player.play_calls == 0

    def test_back_on_first_page_is_noop(self, loaded, player):
        loaded.navigate(-1)
        assert loaded.state.active_chunk_index == 0
        assert player.seeks == []

    def test_forward_on_last_page_is_noop(self, loaded, player):
        loaded.goto_chunk(3)
        loaded.navigate(1)
        assert loaded.state.active_chunk_index == 2
        assert player.seeks == [3.0]

    def test_previous_page(self, loaded, player):
        loaded.goto_chunk(3)
        loaded.navigate(-1)
        assert loaded.state.active_chunk_index == 1
        assert player.seeks == [3.0, 1.5]

    def test_page_change_published_before_seek(self, loaded, player):
        order = []
        loaded.subscribe(lambda state: order.append(("state", state.active_chunk_index)))
        original_seek = player.seek
        player.seek = lambda t: (order.append(("seek", t)), original_seek(t))
        loaded.navigate(1)
        assert order == [("state", 1), ("seek", 1.5)]

    def test_navigation_then_playback_stays_on_page(self, loaded, clock):
        loaded.set_playing(True)
        loaded.navigate(1)
        clock.on_tick(1.5)
        clock.on_tick(1.7)
        assert loaded.state.active_chunk_index == 1


class TestGotoChunk:
    def test_goto_is_one_based(self, loaded, player):
        loaded.goto_chunk(2)
        assert loaded.state.active_chunk_index == 1
        assert player.seeks == [1.5]

    @pytest.mark.parametrize("page", [0, -1, 4, 100])
    def test_out_of_range_ignored(self, loaded, player, page):
        loaded.goto_chunk(page)
        assert loaded.state.active_chunk_index == 0
        assert player.seeks == []


# ---------------------------------------------------------------------------
# Word clicks and seeks
# ---------------------------------------------------------------------------


class TestWordClicked:
    def test_plain_click_does_not_seek(self, loaded, player):
        word = loaded.chunks[1].words[2]
        loaded.word_clicked(word, modifier_held=False)
        assert player.seeks == []

    def test_modifier_click_seeks_to_word(self, loaded, player):
        word = loaded.chunks[1].words[2]
        loaded.word_clicked(word, modifier_held=True)
        assert player.seeks == [word.start_s]

    def test_click_while_empty_is_ignored(self, controller, player):
        controller.word_clicked(Word("x", 1.0, 2.0), modifier_held=True)
        assert player.seeks == []

    def test_seek_forwards_to_player(self, loaded, player):
        loaded.seek(0.0)
        assert player.seeks == [0.0]

    def test_navigation_without_player_still_moves_page(self):
        controller = SyncController(PlaybackClockAdapter(), target_size=3)
        controller.load_transcript(make_words(6, terminal_at=(3,)))
        controller.navigate(1)
        controller.seek(1.0)
        assert controller.state.active_chunk_index == 1


# ---------------------------------------------------------------------------
# Player events
# ---------------------------------------------------------------------------


class TestPlayerEvents:
    def test_events_ignored_while_empty(self, controller, clock):
        clock.on_play()
        clock.on_tick(1.0)
        clock.on_ended()
        assert controller.state == SyncState()

    def test_play_and_pause(self, loaded, clock):
        clock.on_play()
        assert loaded.state.is_playing is True
        clock.on_pause()
        assert loaded.state.is_playing is False

    def test_playback_ended_resets_time(self, loaded, clock):
        clock.on_play()
        clock.on_tick(2.0)
        clock.on_ended()
        assert loaded.state.is_playing is False
        assert loaded.state.current_time_s == 0.0
        assert loaded.state.active_chunk_index == 1

    def test_tick_through_clock_updates_state(self, loaded, clock):
        clock.on_tick(0.1)
        assert loaded.state.active_word_index == 0
