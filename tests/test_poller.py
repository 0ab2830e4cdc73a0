"""Tests for the game poller lifecycle."""

import asyncio

import pytest

from avalon import remote
from avalon.errors import RequestError
from avalon.notifications import NotificationManager
from avalon.poller import GamePoller
from avalon.service import GameService
from avalon.store import Store

from conftest import FakeApi, make_game, wait_until


def make_poller(api, sink, interval_ms=10):
    store = Store()
    manager = NotificationManager(sink)
    manager.attach(store)
    poller = GamePoller(GameService(store, api), "avalon", "p-1", interval_ms=interval_ms)
    return poller, store, manager


@pytest.mark.asyncio
async def test_activate_shows_loading_immediately(sink):
    api = FakeApi(fetch_delay=0.05)
    poller, store, _ = make_poller(api, sink)

    poller.activate()
    assert remote.is_loading(store.state.game_state.game)

    await wait_until(lambda: remote.is_ready(store.state.game_state.game))
    poller.deactivate()


@pytest.mark.asyncio
async def test_failed_fetch_stops_polling_with_one_toast(sink):
    game = make_game()
    api = FakeApi([game, game, RequestError("Server down", 503), game])
    poller, store, manager = make_poller(api, sink)

    poller.activate()
    await wait_until(lambda: api.state_calls >= 3 and not poller.is_running())
    await asyncio.sleep(0.05)
    await manager.flush()

    assert api.state_calls == 3
    assert poller.ticks == 3
    assert not poller.armed
    assert [toast.message for toast in sink.toasts] == ["Server down"]
    assert store.state.game_state.game == remote.failure("Server down")


@pytest.mark.asyncio
async def test_slow_fetches_never_overlap(sink):
    api = FakeApi(fetch_delay=0.03)
    poller, _, _ = make_poller(api, sink, interval_ms=5)

    poller.activate()
    await wait_until(lambda: api.state_calls >= 4)
    poller.deactivate()

    assert api.max_in_flight == 1


@pytest.mark.asyncio
async def test_deactivate_clears_game_and_is_idempotent(sink):
    api = FakeApi()
    poller, store, _ = make_poller(api, sink)

    poller.activate()
    await wait_until(lambda: remote.is_ready(store.state.game_state.game))

    poller.deactivate()
    poller.deactivate()
    await wait_until(lambda: not poller.is_running())

    calls = api.state_calls
    await asyncio.sleep(0.05)
    assert api.state_calls == calls
    assert remote.is_not_started(store.state.game_state.game)


@pytest.mark.asyncio
async def test_activate_twice_keeps_single_loop(sink):
    api = FakeApi(fetch_delay=0.02)
    poller, _, _ = make_poller(api, sink, interval_ms=5)

    poller.activate()
    poller.activate()
    await wait_until(lambda: api.state_calls >= 3)
    poller.deactivate()

    assert api.max_in_flight == 1


@pytest.mark.asyncio
async def test_reactivation_after_failure_polls_again(sink):
    game = make_game()
    api = FakeApi([RequestError("Server down", 503), game])
    poller, store, manager = make_poller(api, sink)

    poller.activate()
    await wait_until(lambda: not poller.is_running() and api.state_calls == 1)
    assert remote.is_failure(store.state.game_state.game)

    poller.activate()
    assert remote.is_loading(store.state.game_state.game)
    await wait_until(lambda: remote.is_ready(store.state.game_state.game))
    poller.deactivate()
    await manager.flush()

    assert len(sink.toasts) == 1
