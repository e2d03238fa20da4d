"""Tests for the PollingController."""

import asyncio

from radiofeed.models import LOADING_LABEL, NowInfo, StatusInfo
from radiofeed.poller import PollingController


def delayed(value, seconds=0.0):
    async def fetch():
        await asyncio.sleep(seconds)
        return value
    return fetch


class FakePlayback:
    def __init__(self):
        self.paused = 0

    async def pause(self):
        self.paused += 1


async def test_tick_merges_both_collectors():
    poller = PollingController(delayed(StatusInfo("DJ Mike", "Pop")), delayed(NowInfo(42, "Song")),
                               interval=10)
    display = await poller.tick()
    assert display.status == StatusInfo("DJ Mike", "Pop")
    assert display.now == NowInfo(42, "Song")
    assert display.loaded
    assert poller.display is display


async def test_collectors_run_concurrently():
    poller = PollingController(delayed(StatusInfo(), 0.3), delayed(NowInfo(), 0.3), interval=10)
    loop = asyncio.get_running_loop()
    started = loop.time()
    await poller.tick()
    assert loop.time() - started < 0.5


async def test_start_ticks_immediately_then_on_interval():
    poller = PollingController(delayed(StatusInfo()), delayed(NowInfo(1)), interval=0.2)
    poller.start()
    try:
        await asyncio.sleep(0.05)
        assert poller.ticks == 1
        await asyncio.sleep(0.3)
        assert poller.ticks == 2
    finally:
        await poller.stop()
    assert not poller.running


async def test_stop_cancels_in_flight_tick_and_releases_playback():
    playback = FakePlayback()
    poller = PollingController(delayed(StatusInfo("late"), 5), delayed(NowInfo(9), 5),
                               interval=10, playback=playback)
    poller.start()
    await asyncio.sleep(0.05)
    await poller.stop()

    assert playback.paused == 1
    assert not poller.display.loaded
    await asyncio.sleep(0.05)
    assert poller.ticks == 0


async def test_on_update_receives_display():
    seen = []

    async def on_update(display):
        seen.append(display)

    poller = PollingController(delayed(StatusInfo()), delayed(NowInfo(3)), interval=10,
                               on_update=on_update)
    await poller.tick()
    assert seen == [poller.display]


async def test_failing_callback_keeps_display():
    async def on_update(display):
        raise RuntimeError("consumer gone")

    poller = PollingController(delayed(StatusInfo()), delayed(NowInfo(3)), interval=10,
                               on_update=on_update)
    await poller.tick()
    assert poller.display.now.listeners == 3


def test_placeholder_labels_before_first_tick():
    poller = PollingController(delayed(StatusInfo()), delayed(NowInfo()), interval=10)
    labels = poller.display.to_dict()["labels"]
    assert labels["dj"] == LOADING_LABEL
    assert labels["song"] == LOADING_LABEL
    assert labels["listeners"] == "0"


def test_interval_from_config():
    poller = PollingController(delayed(StatusInfo()), delayed(NowInfo()))
    assert poller.interval == 10.0
