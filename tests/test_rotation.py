"""Rotation engine and ticker timing."""

import random
import threading

import pytest

from signage.errors import EmptyPlaylistError
from signage.player.rotation import PlaylistAd, RotationEngine
from signage.player.ticker import Ticker


def _ads(*durations, status="active"):
    return [PlaylistAd(ad_id=f"ad{i}", duration=d, status=status) for i, d in enumerate(durations)]


def test_sequential_cycle_returns_to_start():
    engine = RotationEngine()
    engine.load_playlist(_ads(5, 3, 2))
    assert engine.current_index == 0
    assert engine.time_remaining == 5

    seen = [engine.tick().ad_id for _ in range(10)]

    assert engine.current_index == 0
    assert engine.time_remaining == 5
    assert seen == ["ad0"] * 4 + ["ad1"] * 3 + ["ad2"] * 2 + ["ad0"]


def test_invariants_hold_every_tick():
    engine = RotationEngine()
    engine.load_playlist(_ads(4, 1, 7))
    for _ in range(50):
        engine.tick()
        assert 0 <= engine.current_index < len(engine.playlist)
        assert 0 < engine.time_remaining <= engine.current_ad.duration


def test_random_rotation_stays_in_bounds():
    engine = RotationEngine(rng=random.Random(42))
    engine.load_playlist(_ads(1, 1, 1, 1), rotation_type="random")
    picked = {engine.tick().ad_id for _ in range(100)}
    assert picked <= {"ad0", "ad1", "ad2", "ad3"}
    assert len(picked) > 1


def test_scheduled_plays_in_order():
    engine = RotationEngine()
    engine.load_playlist(_ads(1, 1), rotation_type="scheduled")
    assert [engine.tick().ad_id for _ in range(3)] == ["ad1", "ad0", "ad1"]


def test_inactive_ads_are_skipped():
    engine = RotationEngine()
    ads = _ads(2, 2) + [PlaylistAd(ad_id="off", duration=9, status="paused")]
    engine.load_playlist(ads)
    assert [ad.ad_id for ad in engine.playlist] == ["ad0", "ad1"]


def test_empty_playlist():
    engine = RotationEngine()
    with pytest.raises(EmptyPlaylistError):
        engine.load_playlist(_ads(5, status="paused"))
    assert engine.is_empty
    assert engine.tick() is None
    assert engine.current_ad is None
    assert engine.next() is None


def test_reload_keeps_current_ad():
    engine = RotationEngine()
    engine.load_playlist(_ads(5, 3, 2))
    engine.tick()
    engine.next()
    assert engine.current_ad.ad_id == "ad1"

    engine.reload([PlaylistAd(ad_id="new", duration=4), PlaylistAd(ad_id="ad1", duration=3)])
    assert engine.current_ad.ad_id == "ad1"
    assert engine.current_index == 1


def test_reload_restarts_when_current_ad_removed():
    engine = RotationEngine()
    engine.load_playlist(_ads(5, 3))
    engine.reload([PlaylistAd(ad_id="new", duration=4)])
    assert engine.current_ad.ad_id == "new"
    assert engine.time_remaining == 4


def test_previous_wraps():
    engine = RotationEngine()
    engine.load_playlist(_ads(5, 3, 2))
    assert engine.previous().ad_id == "ad2"
    assert engine.time_remaining == 2


def test_from_dict_clamps_duration():
    ad = PlaylistAd.from_dict({"ad_id": "x", "duration": 0})
    assert ad.duration == 1


def test_ticker_survives_callback_errors():
    calls = []
    done = threading.Event()

    def callback():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("boom")
        if len(calls) >= 3:
            done.set()

    ticker = Ticker("test", 0.01, callback)
    ticker.start()
    try:
        assert done.wait(timeout=5)
    finally:
        ticker.stop()
    assert not ticker.running


def test_tickers_are_independent():
    slow_started = threading.Event()
    release = threading.Event()
    fast_done = threading.Event()
    fast_calls = []

    def slow():
        slow_started.set()
        release.wait(timeout=5)

    def fast():
        fast_calls.append(1)
        if len(fast_calls) >= 3:
            fast_done.set()

    slow_ticker = Ticker("slow", 0.01, slow)
    fast_ticker = Ticker("fast", 0.01, fast)
    slow_ticker.start()
    fast_ticker.start()
    try:
        assert slow_started.wait(timeout=5)
        assert fast_done.wait(timeout=5)
    finally:
        release.set()
        fast_ticker.stop()
        slow_ticker.stop()


def test_restart_after_timed_out_stop_leaves_one_thread():
    entered = threading.Event()
    release = threading.Event()

    def callback():
        entered.set()
        release.wait(timeout=5)

    ticker = Ticker("stuck", 0.01, callback)
    ticker.start()
    assert entered.wait(timeout=5)
    old_thread = ticker._thread

    ticker.stop(timeout=0.05)
    assert old_thread.is_alive()
    assert not ticker.running

    ticker.start()
    try:
        release.set()
        old_thread.join(timeout=5)
        assert not old_thread.is_alive()
        assert ticker.running
    finally:
        ticker.stop()
