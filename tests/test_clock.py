"""
Tests for the Ticker clock collaborator.

Intervals are kept tiny so the suite stays fast; assertions wait on events
rather than sleeping for fixed amounts.
"""

import threading

import pytest

from workout_timer.core.clock import Ticker


def _counting_callback(target: int):
    calls = []
    done = threading.Event()

    def callback():
        calls.append(1)
        if len(calls) >= target:
            done.set()

    return callback, calls, done


class TestTicker:
    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            Ticker(lambda: None, interval=0)
        with pytest.raises(ValueError):
            Ticker(lambda: None, interval=-1.0)

    def test_calls_callback_repeatedly(self):
        callback, calls, done = _counting_callback(3)
        with Ticker(callback, interval=0.01) as ticker:
            assert done.wait(2.0)
            assert ticker.running
        assert not ticker.running
        assert len(calls) >= 3

    def test_stop_halts_ticks(self):
        callback, calls, done = _counting_callback(2)
        ticker = Ticker(callback, interval=0.01)
        ticker.start()
        assert done.wait(2.0)
        ticker.stop()
        stopped_at = len(calls)
        threading.Event().wait(0.05)
        assert len(calls) == stopped_at

    def test_start_is_idempotent(self):
        ticker = Ticker(lambda: None, interval=0.01)
        ticker.start()
        first = ticker._thread
        ticker.start()
        assert ticker._thread is first
        ticker.stop()

    def test_callback_errors_do_not_stop_ticker(self):
        done = threading.Event()
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")
            done.set()

        with Ticker(flaky, interval=0.01) as ticker:
            assert done.wait(2.0)
        assert ticker.ticks >= 2

    def test_stop_timeout_keeps_thread_until_it_exits(self):
        """A thread stuck in its callback is still tracked after stop() times out."""
        entered = threading.Event()
        release = threading.Event()
        calls = []

        def slow():
            calls.append(1)
            entered.set()
            release.wait(2.0)

        ticker = Ticker(slow, interval=0.01)
        ticker.start()
        assert entered.wait(2.0)
        ticker.stop(timeout=0.01)
        stuck = ticker._thread
        assert stuck is not None
        assert ticker.running

        release.set()
        stuck.join(2.0)
        assert not stuck.is_alive()
        assert len(calls) == 1
        ticker.stop()
        assert not ticker.running

    def test_restart_after_timed_out_stop_runs_one_thread(self):
        entered = threading.Event()
        release = threading.Event()
        threads = []

        def callback():
            threads.append(threading.current_thread())
            entered.set()
            release.wait(2.0)

        ticker = Ticker(callback, interval=0.01)
        ticker.start()
        assert entered.wait(2.0)
        ticker.stop(timeout=0.01)
        old = ticker._thread

        ticker.start()
        new = ticker._thread
        assert new is not old
        release.set()
        old.join(2.0)
        ticker.stop()

        assert not old.is_alive()
        assert threads.count(old) == 1

    def test_first_tick_waits_one_interval(self):
        """Nothing happens at start; the first tick is one interval later."""
        calls = []
        ticker = Ticker(lambda: calls.append(1), interval=5.0)
        ticker.start()
        ticker.stop()
        assert calls == []
