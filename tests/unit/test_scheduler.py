"""Tests for the recurring sweep scheduler."""

import threading
import time
from fractions import Fraction

import pytest

from nscache.core.scheduler import MAX_DELAY_MS, SweepScheduler, is_schedulable


@pytest.mark.parametrize("interval", [1, 10.5, 3_600_000, MAX_DELAY_MS - 1, Fraction(1, 2)])
def test_is_schedulable(interval):
    assert is_schedulable(interval) is True


@pytest.mark.parametrize("interval", [0, -5, MAX_DELAY_MS, MAX_DELAY_MS + 1, None, "100", True, float("nan"), float("inf")])
def test_not_schedulable(interval):
    assert is_schedulable(interval) is False


def test_invalid_interval():
    with pytest.raises(ValueError):
        SweepScheduler(lambda: None, 0)


def test_runs_repeatedly():
    """Callback runs on every interval until cancelled."""
    calls = threading.Semaphore(0)
    scheduler = SweepScheduler(calls.release, 10, name="test")
    scheduler.start()
    try:
        for _ in range(3):
            assert calls.acquire(timeout=2)
        assert scheduler.runs >= 3
        assert scheduler.active is True
    finally:
        scheduler.cancel()


def test_cancel_stops_runs():
    calls = []
    scheduler = SweepScheduler(lambda: calls.append(1), 10)
    scheduler.start()
    time.sleep(0.05)

    scheduler.cancel()
    count = len(calls)
    time.sleep(0.1)

    assert scheduler.active is False
    assert len(calls) == count


def test_cancel_before_first_run():
    calls = []
    scheduler = SweepScheduler(lambda: calls.append(1), 50)
    scheduler.start()
    scheduler.cancel()
    time.sleep(0.1)

    assert calls == []


def test_cancel_twice():
    scheduler = SweepScheduler(lambda: None, 1000)
    scheduler.start()

    scheduler.cancel()
    scheduler.cancel()

    assert scheduler.active is False


def test_not_active_until_started():
    scheduler = SweepScheduler(lambda: None, 1000)

    assert scheduler.active is False
    scheduler.cancel()


def test_failing_callback_keeps_schedule():
    """An exception in one run does not stop later runs."""
    runs = threading.Semaphore(0)

    def callback():
        runs.release()
        raise RuntimeError("boom")

    scheduler = SweepScheduler(callback, 10)
    scheduler.start()
    try:
        assert runs.acquire(timeout=2)
        assert runs.acquire(timeout=2)
    finally:
        scheduler.cancel()


def test_cancel_from_callback():
    """The callback may cancel its own scheduler."""
    done = threading.Event()
    holder = {}

    def callback():
        holder["scheduler"].cancel()
        done.set()

    scheduler = SweepScheduler(callback, 10)
    holder["scheduler"] = scheduler
    scheduler.start()

    assert done.wait(2)
    time.sleep(0.05)
    assert scheduler.runs == 1
