import threading
from datetime import datetime, timedelta, timezone

import pytest

from zaplog.clock import DEFAULT_CLOCK, MockClock, SystemClock, Ticker

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def test_system_clock_new_ticker():
    ticker = DEFAULT_CLOCK.new_ticker(timedelta(milliseconds=1))
    try:
        ticks = [ticker.get(timeout=2) for _ in range(3)]
    finally:
        ticker.stop()
    assert len(ticks) == 3
    assert ticks == sorted(ticks)


def test_system_clock_now_is_aware_and_current():
    before = datetime.now(timezone.utc)
    now = SystemClock().now()
    after = datetime.now(timezone.utc)
    assert before <= now <= after


def test_ticker_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        Ticker(timedelta(0))
    with pytest.raises(ValueError):
        MockClock().new_ticker(timedelta(seconds=-1))


def test_ticker_get_times_out():
    ticker = MockClock().new_ticker(timedelta(seconds=1))
    with pytest.raises(TimeoutError):
        ticker.get(timeout=0.01)


def test_mock_clock_new_ticker():
    clock = MockClock()
    ticker = clock.new_ticker(timedelta(microseconds=1))
    count = [0]
    quit_event = threading.Event()

    def run():
        while not quit_event.is_set():
            try:
                ticker.get(timeout=0.01)
            except TimeoutError:
                continue
            count[0] += 1
        ticker.stop()

    worker = threading.Thread(target=run)
    worker.start()
    clock.add(timedelta(microseconds=2))
    quit_event.set()
    worker.join()
    assert count[0] == 2
    assert clock.now() == EPOCH + timedelta(microseconds=2)


def test_mock_clock_now_advances():
    clock = MockClock()
    assert clock.now() == EPOCH
    clock.add(timedelta(seconds=5))
    assert clock.now() == EPOCH + timedelta(seconds=5)


def test_mock_ticker_keeps_first_unread_tick():
    clock = MockClock()
    ticker = clock.new_ticker(timedelta(seconds=1))
    clock.add(timedelta(seconds=3))
    assert ticker.get(timeout=0) == EPOCH + timedelta(seconds=1)


def test_mock_ticker_stopped_delivers_nothing():
    clock = MockClock()
    ticker = clock.new_ticker(timedelta(seconds=1))
    ticker.stop()
    clock.add(timedelta(seconds=2))
    assert clock.now() == EPOCH + timedelta(seconds=2)
    with pytest.raises(TimeoutError):
        ticker.get(timeout=0.01)