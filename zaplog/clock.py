"""Sources of time: the system clock and a controllable mock clock."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

_HANDOFF_TIMEOUT = 0.05
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _as_timedelta(value: timedelta | float) -> timedelta:
    if isinstance(value, timedelta):
        return value
    return timedelta(seconds=value)


class Ticker:
    """Delivers ticks of a clock; holds at most one undelivered tick."""

    def __init__(self, interval: timedelta | float) -> None:
        self.interval = _as_timedelta(interval)
        if self.interval <= timedelta(0):
            raise ValueError("non-positive interval for new_ticker")
        self._cond = threading.Condition()
        self._pending: datetime | None = None
        self._waiters = 0
        self._stop_event = threading.Event()

    def get(self, timeout: float | None = None) -> datetime:
        """Wait for the next tick; raise TimeoutError if none arrives in time."""
        with self._cond:
            self._waiters += 1
            self._cond.notify_all()
            try:
                if not self._cond.wait_for(lambda: self._pending is not None, timeout):
                    raise TimeoutError("no tick received")
                moment = self._pending
                self._pending = None
                self._cond.notify_all()
                return moment
            finally:
                self._waiters -= 1

    def stop(self) -> None:
        """Stop producing ticks. A tick already delivered stays readable."""
        self._stop_event.set()

    @property
    def _stopped(self) -> bool:
        return self._stop_event.is_set()

    def _offer(self, moment: datetime) -> None:
        with self._cond:
            if self._stopped or self._pending is not None:
                return
            self._pending = moment
            self._cond.notify_all()

    def _handoff(self, moment: datetime) -> None:
        """Deliver a tick and give a reader the chance to handle it."""
        with self._cond:
            if self._stopped:
                return
            if not self._cond.wait_for(lambda: self._pending is None, _HANDOFF_TIMEOUT):
                return
            self._pending = moment
            self._cond.notify_all()
            self._cond.wait_for(
                lambda: self._pending is None and self._waiters > 0,
                _HANDOFF_TIMEOUT,
            )

    def _run(self) -> None:
        seconds = self.interval.total_seconds()
        while not self._stop_event.wait(seconds):
            self._offer(datetime.now().astimezone())


class SystemClock:
    """Clock backed by the system time."""

    def now(self) -> datetime:
        return datetime.now().astimezone()

    def new_ticker(self, interval: timedelta | float) -> Ticker:
        ticker = Ticker(interval)
        threading.Thread(target=ticker._run, daemon=True).start()
        return ticker


DEFAULT_CLOCK = SystemClock()


@dataclass
class _MockTimer:
    ticker: Ticker
    next: datetime


class MockClock:
    """Clock whose time only moves when ``add`` is called. Starts at the epoch."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._now = _EPOCH
        self._timers: list[_MockTimer] = []

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def new_ticker(self, interval: timedelta | float) -> Ticker:
        ticker = Ticker(interval)
        with self._lock:
            self._timers.append(_MockTimer(ticker, self._now + ticker.interval))
        return ticker

    def add(self, delta: timedelta | float) -> None:
        """Move time forward, firing every tick that falls due on the way."""
        delta = _as_timedelta(delta)
        with self._lock:
            target = self._now + delta
        while True:
            with self._lock:
                self._timers = [t for t in self._timers if not t.ticker._stopped]
                due = min(
                    (t for t in self._timers if t.next <= target),
                    key=lambda t: t.next,
                    default=None,
                )
                if due is None:
                    self._now = target
                    return
                moment = due.next
                self._now = moment
                due.next = moment + due.ticker.interval
            due.ticker._handoff(moment)