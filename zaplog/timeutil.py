"""Time conversions and scalable test timeouts."""

from __future__ import annotations

import logging
import os
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, TypeVar

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_state: dict[str, float] = {"scale": 1.0}

_T = TypeVar("_T", timedelta, float)


def time_to_millis(moment: datetime) -> int:
    """Milliseconds since the Unix epoch, truncated toward zero.

    Naive datetimes are taken to be in UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    delta = moment - _EPOCH
    micros = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
    millis = abs(micros) // 1000
    return millis if micros >= 0 else -millis


def timeout(base: _T) -> _T:
    """Scale ``base`` by the current timeout factor."""
    return base * _state["scale"]


def sleep(base: timedelta | float) -> None:
    """Sleep for the scaled duration."""
    scaled = timeout(base)
    seconds = scaled.total_seconds() if isinstance(scaled, timedelta) else scaled
    time.sleep(max(seconds, 0.0))


def initialize(factor: str) -> Callable[[], None]:
    """Set the timeout factor; return a function that restores the old one."""
    original = _state["scale"]
    _state["scale"] = float(factor)

    def undo() -> None:
        _state["scale"] = original

    return undo


_env_scale = os.environ.get("TEST_TIMEOUT_SCALE")
if _env_scale:
    initialize(_env_scale)
    logging.getLogger(__name__).info("Scaling timeouts by %sx.", _state["scale"])