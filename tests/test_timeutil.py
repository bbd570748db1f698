import time
from datetime import datetime, timedelta, timezone

import pytest

from zaplog.timeutil import initialize, sleep, time_to_millis, timeout


@pytest.mark.parametrize(
    "moment, stamp",
    [
        (datetime.fromtimestamp(0, timezone.utc), 0),
        (datetime.fromtimestamp(1, timezone.utc), 1000),
        (datetime.fromtimestamp(1, timezone.utc) + timedelta(milliseconds=500), 1500),
    ],
)
def test_time_to_millis(moment, stamp):
    assert time_to_millis(moment) == stamp


def test_time_to_millis_naive_is_utc():
    assert time_to_millis(datetime(1970, 1, 1, 0, 0, 1)) == 1000


def test_timeout_scaling_and_undo():
    base = timedelta(seconds=1)
    undo = initialize("2")
    try:
        assert timeout(base) == timedelta(seconds=2)
    finally:
        undo()
    assert timeout(base) == base


def test_initialize_rejects_garbage():
    with pytest.raises(ValueError):
        initialize("not-a-number")
    assert timeout(3.0) == 3.0


def test_sleep_uses_scale():
    undo = initialize("0")
    try:
        assert timeout(timedelta(hours=1)) == timedelta(0)
        start = time.monotonic()
        sleep(timedelta(hours=1))
        elapsed = time.monotonic() - start
    finally:
        undo()
    assert elapsed < 1.0