"""Opening sinks by URL and combining write syncers."""

from __future__ import annotations

import threading
from typing import Any, Callable

from zaplog.sink import new_sink


class _Discard:
    """Accepts and drops every write, keeping only counts."""

    def __init__(self) -> None:
        self.discarded = 0
        self.syncs = 0

    def write(self, data: bytes) -> int:
        self.discarded += len(data)
        return len(data)

    def sync(self) -> None:
        self.syncs += 1


_DISCARD = _Discard()


def _combine(errors: list[BaseException]) -> BaseException:
    if len(errors) == 1:
        return errors[0]
    return OSError("; ".join(str(err) for err in errors))


class _LockedMultiWriteSyncer:
    """Writes to and syncs every wrapped writer, one caller at a time."""

    def __init__(self, writers: tuple[Any, ...]) -> None:
        self._writers = writers
        self._lock = threading.Lock()

    def write(self, data: bytes) -> int:
        errors: list[BaseException] = []
        written = 0
        with self._lock:
            for writer in self._writers:
                try:
                    count = writer.write(data)
                except Exception as exc:
                    errors.append(exc)
                    continue
                if count is None:
                    count = len(data)
                if written == 0 and count != 0:
                    written = count
                elif count < written:
                    written = count
        if errors:
            raise _combine(errors)
        return written

    def sync(self) -> None:
        errors: list[BaseException] = []
        with self._lock:
            for writer in self._writers:
                writer_sync = getattr(writer, "sync", None)
                if not callable(writer_sync):
                    continue
                try:
                    writer_sync()
                except Exception as exc:
                    errors.append(exc)
        if errors:
            raise _combine(errors)


def combine_write_syncers(*writers: Any) -> Any:
    """Combine writers into one locked writer; with none, one that discards."""
    if not writers:
        return _DISCARD
    return _LockedMultiWriteSyncer(tuple(writers))


def open_sinks(*paths: str) -> tuple[Any, Callable[[], None]]:
    """Open every path or URL and combine them.

    Returns the combined writer and a function that closes what was opened.
    If any path fails, everything opened is closed and OSError is raised
    naming every failure.
    """
    sinks: list[Any] = []
    messages: list[str] = []
    first_error: BaseException | None = None

    def close() -> None:
        for sink in sinks:
            try:
                sink.close()
            except Exception:
                pass

    for path in paths:
        try:
            sinks.append(new_sink(path))
        except Exception as exc:
            first_error = first_error or exc
            messages.append(f'couldn\'t open sink "{path}": {exc}')

    if messages:
        close()
        raise OSError("; ".join(messages)) from first_error

    return combine_write_syncers(*sinks), close