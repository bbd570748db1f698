"""A write syncer that batches writes in memory and flushes them periodically."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from zaplog.clock import DEFAULT_CLOCK, Ticker

_DEFAULT_BUFFER_SIZE = 256 * 1024
_DEFAULT_FLUSH_INTERVAL = timedelta(seconds=30)
_POLL_SECONDS = 0.01


def _combine(errors: list[BaseException]) -> BaseException:
    if len(errors) == 1:
        return errors[0]
    return OSError("; ".join(str(err) for err in errors))


@dataclass(eq=False)
class BufferedWriteSyncer:
    """Buffers writes to ``ws`` and flushes them when full or on a timer.

    ``size`` defaults to 256 kB and ``flush_interval`` to 30 seconds when
    left at zero; ``clock`` defaults to the system clock. Safe for
    concurrent use.
    """

    ws: Any
    size: int = 0
    flush_interval: timedelta | float = 0
    clock: Any = None

    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _initialized: bool = field(default=False, init=False, repr=False)
    _stopped: bool = field(default=False, init=False, repr=False)
    _buffer: bytearray = field(default_factory=bytearray, init=False, repr=False)
    _capacity: int = field(default=0, init=False, repr=False)
    _error: BaseException | None = field(default=None, init=False, repr=False)
    _ticker: Ticker | None = field(default=None, init=False, repr=False)
    _stop_event: threading.Event = field(default_factory=threading.Event, init=False, repr=False)
    _thread: threading.Thread | None = field(default=None, init=False, repr=False)

    def _initialize(self) -> None:
        self._capacity = self.size or _DEFAULT_BUFFER_SIZE
        interval = self.flush_interval or _DEFAULT_FLUSH_INTERVAL
        if self.clock is None:
            self.clock = DEFAULT_CLOCK
        self._ticker = self.clock.new_ticker(interval)
        self._initialized = True
        self._thread = threading.Thread(target=self._flush_loop, daemon=True)
        self._thread.start()

    def _available(self) -> int:
        return self._capacity - len(self._buffer)

    def _write_through(self, data: bytes) -> int:
        try:
            written = self.ws.write(data)
        except Exception as exc:
            self._error = exc
            raise
        return len(data) if written is None else written

    def _flush(self) -> None:
        if self._error is not None:
            raise self._error
        if not self._buffer:
            return
        written = self._write_through(bytes(self._buffer))
        if written < len(self._buffer):
            if written > 0:
                del self._buffer[:written]
            self._error = OSError("short write")
            raise self._error
        self._buffer.clear()

    def write(self, data: bytes) -> int:
        """Buffer ``data``; flush first if it would not fit beside what is buffered."""
        data = bytes(data)
        with self._lock:
            if not self._initialized:
                self._initialize()
            if len(data) > self._available() and self._buffer:
                self._flush()
            if self._error is not None:
                raise self._error
            if len(data) > self._available():
                written = self._write_through(data)
                if written < len(data):
                    self._error = OSError("short write")
                    raise self._error
                return written
            self._buffer.extend(data)
            return len(data)

    def sync(self) -> None:
        """Flush buffered data and sync the wrapped syncer."""
        errors: list[BaseException] = []
        with self._lock:
            if self._initialized:
                try:
                    self._flush()
                except Exception as exc:
                    errors.append(exc)
            ws_sync = getattr(self.ws, "sync", None)
            if callable(ws_sync):
                try:
                    ws_sync()
                except Exception as exc:
                    errors.append(exc)
        if errors:
            raise _combine(errors)

    def _flush_loop(self) -> None:
        assert self._ticker is not None
        while not self._stop_event.is_set():
            try:
                self._ticker.get(timeout=_POLL_SECONDS)
            except TimeoutError:
                continue
            try:
                self.sync()
            except Exception:
                # The error stays recorded and surfaces from sync or stop.
                pass

    def stop(self) -> None:
        """Stop the flush timer and flush what remains; later calls do nothing."""
        thread = None
        with self._lock:
            if self._initialized:
                if self._stopped:
                    return
                self._stopped = True
                assert self._ticker is not None
                self._ticker.stop()
                self._stop_event.set()
                thread = self._thread
        if thread is not None:
            thread.join()
        self.sync()

    def __enter__(self) -> BufferedWriteSyncer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()