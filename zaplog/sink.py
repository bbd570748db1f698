"""Log destinations opened from URLs, with a registry of factories by scheme."""

from __future__ import annotations

import os
import string
import sys
import threading
from dataclasses import dataclass
from typing import Any, Callable
from urllib.parse import SplitResult, urlsplit

SCHEME_FILE = "file"

SinkFactory = Callable[[SplitResult], Any]

_registry_lock = threading.RLock()
_factories: dict[str, SinkFactory] = {}


class SinkNotFoundError(LookupError):
    """No factory is registered for a URL's scheme."""

    def __init__(self, scheme: str) -> None:
        self.scheme = scheme
        super().__init__(f'no sink found for scheme "{scheme}"')


@dataclass
class NopCloserSink:
    """A sink whose ``close`` leaves the wrapped writer open."""

    ws: Any
    closed: bool = False

    def write(self, data: bytes) -> int:
        return self.ws.write(data)

    def sync(self) -> None:
        ws_sync = getattr(self.ws, "sync", None)
        if callable(ws_sync):
            ws_sync()

    def close(self) -> None:
        """Mark the sink closed without closing the wrapped writer."""
        self.closed = True


class _StdStream:
    """Writes bytes to whatever stream ``current`` returns at write time."""

    def __init__(self, current: Callable[[], Any]) -> None:
        self._current = current

    def write(self, data: bytes) -> int:
        stream = self._current()
        buffer = getattr(stream, "buffer", None)
        if buffer is not None:
            stream.flush()
            buffer.write(data)
            buffer.flush()
        else:
            stream.write(bytes(data).decode("utf-8", errors="replace"))
            stream.flush()
        return len(data)

    def sync(self) -> None:
        self._current().flush()


_STD_STREAMS: dict[str, Callable[[], Any]] = {
    "stdout": lambda: sys.stdout,
    "stderr": lambda: sys.stderr,
}


class _FileSink:
    """An append-only file."""

    def __init__(self, raw: Any) -> None:
        self._file = raw

    def write(self, data: bytes) -> int:
        written = self._file.write(data)
        return len(data) if written is None else written

    def sync(self) -> None:
        self._file.flush()
        os.fsync(self._file.fileno())

    def close(self) -> None:
        self._file.close()


def _check_scheme_prefix(raw: str) -> None:
    for index, char in enumerate(raw):
        if char.isascii() and char.isalpha():
            continue
        if char in string.digits or char in "+-.":
            if index == 0:
                return
            continue
        if char == ":" and index == 0:
            raise ValueError("missing protocol scheme")
        return


def _parse_url(raw: str) -> SplitResult:
    _check_scheme_prefix(raw)
    url = urlsplit(raw)
    if not url.scheme and not url.netloc:
        first_segment = url.path.split("/", 1)[0]
        if ":" in first_segment:
            raise ValueError("first path segment in URL cannot contain colon")
    return url


def _split_host_port(hostport: str) -> tuple[str, str]:
    if hostport.startswith("["):
        end = hostport.find("]")
        if end < 0:
            return hostport, ""
        rest = hostport[end + 1:]
        return hostport[1:end], rest[1:] if rest.startswith(":") else ""
    host, sep, port = hostport.rpartition(":")
    if not sep:
        return hostport, ""
    return host, port


def _new_file_sink(url: SplitResult) -> Any:
    shown = url.geturl()
    _, at, hostport = url.netloc.rpartition("@")
    if at:
        raise ValueError(f"user and password not allowed with file URLs: got {shown}")
    if url.fragment:
        raise ValueError(f"fragments not allowed with file URLs: got {shown}")
    if url.query:
        raise ValueError(f"query parameters not allowed with file URLs: got {shown}")
    host, port = _split_host_port(hostport)
    if port:
        raise ValueError(f"ports not allowed with file URLs: got {shown}")
    if host and host != "localhost":
        raise ValueError(
            f"file URLs must leave host empty or use localhost: got {shown}"
        )
    current = _STD_STREAMS.get(url.path)
    if current is not None:
        return NopCloserSink(_StdStream(current))
    try:
        raw = open(url.path, "ab", buffering=0)
    except OSError as exc:
        reason = (exc.strerror or str(exc)).lower()
        raise OSError(exc.errno, f"open {url.path}: {reason}") from exc
    return _FileSink(raw)


def normalize_scheme(scheme: str) -> str:
    """Lowercase ``scheme`` and check it against RFC 3986 section 3.1."""
    lowered = scheme.lower()
    if not lowered or not "a" <= lowered[0] <= "z":
        raise ValueError("must start with a letter")
    for char in lowered[1:]:
        if "a" <= char <= "z" or "0" <= char <= "9" or char in ".+-":
            continue
        raise ValueError(f"may not contain {char!r}")
    return lowered


def register_sink(scheme: str, factory: SinkFactory) -> None:
    """Register ``factory`` for every sink URL with ``scheme``."""
    if scheme == "":
        raise ValueError("can't register a sink factory for empty string")
    try:
        normalized = normalize_scheme(scheme)
    except ValueError as exc:
        raise ValueError(f'"{scheme}" is not a valid scheme: {exc}') from exc
    with _registry_lock:
        if normalized in _factories:
            raise ValueError(
                f'sink factory already registered for scheme "{normalized}"'
            )
        _factories[normalized] = factory


def reset_sink_registry() -> None:
    """Forget every registered factory except the one for files."""
    with _registry_lock:
        _factories.clear()
        _factories[SCHEME_FILE] = _new_file_sink


def new_sink(raw_url: str) -> Any:
    """Open the sink that ``raw_url`` names; URLs without a scheme are files."""
    try:
        url = _parse_url(raw_url)
    except ValueError as exc:
        raise ValueError(f'can\'t parse "{raw_url}" as a URL: {exc}') from exc
    if not url.scheme:
        url = url._replace(scheme=SCHEME_FILE)
    with _registry_lock:
        factory = _factories.get(url.scheme)
    if factory is None:
        raise SinkNotFoundError(url.scheme)
    return factory(url)


reset_sink_registry()