"""Logging levels and a thread-safe, dynamically adjustable level."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable


class Level(IntEnum):
    """Logging priority. Higher levels are more important."""

    DEBUG = -1
    INFO = 0
    WARN = 1
    ERROR = 2
    DPANIC = 3
    PANIC = 4
    FATAL = 5

    def __str__(self) -> str:
        return self.name.lower()

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)

    def enabled(self, lvl: int) -> bool:
        """Report whether ``lvl`` is at or above this level."""
        return lvl >= self


_LEVELS_BY_TEXT = {level.name.lower(): level for level in Level}
_LEVELS_BY_TEXT[""] = Level.INFO


def parse_level(text: str | bytes) -> Level:
    """Parse a lowercase or all-caps level name; the empty string means INFO."""
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("utf-8", errors="replace")
    if text in _LEVELS_BY_TEXT:
        return _LEVELS_BY_TEXT[text]
    if text == text.upper() and text.lower() in _LEVELS_BY_TEXT:
        return _LEVELS_BY_TEXT[text.lower()]
    raise ValueError(f'unrecognized level: "{text}"')


@dataclass(frozen=True)
class LevelEnablerFunc:
    """Adapts a plain predicate on levels into a level enabler."""

    func: Callable[[int], bool]

    def enabled(self, lvl: int) -> bool:
        return bool(self.func(lvl))


class AtomicLevel:
    """A logging level that can be changed safely at runtime."""

    def __init__(self, level: int = Level.INFO) -> None:
        self._lock = threading.Lock()
        self._level = self._coerce(level)

    @staticmethod
    def _coerce(level: int) -> int:
        try:
            return Level(level)
        except ValueError:
            return int(level)

    def level(self) -> int:
        """Return the minimum enabled level."""
        with self._lock:
            return self._level

    def set_level(self, lvl: int) -> None:
        """Change the minimum enabled level."""
        coerced = self._coerce(lvl)
        with self._lock:
            self._level = coerced

    def enabled(self, lvl: int) -> bool:
        return lvl >= self.level()

    def unmarshal_text(self, text: str | bytes) -> None:
        """Set the level from its text form; raises ValueError if unknown."""
        self.set_level(parse_level(text))

    def marshal_text(self) -> bytes:
        return str(self.level()).encode("ascii")

    def __str__(self) -> str:
        return str(self.level())

    def __repr__(self) -> str:
        return f"AtomicLevel({self.level()!s})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AtomicLevel):
            return NotImplemented
        return self.level() == other.level()

    __hash__ = None  # type: ignore[assignment]


def parse_atomic_level(text: str | bytes) -> AtomicLevel:
    """Build an AtomicLevel from a level name; raises ValueError if unknown."""
    return AtomicLevel(parse_level(text))