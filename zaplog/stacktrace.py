"""Capturing and formatting the call stack."""

from __future__ import annotations

import inspect
import sys
from enum import Enum
from functools import lru_cache
from traceback import FrameSummary
from types import CodeType, FrameType
from typing import Iterable

_EMPTY_FRAME = FrameSummary("", 0, "", lookup_line=False)


class StackDepth(Enum):
    """How much of the call stack to capture."""

    FIRST = 0
    FULL = 1


@lru_cache(maxsize=None)
def _module_name(code: CodeType) -> str:
    try:
        module = inspect.getmodule(code)
    except TypeError:
        module = None
    if module is not None:
        return module.__name__
    return inspect.getmodulename(code.co_filename) or ""


def _summarize(frame: FrameType) -> FrameSummary:
    code = frame.f_code
    module = _module_name(code)
    name = code.co_name
    function = f"{module}.{name}" if module else name
    return FrameSummary(code.co_filename, frame.f_lineno, function, lookup_line=False)


class Stacktrace:
    """Captured frames, read one at a time from the innermost outward."""

    def __init__(self, frames: Iterable[FrameSummary]) -> None:
        self._frames = tuple(frames)
        self._position = 0

    def count(self) -> int:
        """Total number of frames; does not change as frames are read."""
        return len(self._frames)

    def next(self) -> tuple[FrameSummary, bool]:
        """Return the next frame and whether more frames follow it."""
        if self._position >= len(self._frames):
            return _EMPTY_FRAME, False
        frame = self._frames[self._position]
        self._position += 1
        return frame, self._position < len(self._frames)


def capture_stacktrace(skip: int, depth: StackDepth) -> Stacktrace:
    """Capture the stack; ``skip=0`` starts at the caller of this function."""
    try:
        frame: FrameType | None = sys._getframe(skip + 1)
    except ValueError:
        frame = None
    frames: list[FrameSummary] = []
    while frame is not None:
        frames.append(_summarize(frame))
        if depth is StackDepth.FIRST:
            break
        frame = frame.f_back
    return Stacktrace(frames)


class StackFormatter:
    """Formats frames as ``function\\n\\tfile:line``, one per entry."""

    def __init__(self) -> None:
        self._parts: list[str] = []

    def format_frame(self, frame: FrameSummary) -> None:
        if self._parts:
            self._parts.append("\n")
        self._parts.append(f"{frame.name}\n\t{frame.filename}:{frame.lineno}")

    def format_stack(self, stack: Stacktrace) -> None:
        """Format every remaining frame except the outermost one."""
        frame, more = stack.next()
        while more:
            self.format_frame(frame)
            frame, more = stack.next()

    def getvalue(self) -> str:
        return "".join(self._parts)


def take_stacktrace(skip: int) -> str:
    """Format the full stack; ``skip=0`` starts at the caller of this function."""
    stack = capture_stacktrace(skip + 1, StackDepth.FULL)
    formatter = StackFormatter()
    formatter.format_stack(stack)
    return formatter.getvalue()