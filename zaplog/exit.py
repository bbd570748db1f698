"""Process termination that tests can replace with a recording stub."""

from __future__ import annotations

import sys
from typing import Callable


def _terminate() -> None:
    sys.exit(1)


_real = _terminate


def exit() -> None:  # noqa: A001
    """Terminate the process with status 1, unless a stub is installed."""
    _real()


class StubbedExit:
    """Records whether exit was called instead of terminating."""

    def __init__(self, prev: Callable[[], None]) -> None:
        self.exited = False
        self._prev = prev

    def _exit(self) -> None:
        self.exited = True

    def unstub(self) -> None:
        """Restore the exit behaviour in place before this stub."""
        global _real
        _real = self._prev

    def __enter__(self) -> StubbedExit:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unstub()


def stub() -> StubbedExit:
    """Replace process termination with a recording stub."""
    global _real
    stubbed = StubbedExit(_real)
    _real = stubbed._exit
    return stubbed


def with_stub(func: Callable[[], object]) -> StubbedExit:
    """Run ``func`` with exit stubbed and return the stub."""
    with stub() as stubbed:
        func()
    return stubbed