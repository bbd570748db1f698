"""ANSI foreground colours for terminal output."""

from enum import IntEnum


class Color(IntEnum):
    """A terminal foreground colour."""

    BLACK = 30
    RED = 31
    GREEN = 32
    YELLOW = 33
    BLUE = 34
    MAGENTA = 35
    CYAN = 36
    WHITE = 37

    def add(self, text: str) -> str:
        """Wrap ``text`` in this colour's escape codes."""
        return f"\x1b[{int(self)}m{text}\x1b[0m"