"""Leveled logging building blocks: levels, sinks, writers, buffering, clocks, stack traces and test helpers."""

__version__ = "0.1.0"
__all__ = [
    "buffered",
    "clock",
    "color",
    "exit",
    "level",
    "readme",
    "sink",
    "spies",
    "stacktrace",
    "timeutil",
    "writer",
]