"""Builds README benchmark tables from ``go test -bench`` output."""

from __future__ import annotations

import argparse
import math
import re
import subprocess
import sys
from dataclasses import dataclass
from typing import Callable, Mapping, Sequence

LIBRARY_NAME_TO_MARKDOWN_NAME: dict[str, str] = {
    "Zap": ":zap: zap",
    "Zap.Sugar": ":zap: zap (sugared)",
    "stdlib.Println": "standard library",
    "sirupsen/logrus": "logrus",
    "go-kit/kit/log": "go-kit",
    "inconshreveable/log15": "log15",
    "apex/log": "apex/log",
    "rs/zerolog": "zerolog",
}

TEMPLATE_FIELDS = (
    "BenchmarkAddingFields",
    "BenchmarkAccumulatedContext",
    "BenchmarkWithoutFields",
)

TABLE_HEADER = (
    "| Package | Time | Time % to zap | Objects Allocated |",
    "| :------ | :--: | :-----------: | :---------------: |",
)

_UNIT_NANOS = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

_DURATION_PART = re.compile(r"(\d*)(?:\.(\d*))?([^\d.]*)")
_INTEGER = re.compile(r"[+-]?\d+")
_ACTION = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)
_FIELD_ACTION = re.compile(r"\s*\.(\w+)\s*")


def parse_duration(text: str) -> int:
    """Parse a duration such as ``"1.5ms"`` or ``"2h45m"`` into nanoseconds."""
    error = ValueError(f'time: invalid duration "{text}"')
    rest = text
    negative = False
    if rest[:1] in ("+", "-"):
        negative = rest[0] == "-"
        rest = rest[1:]
    if rest == "0":
        return 0
    if not rest:
        raise error

    total = 0
    position = 0
    while position < len(rest):
        match = _DURATION_PART.match(rest, position)
        whole, fraction, unit = match.group(1), match.group(2), match.group(3)
        if not whole and not fraction:
            raise error
        if not unit:
            raise ValueError(f'time: missing unit in duration "{text}"')
        if unit not in _UNIT_NANOS:
            raise ValueError(f'time: unknown unit "{unit}" in duration "{text}"')
        scale = _UNIT_NANOS[unit]
        total += int(whole or "0") * scale
        if fraction:
            total += int(fraction) * scale // 10 ** len(fraction)
        position = match.end()
    return -total if negative else total


def _parse_int(text: str) -> int:
    if not _INTEGER.fullmatch(text):
        raise ValueError(f'strconv.Atoi: parsing "{text}": invalid syntax')
    return int(text)


def _percent(value: int, baseline: int) -> str:
    if baseline == 0:
        if value > 0:
            ratio = math.inf
        elif value < 0:
            ratio = -math.inf
        else:
            ratio = math.nan
    else:
        ratio = value / baseline
    change = ratio * 100 - 100
    if math.isnan(change):
        return "+NaN%"
    if math.isinf(change):
        return "+Inf%" if change > 0 else "-Inf%"
    return f"{change:+.0f}%"


@dataclass
class BenchmarkRow:
    """One library's results, with the zap baseline they are compared to."""

    name: str
    time: int
    allocated_bytes: int
    allocated_objects: int
    zap_time: int = 0
    zap_allocated_bytes: int = 0
    zap_allocated_objects: int = 0

    def __str__(self) -> str:
        return (
            f"| {self.name} | {self.time} ns/op | "
            f"{_percent(self.time, self.zap_time)} | {self.allocated_objects} allocs/op"
        )

    def sort_key(self) -> tuple[bool, int]:
        """Zap rows first, then by time."""
        return ("zap" not in self.name, self.time)


def find_unique_substring(lines: Sequence[str], substring: str) -> str:
    """Return the one line holding ``substring``, or "" if none does."""
    found = ""
    for line in lines:
        if substring in line:
            if found:
                raise ValueError(f"input has duplicate substring {substring}")
            found = line
    return found


def _strip_suffix(text: str, suffix: str) -> str:
    return text[: -len(suffix)] if suffix and text.endswith(suffix) else text


def parse_benchmark_row(
    lines: Sequence[str],
    benchmark_name: str,
    library_name: str,
    baseline: BenchmarkRow | None,
) -> BenchmarkRow | None:
    """Parse one library's result line; None if the output has no such line."""
    line = find_unique_substring(lines, f"{benchmark_name}/{library_name}-")
    if not line:
        return None
    columns = line.split("\t")
    if len(columns) < 5:
        raise ValueError(f"unknown benchmark line: {line}")
    duration = parse_duration(
        _strip_suffix(columns[2].strip(), "/op").replace(" ", "")
    )
    allocated_bytes = _parse_int(_strip_suffix(columns[3].strip(), " B/op"))
    allocated_objects = _parse_int(_strip_suffix(columns[4].strip(), " allocs/op"))
    row = BenchmarkRow(
        name=LIBRARY_NAME_TO_MARKDOWN_NAME.get(library_name, ""),
        time=duration,
        allocated_bytes=allocated_bytes,
        allocated_objects=allocated_objects,
    )
    if baseline is not None:
        row.zap_time = baseline.time
        row.zap_allocated_bytes = baseline.allocated_bytes
        row.zap_allocated_objects = baseline.allocated_objects
    return row


def benchmark_table(lines: Sequence[str], benchmark_name: str) -> str:
    """Render a Markdown table of every library found in the output."""
    baseline = parse_benchmark_row(lines, benchmark_name, "Zap", None)
    rows = [
        row
        for library in LIBRARY_NAME_TO_MARKDOWN_NAME
        if (row := parse_benchmark_row(lines, benchmark_name, library, baseline))
        is not None
    ]
    rows.sort(key=BenchmarkRow.sort_key)
    return "\n".join([*TABLE_HEADER, *(str(row) for row in rows)])


def get_benchmark_output(benchmark_name: str) -> list[str]:
    """Run the named benchmark in ``benchmarks`` and return its output lines."""
    command = ["go", "test", f"-bench={benchmark_name}", "-benchmem"]
    try:
        result = subprocess.run(
            command,
            cwd="benchmarks",
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except OSError as exc:
        raise RuntimeError(
            f"error running 'go test -bench=\"{benchmark_name}\"': {exc}\n"
        ) from exc
    output = result.stdout or ""
    if result.returncode != 0:
        raise RuntimeError(
            f"error running 'go test -bench=\"{benchmark_name}\"': "
            f"exit status {result.returncode}\n{output}"
        )
    return output.split("\n")


def render_template(template: str, data: Mapping[str, str]) -> str:
    """Replace each ``{{ .Field }}`` with ``data["Field"]``."""

    def substitute(match: re.Match[str]) -> str:
        action = _FIELD_ACTION.fullmatch(match.group(1))
        if action is None:
            raise ValueError(f"unsupported template action: {match.group(0)}")
        name = action.group(1)
        if name not in data:
            raise ValueError(f"can't evaluate field {name}")
        return str(data[name])

    return _ACTION.sub(substitute, template)


def _template_data(
    run: Callable[[str], list[str]] = get_benchmark_output,
) -> dict[str, str]:
    return {name: benchmark_table(run(name), name) for name in TEMPLATE_FIELDS}


def main(argv: Sequence[str] | None = None) -> int:
    """Read a template on stdin and write it filled with benchmark tables."""
    parser = argparse.ArgumentParser(
        description="Fill a README template with benchmark tables."
    )
    parser.parse_args(argv)
    try:
        data = _template_data()
        template = sys.stdin.read()
        sys.stdout.write(render_template(template, data))
    except (OSError, ValueError, RuntimeError) as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())