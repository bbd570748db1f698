# zaplog

Building blocks for leveled logging: levels, output destinations, buffered
writers, clocks, stack traces and a few test helpers. It has no
dependencies outside the standard library.

## What it does not do

There is no logger front end here. The package has no `Logger` class with
`info`/`error` methods, no field types, no encoders (JSON or console) and no
core that ties them together. It provides the pieces such a logger is built
from. Writing an entry is up to you: you call `write(bytes)` on a writer.

## Modules

- `zaplog.level`: the `Level` enum, with `DEBUG`, `INFO`, `WARN`, `ERROR`,
  `DPANIC`, `PANIC` and `FATAL`. `str(Level.WARN)` is `"warn"`.
  - `parse_level(text)` accepts lowercase or all-caps names. The empty string
    means `INFO`. Anything else raises `ValueError`.
  - `LevelEnablerFunc` wraps a predicate.
  - `AtomicLevel` is a thread-safe level. It has `level()`, `set_level()`,
    `enabled()`, `unmarshal_text()` and `marshal_text()`.
  - `parse_atomic_level(text)` builds an `AtomicLevel` from a name.
- `zaplog.sink`: a registry of sink factories keyed by URL scheme.
  - `register_sink(scheme, factory)` raises `ValueError` in three cases: the
    scheme is empty, the scheme is invalid, or the scheme is already
    registered. Schemes are normalized with `normalize_scheme`.
  - `new_sink(url)` opens a sink. A URL without a scheme is a file path. The
    built-in `file` scheme allows only an empty host or `localhost`. It
    rejects user info, ports, queries and fragments. The paths `stdout` and
    `stderr` write to the process streams.
  - An unknown scheme raises `SinkNotFoundError`.
  - `reset_sink_registry()` restores the built-in state.
  - `NopCloserSink` wraps a writer so that `close()` leaves it open.
- `zaplog.writer`:
  - `open_sinks(*urls)` opens every destination and returns
    `(writer, close)`. If any destination fails, it closes what was opened
    and raises `OSError` naming each failure.
  - `combine_write_syncers(*writers)` joins writers into one locked writer.
    With no writers, it returns one that discards.
- `zaplog.buffered`: `BufferedWriteSyncer(ws, size=0, flush_interval=0,
  clock=None)` collects writes in memory.
  - Defaults: `size` is 256 kB and `flush_interval` is 30 seconds. `clock` is
    the system clock.
  - It flushes when a write would not fit beside what is buffered. It also
    flushes on its ticker.
  - `sync()` flushes and syncs the wrapped writer.
  - `stop()` stops the timer and flushes. A second call does nothing.
  - It can also be used as a context manager.
- `zaplog.clock`: `SystemClock` (and `DEFAULT_CLOCK`) and `MockClock`.
  - `MockClock` starts at the Unix epoch. Time moves only when `add(delta)`
    is called, and each tick that falls due on the way is delivered.
  - `new_ticker(interval)` returns a `Ticker`, which has
    `get(timeout=None)` and `stop()`.
- `zaplog.stacktrace`:
  - `capture_stacktrace(skip, StackDepth.FIRST | StackDepth.FULL)` returns a
    `Stacktrace`, which has `count()` and `next()`.
  - `take_stacktrace(skip)` formats the stack as `function\n\tfile:line`
    entries.
  - `StackFormatter` does the formatting.
- `zaplog.color`: `Color` holds the ANSI foreground colours.
  `Color.RED.add("foo")` gives `"\x1b[31mfoo\x1b[0m"`.
- `zaplog.exit`: `exit()` ends the process with status 1.
  - `stub()` or `with_stub(func)` replaces that exit with a `StubbedExit`
    that records the call in `.exited`.
  - `StubbedExit` can also be used as a context manager.
- `zaplog.timeutil`:
  - `time_to_millis(datetime)` returns milliseconds since the epoch. Naive
    datetimes are taken as UTC.
  - `timeout(base)` and `sleep(base)` scale by a factor. The factor is set
    with `initialize(factor)` or the `TEST_TIMEOUT_SCALE` environment
    variable.
- `zaplog.spies`: writer doubles for tests.
  - `Syncer`, `Discarder`, `FailWriter` and `ShortWriter`.
  - `Buffer`, which has `getvalue()`, `lines()` and `stripped()`.

## Install

```
pip install zaplog
```

## Examples

Change the level at runtime:

```python
from zaplog.level import Level, parse_atomic_level

lvl = parse_atomic_level("warn")
lvl.enabled(Level.INFO)    # False
lvl.set_level(Level.DEBUG)
lvl.enabled(Level.INFO)    # True
```

Buffer writes to several destinations:

```python
from zaplog.buffered import BufferedWriteSyncer
from zaplog.writer import open_sinks

out, close = open_sinks("stdout", "/tmp/app.log")
buffered = BufferedWriteSyncer(out, size=4096)
buffered.write(b"hello\n")
buffered.stop()
close()
```

Drive a buffered writer with a mock clock:

```python
from datetime import timedelta
from zaplog.buffered import BufferedWriteSyncer
from zaplog.clock import MockClock
from zaplog.spies import Buffer

clock = MockClock()
sink = Buffer()
ws = BufferedWriteSyncer(sink, size=64, flush_interval=timedelta(microseconds=1), clock=clock)
ws.write(b"foo")
clock.add(timedelta(microseconds=10))
sink.getvalue()    # "foo"
ws.stop()
```

## Benchmark table command

`zaplog-readme` reads a template on standard input. The template refers to
three fields:

- `{{ .BenchmarkAddingFields }}`
- `{{ .BenchmarkAccumulatedContext }}`
- `{{ .BenchmarkWithoutFields }}`

For each field, the command runs `go test -bench=<name> -benchmem` in a
`benchmarks` directory under the current directory. It turns the output
into a Markdown table and writes the filled template to standard output.
It needs the `go` tool and that directory to be present. On any error it
prints the message to standard error and exits with status 1.

```
zaplog-readme < README.tmpl > README.out
```

The pieces can also be called on their own: `parse_duration`,
`find_unique_substring`, `parse_benchmark_row`, `benchmark_table` and
`render_template`, all in `zaplog.readme`.

## Tests

```
pip install zaplog[test]
pytest
```