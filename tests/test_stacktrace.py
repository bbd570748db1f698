from traceback import FrameSummary

from zaplog.stacktrace import (
    StackDepth,
    StackFormatter,
    Stacktrace,
    capture_stacktrace,
    take_stacktrace,
)


def _frame(name, filename, line):
    return FrameSummary(filename, line, name, lookup_line=False)


def test_take_stacktrace():
    lines = take_stacktrace(0).split("\n")
    assert lines
    assert lines[0].endswith(".test_take_stacktrace")
    assert "test_stacktrace.py:" in lines[1]


def test_take_stacktrace_with_skip():
    lines = take_stacktrace(1).split("\n")
    assert lines
    assert "_pytest" in lines[0]


def test_take_stacktrace_with_skip_inner_func():
    def inner():
        return take_stacktrace(2)

    lines = inner().split("\n")
    assert lines
    assert "_pytest" in lines[0]


def test_take_stacktrace_deep_stack():
    depth = 500

    def recurse(n):
        if n > 0:
            return recurse(n - 1)
        return take_stacktrace(0)

    trace = recurse(depth)
    assert trace.count(".recurse\n") >= depth


def test_capture_first_frame_only():
    stack = capture_stacktrace(0, StackDepth.FIRST)
    assert stack.count() == 1
    frame, more = stack.next()
    assert frame.name.endswith(".test_capture_first_frame_only")
    assert more is False
    assert stack.count() == 1


def test_capture_too_deep_is_empty():
    stack = capture_stacktrace(10**6, StackDepth.FULL)
    assert stack.count() == 0
    frame, more = stack.next()
    assert more is False
    assert frame.name == ""


def test_stacktrace_next_reports_more():
    stack = Stacktrace([_frame("a", "a.py", 1), _frame("b", "b.py", 2)])
    first, more = stack.next()
    assert (first.name, more) == ("a", True)
    second, more = stack.next()
    assert (second.name, more) == ("b", False)
    assert stack.next()[1] is False


def test_format_frame():
    formatter = StackFormatter()
    formatter.format_frame(_frame("pkg.fn", "f.py", 12))
    assert formatter.getvalue() == "pkg.fn\n\tf.py:12"
    formatter.format_frame(_frame("pkg.gn", "g.py", 3))
    assert formatter.getvalue() == "pkg.fn\n\tf.py:12\npkg.gn\n\tg.py:3"


def test_format_stack_drops_outermost_frame():
    stack = Stacktrace(
        [_frame("a", "a.py", 1), _frame("b", "b.py", 2), _frame("main", "m.py", 3)]
    )
    formatter = StackFormatter()
    formatter.format_stack(stack)
    assert formatter.getvalue() == "a\n\ta.py:1\nb\n\tb.py:2"


def test_format_stack_after_first_frame_taken():
    stack = Stacktrace(
        [_frame("a", "a.py", 1), _frame("b", "b.py", 2), _frame("main", "m.py", 3)]
    )
    formatter = StackFormatter()
    frame, more = stack.next()
    formatter.format_frame(frame)
    if more:
        formatter.format_stack(stack)
    assert formatter.getvalue() == "a\n\ta.py:1\nb\n\tb.py:2"