from zaplog.color import Color


def test_color_formatting():
    assert Color.RED.add("foo") == "\x1b[31mfoo\x1b[0m"


def test_colors_run_from_black_to_white():
    assert Color.BLACK.add("x") == "\x1b[30mx\x1b[0m"
    assert Color.WHITE.add("x") == "\x1b[37mx\x1b[0m"


def test_add_wraps_text_unchanged():
    colored = Color.CYAN.add("hello")
    assert colored.startswith("\x1b[36m")
    assert colored.endswith("\x1b[0m")
    assert "hello" in colored