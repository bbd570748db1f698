import pytest

from zaplog.spies import Buffer, Discarder, FailWriter, ShortWriter, Syncer


def test_syncer_records_calls():
    syncer = Syncer()
    assert syncer.called() is False
    syncer.sync()
    assert syncer.called() is True


def test_syncer_raises_configured_error():
    syncer = Syncer()
    err = RuntimeError("fail")
    syncer.set_error(err)
    with pytest.raises(RuntimeError) as info:
        syncer.sync()
    assert info.value is err
    assert syncer.called() is True


def test_discarder_reports_full_length():
    data = b"some bytes"
    assert Discarder().write(data) == len(data)


def test_fail_writer_fails():
    with pytest.raises(OSError) as info:
        FailWriter().write(b"foo")
    assert "failed" in str(info.value)


def test_short_writer_drops_last_byte():
    data = b"abcdef"
    assert ShortWriter().write(data) == len(data) - 1


def test_buffer_round_trip_and_lines():
    buf = Buffer()
    assert buf.write(b"foo\n") == 4
    buf.write(b"bar\n")
    assert buf.getvalue() == "foo\nbar\n"
    assert buf.lines() == ["foo", "bar"]
    assert buf.stripped() == "foo\nbar"


def test_buffer_lines_ignores_unterminated_tail():
    buf = Buffer()
    buf.write(b"one\ntwo")
    assert buf.lines() == ["one"]
    assert buf.stripped() == "one\ntwo"


def test_buffer_sync_spies():
    buf = Buffer()
    buf.sync()
    assert buf.called() is True