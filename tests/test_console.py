import io

from r51bus.console import (
    Console,
    ErrorCommand,
    FilterMode,
    FrameIDFilter,
    NotEnoughArgumentsCommand,
    NotFoundCommand,
    TooManyArgumentsCommand,
)
from r51bus.messages import CANFrame


def make_console(mute=False):
    stream = io.StringIO()
    return Console(stream, mute), stream


def test_println_terminates_with_crlf():
    console, stream = make_console()
    console.print("a")
    console.println("b")
    assert stream.getvalue() == "ab\r\n"


def test_muted_console_drops_everything():
    console, _ = make_console(mute=True)
    assert console.event_mute is True
    assert console.j1939_mute is True
    assert console.can_filter.mode is FilterMode.DROP
    assert console.can_filter.match(CANFrame(0x123)) is False


def test_unmuted_console_allows_frames():
    console, _ = make_console(mute=False)
    assert console.event_mute is False
    assert console.can_filter.match(CANFrame(0x123)) is True


def test_allow_mode_with_dropped_id():
    f = FrameIDFilter()
    f.drop(0x100)
    assert f.match(CANFrame(0x100)) is False
    assert f.match(CANFrame(0x101)) is True
    f.allow(0x100)
    assert f.match(CANFrame(0x100)) is True


def test_drop_mode_with_allowed_id():
    f = FrameIDFilter(FilterMode.DROP)
    f.allow(0x200)
    assert f.match(0x200) is True
    assert f.match(0x201) is False
    f.drop(0x200)
    assert f.match(0x200) is False


def test_changing_mode_clears_exceptions():
    f = FrameIDFilter(FilterMode.DROP)
    f.allow(0x200)
    f.mode = FilterMode.ALLOW
    f.mode = FilterMode.DROP
    assert f.match(0x200) is False


def test_error_commands_swallow_arguments():
    for cmd in (NotFoundCommand(), NotEnoughArgumentsCommand(), TooManyArgumentsCommand()):
        assert isinstance(cmd, ErrorCommand)
        assert cmd.next("anything") is cmd
        assert cmd.line() is False


def test_error_messages():
    cases = [
        (NotFoundCommand(), "console: command not found\r\n"),
        (NotEnoughArgumentsCommand(), "console: not enough arguments\r\n"),
        (TooManyArgumentsCommand(), "console: too many arguments\r\n"),
    ]
    for cmd, expected in cases:
        console, stream = make_console()
        assert cmd.run(console, "x") == []
        assert stream.getvalue() == expected