"""Console commands for events, CAN frames, J1939 messages and the scratch buffer."""

from __future__ import annotations

import string
from dataclasses import dataclass, field

from r51bus.console import (
    Command,
    Console,
    FilterMode,
    Message,
    NotEnoughArgumentsCommand,
    NotFoundCommand,
    TooManyArgumentsCommand,
)
from r51bus.messages import EVENT_DATA_SIZE, CANFrame, Event, J1939Message

SCRATCH_CAPACITY = 256
_ULONG_MAX = 0xFFFFFFFF


def _strtoul(text: str) -> int:
    """Parse a leading hex number the lenient way: junk parses as 0."""
    s = text.lstrip(" \t\n\r\f\v")
    negative = False
    if s and s[0] in "+-":
        negative = s[0] == "-"
        s = s[1:]
    if s[:2].lower() == "0x" and len(s) > 2 and s[2] in string.hexdigits:
        s = s[2:]
    end = 0
    while end < len(s) and s[end] in string.hexdigits:
        end += 1
    value = min(int(s[:end], 16), _ULONG_MAX) if end else 0
    if negative:
        value = -value
    return value & _ULONG_MAX


def _parse_hex_bytes(text: str, limit: int | None = None) -> list[int]:
    """Split hex data into bytes, either colon separated or two digits each."""
    out: list[int] = []
    begin = 0
    count = 0
    for i in range(len(text) + 1):
        ch = text[i] if i < len(text) else ""
        if count == 2 or ch in (":", ""):
            out.append(_strtoul(text[begin:i]) & 0xFF)
            if limit is not None and len(out) == limit:
                break
            if ch == ":":
                begin = i + 1
                count = 0
            else:
                begin = i
                count = 1
        else:
            count += 1
    return out


def parse_event(text: str) -> Event:
    """Parse an event written as SS:ID#DD:DD:... ; missing data is 0xFF."""
    if len(text) < 5 or text[2] != ":" or (len(text) > 5 and text[5] != "#"):
        raise ValueError(f"invalid event format: {text!r}")
    subsystem = _strtoul(text[0:2]) & 0xFF
    event_id = _strtoul(text[3:5]) & 0xFF
    data = _parse_hex_bytes(text[6:], EVENT_DATA_SIZE) if len(text) > 5 else []
    return Event(subsystem, event_id, data)


def parse_can_frame(text: str) -> CANFrame:
    """Parse a frame written as [+|-]ID#DD:DD:... ; + forces extended ids."""
    prefix = text[0] if text and text[0] in "+-" else ""
    id_text, _, data_text = text[len(prefix):].partition("#")
    frame_id = _strtoul(id_text)
    if frame_id == 0:
        raise ValueError(f"invalid CAN frame format: {text!r}")
    if prefix == "+":
        ext = True
    elif prefix == "-":
        ext = False
    else:
        ext = frame_id > 0x7FF
    data = _parse_hex_bytes(data_text)
    if len(data) > 8:
        raise ValueError(f"invalid CAN frame format: {text!r}")
    return CANFrame(frame_id, bytearray(data), ext)


def parse_j1939_message(text: str) -> J1939Message:
    """Parse a J1939 message written as ID#DD:DD:... with a 29-bit id."""
    id_text, _, data_text = text.partition("#")
    frame_id = _strtoul(id_text)
    if frame_id == 0:
        raise ValueError(f"invalid J1939 message format: {text!r}")
    return J1939Message.from_id(frame_id, bytearray(_parse_hex_bytes(data_text)))


class _LeafCommand(Command):
    """A command that takes no further arguments."""

    def next(self, arg: str) -> Command:
        return TooManyArgumentsCommand()


class _ForwardCommand(NotEnoughArgumentsCommand):
    """A command whose single argument is handed to another command."""

    def __init__(self, target: Command) -> None:
        self._target = target

    def next(self, arg: str) -> Command:
        return self._target


class _SubCommands(NotEnoughArgumentsCommand):
    """A command that dispatches its argument by name."""

    def __init__(self, commands: dict[str, Command]) -> None:
        self._commands = commands

    def next(self, arg: str) -> Command:
        return self._commands.get(arg) or NotFoundCommand()


class EventSendCommand(_LeafCommand):
    """Send a fixed event."""

    def __init__(self, event: Event) -> None:
        self._event = event.copy()

    def run(self, console: Console, arg: str) -> list[Message]:
        return [self._event.copy()]


class EventSendRunCommand(_LeafCommand):
    """Parse the argument as an event and send it."""

    def run(self, console: Console, arg: str) -> list[Message]:
        try:
            event = parse_event(arg)
        except ValueError:
            console.println("console: invalid event format")
            return []
        console.println(f"console: send event {event}")
        return [event]


class EventReadCommand(_ForwardCommand):
    def __init__(self) -> None:
        super().__init__(EventSendRunCommand())


class EventMuteCommand(_LeafCommand):
    def run(self, console: Console, arg: str) -> list[Message]:
        console.event_mute = True
        return []


class EventUnmuteCommand(_LeafCommand):
    def run(self, console: Console, arg: str) -> list[Message]:
        console.event_mute = False
        return []


class EventCommand(_SubCommands):
    def __init__(self) -> None:
        super().__init__({
            "send": EventReadCommand(),
            "mute": EventMuteCommand(),
            "unmute": EventUnmuteCommand(),
        })

    def next(self, arg: str) -> Command:
        return super().next(arg)


class CANSendRunCommand(_LeafCommand):
    """Parse the argument as a CAN frame and send it."""

    def run(self, console: Console, arg: str) -> list[Message]:
        try:
            frame = parse_can_frame(arg)
        except ValueError:
            console.println("console: invalid CAN frame format")
            return []
        console.println(f"console: send frame {frame}")
        return [frame]


class CANSendCommand(_ForwardCommand):
    def __init__(self) -> None:
        super().__init__(CANSendRunCommand())


class _CANFilterRunCommand(_LeafCommand):
    _mode: FilterMode

    def run(self, console: Console, arg: str) -> list[Message]:
        if arg == "all":
            console.can_filter.mode = self._mode
            return []
        frame_id = _strtoul(arg)
        if frame_id == 0:
            console.println("invalid frame id")
        elif self._mode is FilterMode.ALLOW:
            console.can_filter.allow(frame_id)
        else:
            console.can_filter.drop(frame_id)
        return []


class CANFilterAllowRunCommand(_CANFilterRunCommand):
    """Allow one frame id, or every frame with "all"."""

    _mode = FilterMode.ALLOW

    def run(self, console: Console, arg: str) -> list[Message]:
        return super().run(console, arg)


class CANFilterDropRunCommand(_CANFilterRunCommand):
    """Drop one frame id, or every frame with "all"."""

    _mode = FilterMode.DROP

    def run(self, console: Console, arg: str) -> list[Message]:
        return super().run(console, arg)


class CANFilterCommand(_SubCommands):
    def __init__(self) -> None:
        super().__init__({
            "allow": _ForwardCommand(CANFilterAllowRunCommand()),
            "drop": _ForwardCommand(CANFilterDropRunCommand()),
        })


class CANCommand(_SubCommands):
    def __init__(self) -> None:
        super().__init__({"send": CANSendCommand(), "filter": CANFilterCommand()})

    def next(self, arg: str) -> Command:
        return super().next(arg)


class J1939SendRunCommand(_LeafCommand):
    """Parse the argument as a J1939 message and send it."""

    def run(self, console: Console, arg: str) -> list[Message]:
        try:
            msg = parse_j1939_message(arg)
        except ValueError:
            console.println("console: invalid J1939 msessage format")
            return []
        console.println(f"console: send message {msg}")
        return [msg]


class J1939SendCommand(_ForwardCommand):
    def __init__(self) -> None:
        super().__init__(J1939SendRunCommand())


class J1939MuteCommand(_LeafCommand):
    def run(self, console: Console, arg: str) -> list[Message]:
        console.j1939_mute = True
        return []


class J1939UnmuteCommand(_LeafCommand):
    def run(self, console: Console, arg: str) -> list[Message]:
        console.j1939_mute = False
        return []


class J1939Command(_SubCommands):
    def __init__(self) -> None:
        super().__init__({
            "send": J1939SendCommand(),
            "mute": J1939MuteCommand(),
            "unmute": J1939UnmuteCommand(),
        })

    def next(self, arg: str) -> Command:
        return super().next(arg)


@dataclass
class Scratch:
    """A NUL-terminated byte buffer with a fixed capacity."""

    capacity: int = SCRATCH_CAPACITY
    data: bytearray = field(default_factory=bytearray)

    @property
    def size(self) -> int:
        return len(self.data)

    def clear(self) -> None:
        self.data.clear()


class ScratchSetCommand(_LeafCommand):
    """Store the argument in the scratch buffer."""

    def __init__(self, scratch: Scratch) -> None:
        self._scratch = scratch

    def run(self, console: Console, arg: str) -> list[Message]:
        raw = arg.encode("latin-1", errors="replace")
        if len(raw) + 1 > self._scratch.capacity:
            console.println("console: scratch buffer overflow")
            return []
        self._scratch.data = bytearray(raw) + b"\x00"
        return []


class ScratchCommand(_ForwardCommand):
    """Take the rest of the line as the scratch buffer contents."""

    def __init__(self, scratch: Scratch) -> None:
        super().__init__(ScratchSetCommand(scratch))

    def next(self, arg: str) -> Command:
        return super().next(arg)

    def line(self) -> bool:
        return True