"""A bus node that prints messages in readable form and reads commands from text."""

from __future__ import annotations

from typing import TextIO

from r51bus.console import Command, Console, Message
from r51bus.messages import (
    BCMEvent,
    BluetoothEvent,
    CANFrame,
    ClimateEvent,
    Event,
    IPDMEvent,
    J1939Claim,
    J1939Message,
    KeypadEvent,
    PowerEvent,
    PowerMode,
    SubSystem,
)
from r51bus.reader import Reader, ReadResult
from r51bus.root import RootCommand

_BUFFER_SIZE = 256

_CLIMATE_MODES = {0x00: "off", 0x01: "auto", 0x02: "manual", 0x03: "defog"}
_UNITS_METRIC = 0x01

# Indexed by a bool: False -> "off", True -> "on".
_ON_OFF = ("off", "on")
# Indexed by a bool: False -> disconnected, True -> connected.
_CONNECTION = ("disconnect", "connect")


def _bit(data: bytearray, index: int, bit: int) -> bool:
    return bool((data[index] >> bit) & 1)


def _signed(value: int) -> int:
    return value - 0x100 if value >= 0x80 else value


def _power_state(event: Event) -> str:
    pdm, pin, mode = event.data[0], event.data[1], event.data[2]
    if mode == PowerMode.OFF:
        state = "off"
    elif mode == PowerMode.ON:
        state = "on"
    elif mode == PowerMode.PWM:
        state = f"pwm {event.data[3]}"
    elif mode == PowerMode.FAULT:
        state = "fault"
    else:
        state = ""
    return f"pdm {pdm} output {pin} {state}"


def _input_state(event: Event) -> str:
    return f"pdm {event.data[0]} input {event.data[1]} {_ON_OFF[bool(event.data[2])]}"


def _key_state(event: Event) -> str:
    action = "press" if event.data[2] else "release"
    return f"keypad {event.data[0]} {action} {event.data[1]}"


def _encoder_state(event: Event) -> str:
    return (f"keypad {event.data[0]} encoder {event.data[1]} "
            f"delta {_signed(event.data[2])}")


def _climate_system(event: Event) -> str:
    mode = _CLIMATE_MODES.get(event.data[0], "")
    return (f"climate {mode}, ac {_ON_OFF[_bit(event.data, 1, 0)]}, "
            f"dual {_ON_OFF[_bit(event.data, 1, 1)]}")


def _climate_airflow(event: Event) -> str:
    parts = [f"climate fan {event.data[0]}"]
    for bit, name in enumerate(("face", "feet", "windshield", "recirculate")):
        if _bit(event.data, 1, bit):
            parts.append(name)
    return " ".join(parts)


def _climate_temp(event: Event) -> str:
    unit = "C" if event.data[3] == _UNITS_METRIC else "F"
    return (f"climate driver temp {event.data[0]}{unit}, "
            f"passenger temp {event.data[1]}{unit}, "
            f"outside temp {event.data[2]}{unit}")


def _illum(event: Event) -> str:
    return f"dash illumination {_ON_OFF[bool(event.data[0])]}"


def _tire_pressure(event: Event) -> str:
    return "tire pressure " + " ".join(str(b) for b in event.data[:4])


def _ipdm_power(event: Event) -> str:
    names = (
        (0, "high beams"),
        (1, "low beams"),
        (2, "running lights"),
        (3, "fog lights"),
        (6, "defrost"),
        (7, "a/c comp"),
    )
    return "ipdm " + ", ".join(
        f"{name} {_ON_OFF[_bit(event.data, 0, bit)]}" for bit, name in names)


def _bluetooth(event: Event) -> str:
    connected = event.data[0] != 0x00
    state = _CONNECTION[connected]
    return f"bluetooth {state}"


_DESCRIBERS = {
    (SubSystem.POWER, PowerEvent.POWER_STATE): _power_state,
    (SubSystem.POWER, PowerEvent.INPUT_STATE): _input_state,
    (SubSystem.KEYPAD, KeypadEvent.KEY_STATE): _key_state,
    (SubSystem.KEYPAD, KeypadEvent.ENCODER_STATE): _encoder_state,
    (SubSystem.CLIMATE, ClimateEvent.SYSTEM_STATE): _climate_system,
    (SubSystem.CLIMATE, ClimateEvent.AIRFLOW_STATE): _climate_airflow,
    (SubSystem.CLIMATE, ClimateEvent.TEMP_STATE): _climate_temp,
    (SubSystem.BCM, BCMEvent.ILLUM_STATE): _illum,
    (SubSystem.BCM, BCMEvent.TIRE_PRESSURE_STATE): _tire_pressure,
    (SubSystem.IPDM, IPDMEvent.POWER_STATE): _ipdm_power,
    (SubSystem.BLUETOOTH, BluetoothEvent.STATE): _bluetooth,
}


def describe_event(event: Event) -> str:
    """Return a readable summary of a known state event, or "" if unknown."""
    describer = _DESCRIBERS.get((event.subsystem, event.id))
    return describer(event) if describer else ""


class ConsoleNode:
    """Print bus messages to a stream and turn typed commands into messages."""

    def __init__(self, stream: TextIO | None = None, mute: bool = True) -> None:
        self._console = Console(stream, mute)
        self._reader = Reader(_BUFFER_SIZE)
        self._root = RootCommand()
        self._command: Command = self._root

    @property
    def console(self) -> Console:
        return self._console

    def feed(self, data: str | bytes) -> None:
        """Queue typed input to be processed by the next ``emit``."""
        self._reader.feed(data)

    def emit(self) -> list[Message]:
        """Process queued input and return the messages the commands send."""
        out: list[Message] = []
        while self._reader.available():
            if self._command.line():
                result, token = self._reader.line()
            else:
                result, token = self._reader.word()
            if result is ReadResult.EOW:
                self._command = self._command.next(token)
            elif result is ReadResult.EOL:
                command = self._command.next(token)
                out.extend(command.run(self._console, token))
                self._command = self._root
            elif result is ReadResult.OVERRUN:
                self._command = self._root
        return out

    def handle(self, msg: object) -> list[Message]:
        """Write a bus message to the stream unless it is muted or filtered."""
        console = self._console
        if isinstance(msg, Event):
            if not console.event_mute:
                detail = describe_event(msg)
                suffix = f" ({detail})" if detail else ""
                console.println(f"console: event recv {msg}{suffix}")
        elif isinstance(msg, CANFrame):
            if console.can_filter.match(msg):
                console.println(f"console: can recv {msg}")
        elif isinstance(msg, J1939Claim):
            if not console.j1939_mute:
                console.println(f"console: j1939 claim 0x{msg.address:02X}")
        elif isinstance(msg, J1939Message):
            if not console.j1939_mute:
                console.println(f"console: j1939 recv {msg}")
        return []