"""Bus message types, subsystem identifiers and clocks shared by the nodes."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import IntEnum

NULL_ADDRESS = 0xFE
EVENT_DATA_SIZE = 6


class SubSystem(IntEnum):
    CONTROLLER = 0x00
    ECM = 0x01
    IPDM = 0x02
    BCM = 0x03
    CLIMATE = 0x04
    SETTINGS = 0x05
    KEYPAD = 0x06
    POWER = 0x07
    AUDIO = 0x08
    BLUETOOTH = 0x09
    SCREEN = 0x0A


class ControllerEvent(IntEnum):
    REQUEST_CMD = 0x01


class PowerEvent(IntEnum):
    POWER_STATE = 0x00
    INPUT_STATE = 0x01
    POWER_CMD = 0x10


class PowerMode(IntEnum):
    OFF = 0x00
    ON = 0x01
    PWM = 0x02
    FAULT = 0x03


class PowerCmd(IntEnum):
    OFF = 0x00
    ON = 0x01
    TOGGLE = 0x02
    RESET = 0x03
    PWM = 0x04


class KeypadEvent(IntEnum):
    KEY_STATE = 0x00
    ENCODER_STATE = 0x01
    INDICATOR_CMD = 0x10
    BRIGHTNESS_CMD = 0x11
    BACKLIGHT_CMD = 0x12


class LEDMode(IntEnum):
    OFF = 0x00
    ON = 0x01
    BLINK = 0x02
    ALT_BLINK = 0x03


class LEDColor(IntEnum):
    BLACK = 0x00
    WHITE = 0x01
    RED = 0x02
    GREEN = 0x03
    BLUE = 0x04
    CYAN = 0x05
    YELLOW = 0x06
    MAGENTA = 0x07
    AMBER = 0x08
    NONE = 0xFF


class ClimateEvent(IntEnum):
    SYSTEM_STATE = 0x00
    AIRFLOW_STATE = 0x01
    TEMP_STATE = 0x02
    TURN_OFF_CMD = 0x10
    TOGGLE_AUTO_CMD = 0x11
    TOGGLE_AC_CMD = 0x12
    TOGGLE_DUAL_CMD = 0x13
    TOGGLE_RECIRCULATE_CMD = 0x14
    CYCLE_AIRFLOW_MODE_CMD = 0x15
    TOGGLE_DEFOG_CMD = 0x16
    INC_FAN_SPEED_CMD = 0x17
    DEC_FAN_SPEED_CMD = 0x18
    INC_DRIVER_TEMP_CMD = 0x19
    DEC_DRIVER_TEMP_CMD = 0x1A
    INC_PASSENGER_TEMP_CMD = 0x1B
    DEC_PASSENGER_TEMP_CMD = 0x1C


class BCMEvent(IntEnum):
    ILLUM_STATE = 0x00
    TIRE_PRESSURE_STATE = 0x01
    TOGGLE_DEFROST_CMD = 0x10


class IPDMEvent(IntEnum):
    POWER_STATE = 0x00


class BluetoothEvent(IntEnum):
    STATE = 0x00
    DISCONNECT_CMD = 0x10
    FORGET_CMD = 0x11


def _hex_bytes(data: bytes | bytearray) -> str:
    return ":".join(f"{b:02X}" for b in data)


@dataclass
class Event:
    """An internal bus event: subsystem, id and six data bytes padded with 0xFF."""

    subsystem: int
    id: int
    data: bytearray = field(default_factory=bytearray)

    def __post_init__(self) -> None:
        self.subsystem = int(self.subsystem)
        self.id = int(self.id)
        raw = bytearray(int(b) for b in self.data)
        if len(raw) > EVENT_DATA_SIZE:
            raise ValueError(f"event data holds at most {EVENT_DATA_SIZE} bytes")
        raw.extend(b"\xff" * (EVENT_DATA_SIZE - len(raw)))
        self.data = raw

    def matches(self, subsystem: int, id: int) -> bool:
        """Return True if this event has the given subsystem and id."""
        return self.subsystem == int(subsystem) and self.id == int(id)

    def copy(self) -> Event:
        return Event(self.subsystem, self.id, bytearray(self.data))

    def __str__(self) -> str:
        return f"{self.subsystem:02X}:{self.id:02X}#{_hex_bytes(self.data)}"


def is_request(event: Event, subsystem: int, id: int) -> bool:
    """Return True if the event is a controller request for the given state."""
    if not event.matches(SubSystem.CONTROLLER, ControllerEvent.REQUEST_CMD):
        return False
    return event.data[0] == int(subsystem) and event.data[1] in (int(id), 0xFF)


@dataclass
class J1939Message:
    """A J1939 message. PDU1 PGNs carry the destination address separately."""

    pgn: int
    source_address: int = NULL_ADDRESS
    dest_address: int = 0xFF
    priority: int = 6
    data: bytearray = field(default_factory=bytearray)

    def __post_init__(self) -> None:
        self.data = bytearray(self.data)
        self.pgn &= 0x3FFFF
        if self._pdu1:
            self.pgn &= 0x3FF00

    @property
    def _pdu1(self) -> bool:
        return ((self.pgn >> 8) & 0xFF) < 0xF0

    @property
    def id(self) -> int:
        """The 29-bit CAN identifier of the message."""
        value = ((self.priority & 0x07) << 26) | (self.pgn << 8) | (self.source_address & 0xFF)
        if self._pdu1:
            value |= (self.dest_address & 0xFF) << 8
        return value

    @classmethod
    def from_id(cls, frame_id: int, data: bytes | bytearray = b"") -> J1939Message:
        """Build a message from a 29-bit CAN identifier."""
        pgn = (frame_id >> 8) & 0x3FFFF
        dest = 0xFF
        if ((pgn >> 8) & 0xFF) < 0xF0:
            dest = pgn & 0xFF
        return cls(pgn, frame_id & 0xFF, dest, (frame_id >> 26) & 0x07, bytearray(data))

    def copy(self) -> J1939Message:
        return J1939Message(self.pgn, self.source_address, self.dest_address,
                            self.priority, bytearray(self.data))

    def __str__(self) -> str:
        return f"{self.id:08X}#{_hex_bytes(self.data)}"


@dataclass
class CANFrame:
    """A CAN 2.0 frame with standard or extended identifier."""

    id: int
    data: bytearray = field(default_factory=bytearray)
    ext: bool = False

    def __post_init__(self) -> None:
        self.data = bytearray(self.data)
        if len(self.data) > 8:
            raise ValueError("CAN frame data holds at most 8 bytes")

    def __str__(self) -> str:
        frame_id = f"{self.id:08X}" if self.ext else f"{self.id:03X}"
        return f"{frame_id}#{_hex_bytes(self.data)}"


@dataclass(frozen=True)
class J1939Claim:
    """Notification that an address was claimed on the J1939 bus."""

    address: int


class Clock:
    """Millisecond clock that wraps at 32 bits."""

    def millis(self) -> int:
        return int(time.monotonic() * 1000) & 0xFFFFFFFF


class FakeClock(Clock):
    """A clock whose time is set by hand."""

    def __init__(self, millis: int = 0) -> None:
        self._millis = millis & 0xFFFFFFFF

    def millis(self) -> int:
        return self._millis

    def set(self, millis: int) -> None:
        self._millis = millis & 0xFFFFFFFF

    def advance(self, millis: int) -> None:
        self._millis = (self._millis + millis) & 0xFFFFFFFF