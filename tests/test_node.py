import io

import pytest

from r51bus.messages import (
    BluetoothEvent,
    CANFrame,
    ClimateEvent,
    Event,
    IPDMEvent,
    J1939Claim,
    J1939Message,
    KeypadEvent,
    SubSystem,
    BCMEvent,
)
from r51bus.node import ConsoleNode, describe_event


def make_node(mute=True):
    stream = io.StringIO()
    return ConsoleNode(stream, mute=mute), stream


def test_event_send_command():
    node, stream = make_node()
    node.feed("event send 05:10#01\n")
    out = node.emit()
    assert out == [Event(0x05, 0x10, [0x01])]
    assert stream.getvalue() == "console: send event 05:10#01:FF:FF:FF:FF:FF\r\n"


def test_climate_command_sends_event():
    node, _ = make_node()
    node.feed("climate off\n")
    assert node.emit() == [Event(SubSystem.CLIMATE, ClimateEvent.TURN_OFF_CMD)]


def test_command_split_across_feeds():
    node, _ = make_node()
    node.feed("climate")
    assert node.emit() == []
    node.feed(" fan inc\n")
    assert node.emit() == [Event(SubSystem.CLIMATE, ClimateEvent.INC_FAN_SPEED_CMD)]


@pytest.mark.parametrize("line, message", [
    ("foo\n", "console: command not found\r\n"),
    ("climate\n", "console: not enough arguments\r\n"),
    ("climate off extra\n", "console: too many arguments\r\n"),
])
def test_command_errors(line, message):
    node, stream = make_node()
    node.feed(line)
    assert node.emit() == []
    assert stream.getvalue() == message


def test_state_returns_to_root_after_line():
    node, _ = make_node()
    node.feed("foo\nclimate off\n")
    assert node.emit() == [Event(SubSystem.CLIMATE, ClimateEvent.TURN_OFF_CMD)]


def test_event_mute_commands():
    node, _ = make_node(mute=False)
    node.feed("event mute\n")
    node.emit()
    assert node.console.event_mute is True
    node.feed("event unmute\n")
    node.emit()
    assert node.console.event_mute is False


def test_handle_muted_prints_nothing():
    node, stream = make_node(mute=True)
    node.handle(Event(SubSystem.BLUETOOTH, BluetoothEvent.STATE, [0x01]))
    node.handle(J1939Claim(0x0A))
    node.handle(CANFrame(0x123, bytearray([1, 2])))
    assert stream.getvalue() == ""


def test_handle_event_with_description():
    node, stream = make_node(mute=False)
    node.handle(Event(SubSystem.BLUETOOTH, BluetoothEvent.STATE, [0x01]))
    assert stream.getvalue() == "console: event recv 09:00#01:FF:FF:FF:FF:FF (bluetooth connect)\r\n"


def test_handle_unknown_event_has_no_description():
    node, stream = make_node(mute=False)
    event = Event(0x30, 0x40)
    node.handle(event)
    assert stream.getvalue() == f"console: event recv {event}\r\n"


def test_handle_claim_pads_address():
    node, stream = make_node(mute=False)
    node.handle(J1939Claim(0x0A))
    node.handle(J1939Claim(0x21))
    assert stream.getvalue() == "console: j1939 claim 0x0A\r\nconsole: j1939 claim 0x21\r\n"


def test_handle_can_frame_unmuted():
    node, stream = make_node(mute=False)
    frame = CANFrame(0x123, bytearray([1, 2]))
    node.handle(frame)
    assert stream.getvalue() == f"console: can recv {frame}\r\n"


def test_handle_j1939_message():
    node, stream = make_node(mute=False)
    msg = J1939Message(0xEF00, 0x21, 0x0A, 6, bytearray([1]))
    node.handle(msg)
    assert stream.getvalue() == f"console: j1939 recv {msg}\r\n"


def test_describe_ipdm():
    event = Event(SubSystem.IPDM, IPDMEvent.POWER_STATE, [0b01000001])
    assert describe_event(event) == (
        "ipdm high beams on, low beams off, running lights off, "
        "fog lights off, defrost on, a/c comp off")


def test_describe_tire_pressure():
    event = Event(SubSystem.BCM, BCMEvent.TIRE_PRESSURE_STATE, [1, 2, 3, 4])
    assert describe_event(event) == "tire pressure 1 2 3 4"


def test_describe_bluetooth_disconnect():
    event = Event(SubSystem.BLUETOOTH, BluetoothEvent.STATE, [0x00])
    assert describe_event(event) == "bluetooth disconnect"


def test_describe_key_press_and_release():
    pressed = describe_event(Event(SubSystem.KEYPAD, KeypadEvent.KEY_STATE, [1, 3, 1]))
    released = describe_event(Event(SubSystem.KEYPAD, KeypadEvent.KEY_STATE, [1, 3, 0]))
    assert "press" in pressed and "release" not in pressed
    assert "release" in released


def test_describe_unknown_event():
    assert describe_event(Event(0x30, 0x40)) == ""