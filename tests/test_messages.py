import pytest

from r51bus.messages import (
    BluetoothEvent,
    CANFrame,
    ControllerEvent,
    Event,
    FakeClock,
    J1939Message,
    SubSystem,
    is_request,
)


def test_event_pads_data_with_ff():
    event = Event(SubSystem.BLUETOOTH, BluetoothEvent.STATE, [0x00])
    assert event.data == bytearray([0x00, 0xFF, 0xFF, 0xFF, 0xFF, 0xFF])


def test_event_rejects_long_data():
    with pytest.raises(ValueError):
        Event(1, 2, [0] * 7)


def test_event_matches():
    event = Event(SubSystem.BLUETOOTH, BluetoothEvent.FORGET_CMD)
    assert event.matches(SubSystem.BLUETOOTH, BluetoothEvent.FORGET_CMD)
    assert not event.matches(SubSystem.BLUETOOTH, BluetoothEvent.STATE)


def test_event_str_holds_fields():
    event = Event(0x0A, 0x1B, [0x01, 0x02])
    head, data = str(event).split("#")
    assert [int(p, 16) for p in head.split(":")] == [0x0A, 0x1B]
    assert bytes(int(p, 16) for p in data.split(":")) == bytes(event.data)


def test_event_copy_is_independent():
    event = Event(1, 2, [3])
    other = event.copy()
    other.data[0] = 9
    assert event.data[0] == 3


def test_is_request():
    req = Event(SubSystem.CONTROLLER, ControllerEvent.REQUEST_CMD, [SubSystem.BLUETOOTH])
    assert is_request(req, SubSystem.BLUETOOTH, BluetoothEvent.STATE)
    assert not is_request(req, SubSystem.AUDIO, 0)
    specific = Event(SubSystem.CONTROLLER, ControllerEvent.REQUEST_CMD,
                     [SubSystem.BLUETOOTH, 0x05])
    assert is_request(specific, SubSystem.BLUETOOTH, 0x05)
    assert not is_request(specific, SubSystem.BLUETOOTH, 0x04)
    other = Event(SubSystem.BLUETOOTH, BluetoothEvent.STATE, [SubSystem.BLUETOOTH])
    assert not is_request(other, SubSystem.BLUETOOTH, BluetoothEvent.STATE)


def test_j1939_request_wire_format():
    msg = J1939Message(0xEAFF, 0x21, 0xFF, 0x06, [0x14, 0xF0, 0x01])
    assert str(msg) == "18EAFF21#14:F0:01"
    assert msg.pgn == 0xEA00


def test_j1939_round_trip_through_id():
    msg = J1939Message(0x1EF00, 0x21, 0x0A, 7, [1, 2, 3])
    back = J1939Message.from_id(msg.id, msg.data)
    assert back == msg


def test_j1939_pdu2_keeps_pgn():
    msg = J1939Message(0x1FF04, 0x0A)
    assert J1939Message.from_id(msg.id).pgn == 0x1FF04


def test_can_frame_str_round_trip():
    frame = CANFrame(0x5C5, [0x44, 0x01], False)
    head, data = str(frame).split("#")
    assert int(head, 16) == 0x5C5
    assert bytes(int(p, 16) for p in data.split(":")) == b"\x44\x01"


def test_can_frame_rejects_long_data():
    with pytest.raises(ValueError):
        CANFrame(1, bytes(9))


def test_fake_clock():
    clock = FakeClock()
    clock.set(100)
    clock.advance(50)
    assert clock.millis() == 150
    clock.set(0xFFFFFFFF)
    clock.advance(2)
    assert clock.millis() == 1