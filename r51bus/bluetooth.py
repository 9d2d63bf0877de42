"""Bus node that reports and controls a BLE connection."""

from __future__ import annotations

from typing import Protocol

from r51bus.messages import BluetoothEvent, Event, SubSystem, is_request


class BLEDevice(Protocol):
    def disconnect(self) -> None: ...

    def forget(self) -> None: ...


class BLENode:
    """Tracks the BLE connection state and forwards commands to the device."""

    def __init__(self, ble: BLEDevice) -> None:
        self._ble = ble
        self._event = Event(SubSystem.BLUETOOTH, BluetoothEvent.STATE, [0x00])
        self._emit = False

    def handle(self, msg: object) -> list[Event]:
        """Handle a bus message and return the messages to send in reply."""
        if not isinstance(msg, Event):
            return []
        out: list[Event] = []
        if msg.subsystem == SubSystem.CONTROLLER:
            if is_request(msg, SubSystem.BLUETOOTH, BluetoothEvent.STATE):
                out.append(self._event.copy())
                self._emit = False
        elif msg.subsystem == SubSystem.BLUETOOTH:
            if msg.id == BluetoothEvent.DISCONNECT_CMD:
                self._ble.disconnect()
            elif msg.id == BluetoothEvent.FORGET_CMD:
                self._ble.forget()
        return out

    def emit(self) -> list[Event]:
        """Return the state event if it changed since last sent."""
        if not self._emit:
            return []
        self._emit = False
        return [self._event.copy()]

    def on_connect(self) -> None:
        if self._event.data[0] != 0x01:
            self._event.data[0] = 0x01
            self._emit = True

    def on_disconnect(self) -> None:
        if self._event.data[0] != 0x00:
            self._event.data[0] = 0x00
            self._emit = True