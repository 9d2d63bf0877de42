"""Base for control nodes that build command events, and button helpers."""

from __future__ import annotations

from r51bus.messages import (
    Clock,
    ControllerEvent,
    Event,
    KeypadEvent,
    PowerEvent,
    SubSystem,
)

_NO_PAYLOAD = 0xFF


class Controls:
    """Builds the command events sent by control nodes."""

    def send_cmd(self, subsystem: int, cmd: int, payload: int | None = None) -> Event:
        """Return a command event with an optional one-byte payload."""
        first = _NO_PAYLOAD if payload is None else int(payload)
        return Event(subsystem, cmd, [first, 0xFF, 0xFF])

    def send_power_cmd(self, pdm: int, pin: int, cmd: int) -> Event:
        return Event(SubSystem.POWER, PowerEvent.POWER_CMD, [pdm, pin, int(cmd)])

    def request(self, subsystem: int, id: int) -> Event:
        return Event(SubSystem.CONTROLLER, ControllerEvent.REQUEST_CMD,
                     [int(subsystem), int(id), 0xFF])

    def set_brightness(self, keypad: int, value: int) -> Event:
        return Event(SubSystem.KEYPAD, KeypadEvent.BRIGHTNESS_CMD, [keypad, value, 0xFF])

    def set_backlight(self, keypad: int, brightness: int, color: int = 0xFF) -> Event:
        return Event(SubSystem.KEYPAD, KeypadEvent.BACKLIGHT_CMD,
                     [keypad, brightness, int(color)])


def _elapsed(clock: Clock, since: int) -> int:
    return (clock.millis() - since) & 0xFFFFFFFF


class RepeatButton:
    """A button that repeats its action while held."""

    def __init__(self, interval: int, clock: Clock | None = None) -> None:
        self._clock = clock or Clock()
        self._interval = interval
        self._pressed = 0
        self._state = 0

    def press(self) -> None:
        self._pressed = self._clock.millis()
        self._state = 1

    def trigger(self) -> bool:
        """Return True when the repeat action should run."""
        if self._state != 0 and _elapsed(self._clock, self._pressed) >= self._interval:
            self._pressed = self._clock.millis()
            self._state = 2
            return True
        return False

    def release(self) -> bool:
        """Return True if the button was released before it repeated."""
        triggered = self._state == 1
        self._state = 0
        return triggered


class LongPressButton:
    """A button with a separate action on long press."""

    def __init__(self, timeout: int, clock: Clock | None = None) -> None:
        self._clock = clock or Clock()
        self._timeout = timeout
        self._pressed = 0
        self._state = 0

    def press(self) -> None:
        self._pressed = self._clock.millis()
        self._state = 1

    def trigger(self) -> bool:
        """Return True once when the long press action should run."""
        if self._state == 1 and _elapsed(self._clock, self._pressed) >= self._timeout:
            self._state = 2
            return True
        return False

    def release(self) -> bool:
        """Return True if the short press action should run."""
        short = self._state == 1
        self._state = 0
        return short