"""Bus nodes for Blink Marine PKP keypads and PowerKey keyboxes over J1939."""

from __future__ import annotations

from r51bus.messages import (
    NULL_ADDRESS,
    Clock,
    Event,
    J1939Claim,
    J1939Message,
    KeypadEvent,
    LEDColor,
    LEDMode,
    PowerCmd,
    PowerEvent,
    PowerMode,
    SubSystem,
    is_request,
)

_HEARTBEAT_INTERVAL = 500
_COMMAND_PGN = 0xEF00
_HEARTBEAT_PGN = 0xEE00
_PRIORITY = 0x06
_PWM_PINS = (11, 12)
_MAX_PIN = 12
_REPORTED_PINS = 12

_BLINK_COLORS = {
    LEDColor.WHITE: 0x07,
    LEDColor.RED: 0x01,
    LEDColor.GREEN: 0x02,
    LEDColor.BLUE: 0x03,
    LEDColor.CYAN: 0x05,
    LEDColor.YELLOW: 0x09,
    LEDColor.MAGENTA: 0x06,
    LEDColor.AMBER: 0x08,
}


def to_blink_color(color: int) -> int:
    """Return the Blink colour code for an LED colour; unknown colours are 0."""
    try:
        return _BLINK_COLORS.get(LEDColor(int(color)), 0x00)
    except ValueError:
        return 0x00


def to_blink_brightness(brightness: int) -> int:
    """Scale an 8-bit brightness to the keypad's 0-63 range, keeping 0 as off."""
    if brightness == 0x00:
        return 0x00
    if brightness < 0x04:
        return 0x01
    return brightness // 4


class _Ticker:
    """Fires once per interval while running; starts paused."""

    def __init__(self, interval: int, clock: Clock) -> None:
        self._interval = interval
        self._clock = clock
        self._paused = True
        self._last = clock.millis()

    def active(self) -> bool:
        if self._paused:
            return False
        return (self._clock.millis() - self._last) & 0xFFFFFFFF >= self._interval

    def reset(self) -> None:
        self._last = self._clock.millis()

    def resume(self) -> None:
        self._paused = False
        self.reset()


def _command_message(address: int, header: bytes) -> J1939Message:
    data = bytearray(8)
    data[:len(header)] = header
    return J1939Message(_COMMAND_PGN, NULL_ADDRESS, address, _PRIORITY, data)


def _is_blink_command(msg: J1939Message, own: J1939Message) -> bool:
    return (own.source_address != NULL_ADDRESS
            and msg.source_address == own.dest_address
            and msg.pgn == _COMMAND_PGN
            and len(msg.data) >= 5
            and msg.data[0] == 0x04
            and msg.data[1] == 0x1B
            and msg.data[2] == 0x01)


class BlinkKeybox:
    """Drive a Blink PowerKey keybox from power commands on the internal bus.

    Pins 11 and 12 are PWM outputs; the others are switched on and off.
    """

    def __init__(self, address: int, pdm_id: int, clock: Clock | None = None) -> None:
        self._hb_tick = _Ticker(_HEARTBEAT_INTERVAL, clock or Clock())
        self._hb_msg = J1939Message(_HEARTBEAT_PGN, NULL_ADDRESS, address, _PRIORITY,
                                    bytearray(4))
        self._pin_cmd = _command_message(address, b"\x04\x1b\x01")
        self._pwm_cmd = _command_message(address, b"\x04\x1b\x03\x00\x00")
        self._pin_state = 0
        self._pin_fault = 0
        self._pwm = {11: 0, 12: 0}
        self._pdm = pdm_id & 0xFF
        self._power = Event(SubSystem.POWER, PowerEvent.POWER_STATE, [self._pdm])

    def handle(self, msg: object) -> list[object]:
        """Handle a bus message and return the messages to send in reply."""
        out: list[object] = []
        if isinstance(msg, Event):
            if is_request(msg, SubSystem.POWER, PowerEvent.POWER_STATE):
                self._handle_state_request(out)
            if msg.matches(SubSystem.POWER, PowerEvent.POWER_CMD):
                self._handle_power_command(msg, out)
        elif isinstance(msg, J1939Claim):
            self._handle_claim(msg)
        elif isinstance(msg, J1939Message):
            self._handle_j1939(msg, out)
        return out

    def emit(self) -> list[object]:
        """Return the heartbeat message when it is due."""
        if self._hb_tick.active():
            self._hb_tick.reset()
            return [self._hb_msg.copy()]
        return []

    def _report(self, out: list[object], pin: int, mode: PowerMode, duty: int) -> None:
        self._power.data[1] = pin & 0xFF
        self._power.data[2] = int(mode)
        self._power.data[3] = duty & 0xFF
        out.append(self._power.copy())

    def _handle_power_command(self, cmd: Event, out: list[object]) -> None:
        pdm, pin, action, duty = cmd.data[0], cmd.data[1], cmd.data[2], cmd.data[3]
        if pdm != self._pdm or self._pin_cmd.source_address == NULL_ADDRESS or pin > _MAX_PIN:
            return
        if action == PowerCmd.ON:
            if pin in _PWM_PINS:
                self._set_pwm(pin, 0xFF, out)
            else:
                self._set_output(pin, True, out)
        elif action == PowerCmd.OFF:
            if pin in _PWM_PINS:
                self._set_pwm(pin, 0x00, out)
            else:
                self._set_output(pin, False, out)
        elif action == PowerCmd.RESET:
            self._reset(pin, out)
        elif action == PowerCmd.TOGGLE:
            if pin in _PWM_PINS:
                slot = 3 if pin == 11 else 4
                self._set_pwm(pin, 0xFF if self._pwm_cmd.data[slot] == 0x00 else 0x00, out)
            else:
                current = bool((self._pin_state >> pin) & 1)
                self._set_output(pin, not current, out)
        elif action == PowerCmd.PWM:
            self._set_pwm(pin, duty, out)

    def _handle_state_request(self, out: list[object]) -> None:
        self._power.data[3] = 0xFF
        for pin in range(_REPORTED_PINS):
            state = (self._pin_state >> pin) & 1
            fault = (self._pin_fault >> pin) & 1
            self._power.data[1] = pin
            if fault:
                self._power.data[2] = PowerMode.FAULT
                self._power.data[3] = 0xFF
            elif pin in _PWM_PINS:
                self._power.data[2] = PowerMode.PWM
                self._power.data[3] = self._pwm[pin]
            elif state:
                self._power.data[2] = PowerMode.ON
            else:
                self._power.data[2] = PowerMode.OFF
            out.append(self._power.copy())

    def _handle_claim(self, claim: J1939Claim) -> None:
        for msg in (self._pin_cmd, self._pwm_cmd, self._hb_msg):
            msg.source_address = claim.address
        self._hb_tick.resume()

    def _handle_j1939(self, msg: J1939Message, out: list[object]) -> None:
        if not _is_blink_command(msg, self._pin_cmd):
            return
        pin = (msg.data[3] - 1) & 0xFF
        value = bool(msg.data[4])
        current = bool((self._pin_fault >> pin) & 1)
        if current == value:
            return
        if value:
            self._pin_fault = (self._pin_fault | (1 << pin)) & 0xFFFF
            if pin == 11:
                self._pwm_cmd.data[3] = 0x00
            elif pin == 12:
                self._pwm_cmd.data[4] = 0x00
        else:
            self._pin_fault &= ~(1 << pin) & 0xFFFF
        self._report(out, pin, PowerMode.FAULT if value else PowerMode.OFF, 0xFF)

    def _set_output(self, pin: int, value: bool, out: list[object]) -> None:
        current = bool((self._pin_state >> pin) & 1)
        fault = bool((self._pin_fault >> pin) & 1)
        if current == value or fault:
            return
        if value:
            self._pin_state = (self._pin_state | (1 << pin)) & 0xFFFF
        else:
            self._pin_state &= ~(1 << pin) & 0xFFFF
        self._pin_cmd.data[3] = pin + 1
        self._pin_cmd.data[4] = int(value)
        out.append(self._pin_cmd.copy())
        self._report(out, pin, PowerMode.ON if value else PowerMode.OFF, 0xFF)

    def _set_pwm(self, pin: int, duty_cycle: int, out: list[object]) -> None:
        if pin not in _PWM_PINS:
            return
        duty_cycle &= 0xFF
        current = self._pwm[pin]
        self._pwm_cmd.data[3 if pin == 11 else 4] = duty_cycle
        self._pwm[pin] = duty_cycle
        if duty_cycle == current:
            return
        out.append(self._pwm_cmd.copy())
        self._report(out, pin, PowerMode.PWM, duty_cycle)

    def _reset(self, pin: int, out: list[object]) -> None:
        if not (self._pin_fault >> pin) & 1:
            return
        self._pin_fault &= ~(1 << pin) & 0xFFFF
        self._pin_cmd.data[3] = pin + 1
        self._pin_cmd.data[4] = 0x02
        out.append(self._pin_cmd.copy())
        self._report(out, pin, PowerMode.OFF, 0xFF)


class BlinkKeypad:
    """Drive a Blink Marine PKP keypad over J1939.

    The keypad numbers its keys from 1; events on the bus number them from 0.
    """

    def __init__(self, address: int, keypad: int, key_count: int) -> None:
        self._keypress = Event(SubSystem.KEYPAD, KeypadEvent.KEY_STATE, [keypad & 0xFF])
        self._command = _command_message(address, b"\x04\x1b")
        self._key_count = key_count

    @property
    def _keypad(self) -> int:
        return self._keypress.data[0]

    def handle(self, msg: object) -> list[object]:
        """Handle a bus message and return the messages to send in reply."""
        out: list[object] = []
        if isinstance(msg, Event):
            if msg.subsystem == SubSystem.KEYPAD:
                if msg.id == KeypadEvent.INDICATOR_CMD:
                    self._handle_indicator(msg, out)
                elif msg.id == KeypadEvent.BRIGHTNESS_CMD:
                    self._handle_brightness(msg, out)
                elif msg.id == KeypadEvent.BACKLIGHT_CMD:
                    self._handle_backlight(msg, out)
        elif isinstance(msg, J1939Claim):
            self._handle_claim(msg, out)
        elif isinstance(msg, J1939Message):
            self._handle_j1939(msg, out)
        return out

    def _claimed_for(self, cmd: Event) -> bool:
        return self._command.source_address != NULL_ADDRESS and cmd.data[0] == self._keypad

    def _handle_claim(self, claim: J1939Claim, out: list[object]) -> None:
        self._command.source_address = claim.address
        self._set_backlight_brightness(0x00, out)
        self._set_key_brightness(0xFF, out)
        for key in range(self._key_count):
            self._set_key_led(key, LEDMode.OFF, out)

    def _handle_j1939(self, msg: J1939Message, out: list[object]) -> None:
        if not _is_blink_command(msg, self._command):
            return
        self._keypress.data[1] = (msg.data[3] - 1) & 0xFF
        self._keypress.data[2] = int(msg.data[4] == 0x01)
        out.append(self._keypress.copy())

    def _handle_indicator(self, cmd: Event, out: list[object]) -> None:
        led = cmd.data[1]
        if not self._claimed_for(cmd) or led >= self._key_count:
            return
        self._set_key_led(led, cmd.data[2], out, cmd.data[3], cmd.data[4])

    def _handle_brightness(self, cmd: Event, out: list[object]) -> None:
        if self._claimed_for(cmd):
            self._set_key_brightness(cmd.data[1], out)

    def _handle_backlight(self, cmd: Event, out: list[object]) -> None:
        if not self._claimed_for(cmd):
            return
        if cmd.data[2] != 0xFF:
            self._set_settings(0x7D, to_blink_color(cmd.data[2]), out)
        self._set_backlight_brightness(cmd.data[1], out)

    def _set_key_led(self, key: int, mode: int, out: list[object],
                     color: int = LEDColor.WHITE, alt_color: int = LEDColor.WHITE) -> None:
        data = self._command.data
        data[2] = 0x01
        data[3] = (key + 1) & 0xFF
        if mode == LEDMode.OFF:
            data[4:7] = bytes((0x00, 0x00, 0xFF))
        elif mode == LEDMode.ON:
            data[4:7] = bytes((to_blink_color(color), 0x01, 0xFF))
        elif mode == LEDMode.BLINK:
            data[4:7] = bytes((to_blink_color(color), 0x02, 0xFF))
        elif mode == LEDMode.ALT_BLINK:
            data[4:7] = bytes((to_blink_color(color), 0x03, to_blink_color(alt_color)))
        out.append(self._command.copy())

    def _set_settings(self, setting: int, value: int, out: list[object]) -> None:
        data = self._command.data
        data[2] = setting
        data[3] = value
        data[4] = 0xFF
        data[5] = 0xFF
        out.append(self._command.copy())

    def _set_key_brightness(self, brightness: int, out: list[object]) -> None:
        self._set_settings(0x02, to_blink_brightness(brightness), out)

    def _set_backlight_brightness(self, brightness: int, out: list[object]) -> None:
        self._set_settings(0x03, to_blink_brightness(brightness), out)