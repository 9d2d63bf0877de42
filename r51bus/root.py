"""The root of the console command tree and the vehicle subsystem commands."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from r51bus.commands import CANCommand, EventCommand, EventSendCommand, J1939Command
from r51bus.console import (
    Command,
    Console,
    Message,
    NotEnoughArgumentsCommand,
    NotFoundCommand,
    TooManyArgumentsCommand,
)
from r51bus.messages import (
    BCMEvent,
    BluetoothEvent,
    ClimateEvent,
    ControllerEvent,
    Event,
    SubSystem,
)


def _request(subsystem: SubSystem) -> EventSendCommand:
    return EventSendCommand(
        Event(SubSystem.CONTROLLER, ControllerEvent.REQUEST_CMD, [int(subsystem)]))


def _send(subsystem: SubSystem, event_id: int) -> EventSendCommand:
    return EventSendCommand(Event(subsystem, event_id))


class _AliasedCommands(NotEnoughArgumentsCommand):
    """Dispatch an argument to a subcommand by any of its names."""

    def __init__(self, table: Iterable[tuple[Sequence[str], Command]]) -> None:
        self._commands: dict[str, Command] = {}
        for names, command in table:
            for name in names:
                self._commands[name] = command

    def next(self, arg: str) -> Command:
        return self._commands.get(arg) or NotFoundCommand()


class HelpCommand(Command):
    """Print usage lines for a command group."""

    def __init__(self, lines: Sequence[str]) -> None:
        self._lines = tuple(lines)

    def next(self, arg: str) -> Command:
        return TooManyArgumentsCommand()

    def run(self, console: Console, arg: str) -> list[Message]:
        for text in self._lines:
            console.println(text)
        return []


class ClimateIncDec(_AliasedCommands):
    """Choose between an increase and a decrease event."""

    def __init__(self, inc: Event, dec: Event) -> None:
        super().__init__([
            (("inc", "+"), EventSendCommand(inc)),
            (("dec", "-"), EventSendCommand(dec)),
        ])

    def next(self, arg: str) -> Command:
        return super().next(arg)


def _climate_incdec(inc: ClimateEvent, dec: ClimateEvent) -> ClimateIncDec:
    return ClimateIncDec(Event(SubSystem.CLIMATE, inc), Event(SubSystem.CLIMATE, dec))


class ClimateCommand(_AliasedCommands):
    """Climate control commands."""

    def __init__(self) -> None:
        climate = SubSystem.CLIMATE
        super().__init__([
            (("off", "o"), _send(climate, ClimateEvent.TURN_OFF_CMD)),
            (("auto", "a"), _send(climate, ClimateEvent.TOGGLE_AUTO_CMD)),
            (("ac", "c"), _send(climate, ClimateEvent.TOGGLE_AC_CMD)),
            (("dual", "d"), _send(climate, ClimateEvent.TOGGLE_DUAL_CMD)),
            (("defog", "w"), _send(climate, ClimateEvent.TOGGLE_DEFOG_CMD)),
            (("fan", "f"), _climate_incdec(ClimateEvent.INC_FAN_SPEED_CMD,
                                           ClimateEvent.DEC_FAN_SPEED_CMD)),
            (("recirculate", "r"), _send(climate, ClimateEvent.TOGGLE_RECIRCULATE_CMD)),
            (("mode", "m"), _send(climate, ClimateEvent.CYCLE_AIRFLOW_MODE_CMD)),
            (("dtemp", "dt"), _climate_incdec(ClimateEvent.INC_DRIVER_TEMP_CMD,
                                              ClimateEvent.DEC_DRIVER_TEMP_CMD)),
            (("ptemp", "pt"), _climate_incdec(ClimateEvent.INC_PASSENGER_TEMP_CMD,
                                              ClimateEvent.DEC_PASSENGER_TEMP_CMD)),
            (("request", "req"), _request(climate)),
            (("help", "h"), HelpCommand([
                "usage: climate CMD [INC|DEC]",
                "commands: off, auto, ac, dual, defog, fan, recirculate,",
                "  mode, dtemp, ptemp, request",
                "fan, dtemp, and  ptemp take a inc/dec argument",
            ])),
        ])

    def next(self, arg: str) -> Command:
        return super().next(arg)


class BCMCommand(_AliasedCommands):
    """Body control module commands."""

    def __init__(self) -> None:
        super().__init__([
            (("defrost", "d"), _send(SubSystem.BCM, BCMEvent.TOGGLE_DEFROST_CMD)),
            (("request", "req"), _request(SubSystem.BCM)),
            (("help", "h"), HelpCommand([
                "usage: bcm CMD",
                "commands: defrost, request",
            ])),
        ])

    def next(self, arg: str) -> Command:
        return super().next(arg)


class BluetoothCommand(_AliasedCommands):
    """Bluetooth connection commands."""

    def __init__(self) -> None:
        ble = SubSystem.BLUETOOTH
        super().__init__([
            (("disconnect", "d"), _send(ble, BluetoothEvent.DISCONNECT_CMD)),
            (("forget", "f"), _send(ble, BluetoothEvent.FORGET_CMD)),
            (("request", "req"), _request(ble)),
            (("help", "h"), HelpCommand([
                "usage: bluetooth CMD",
                "commands: disconnect, forget",
            ])),
        ])

    def next(self, arg: str) -> Command:
        return super().next(arg)


class IPDMCommand(_AliasedCommands):
    """Intelligent power distribution module commands."""

    def __init__(self) -> None:
        super().__init__([
            (("request", "req"), _request(SubSystem.IPDM)),
            (("help", "h"), HelpCommand([
                "usage: ipdm CMD",
                "commands: request",
            ])),
        ])

    def next(self, arg: str) -> Command:
        return super().next(arg)


class RootCommand(Command):
    """The top of the command tree."""

    def __init__(self) -> None:
        table: list[tuple[tuple[str, ...], Command]] = [
            (("can", "f"), CANCommand()),
            (("event", "e"), EventCommand()),
            (("j1939", "j"), J1939Command()),
            (("climate", "c"), ClimateCommand()),
            (("bcm", "b"), BCMCommand()),
            (("ipdm", "i"), IPDMCommand()),
            (("bluetooth", "ble"), BluetoothCommand()),
        ]
        self._commands = {name: command for names, command in table for name in names}

    def next(self, arg: str) -> Command:
        return self._commands.get(arg) or NotFoundCommand()

    def run(self, console: Console, arg: str) -> list[Message]:
        console.println("console: command incomplete")
        return []