import io

import pytest

from r51bus.console import Console
from r51bus.messages import (
    BCMEvent,
    BluetoothEvent,
    CANFrame,
    ClimateEvent,
    ControllerEvent,
    Event,
    SubSystem,
)
from r51bus.root import (
    BCMCommand,
    BluetoothCommand,
    ClimateCommand,
    ClimateIncDec,
    HelpCommand,
    IPDMCommand,
    RootCommand,
)


@pytest.fixture
def console():
    return Console(io.StringIO(), mute=True)


def walk(command, *args):
    for arg in args:
        command = command.next(arg)
    return command


def run(console, command, *args):
    cmd = walk(command, *args)
    return cmd.run(console, args[-1] if args else "")


def output(console):
    return console.stream.getvalue()


def request(subsystem):
    return Event(SubSystem.CONTROLLER, ControllerEvent.REQUEST_CMD, [subsystem])


def test_root_run_is_incomplete(console):
    assert RootCommand().run(console, "") == []
    assert output(console) == "console: command incomplete\r\n"


def test_root_unknown_command(console):
    assert run(console, RootCommand(), "nope") == []
    assert output(console) == "console: command not found\r\n"


def test_not_found_swallows_further_args(console):
    assert run(console, RootCommand(), "nope", "more", "args") == []
    assert output(console) == "console: command not found\r\n"


def test_group_without_args_is_not_enough(console):
    assert run(console, RootCommand(), "climate") == []
    assert output(console) == "console: not enough arguments\r\n"


@pytest.mark.parametrize("args, expected", [
    (("climate", "off"), ClimateEvent.TURN_OFF_CMD),
    (("c", "o"), ClimateEvent.TURN_OFF_CMD),
    (("climate", "auto"), ClimateEvent.TOGGLE_AUTO_CMD),
    (("climate", "c"), ClimateEvent.TOGGLE_AC_CMD),
    (("climate", "dual"), ClimateEvent.TOGGLE_DUAL_CMD),
    (("climate", "w"), ClimateEvent.TOGGLE_DEFOG_CMD),
    (("climate", "recirculate"), ClimateEvent.TOGGLE_RECIRCULATE_CMD),
    (("climate", "m"), ClimateEvent.CYCLE_AIRFLOW_MODE_CMD),
    (("climate", "fan", "inc"), ClimateEvent.INC_FAN_SPEED_CMD),
    (("climate", "f", "-"), ClimateEvent.DEC_FAN_SPEED_CMD),
    (("climate", "dtemp", "+"), ClimateEvent.INC_DRIVER_TEMP_CMD),
    (("climate", "dt", "dec"), ClimateEvent.DEC_DRIVER_TEMP_CMD),
    (("climate", "ptemp", "inc"), ClimateEvent.INC_PASSENGER_TEMP_CMD),
    (("climate", "pt", "-"), ClimateEvent.DEC_PASSENGER_TEMP_CMD),
])
def test_climate_commands(console, args, expected):
    assert run(console, RootCommand(), *args) == [Event(SubSystem.CLIMATE, expected)]


def test_climate_event_data_is_padded(console):
    (event,) = run(console, ClimateCommand(), "off")
    assert event.data == bytearray(b"\xff" * 6)


def test_climate_incdec_unknown(console):
    cmd = ClimateIncDec(Event(SubSystem.CLIMATE, ClimateEvent.INC_FAN_SPEED_CMD),
                        Event(SubSystem.CLIMATE, ClimateEvent.DEC_FAN_SPEED_CMD))
    assert run(console, cmd, "up") == []
    assert output(console) == "console: command not found\r\n"


def test_climate_incdec_missing_direction(console):
    assert run(console, ClimateCommand(), "fan") == []
    assert output(console) == "console: not enough arguments\r\n"


def test_leaf_extra_argument(console):
    assert run(console, ClimateCommand(), "off", "extra") == []
    assert output(console) == "console: too many arguments\r\n"


@pytest.mark.parametrize("args, subsystem", [
    (("climate", "request"), SubSystem.CLIMATE),
    (("bcm", "req"), SubSystem.BCM),
    (("ipdm", "request"), SubSystem.IPDM),
    (("ble", "req"), SubSystem.BLUETOOTH),
])
def test_request_commands(console, args, subsystem):
    assert run(console, RootCommand(), *args) == [request(subsystem)]


@pytest.mark.parametrize("arg", ["defrost", "d"])
def test_bcm_defrost(console, arg):
    assert run(console, BCMCommand(), arg) == [
        Event(SubSystem.BCM, BCMEvent.TOGGLE_DEFROST_CMD)]


@pytest.mark.parametrize("arg, expected", [
    ("disconnect", BluetoothEvent.DISCONNECT_CMD),
    ("d", BluetoothEvent.DISCONNECT_CMD),
    ("forget", BluetoothEvent.FORGET_CMD),
    ("f", BluetoothEvent.FORGET_CMD),
])
def test_bluetooth_commands(console, arg, expected):
    assert run(console, BluetoothCommand(), arg) == [Event(SubSystem.BLUETOOTH, expected)]


def test_bluetooth_reached_by_long_name(console):
    assert run(console, RootCommand(), "bluetooth", "forget") == [
        Event(SubSystem.BLUETOOTH, BluetoothEvent.FORGET_CMD)]


def test_ipdm_unknown(console):
    assert run(console, IPDMCommand(), "defrost") == []
    assert output(console) == "console: command not found\r\n"


def test_climate_help(console):
    assert run(console, ClimateCommand(), "help") == []
    assert output(console) == (
        "usage: climate CMD [INC|DEC]\r\n"
        "commands: off, auto, ac, dual, defog, fan, recirculate,\r\n"
        "  mode, dtemp, ptemp, request\r\n"
        "fan, dtemp, and  ptemp take a inc/dec argument\r\n"
    )


def test_bcm_help(console):
    run(console, BCMCommand(), "h")
    assert output(console) == "usage: bcm CMD\r\ncommands: defrost, request\r\n"


def test_bluetooth_help(console):
    run(console, BluetoothCommand(), "help")
    assert output(console) == "usage: bluetooth CMD\r\ncommands: disconnect, forget\r\n"


def test_ipdm_help(console):
    run(console, IPDMCommand(), "h")
    assert output(console) == "usage: ipdm CMD\r\ncommands: request\r\n"


def test_help_takes_no_arguments(console):
    assert run(console, HelpCommand(["a"]), "x") == []
    assert output(console) == "console: too many arguments\r\n"


def test_root_routes_can_send(console):
    assert run(console, RootCommand(), "f", "send", "123#01") == [
        CANFrame(0x123, bytearray([0x01]), False)]


def test_root_routes_event_mute(console):
    console.event_mute = False
    run(console, RootCommand(), "e", "mute")
    assert console.event_mute is True


def test_root_routes_j1939_unmute(console):
    run(console, RootCommand(), "j", "unmute")
    assert console.j1939_mute is False


def test_commands_are_reusable(console):
    root = RootCommand()
    first = run(console, root, "climate", "off")
    second = run(console, root, "climate", "off")
    assert first == second == [Event(SubSystem.CLIMATE, ClimateEvent.TURN_OFF_CMD)]