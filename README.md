# r51bus

Nodes for an in-vehicle message bus built from events, CAN frames and J1939
messages. Each node is a plain object: `handle(msg)` takes a bus message and
returns the list of messages to send in reply, and `emit()` (where a node has
one) returns the messages that are due on their own.

## What's inside

- `r51bus.messages`: the message types `Event`, `J1939Message`, `CANFrame`
  and `J1939Claim`; the enumerations `SubSystem`, `ControllerEvent`,
  `PowerEvent`, `PowerMode`, `PowerCmd`, `KeypadEvent`, `LEDMode`, `LEDColor`,
  `ClimateEvent`, `BCMEvent`, `IPDMEvent` and `BluetoothEvent`;
  `is_request()`, which tells whether an event is a controller request for a
  given state; and the millisecond clocks `Clock` and `FakeClock`.
- `r51bus.reader`: `Reader`, which splits fed text into words or lines
  without blocking and reports `ReadResult.EOW`, `EOL`, `FIFO` or `OVERRUN`.
- `r51bus.controls`: `Controls`, whose methods build command events
  (`send_cmd`, `send_power_cmd`, `request`, `set_brightness`,
  `set_backlight`), plus `RepeatButton` and `LongPressButton` for key timing.
- `r51bus.bluetooth`: `BLENode`, which reports connection state
  (`on_connect`, `on_disconnect`) and passes disconnect and forget commands to
  a device object that has `disconnect()` and `forget()` methods.
- `r51bus.console`: `Console` (output stream, mute flags and a
  `FrameIDFilter` for CAN frames), the `Command` interface and the error
  commands.
- `r51bus.commands`: the event, CAN, J1939 and scratch-buffer commands, and
  the parsers `parse_event()`, `parse_can_frame()` and
  `parse_j1939_message()`.
- `r51bus.root`: `RootCommand`, the top of the command tree, with the
  climate, BCM, IPDM and Bluetooth command groups.
- `r51bus.node`: `ConsoleNode`, which prints bus traffic in readable form and
  turns typed commands into bus messages, and `describe_event()`.
- `r51bus.blink`: `BlinkKeybox` and `BlinkKeypad`, which drive Blink Marine
  power keyboxes and PKP keypads over J1939, and the helpers
  `to_blink_color()` and `to_blink_brightness()`.

## Installing

    pip install .

To run the tests, install the `test` extra:

    pip install .[test]
    pytest

## Using the console

```python
import io
from r51bus.node import ConsoleNode

out = io.StringIO()
node = ConsoleNode(out, mute=False)
node.feed("climate fan inc\n")
messages = node.emit()   # [Event(subsystem=4, id=0x17, ...)]
```

`ConsoleNode.handle()` writes each received message to the stream unless it
is muted (`event mute`, `j1939 mute`) or, for CAN frames, dropped by the
filter. With `mute=True`, the default, events and J1939 traffic are muted and
every CAN frame is dropped.

Commands are words separated by spaces, each line ending with a newline:

    event send 01:02#03:04
    event mute
    can send 5C5#01:02
    can filter allow 5C5
    can filter drop all
    j1939 send 18EAFF21#14:F0:01
    climate fan inc
    bcm defrost
    ipdm request
    bluetooth forget

Short names are accepted too: `e` for `event`, `f` for `can`, `j` for
`j1939`, `c` for `climate`, `b` for `bcm`, `i` for `ipdm`, `ble` for
`bluetooth`, and `help`/`h` in the climate, BCM, IPDM and Bluetooth groups
prints their usage.

An event is written `SS:ID#D0:D1:...`, where `SS` is the subsystem and `ID`
the event id, both in hex, followed by up to six data bytes. Data bytes that
are left out are filled with `FF`. A CAN frame is written `ID#D0:D1:...`; a
leading `+` or `-` forces an extended or standard identifier, otherwise ids
above `7FF` are extended.

## What it does not do

- It does no I/O with real hardware: there is no CAN interface, no serial
  port and no BLE radio. Nodes take and return message objects, and the
  caller moves them between the nodes and any device.
- There is no bus or scheduler that routes messages between nodes or calls
  `emit()` periodically; that loop is left to the caller.
- `ScratchCommand` is available in `r51bus.commands` but is not reachable
  from `RootCommand`; add it to your own command tree to use it.
- There is no command-line program.