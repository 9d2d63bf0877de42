"""Console state, the command interface and the error commands."""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from enum import Enum
from typing import TextIO, Union

from r51bus.messages import CANFrame, Event, J1939Message

Message = Union[Event, J1939Message, CANFrame]


class FilterMode(Enum):
    ALLOW = "allow"
    DROP = "drop"


class FrameIDFilter:
    """Pass or drop CAN frames by identifier.

    In ALLOW mode every frame passes except the dropped ids; in DROP mode
    only the allowed ids pass. Changing the mode clears the exceptions.
    """

    def __init__(self, mode: FilterMode = FilterMode.ALLOW) -> None:
        self._mode = mode
        self._exceptions: set[int] = set()

    @property
    def mode(self) -> FilterMode:
        return self._mode

    @mode.setter
    def mode(self, mode: FilterMode) -> None:
        self._mode = mode
        self._exceptions.clear()

    def allow(self, frame_id: int) -> None:
        if self._mode is FilterMode.ALLOW:
            self._exceptions.discard(frame_id)
        else:
            self._exceptions.add(frame_id)

    def drop(self, frame_id: int) -> None:
        if self._mode is FilterMode.DROP:
            self._exceptions.discard(frame_id)
        else:
            self._exceptions.add(frame_id)

    def match(self, frame: CANFrame | int) -> bool:
        """Return True if the frame passes the filter."""
        frame_id = frame if isinstance(frame, int) else frame.id
        passes = self._mode is FilterMode.ALLOW
        if frame_id in self._exceptions:
            return not passes
        return passes


class Console:
    """Output stream and mute settings shared by console commands."""

    def __init__(self, stream: TextIO | None = None, mute: bool = True) -> None:
        self.stream: TextIO = stream if stream is not None else io.StringIO()
        self.can_filter = FrameIDFilter()
        self.event_mute = mute
        self.j1939_mute = mute
        if mute:
            self.can_filter.mode = FilterMode.DROP

    def print(self, text: object) -> None:
        self.stream.write(str(text))

    def println(self, text: object = "") -> None:
        self.stream.write(f"{text}\r\n")


class Command(ABC):
    """A node in the console command tree."""

    @abstractmethod
    def next(self, arg: str) -> Command:
        """Return the subcommand chosen by the given argument."""

    @abstractmethod
    def run(self, console: Console, arg: str) -> list[Message]:
        """Run the command and return the messages it sends to the bus."""

    def line(self) -> bool:
        """Return True if the next argument is the rest of the line."""
        return False


class ErrorCommand(Command):
    """A command that swallows any further arguments."""

    def next(self, arg: str) -> Command:
        return self


class NotFoundCommand(ErrorCommand):
    def run(self, console: Console, arg: str) -> list[Message]:
        console.println("console: command not found")
        return []


class NotEnoughArgumentsCommand(ErrorCommand):
    def run(self, console: Console, arg: str) -> list[Message]:
        console.println("console: not enough arguments")
        return []


class TooManyArgumentsCommand(ErrorCommand):
    def run(self, console: Console, arg: str) -> list[Message]:
        console.println("console: too many arguments")
        return []