"""
Channel/mode model and the HID report layout for the light tower.

The tower has five colored channels and one sound channel. Every write to the
device is a full 65-byte output report carrying one mode per channel, so a
"no change" value (IGNORE) exists for each channel and is the default.

REPORT LAYOUT (65 bytes):
    [0]     report ID 0x57
    [1]     reserved, always 0
    [2..6]  red, yellow, green, blue, white light modes
    [7]     sound mode
    [8..64] zero padding
"""

from enum import IntEnum
from typing import Dict, NamedTuple, Tuple

from qlight.errors import ParseError


REPORT_ID = 0x57
REPORT_LENGTH = 65
SOUND_OFFSET = 7


class Color(IntEnum):
    """Light channel. The value is the channel's wire code and byte offset."""

    RED = 2
    YELLOW = 3
    GREEN = 4
    BLUE = 5
    WHITE = 6

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, token: str) -> "Color":
        """Parse a color name, case-insensitively.

        Raises:
            ParseError: If the token is not one of the five color names

        Examples:
            >>> Color.parse("Green")
            <Color.GREEN: 4>
        """
        value = token.lower()
        for color in cls:
            if color.label == value:
                return color
        names = ", ".join(color.label for color in cls)
        raise ParseError(f"Expected one of [{names}], got {value}")


class LightMode(IntEnum):
    OFF = 0
    ON = 1
    BLINK = 2
    IGNORE = 3

    @classmethod
    def parse(cls, token: str) -> "LightMode":
        """Parse a user-entered mode (on, off, blink), case-insensitively.

        IGNORE is an internal value and is never accepted here.

        Raises:
            ParseError: If the token is not on, off or blink
        """
        value = token.lower()
        mode = _USER_MODES.get(value)
        if mode is None:
            raise ParseError(f"Expected one of [on, off, blink] in command, got {value}")
        return mode


_USER_MODES = {
    "on": LightMode.ON,
    "off": LightMode.OFF,
    "blink": LightMode.BLINK,
}


class SoundMode(IntEnum):
    OFF = 0
    NOISE1 = 1
    NOISE2 = 2
    NOISE3 = 3
    NOISE4 = 4
    NOISE5 = 5
    IGNORE = 6


class LightCommand(NamedTuple):
    """A single channel update."""

    color: Color
    mode: LightMode


# Channel → report byte offset, in wire order.
CHANNEL_OFFSETS: Tuple[Tuple[Color, int], ...] = (
    (Color.RED, 2),
    (Color.YELLOW, 3),
    (Color.GREEN, 4),
    (Color.BLUE, 5),
    (Color.WHITE, 6),
)


class CommandSet:
    """One mode per light channel plus a sound mode.

    A fresh CommandSet leaves every channel untouched (IGNORE). Commands are
    applied with set(); a later set() for the same color replaces the earlier
    one.

    Examples:
        >>> lights = CommandSet.default()
        >>> lights.set(Color.RED, LightMode.ON)
        >>> lights.to_report()[2]
        1
    """

    def __init__(self, sound: SoundMode = SoundMode.IGNORE):
        self._modes: Dict[Color, LightMode] = {color: LightMode.IGNORE for color in Color}
        self.sound = sound

    @classmethod
    def default(cls) -> "CommandSet":
        return cls()

    @classmethod
    def all_off(cls) -> "CommandSet":
        command_set = cls(sound=SoundMode.OFF)
        for color in Color:
            command_set.set(color, LightMode.OFF)
        return command_set

    def set(self, color: Color, mode: LightMode) -> None:
        self._modes[color] = mode

    def get(self, color: Color) -> LightMode:
        return self._modes[color]

    def apply(self, command: LightCommand) -> None:
        self.set(command.color, command.mode)

    def to_report(self) -> bytes:
        """Serialize to the 65-byte HID output report."""
        report = bytearray(REPORT_LENGTH)
        report[0] = REPORT_ID
        for color, offset in CHANNEL_OFFSETS:
            report[offset] = self._modes[color]
        report[SOUND_OFFSET] = self.sound
        return bytes(report)

    def __eq__(self, other):
        if not isinstance(other, CommandSet):
            return NotImplemented
        return self._modes == other._modes and self.sound == other.sound

    def __repr__(self):
        channels = ", ".join(
            f"{color.label}={self._modes[color].name.lower()}" for color, _ in CHANNEL_OFFSETS
        )
        return f"CommandSet({channels}, sound={self.sound.name.lower()})"
