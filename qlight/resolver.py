"""
Turn routed OSC messages and CLI tokens into CommandSets.

OSC input:
    /lights/{id}/{color}  args: [int 0|1|2]  → one channel OFF/ON/BLINK
    /reset/{id}           args: ignored      → every channel OFF

CLI input:
    color:mode tokens, folded left to right (last one wins per channel)
"""

from typing import Dict, Iterable, List, Optional, Sequence

from qlight.errors import ArgumentError, ParseError
from qlight.model import Color, CommandSet, LightCommand, LightMode
from qlight.router import CommandKind, RouteMatch


COMMAND_FORMAT = "[red,yellow,green,blue,white]:[on,off,blink]"

# OSC integer argument → light mode
OSC_MODES = {
    0: LightMode.OFF,
    1: LightMode.ON,
    2: LightMode.BLINK,
}


def osc_light_mode(args: Sequence, type_tags: Optional[str] = None) -> LightMode:
    """Decode the single integer argument of a color message.

    Args:
        args: Decoded OSC arguments
        type_tags: OSC type tag string without the leading comma, when known.
                   Only a single int32 ('i') is a mode code; int64 and RGBA
                   arguments also decode to Python ints.

    Raises:
        ArgumentError: Unless args is exactly one int32 in {0, 1, 2}
    """
    if len(args) != 1:
        raise ArgumentError(f"Expected 1 integer argument, got {len(args)}: {list(args)}")

    if type_tags is not None and type_tags != "i":
        raise ArgumentError(f"Expected a single int32 ('i') argument, got type tags ',{type_tags}'")

    value = args[0]
    # bool is an int subclass; OSC True/False are not mode codes
    if not isinstance(value, int) or isinstance(value, bool):
        raise ArgumentError(f"Expected an integer argument, got {type(value).__name__}: {value!r}")

    mode = OSC_MODES.get(value)
    if mode is None:
        raise ArgumentError(f"Expected argument 0 (off), 1 (on) or 2 (blink), got {value}")
    return mode


def resolve_color(params: Dict[str, str], args: Sequence,
                  type_tags: Optional[str] = None) -> CommandSet:
    color = Color.parse(params["color"])
    mode = osc_light_mode(args, type_tags)

    command_set = CommandSet.default()
    command_set.set(color, mode)
    return command_set


def resolve_reset(params: Dict[str, str], args: Sequence,
                  type_tags: Optional[str] = None) -> CommandSet:
    return CommandSet.all_off()


RESOLVERS = {
    CommandKind.COLOR: resolve_color,
    CommandKind.RESET: resolve_reset,
}


def resolve_message(match: RouteMatch, args: Sequence,
                    type_tags: Optional[str] = None) -> CommandSet:
    """Build the CommandSet for a routed OSC message.

    Raises:
        ParseError: If the color segment is not a known color
        ArgumentError: If the arguments do not fit the route
    """
    return RESOLVERS[match.kind](match.params, args, type_tags)


def parse_command(token: str) -> LightCommand:
    """Parse a CLI `color:mode` token.

    The token is split on the first ':'.

    Raises:
        ParseError: If the separator is missing or either side is invalid

    Examples:
        >>> parse_command("red:on")
        LightCommand(color=<Color.RED: 2>, mode=<LightMode.ON: 1>)
    """
    color_name, sep, mode_name = token.partition(":")
    if not sep:
        raise ParseError(f"Expected format of {COMMAND_FORMAT} got {token}")
    return LightCommand(Color.parse(color_name), LightMode.parse(mode_name))


def resolve_commands(commands: Iterable[LightCommand], reset: bool = False) -> CommandSet:
    command_set = CommandSet.all_off() if reset else CommandSet.default()
    for command in commands:
        command_set.apply(command)
    return command_set


def resolve_cli(tokens: Iterable[str], reset: bool = False) -> CommandSet:
    """Parse every token and fold them into one CommandSet.

    With reset, channels not named by any token are turned off (and the sound
    channel silenced); otherwise they are left unchanged.

    Raises:
        ParseError: On the first invalid token; nothing is applied
    """
    commands: List[LightCommand] = [parse_command(token) for token in tokens]
    return resolve_commands(commands, reset=reset)
