"""
qlight - command-line control of USB light towers (argparse).

Usage:
    qlight list
    qlight set --all red:on blue:blink
    qlight set --path /dev/hidraw3 --path /dev/hidraw4 --reset green:on
"""

import argparse
import sys

from qlight.device import DeviceBinding, DeviceSession, device_path, enumerate_lights
from qlight.errors import DeviceError, ParseError
from qlight.log import get_logger, setup_logging
from qlight.resolver import parse_command, resolve_commands


logger = get_logger(__name__)


def _command_arg(token):
    """argparse type hook for color:mode tokens."""
    try:
        return parse_command(token)
    except ParseError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser():
    parser = argparse.ArgumentParser(
        prog="qlight",
        description="USB light tower controller: five lights and a buzzer over HID",
    )
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    # list
    sub.add_parser("list", help="List all lights connected to this system")

    # set
    p_set = sub.add_parser("set", help="Set the lights to a specific set of modes")
    target = p_set.add_mutually_exclusive_group(required=True)
    target.add_argument("--path", action="append", metavar="PATH",
                        help="Apply to a specific light (repeatable). Use 'list' to get paths.")
    target.add_argument("--all", action="store_true",
                        help="Apply to all detected lights")
    p_set.add_argument("--reset", action="store_true",
                       help="Turn off every color not given on the command line")
    p_set.add_argument("commands", nargs="*", type=_command_arg, metavar="COLOR:MODE",
                       help="Colors: red, yellow, green, blue, white. "
                            "Modes: off, on, blink.")

    return parser


def cmd_list():
    for info in enumerate_lights():
        print(device_path(info))
    return 0


def cmd_set(commands, paths=None, all_lights=False, reset=False):
    """Write one command set to every selected light, in order.

    The first device failure aborts the remaining writes.
    """
    command_set = resolve_commands(commands, reset=reset)
    logger.debug(f"Command set: {command_set}")

    if all_lights:
        paths = [device_path(info) for info in enumerate_lights()]
        if not paths:
            print("No lights found.", file=sys.stderr)
            return 1

    for path in paths or []:
        with DeviceSession(DeviceBinding(path)) as session:
            written = session.write(command_set)
        logger.info(f"{path}: wrote {written} bytes")
    return 0


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(console_level="DEBUG" if args.verbose else "WARNING")

    try:
        if args.command == "list":
            return cmd_list()
        elif args.command == "set":
            return cmd_set(args.commands, paths=args.path,
                           all_lights=args.all, reset=args.reset)
    except DeviceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
