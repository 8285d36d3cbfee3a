"""Exception types shared across qlight modules."""

from typing import Optional


class QlightError(Exception):
    """Base class for all qlight failures."""


class CommandError(QlightError):
    """An inbound command could not be turned into a CommandSet."""


class ParseError(CommandError, ValueError):
    """A color, mode, or color:mode token was not recognised."""


class ArgumentError(CommandError):
    """OSC arguments did not match the shape the route expects."""


class RouteError(QlightError):
    """A route template is malformed."""


class DeviceError(QlightError):
    """Opening, enumerating, or writing to a HID device failed."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class OscDecodeError(QlightError):
    """A UDP datagram could not be decoded as an OSC packet."""


class ConfigError(QlightError, ValueError):
    """Configuration file content is invalid."""
