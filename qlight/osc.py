#!/usr/bin/env python3
"""
qlight OSC bridge - UDP OSC messages to light tower HID reports.

ARCHITECTURE:
- Single-threaded blocking loop on one UDP socket
- Each datagram is decoded with python-osc; only plain messages are handled,
  bundles are logged and dropped
- Messages are routed (qlight.router), resolved into a CommandSet
  (qlight.resolver) and written to the active DeviceSession

INPUT OSC MESSAGES:
    /lights/{id}/{color}  args: [int32] 0 = off, 1 = on, 2 = blink
    /reset/{id}           args: any    every channel off, sound off

ERROR HANDLING:
- Unknown address, bad color, bad arguments: warning, message dropped
- Device open/write failure: per write_errors policy
    'log'   - logged, loop continues
    'raise' - DeviceError propagates and the loop ends
- Undecodable datagram or socket receive error: logged, loop ends
"""

import socket
from typing import Optional, Sequence

from pythonosc import osc_bundle, osc_message
from pythonosc.parsing import osc_types

from qlight.device import DeviceSession
from qlight.errors import CommandError, DeviceError, OscDecodeError
from qlight.log import get_logger
from qlight.model import CommandSet
from qlight.resolver import resolve_message
from qlight.router import Router, default_router


# Largest datagram read from the socket (OSC over UDP MTU)
MAX_DATAGRAM = 1536

logger = get_logger(__name__)


def decode_datagram(data: bytes) -> Optional[osc_message.OscMessage]:
    """Decode one UDP datagram.

    Returns:
        The decoded OscMessage, or None for a bundle (unsupported, dropped)

    Raises:
        OscDecodeError: If the datagram is neither a valid message nor a bundle
    """
    if osc_bundle.OscBundle.dgram_is_bundle(data):
        logger.warning("OSC bundles are not supported. Ignoring packet.")
        return None

    if not osc_message.OscMessage.dgram_is_message(data):
        raise OscDecodeError(f"Datagram is not an OSC packet ({len(data)} bytes)")

    try:
        return osc_message.OscMessage(data)
    except osc_message.ParseError as e:
        raise OscDecodeError(f"Failed to read OSC packet: {e}") from e


def message_type_tags(data: bytes) -> str:
    """Return the type tags of an OSC message datagram, without the leading comma.

    A message without a type tag string has no arguments and yields "".

    Raises:
        OscDecodeError: If the address or type tag string cannot be read
    """
    try:
        _, index = osc_types.get_string(data, 0)
        if index >= len(data):
            return ""
        tags, _ = osc_types.get_string(data, index)
    except osc_types.ParseError as e:
        raise OscDecodeError(f"Failed to read OSC type tags: {e}") from e

    if not tags.startswith(","):
        return ""
    return tags[1:]


def bind_socket(host: str, port: int) -> socket.socket:
    """Create a UDP socket bound to host:port.

    Raises:
        OSError: If the address cannot be bound
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    return sock


class MessageStatistics:
    """Message counters with formatted output.

    Typical counters:
        - received: datagrams read from the socket
        - routed: messages matching a route
        - unrouted: messages with no matching route
        - declined: routed messages rejected by the resolver
        - written: reports written to the device
        - device_errors: failed device opens/writes

    Examples:
        >>> stats = MessageStatistics()
        >>> stats.increment('received')
        >>> stats.print_stats("qlight-osc")
    """

    def __init__(self):
        self.counters = {}

    def increment(self, counter_name: str, amount: int = 1) -> None:
        self.counters[counter_name] = self.counters.get(counter_name, 0) + amount

    def get(self, counter_name: str) -> int:
        return self.counters.get(counter_name, 0)

    def print_stats(self, title: str = "STATISTICS") -> None:
        """Print counters, sorted by name, between separator lines."""
        print("\n" + "=" * 60)
        print(title)
        print("=" * 60)

        for name in sorted(self.counters.keys()):
            display_name = name.replace('_', ' ').title()
            print(f"{display_name}: {self.counters[name]}")

        print("=" * 60)


class LightBridge:
    """Applies routed OSC messages to one light.

    Args:
        session: DeviceSession for the active binding
        router: Routing table (default: default_router())
        write_errors: 'log' to continue after device errors, 'raise' to
                      propagate them and end the loop

    Attributes:
        stats (MessageStatistics): Message counters
    """

    def __init__(self, session: DeviceSession, router: Optional[Router] = None,
                 write_errors: str = "log"):
        if write_errors not in ("log", "raise"):
            raise ValueError(f"write_errors must be 'log' or 'raise', got {write_errors!r}")
        self.session = session
        self.router = router or default_router()
        self.write_errors = write_errors
        self.stats = MessageStatistics()

    def handle_message(self, address: str, args: Sequence,
                       type_tags: Optional[str] = None) -> Optional[CommandSet]:
        """Route, resolve and apply one OSC message.

        type_tags, when given, are the message's OSC type tags; color
        messages then require exactly one int32 ('i') argument.

        Returns:
            The CommandSet written to the device, or None if the message was
            dropped or the write failed under the 'log' policy

        Raises:
            DeviceError: On device failure under the 'raise' policy
        """
        match = self.router.match(address)
        if match is None:
            self.stats.increment('unrouted')
            logger.warning(f"Ignoring message for unknown OSC path: {address}")
            return None

        self.stats.increment('routed')

        try:
            command_set = resolve_message(match, args, type_tags)
        except CommandError as e:
            self.stats.increment('declined')
            logger.warning(f"Ignoring message {address} with arguments {list(args)}: {e}")
            return None

        logger.info(f"{address} (id={match.params.get('id')}) → {command_set}")

        try:
            written = self.session.write(command_set)
        except DeviceError as e:
            self.stats.increment('device_errors')
            if self.write_errors == "raise":
                raise
            logger.error(f"Failed to update {self.session}: {e}")
            return None

        self.stats.increment('written')
        logger.debug(f"Wrote {written} bytes")
        return command_set

    def handle_datagram(self, data: bytes) -> Optional[CommandSet]:
        """Decode a datagram and apply the message it carries.

        Raises:
            OscDecodeError: If the datagram cannot be decoded
            DeviceError: On device failure under the 'raise' policy
        """
        message = decode_datagram(data)
        if message is None:
            self.stats.increment('bundles')
            return None
        return self.handle_message(message.address, message.params,
                                   message_type_tags(data))

    def serve_forever(self, sock: socket.socket) -> None:
        """Receive and apply datagrams until the socket or decoder fails.

        Blocks on sock.recvfrom(). A receive error or an undecodable datagram
        is logged and ends the loop.

        Raises:
            DeviceError: On device failure under the 'raise' policy
        """
        while True:
            try:
                data, addr = sock.recvfrom(MAX_DATAGRAM)
            except OSError as e:
                logger.error(f"Error receiving from socket: {e}")
                break

            self.stats.increment('received')
            logger.debug(f"Received packet with size {len(data)} from: {addr}")

            try:
                self.handle_datagram(data)
            except OscDecodeError as e:
                logger.error(f"{e} (from {addr})")
                break
