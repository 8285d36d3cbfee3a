#!/usr/bin/env python3
"""
Main entry point for the qlight OSC bridge.

Loads configuration, sets up logging, resolves the active device binding,
binds the UDP socket and runs the bridge loop.

USAGE:
    qlight-osc
    qlight-osc --config /etc/qlight/config.yaml
    QLIGHT_OSC_CONFIG=/etc/qlight/config.yaml python3 -m qlight.server
"""

import argparse
import errno
import sys

import yaml

from qlight import config as qconfig
from qlight.device import DeviceSession
from qlight.errors import DeviceError
from qlight.log import get_logger, setup_logging
from qlight.osc import LightBridge, bind_socket


def main(argv=None) -> int:
    """
    Run the OSC bridge.

    Orchestrates:
    1. Configuration loading and validation
    2. Logging setup
    3. Active binding resolution (first configured binding)
    4. Socket bind and receive loop

    Returns:
        Exit code (0 = clean shutdown, 1 = error)
    """
    parser = argparse.ArgumentParser(
        prog="qlight-osc",
        description="Bridge OSC messages to a USB light tower",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help=f"Path to config YAML (default: ${qconfig.CONFIG_ENV_VAR} or {qconfig.DEFAULT_CONFIG_PATH})",
    )
    args = parser.parse_args(argv)

    config_path = args.config or qconfig.default_config_path()

    try:
        config = qconfig.load_config(config_path)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Invalid config: {e}", file=sys.stderr)
        return 1
    except yaml.YAMLError as e:
        print(f"Failed to load config from {config_path}: {e}", file=sys.stderr)
        return 1

    setup_logging(config)
    logger = get_logger(__name__)

    binding = qconfig.first_binding(config)
    host, port = qconfig.parse_listen_address(config['listen'])
    logger.info(f"Active binding: {binding.name} ({binding.path})")

    try:
        sock = bind_socket(host, port)
    except OSError as e:
        if e.errno == errno.EADDRINUSE:
            logger.error(f"Port {port} already in use. Is qlight-osc already running?")
        else:
            logger.error(f"Failed to bind to {host}:{port}: {e}")
        return 1

    logger.info(f"Listening to {host}:{port}")

    bridge = LightBridge(
        DeviceSession(binding),
        write_errors=config.get('write_errors', 'log'),
    )

    exit_code = 0
    try:
        bridge.serve_forever(sock)
    except KeyboardInterrupt:
        logger.info("Shutdown requested (Ctrl+C)")
    except DeviceError as e:
        logger.error(f"Stopping on device error: {e}")
        exit_code = 1
    finally:
        sock.close()
        bridge.session.close()
        bridge.stats.print_stats("QLIGHT-OSC STATISTICS")

    return exit_code


if __name__ == '__main__':
    sys.exit(main())
