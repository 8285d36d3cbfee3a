"""
qlight-osc configuration loading and validation.

Example config.yaml:

    listen: "0.0.0.0:9000"
    bindings:
      tower:
        path: "/dev/hidraw3"
    write_errors: log
    logging:
      console_level: INFO
      file: logs/qlight-osc.log
"""

import ipaddress
import os
from pathlib import Path
from typing import Tuple

import yaml

from qlight.device import DeviceBinding
from qlight.errors import ConfigError


DEFAULT_CONFIG_PATH = "config.yaml"
CONFIG_ENV_VAR = "QLIGHT_OSC_CONFIG"

PORT_MIN = 1
PORT_MAX = 65535

WRITE_ERROR_POLICIES = ("log", "raise")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def default_config_path() -> str:
    return os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH


def load_config(path: str) -> dict:
    """
    Load and validate configuration from a YAML file.

    Args:
        path: Path to configuration YAML file

    Returns:
        Validated configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML syntax is invalid
        ConfigError: If configuration is invalid (via validate_config)
    """
    config_path = Path(path)

    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {path}\n"
            f"Create one or point {CONFIG_ENV_VAR} at it.\n"
            f"See config.yaml.example for a template."
        )

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)

    validate_config(config)

    return config


def parse_listen_address(text: str) -> Tuple[str, int]:
    """Parse an IPv4 "host:port" listen address.

    Raises:
        ConfigError: If the host is not an IPv4 address or the port is out of range

    Examples:
        >>> parse_listen_address("0.0.0.0:9000")
        ('0.0.0.0', 9000)
    """
    if not isinstance(text, str):
        raise ConfigError(f"Invalid listen address: {text!r}\nExpected \"host:port\"")

    host, sep, port_text = text.rpartition(":")
    if not sep or not host:
        raise ConfigError(f"Invalid listen address: {text}\nExpected \"host:port\"")

    try:
        ipaddress.IPv4Address(host)
    except ValueError:
        raise ConfigError(f"Invalid listen address: {text}\nHost must be an IPv4 address")

    try:
        port = int(port_text)
    except ValueError:
        raise ConfigError(f"Invalid listen address: {text}\nPort must be an integer")

    if not (PORT_MIN <= port <= PORT_MAX):
        raise ConfigError(
            f"Invalid listen port: {port}\n"
            f"Port must be in range {PORT_MIN}-{PORT_MAX}"
        )

    return host, port


def validate_config(config: dict) -> None:
    """
    Validate a loaded configuration.

    Validates:
    - listen: IPv4 host:port
    - bindings: non-empty mapping of name → {path: str}
    - write_errors: 'log' or 'raise' (optional)
    - logging levels (optional)

    Raises:
        ConfigError: If any validation fails
    """
    if not isinstance(config, dict):
        raise ConfigError("Configuration must be a mapping")

    listen = config.get('listen')
    if listen is None:
        raise ConfigError(
            "Configuration missing 'listen'\n"
            "Must specify: listen: \"host:port\""
        )
    parse_listen_address(listen)

    bindings = config.get('bindings')
    if not bindings:
        raise ConfigError(
            "No device bindings configured\n"
            "Add at least one entry under 'bindings' with a device path.\n"
            "Run 'qlight list' to find connected lights."
        )
    if not isinstance(bindings, dict):
        raise ConfigError("'bindings' must be a mapping of name → {path: ...}")

    for name, binding in bindings.items():
        if not isinstance(binding, dict) or not binding.get('path'):
            raise ConfigError(f"Binding '{name}' missing 'path'")
        if not isinstance(binding['path'], str):
            raise ConfigError(f"Binding '{name}' path must be a string")

    policy = config.get('write_errors', 'log')
    if policy not in WRITE_ERROR_POLICIES:
        raise ConfigError(
            f"Invalid write_errors: '{policy}'\n"
            f"Must be one of: {', '.join(WRITE_ERROR_POLICIES)}"
        )

    logging_config = config.get('logging') or {}
    for key in ('console_level', 'file_level'):
        level = logging_config.get(key)
        if level is not None and str(level).upper() not in LOG_LEVELS:
            raise ConfigError(
                f"Invalid logging.{key}: '{level}'\n"
                f"Must be one of: {', '.join(LOG_LEVELS)}"
            )


def first_binding(config: dict) -> DeviceBinding:
    """Return the first configured binding, the bridge's active target.

    Raises:
        ConfigError: If no bindings are configured
    """
    bindings = config.get('bindings') or {}
    for name, binding in bindings.items():
        return DeviceBinding(path=binding['path'], name=name)
    raise ConfigError("No device bindings found in config")
