"""
Light tower HID device discovery, open and write.

Uses the `hid` module from the hidapi package. Device paths are kept as text
in qlight (configs and CLI options are text) and encoded for hidapi, which
takes and returns bytes paths.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from qlight.errors import DeviceError
from qlight.log import get_logger
from qlight.model import CommandSet


VENDOR_ID = 0x04D8
PRODUCT_ID = 0xE73C

logger = get_logger(__name__)


def enumerate_lights() -> List[Dict]:
    """List connected light towers.

    Returns:
        hidapi device-info dicts for every HID interface matching the tower's
        vendor and product ID

    Raises:
        DeviceError: If the HID subsystem cannot be enumerated
    """
    import hid

    try:
        return list(hid.enumerate(VENDOR_ID, PRODUCT_ID))
    except (OSError, ValueError) as e:
        raise DeviceError(f"Failed to enumerate HID devices: {e}") from e


def device_path(info: Dict) -> str:
    path = info["path"]
    if isinstance(path, bytes):
        return path.decode("utf-8", errors="replace")
    return path


class Light:
    """An opened light tower."""

    def __init__(self, device, path: str):
        self.device = device
        self.path = path

    def update(self, command_set: CommandSet) -> int:
        """Write the command set as one output report.

        Returns:
            Number of bytes written, as reported by hidapi

        Raises:
            DeviceError: If the write fails
        """
        report = command_set.to_report()
        try:
            written = self.device.write(report)
        except (OSError, ValueError) as e:
            raise DeviceError(f"Failed to write to HID device at path: {self.path}: {e}", self.path) from e
        if written < 0:
            raise DeviceError(f"Failed to write to HID device at path: {self.path}", self.path)
        logger.debug(f"Wrote {written} bytes to {self.path}: {report[:8].hex()}")
        return written

    def close(self) -> None:
        self.device.close()

    def __repr__(self):
        return f"Light({self.path!r})"


def open_light(path: str) -> Light:
    """Open the HID device at path.

    Raises:
        DeviceError: If the device cannot be opened, annotated with the path
    """
    import hid

    device = hid.device()
    try:
        device.open_path(path.encode("utf-8"))
    except (OSError, ValueError) as e:
        raise DeviceError(f"Failed to open HID device at path: {path}: {e}", path) from e
    return Light(device, path)


@dataclass(frozen=True)
class DeviceBinding:
    """A physical device, identified by its open path."""

    path: str
    name: Optional[str] = None


class DeviceSession:
    """Owns the opened device for one binding.

    The device is opened on the first write and kept open for the life of
    the session.

    Args:
        binding: Device to open
        opener: Callable taking a path and returning a Light (default: open_light)
    """

    def __init__(self, binding: DeviceBinding, opener: Callable[[str], Light] = open_light):
        self.binding = binding
        self._opener = opener
        self._light: Optional[Light] = None

    @property
    def is_open(self) -> bool:
        return self._light is not None

    def get_or_open(self) -> Light:
        if self._light is None:
            self._light = self._opener(self.binding.path)
            logger.info(f"Opened light at {self.binding.path}")
        return self._light

    def write(self, command_set: CommandSet) -> int:
        """Send a command set to the device, opening it if needed.

        Returns:
            Number of bytes written

        Raises:
            DeviceError: If opening or writing fails
        """
        return self.get_or_open().update(command_set)

    def close(self) -> None:
        if self._light is not None:
            self._light.close()
            self._light = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self):
        label = self.binding.name or self.binding.path
        state = "open" if self.is_open else "closed"
        return f"DeviceSession({label!r}, {state})"
