"""Shared pytest fixtures for qlight tests.

Provides:
- fake_hid: stand-in for the hidapi `hid` module, installed in sys.modules
- fake_light: Mock Light returned by a DeviceSession opener
- session: DeviceSession whose opener returns fake_light
"""

import sys
from unittest.mock import MagicMock, Mock, patch

import pytest

from qlight.device import DeviceBinding, DeviceSession, Light


@pytest.fixture
def fake_hid():
    """Mock `hid` module.

    hid.device() returns the same MagicMock each call (fake_hid.handle),
    whose write() reports a full 65-byte write.
    """
    module = MagicMock()
    handle = MagicMock()
    handle.write.return_value = 65
    module.device.return_value = handle
    module.handle = handle
    module.enumerate.return_value = []
    with patch.dict(sys.modules, {'hid': module}):
        yield module


@pytest.fixture
def fake_light():
    light = Mock(spec=Light)
    light.update.return_value = 65
    return light


@pytest.fixture
def session(fake_light):
    opener = Mock(return_value=fake_light)
    return DeviceSession(DeviceBinding('/dev/hidraw3', name='tower'), opener=opener)
