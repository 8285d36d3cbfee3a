#!/usr/bin/env python3
"""
Tests for the qlight-osc entry point.

Tests cover:
1. Config errors → exit code 1
2. Bind failures → exit code 1
3. Normal run: active binding, write policy, cleanup and statistics
"""

import errno
import os
import tempfile
from unittest.mock import MagicMock, patch

import pytest
import yaml

from qlight.device import DeviceBinding
from qlight.errors import DeviceError
from qlight.server import main


@pytest.fixture
def config_file():
    config = {
        'listen': '127.0.0.1:9000',
        'bindings': {'tower': {'path': '/dev/hidraw3'}},
        'write_errors': 'raise',
    }
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        yaml.dump(config, f)
        temp_path = f.name
    yield temp_path
    os.unlink(temp_path)


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch('qlight.server.setup_logging'):
        yield


class TestStartupErrors:
    """Startup failures exit with status 1."""

    def test_missing_config(self, capsys):
        assert main(['--config', '/nonexistent/config.yaml']) == 1
        assert 'not found' in capsys.readouterr().err

    def test_invalid_config(self, capsys):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            yaml.dump({'listen': '0.0.0.0:9000'}, f)
            temp_path = f.name
        try:
            assert main(['--config', temp_path]) == 1
        finally:
            os.unlink(temp_path)

        assert 'bindings' in capsys.readouterr().err

    def test_malformed_yaml(self, capsys):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write("listen: [unclosed\n")
            temp_path = f.name
        try:
            assert main(['--config', temp_path]) == 1
        finally:
            os.unlink(temp_path)

        assert 'Failed to load config' in capsys.readouterr().err

    def test_unexpected_errors_propagate(self, config_file):
        with patch('qlight.server.qconfig.load_config', side_effect=RuntimeError("boom")):
            with pytest.raises(RuntimeError):
                main(['--config', config_file])

    def test_config_from_env(self, capsys):
        with patch.dict(os.environ, {'QLIGHT_OSC_CONFIG': '/nonexistent/env.yaml'}):
            assert main([]) == 1

        assert '/nonexistent/env.yaml' in capsys.readouterr().err

    def test_port_in_use(self, config_file):
        error = OSError(errno.EADDRINUSE, "Address already in use")
        with patch('qlight.server.bind_socket', side_effect=error), \
             patch('qlight.server.LightBridge') as bridge_cls:
            assert main(['--config', config_file]) == 1

        bridge_cls.assert_not_called()


class TestRun:
    """Normal bridge runs."""

    def test_runs_bridge_on_first_binding(self, config_file):
        sock = MagicMock()
        with patch('qlight.server.bind_socket', return_value=sock) as bind, \
             patch('qlight.server.LightBridge') as bridge_cls:
            assert main(['--config', config_file]) == 0

        bind.assert_called_once_with('127.0.0.1', 9000)
        session = bridge_cls.call_args[0][0]
        assert session.binding == DeviceBinding(path='/dev/hidraw3', name='tower')
        assert bridge_cls.call_args[1]['write_errors'] == 'raise'

        bridge = bridge_cls.return_value
        bridge.serve_forever.assert_called_once_with(sock)
        sock.close.assert_called_once()
        bridge.session.close.assert_called_once()
        bridge.stats.print_stats.assert_called_once()

    def test_device_error_exits_1(self, config_file):
        sock = MagicMock()
        with patch('qlight.server.bind_socket', return_value=sock), \
             patch('qlight.server.LightBridge') as bridge_cls:
            bridge_cls.return_value.serve_forever.side_effect = DeviceError("Failed to write")

            assert main(['--config', config_file]) == 1

        sock.close.assert_called_once()

    def test_keyboard_interrupt_exits_0(self, config_file):
        with patch('qlight.server.bind_socket', return_value=MagicMock()), \
             patch('qlight.server.LightBridge') as bridge_cls:
            bridge_cls.return_value.serve_forever.side_effect = KeyboardInterrupt

            assert main(['--config', config_file]) == 0

    def test_logs_through_component_logger(self, config_file):
        with patch('qlight.server.bind_socket', return_value=MagicMock()), \
             patch('qlight.server.LightBridge'), \
             patch('qlight.server.get_logger') as get_logger:
            assert main(['--config', config_file]) == 0

        get_logger.assert_called_once_with('qlight.server')
        messages = [c[0][0] for c in get_logger.return_value.info.call_args_list]
        assert any('tower' in m for m in messages)
        assert any('127.0.0.1:9000' in m for m in messages)
