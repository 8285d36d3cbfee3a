"""
Tests for the qlight command-line tool.

Tests cover:
1. Argument parsing (target selection, token validation)
2. list subcommand
3. set subcommand writes, ordering and failure handling
"""

from unittest.mock import Mock, call, patch

import pytest

from qlight.cli import build_parser, cmd_set, main
from qlight.errors import DeviceError
from qlight.model import Color, CommandSet, LightCommand, LightMode


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch('qlight.cli.setup_logging'):
        yield


@pytest.fixture
def sessions():
    """Patch DeviceSession in qlight.cli; record one Mock session per path."""
    created = {}

    def make_session(binding):
        session = Mock()
        session.__enter__ = Mock(return_value=session)
        session.__exit__ = Mock(return_value=False)
        session.write.return_value = 65
        created[binding.path] = session
        return session

    with patch('qlight.cli.DeviceSession', side_effect=make_session):
        yield created


# =============================================================================
# Argument parsing
# =============================================================================

class TestParser:
    """Tests for build_parser()."""

    def test_set_with_paths(self):
        args = build_parser().parse_args(
            ['set', '--path', 'a', '--path', 'b', 'red:on', 'blue:blink'])

        assert args.path == ['a', 'b']
        assert not args.all
        assert args.commands == [
            LightCommand(Color.RED, LightMode.ON),
            LightCommand(Color.BLUE, LightMode.BLINK),
        ]

    def test_set_all_with_reset(self):
        args = build_parser().parse_args(['set', '--all', '--reset', 'green:off'])

        assert args.all and args.reset

    def test_target_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(['set', 'red:on'])

    def test_path_and_all_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(['set', '--all', '--path', 'a', 'red:on'])

    def test_bad_token_rejected_with_format(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(['set', '--all', 'redon'])

        assert exc_info.value.code == 2
        assert '[red,yellow,green,blue,white]:[on,off,blink]' in capsys.readouterr().err


# =============================================================================
# list
# =============================================================================

class TestList:
    """Tests for `qlight list`."""

    def test_prints_one_path_per_line(self, capsys):
        devices = [{'path': b'/dev/hidraw3'}, {'path': b'/dev/hidraw4'}]
        with patch('qlight.cli.enumerate_lights', return_value=devices):
            assert main(['list']) == 0

        assert capsys.readouterr().out == '/dev/hidraw3\n/dev/hidraw4\n'

    def test_enumeration_failure(self, capsys):
        with patch('qlight.cli.enumerate_lights', side_effect=DeviceError("Failed to enumerate HID devices")):
            assert main(['list']) == 1

        assert 'enumerate' in capsys.readouterr().err


# =============================================================================
# set
# =============================================================================

class TestSet:
    """Tests for `qlight set`."""

    def test_writes_to_each_path(self, sessions):
        assert main(['set', '--path', 'a', '--path', 'b', 'red:on', 'blue:blink']) == 0

        expected = CommandSet.default()
        expected.set(Color.RED, LightMode.ON)
        expected.set(Color.BLUE, LightMode.BLINK)
        assert list(sessions) == ['a', 'b']
        for session in sessions.values():
            session.write.assert_called_once_with(expected)

    def test_reset_flag(self, sessions):
        main(['set', '--path', 'a', '--reset', 'red:on'])

        expected = CommandSet.all_off()
        expected.set(Color.RED, LightMode.ON)
        sessions['a'].write.assert_called_once_with(expected)

    def test_all_uses_enumeration(self, sessions):
        devices = [{'path': b'/dev/hidraw3'}, {'path': b'/dev/hidraw5'}]
        with patch('qlight.cli.enumerate_lights', return_value=devices):
            assert main(['set', '--all', 'white:on']) == 0

        assert list(sessions) == ['/dev/hidraw3', '/dev/hidraw5']

    def test_all_with_no_lights(self, sessions, capsys):
        with patch('qlight.cli.enumerate_lights', return_value=[]):
            assert main(['set', '--all', 'white:on']) == 1

        assert sessions == {}
        assert 'No lights found' in capsys.readouterr().err

    def test_bad_token_means_no_device_io(self, sessions):
        with pytest.raises(SystemExit):
            main(['set', '--path', 'a', 'red:on', 'purple:on'])

        assert sessions == {}

    def test_device_error_aborts_remaining(self, sessions, capsys):
        def make_failing(path):
            session = Mock()
            session.__enter__ = Mock(return_value=session)
            session.__exit__ = Mock(return_value=False)
            session.write.side_effect = DeviceError(f"Failed to open HID device at path: {path}", path)
            return session

        with patch('qlight.cli.DeviceSession', side_effect=lambda b: make_failing(b.path)) as factory:
            assert main(['set', '--path', 'a', '--path', 'b', 'red:on']) == 1

        assert factory.call_count == 1
        assert 'Failed to open HID device at path: a' in capsys.readouterr().err

    def test_cmd_set_propagates_device_errors(self):
        with patch('qlight.cli.DeviceSession') as factory:
            factory.return_value.__enter__.return_value.write.side_effect = DeviceError("boom")

            with pytest.raises(DeviceError):
                cmd_set([LightCommand(Color.RED, LightMode.ON)], paths=['a'])


def test_no_subcommand_prints_help(capsys):
    assert main([]) == 1
    assert 'usage' in capsys.readouterr().out.lower()
