#!/usr/bin/env python3
"""Tests for SystemKeyBlocker - graceful fallback when blocking isn't possible.

evdev is replaced with a MagicMock module, so these run anywhere.

Run with: pytest tests/test_keyblock.py -v
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from purple_smash.keyblock import ESCAPE, SystemKeyBlocker, build_key_map


@pytest.fixture
def fake_evdev():
    module = MagicMock()
    with patch.dict(sys.modules, {"evdev": module}):
        yield module


class TestStart:

    def test_no_evdev(self):
        with patch.dict(sys.modules, {"evdev": None}):
            blocker = SystemKeyBlocker()
            assert blocker.start() is False
            assert blocker.is_blocking is False

    def test_permission_denied(self, fake_evdev):
        fake_evdev.InputDevice.side_effect = PermissionError("denied")
        blocker = SystemKeyBlocker(device_path="/dev/input/event3")
        assert blocker.start() is False

    def test_no_keyboard_found(self, fake_evdev):
        with patch.object(SystemKeyBlocker, "_find_keyboard", return_value=None):
            assert SystemKeyBlocker().start() is False

    def test_grab_fails(self, fake_evdev):
        device = MagicMock()
        device.grab.side_effect = OSError("busy")
        fake_evdev.InputDevice.return_value = device
        blocker = SystemKeyBlocker(device_path="/dev/input/event3")
        assert blocker.start() is False
        device.close.assert_called_once()

    def test_grab_succeeds(self, fake_evdev):
        device = MagicMock()
        fake_evdev.InputDevice.return_value = device
        blocker = SystemKeyBlocker(device_path="/dev/input/event3")
        assert blocker.start() is True
        assert blocker.is_blocking is True
        device.grab.assert_called_once()

    def test_start_twice(self, fake_evdev):
        fake_evdev.InputDevice.return_value = MagicMock()
        blocker = SystemKeyBlocker(device_path="/dev/input/event3")
        blocker.start()
        assert blocker.start() is True
        fake_evdev.InputDevice.assert_called_once()


class TestStop:

    def test_stop_releases(self, fake_evdev):
        device = MagicMock()
        fake_evdev.InputDevice.return_value = device
        blocker = SystemKeyBlocker(device_path="/dev/input/event3")
        blocker.start()
        blocker.stop()
        device.ungrab.assert_called_once()
        device.close.assert_called_once()
        assert blocker.is_blocking is False

    def test_stop_when_not_started(self):
        blocker = SystemKeyBlocker()
        blocker.stop()
        assert blocker.is_blocking is False

    def test_ungrab_error_ignored(self, fake_evdev):
        device = MagicMock()
        device.ungrab.side_effect = OSError("gone")
        fake_evdev.InputDevice.return_value = device
        blocker = SystemKeyBlocker(device_path="/dev/input/event3")
        blocker.start()
        blocker.stop()
        device.close.assert_called_once()


class TestKeyMap:

    def test_maps_letters_digits_and_escape(self):
        ecodes = MagicMock()
        ecodes.KEY_A = 30
        ecodes.KEY_1 = 2
        ecodes.KEY_SPACE = 57
        ecodes.KEY_ESC = 1
        key_map = build_key_map(ecodes)
        assert key_map[30] == "a"
        assert key_map[2] == "1"
        assert key_map[57] == " "
        assert key_map[1] == ESCAPE
