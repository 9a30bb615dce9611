#!/usr/bin/env python3
"""Tests for the sound module's ALSA silencing and sound search path.

libasound is replaced with a MagicMock, so nothing is loaded or played.

Run with: pytest tests/test_sound.py -v
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from purple_smash import sound


class TestSilenceAlsa:

    def test_no_libasound(self):
        with patch.object(sound, "_open_asound", return_value=None):
            assert sound.silence_alsa() is False

    def test_handlers_installed(self):
        asound = MagicMock()
        with patch.object(sound, "_open_asound", return_value=asound):
            assert sound.silence_alsa() is True
        handler = asound.snd_lib_error_set_handler.call_args[0][0]
        asound.snd_lib_log_set_handler.assert_called_once_with(handler)
        assert handler in sound._alsa_handlers

    def test_old_alsa_without_log_handler(self):
        asound = MagicMock(spec=["snd_lib_error_set_handler"])
        with patch.object(sound, "_open_asound", return_value=asound):
            assert sound.silence_alsa() is True
        asound.snd_lib_error_set_handler.assert_called_once()


class TestSoundsDirs:

    def test_env_dir_first(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PURPLE_SMASH_SOUNDS", str(tmp_path))
        assert sound.default_sounds_dirs()[0] == tmp_path

    def test_without_env(self, monkeypatch):
        monkeypatch.delenv("PURPLE_SMASH_SOUNDS", raising=False)
        dirs = sound.default_sounds_dirs()
        assert Path("/opt/purple/smash/sounds") in dirs
