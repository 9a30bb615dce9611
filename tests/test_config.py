#!/usr/bin/env python3
"""Tests for SmashConfig loading and validation.

Run with: pytest tests/test_config.py -v
"""

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from purple_smash.config import (
    CONFIG_ENV_VAR, FocusMode, SmashConfig, SoundMode, config_path, load_config,
)
from purple_smash.placement import DisplayMode


@pytest.fixture
def write_config(tmp_path):
    def write(data):
        path = tmp_path / "smash.json"
        path.write_text(data if isinstance(data, str) else json.dumps(data))
        return path
    return write


class TestDefaults:

    def test_defaults(self):
        config = SmashConfig()
        assert config.sound_mode == SoundMode.LAUGHTER
        assert config.fade_enabled is True
        assert config.fade_after == 10.0
        assert config.show_faces is True
        assert config.mouse_draw_enabled is True
        assert config.clickless_mouse_draw is False
        assert config.force_uppercase is True
        assert config.max_figures == 50
        assert config.block_system_keys is False
        assert config.display_mode == DisplayMode.ALL
        assert config.selected_display_index == 0
        assert config.theme == "classic"
        assert config.focus_mode == FocusMode.ALL
        assert config.auto_play_interval == 3.0

    def test_effective_max_figures(self):
        assert SmashConfig().effective_max_figures == 50
        assert SmashConfig(simplified_mode=True).effective_max_figures == 5
        assert SmashConfig(simplified_mode=True, max_simultaneous_shapes=3).effective_max_figures == 3

    def test_to_dict_uses_plain_values(self):
        data = SmashConfig().to_dict()
        assert data["sound_mode"] == "laughter"
        assert data["display_mode"] == "all"
        json.dumps(data)


class TestFromDict:

    def test_enum_strings(self):
        config = SmashConfig.from_dict({
            "sound_mode": "speech",
            "display_mode": "selected",
            "focus_mode": "shapes",
        })
        assert config.sound_mode == SoundMode.SPEECH
        assert config.display_mode == DisplayMode.SELECTED
        assert config.focus_mode == FocusMode.SHAPES

    def test_int_accepted_for_float(self):
        assert SmashConfig.from_dict({"fade_after": 5}).fade_after == 5.0

    @pytest.mark.parametrize("name,value", [
        ("sound_mode", "loud"),
        ("fade_enabled", "yes"),
        ("fade_after", "10"),
        ("fade_after", -1),
        ("max_figures", True),
        ("max_figures", 2.5),
        ("max_figures", -3),
        ("theme", "disco"),
        ("auto_play_interval", 0),
    ])
    def test_invalid_value_keeps_default(self, name, value):
        config = SmashConfig.from_dict({name: value})
        assert getattr(config, name) == getattr(SmashConfig(), name)

    def test_one_bad_value_keeps_the_rest(self):
        config = SmashConfig.from_dict({"theme": "disco", "fade_after": 3})
        assert config.theme == "classic"
        assert config.fade_after == 3.0

    def test_unknown_keys_ignored(self):
        config = SmashConfig.from_dict({"volume": 11})
        assert config == SmashConfig()


class TestLoadConfig:

    def test_missing_file(self, tmp_path):
        assert load_config(tmp_path / "missing.json") == SmashConfig()

    def test_loads_file(self, write_config):
        path = write_config({"theme": "space", "max_figures": 20})
        config = load_config(path)
        assert config.theme == "space"
        assert config.max_figures == 20

    def test_malformed_json(self, write_config):
        assert load_config(write_config("{not json")) == SmashConfig()

    def test_not_an_object(self, write_config):
        assert load_config(write_config("[1, 2, 3]")) == SmashConfig()

    def test_env_var_path(self, write_config, monkeypatch):
        path = write_config({"auto_play": True})
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert config_path() == path
        assert load_config().auto_play is True

    def test_explicit_path_beats_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "env.json"))
        assert config_path(tmp_path / "given.json") == tmp_path / "given.json"
