"""
Configuration for a smash session.

Settings live in a small JSON file. A missing or broken file, or a bad value
for one setting, never stops the toy from starting: the bad part is logged
and the default is used instead.

Example ~/.config/purple/smash.json:
    {"sound_mode": "speech", "theme": "space", "fade_after": 5}
"""

import json
import logging
import os
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from .constants import (
    DEFAULT_AUTO_PLAY_INTERVAL, DEFAULT_FADE_AFTER, DEFAULT_MAX_FIGURES,
    DEFAULT_MAX_SIMULTANEOUS_SHAPES,
)
from .placement import DisplayMode
from .themes import BUILTIN_THEMES

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "purple" / "smash.json"
CONFIG_ENV_VAR = "PURPLE_SMASH_CONFIG"


class SoundMode(Enum):
    LAUGHTER = "laughter"
    SPEECH = "speech"
    OFF = "off"


class FocusMode(Enum):
    """Which kinds of figures keys make."""
    ALL = "all"
    LETTERS = "letters"    # Digits are ignored
    NUMBERS = "numbers"    # Letters are ignored
    SHAPES = "shapes"      # Every key makes a shape


@dataclass
class SmashConfig:
    sound_mode: SoundMode = SoundMode.LAUGHTER
    fade_enabled: bool = True
    fade_after: float = DEFAULT_FADE_AFTER
    show_faces: bool = True
    mouse_draw_enabled: bool = True
    clickless_mouse_draw: bool = False
    force_uppercase: bool = True
    max_figures: int = DEFAULT_MAX_FIGURES
    block_system_keys: bool = False
    display_mode: DisplayMode = DisplayMode.ALL
    selected_display_index: int = 0
    theme: str = "classic"
    focus_mode: FocusMode = FocusMode.ALL
    predictable_mode: bool = False
    simplified_mode: bool = False
    max_simultaneous_shapes: int = DEFAULT_MAX_SIMULTANEOUS_SHAPES
    auto_play: bool = False
    auto_play_interval: float = DEFAULT_AUTO_PLAY_INTERVAL
    large_elements: bool = False
    disable_rotation: bool = False

    @property
    def effective_max_figures(self) -> int:
        """Store capacity, smaller in simplified mode."""
        if self.simplified_mode:
            return self.max_simultaneous_shapes
        return self.max_figures

    @classmethod
    def from_dict(cls, data: dict) -> "SmashConfig":
        """Build a config from parsed JSON, keeping defaults for anything invalid."""
        config = cls()
        for f in fields(cls):
            if f.name not in data:
                continue
            try:
                value = _coerce(f.name, getattr(config, f.name), data[f.name])
            except (TypeError, ValueError) as e:
                logger.warning(f"SmashConfig: ignoring {f.name}={data[f.name]!r}: {e}")
                continue
            setattr(config, f.name, value)

        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            logger.warning(f"SmashConfig: unknown settings {sorted(unknown)}")
        return config

    def to_dict(self) -> dict:
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            data[f.name] = value.value if isinstance(value, Enum) else value
        return data


def _coerce(name: str, default: Any, value: Any) -> Any:
    """Check one value against the type of its default. Raises on bad input."""
    if isinstance(default, Enum):
        return type(default)(value)
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise TypeError("expected true or false")
        return value
    if isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError("expected a whole number")
        if value < 0:
            raise ValueError("must not be negative")
        return value
    if isinstance(default, float):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError("expected a number")
        if value < 0 or (name == "auto_play_interval" and value == 0):
            raise ValueError("out of range")
        return float(value)
    if name == "theme":
        if value not in BUILTIN_THEMES:
            raise ValueError(f"choose one of {sorted(BUILTIN_THEMES)}")
        return value
    if not isinstance(value, type(default)):
        raise TypeError(f"expected {type(default).__name__}")
    return value


def config_path(path: Optional[Path] = None) -> Path:
    """Explicit path, then $PURPLE_SMASH_CONFIG, then the default."""
    if path is not None:
        return Path(path)
    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return Path(env).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config(path: Optional[Path] = None) -> SmashConfig:
    """Load settings from disk. Anything wrong falls back to defaults."""
    path = config_path(path)
    if not path.exists():
        logger.debug(f"SmashConfig: no config at {path}, using defaults")
        return SmashConfig()

    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        logger.warning(f"SmashConfig: could not read {path}: {e}")
        return SmashConfig()

    if not isinstance(data, dict):
        logger.warning(f"SmashConfig: {path} is not a JSON object, using defaults")
        return SmashConfig()

    logger.info(f"SmashConfig: loaded {path}")
    return SmashConfig.from_dict(data)
