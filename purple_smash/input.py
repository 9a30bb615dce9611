"""
Normalized input events.

Whatever produces input (Textual key and mouse messages, the evdev key
blocker, a switch-access device, tests) turns it into one of the small
event types below before the session sees it. The session never looks at
raw terminal or device events.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from .figures import Point, Size
from .placement import DisplayMode


@dataclass(frozen=True)
class KeyEvent:
    """A printable key. `character` is exactly one glyph."""
    character: str

    @property
    def is_letter(self) -> bool:
        return self.character.isalpha()

    @property
    def is_digit(self) -> bool:
        return self.character.isdigit()


@dataclass(frozen=True)
class PointerEvent:
    """The pointer moved on a surface.

    surface_size is the surface's size when the event was sampled, so the
    session learns surface sizes without asking the display.
    """
    position: Point
    surface_index: int = 0
    is_dragging: bool = False
    surface_size: Optional[Size] = None


@dataclass(frozen=True)
class DragEnded:
    """The mouse button came up."""
    surface_index: int = 0


@dataclass(frozen=True)
class ScrollEvent:
    """Positive delta_y scrolls up, negative scrolls down."""
    delta_y: float
    surface_index: int = 0


@dataclass(frozen=True)
class TapEvent:
    """A click without a drag."""
    position: Point
    surface_index: int = 0
    surface_size: Optional[Size] = None


@dataclass(frozen=True)
class TopologyChanged:
    surface_count: int


@dataclass(frozen=True)
class DisplayModeChanged:
    display_mode: DisplayMode
    selected_index: int = 0


class SwitchAction(Enum):
    """Actions from a single-switch or switch-scanning accessibility device."""
    SHOW_RANDOM_SHAPE = "show_random_shape"
    SHOW_RANDOM_LETTER = "show_random_letter"
    SHOW_RANDOM_NUMBER = "show_random_number"
    CLEAR_SCREEN = "clear_screen"


InputEvent = Union[
    KeyEvent, PointerEvent, DragEnded, ScrollEvent, TapEvent,
    TopologyChanged, DisplayModeChanged, SwitchAction,
]


def normalize_key(character: Optional[str]) -> Optional[KeyEvent]:
    """
    KeyEvent for a single printable character, None for anything else.

    Control characters, empty strings and multi-character key names
    ("escape", "f1") give None.
    """
    if not character or len(character) != 1:
        return None
    if not character.isprintable():
        return None
    return KeyEvent(character)


@dataclass
class HoldState:
    """
    Tracks a key being held down, for long-press actions like Escape to quit.

    Terminals only send repeated key-downs while a key is held, so callers
    start() on the first press, check() on each repeat and reset() when a
    different key arrives or the repeats stop.
    """
    key: Optional[str] = None
    start_time: float = 0.0
    triggered: bool = False
    threshold: float = 1.0  # seconds
    clock: Callable[[], float] = time.monotonic

    def start(self, key: str) -> None:
        """Start tracking a key hold."""
        if key != self.key:
            self.key = key
            self.start_time = self.clock()
            self.triggered = False

    def check(self, key: str) -> bool:
        """
        Check if hold threshold reached for given key.
        Returns True if threshold reached (only once per hold).
        """
        if key != self.key:
            self.reset()
            return False

        if self.triggered:
            return False

        if self.clock() - self.start_time >= self.threshold:
            self.triggered = True
            return True

        return False

    def reset(self) -> None:
        self.key = None
        self.start_time = 0.0
        self.triggered = False
