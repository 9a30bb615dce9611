"""Themes: palettes, shapes and sizes for figures.

Pure data plus a small picker. Importable from anywhere without touching
audio or the terminal.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .figures import NamedColor, ShapeType

logger = logging.getLogger(__name__)


class FaceStyle(Enum):
    NONE = "none"
    SIMPLE = "simple"    # Two dots and a curve
    KAWAII = "kawaii"


# Named colors (names are spoken in speech mode)
RED = NamedColor("Red", "#ff3b30")
BLUE = NamedColor("Blue", "#007aff")
YELLOW = NamedColor("Yellow", "#ffcc00")
GREEN = NamedColor("Green", "#34c759")
PURPLE = NamedColor("Purple", "#af52de")
PINK = NamedColor("Pink", "#ff2d55")
ORANGE = NamedColor("Orange", "#ff9500")
CYAN = NamedColor("Cyan", "#32ade6")
MINT = NamedColor("Mint", "#00c7be")
WHITE = NamedColor("White", "#ffffff")

CLASSIC_PALETTE = (RED, BLUE, YELLOW, GREEN, PURPLE, PINK, ORANGE, CYAN, MINT)

ALL_SHAPES = frozenset(ShapeType)


@dataclass(frozen=True)
class Theme:
    name: str
    background: str
    palette: tuple[NamedColor, ...]
    enabled_shapes: frozenset = ALL_SHAPES
    min_size: float = 150.0
    max_size: float = 300.0
    font_name: str = "default"
    face_style: FaceStyle = FaceStyle.SIMPLE

    @property
    def supports_faces(self) -> bool:
        return self.face_style != FaceStyle.NONE


CLASSIC = Theme(
    name="classic",
    background="#000000",
    palette=CLASSIC_PALETTE,
)

PASTEL = Theme(
    name="pastel",
    background="#f2f2f2",
    palette=(
        NamedColor("Pink", "#ffcccc"),
        NamedColor("Blue", "#cce6ff"),
        NamedColor("Yellow", "#ffffcc"),
        NamedColor("Green", "#ccffcc"),
        NamedColor("Purple", "#e6ccff"),
        NamedColor("Peach", "#ffe6cc"),
    ),
    max_size=280.0,
    face_style=FaceStyle.KAWAII,
)

HIGH_CONTRAST = Theme(
    name="high_contrast",
    background="#000000",
    palette=(RED, GREEN, BLUE, YELLOW, WHITE),
    min_size=200.0,
    max_size=350.0,
)

SPACE = Theme(
    name="space",
    background="#0d051a",
    palette=(
        NamedColor("Purple", "#9966ff"),
        NamedColor("Blue", "#6699ff"),
        WHITE,
        NamedColor("Gold", "#ffcc66"),
        NamedColor("Teal", "#66ffcc"),
    ),
    enabled_shapes=frozenset({ShapeType.STAR, ShapeType.CIRCLE, ShapeType.OVAL}),
    min_size=100.0,
    max_size=250.0,
    face_style=FaceStyle.NONE,
)

NIGHT = Theme(
    name="night",
    background="#000000",
    palette=(
        NamedColor("Red", "#994d33"),
        NamedColor("Orange", "#99804d"),
        NamedColor("Yellow", "#80804d"),
    ),
    max_size=280.0,
)

OCEAN = Theme(
    name="ocean",
    background="#001a33",
    palette=(
        NamedColor("Blue", "#4db3e6"),
        NamedColor("Blue", "#3380cc"),
        NamedColor("Seafoam", "#66cc99"),
        WHITE,
        NamedColor("Teal", "#339980"),
    ),
)

CANDY = Theme(
    name="candy",
    background="#ffe6f2",
    palette=(
        NamedColor("Pink", "#ff6699"),
        NamedColor("Purple", "#cc66ff"),
        NamedColor("Teal", "#66e6e6"),
        NamedColor("Pink", "#ff99cc"),
        NamedColor("Violet", "#9966e6"),
    ),
    min_size=120.0,
    max_size=280.0,
    face_style=FaceStyle.KAWAII,
)

BUILTIN_THEMES = {
    theme.name: theme
    for theme in (CLASSIC, PASTEL, HIGH_CONTRAST, SPACE, NIGHT, OCEAN, CANDY)
}


def get_theme(name: str) -> Theme:
    """Look up a built-in theme, falling back to classic."""
    theme = BUILTIN_THEMES.get(name)
    if theme is None:
        logger.warning(f"Unknown theme {name!r}, using classic")
        return CLASSIC
    return theme


class ThemePicker:
    """
    Random choices from the current theme.

    Empty palettes and empty shape sets never fail: they fall back to white
    and circles.
    """

    def __init__(self, theme: Theme = CLASSIC, rng: Optional[random.Random] = None):
        self.theme = theme
        self._rng = rng or random.Random()

    def select(self, name: str) -> None:
        self.theme = get_theme(name)

    @property
    def supports_faces(self) -> bool:
        return self.theme.supports_faces

    @property
    def font_name(self) -> str:
        return self.theme.font_name

    def random_color(self) -> NamedColor:
        if not self.theme.palette:
            return WHITE
        return self._rng.choice(self.theme.palette)

    def random_enabled_shape(self) -> ShapeType:
        # Sort so a seeded rng gives the same shape every run
        shapes = sorted(self.theme.enabled_shapes, key=lambda s: s.value)
        if not shapes:
            return ShapeType.CIRCLE
        return self._rng.choice(shapes)

    def random_size(self) -> float:
        return self._rng.uniform(self.theme.min_size, self.theme.max_size)
