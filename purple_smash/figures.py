"""
Figures and drawing trails: the things that show up on screen.

Pure data with no side effects. Everything here is created by the session
and only ever replaced (never edited in place) once it is on screen.
"""

import itertools
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import NamedTuple, Optional


class Point(NamedTuple):
    x: float
    y: float


class Size(NamedTuple):
    width: float
    height: float


class NamedColor(NamedTuple):
    """A palette color with the name we say out loud."""
    name: str
    hex: str


class ShapeType(Enum):
    """Shapes a non-letter key can make."""
    CIRCLE = "circle"
    OVAL = "oval"
    RECTANGLE = "rectangle"
    SQUARE = "square"
    TRIANGLE = "triangle"
    HEXAGON = "hexagon"
    TRAPEZOID = "trapezoid"
    STAR = "star"
    HEART = "heart"


# Glyph used to draw each shape in a terminal cell
SHAPE_GLYPHS = {
    ShapeType.CIRCLE: "●",
    ShapeType.OVAL: "⬬",
    ShapeType.RECTANGLE: "▬",
    ShapeType.SQUARE: "■",
    ShapeType.TRIANGLE: "▲",
    ShapeType.HEXAGON: "⬢",
    ShapeType.TRAPEZOID: "⏢",
    ShapeType.STAR: "★",
    ShapeType.HEART: "♥",
}


class AnimationStyle(Enum):
    JIGGLE = "jiggle"
    THROB = "throb"
    ROTATE = "rotate"
    SNAP = "snap"
    NONE = "none"


ALL_ANIMATION_STYLES = tuple(AnimationStyle)

# Styles that never spin (for kids who find rotation upsetting)
NON_ROTATING_STYLES = (
    AnimationStyle.JIGGLE, AnimationStyle.THROB, AnimationStyle.SNAP, AnimationStyle.NONE,
)


_figure_ids = itertools.count(1)


@dataclass(frozen=True)
class Figure:
    """
    A single glyph or shape on one surface.

    Exactly one of `shape` and `character` is set. Building a Figure with
    neither or both is a bug in the caller and raises ValueError.

    Attributes:
        shape: Shape to draw, or None for a letter/number figure
        character: Glyph to draw, or None for a shape figure
        color: Palette color
        position: Center, in the surface's logical units
        size: Base size in logical units
        created_at: Clock reading when the figure was made
        opacity: 1.0 fully visible, 0.0 gone
        surface_index: Which surface shows this figure
    """
    shape: Optional[ShapeType]
    character: Optional[str]
    color: NamedColor
    position: Point
    size: float
    created_at: float
    scale: float = 1.0
    rotation: float = 0.0
    opacity: float = 1.0
    show_face: bool = False
    animation_style: AnimationStyle = AnimationStyle.NONE
    font_name: str = "default"
    surface_index: int = 0
    figure_id: int = field(default_factory=lambda: next(_figure_ids))

    def __post_init__(self):
        if (self.shape is None) == (self.character is None):
            raise ValueError("Figure needs exactly one of shape or character")
        if self.character is not None and len(self.character) != 1:
            raise ValueError(f"Figure character must be a single glyph, got {self.character!r}")
        if not 0.0 <= self.opacity <= 1.0:
            raise ValueError(f"Figure opacity out of range: {self.opacity}")

    @property
    def glyph(self) -> str:
        if self.character is not None:
            return self.character
        return SHAPE_GLYPHS[self.shape]

    def age(self, now: float) -> float:
        return now - self.created_at

    def with_opacity(self, opacity: float) -> "Figure":
        return replace(self, opacity=opacity)


@dataclass(frozen=True)
class TrailPoint:
    position: Point
    created_at: float
    opacity: float = 1.0


@dataclass
class DrawingTrail:
    """One freehand stroke on one surface.

    Owned by the DrawingBoard. The store only ever receives copies.
    """
    surface_index: int
    color: NamedColor
    width: float
    created_at: float
    points: list[TrailPoint] = field(default_factory=list)
    closed: bool = False

    @property
    def last_point(self) -> Optional[TrailPoint]:
        return self.points[-1] if self.points else None

    def copy(self) -> "DrawingTrail":
        return replace(self, points=list(self.points))
