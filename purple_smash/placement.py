"""
Placement - which surface a new figure goes on, and where.

A surface is one full-screen render target (usually one monitor; in the
terminal app, one pane). Sizes are in logical units and are learned lazily
as events arrive from each surface.
"""

import logging
import random
from enum import Enum
from typing import Optional

from .constants import MIN_SPAN, SPAWN_MARGIN
from .figures import Point, Size

logger = logging.getLogger(__name__)


class DisplayMode(Enum):
    """Which surfaces get figures."""
    ALL = "all"
    PRIMARY = "primary"
    SELECTED = "selected"


class SurfaceTopology:
    """
    The active surfaces and the last known size of each.

    Sizes are kept for the life of the process, including across topology
    changes: a surface that comes back keeps its old size until it reports a
    new one.
    """

    def __init__(self, surface_count: int = 1, default_size: Size = Size(0, 0)):
        self.surface_count = max(0, surface_count)
        self.default_size = default_size
        self._sizes: dict[int, Size] = {}

    def update(self, surface_count: int) -> None:
        """Called when displays are added or removed."""
        self.surface_count = max(0, surface_count)
        logger.info(f"SurfaceTopology: {self.surface_count} surface(s)")

    def set_surface_size(self, surface_index: int, size: Size) -> None:
        self._sizes[surface_index] = Size(*size)

    def size_for(self, surface_index: int) -> Size:
        """Known size of a surface, falling back to surface 0, then the default."""
        if surface_index in self._sizes:
            return self._sizes[surface_index]
        return self._sizes.get(0, self.default_size)


def eligible_surfaces(display_mode: DisplayMode, selected_index: int, surface_count: int) -> list[int]:
    """
    Surface indices that may receive keyboard figures.

    Selected mode clamps an out-of-range index to the nearest real surface.
    No surfaces at all gives an empty list.
    """
    if surface_count <= 0:
        return []
    if display_mode == DisplayMode.PRIMARY:
        return [0]
    if display_mode == DisplayMode.SELECTED:
        return [min(max(selected_index, 0), surface_count - 1)]
    return list(range(surface_count))


def resolve_target(
    display_mode: DisplayMode,
    selected_index: int,
    topology: SurfaceTopology,
    rng: Optional[random.Random] = None,
) -> int:
    """Pick a surface for a keyboard figure, uniformly among eligible ones.

    Never fails: with nothing eligible, surface 0 is used.
    """
    rng = rng or random
    surfaces = eligible_surfaces(display_mode, selected_index, topology.surface_count)
    if not surfaces:
        return 0
    return rng.choice(surfaces)


def random_position(size: Size, rng: Optional[random.Random] = None) -> Point:
    """
    Uniform random point at least SPAWN_MARGIN from every edge.

    A dimension smaller than 2 * margin + 1 (including zero) is treated as
    exactly that, so the range is never empty or inverted.
    """
    rng = rng or random
    width = max(MIN_SPAN, size[0])
    height = max(MIN_SPAN, size[1])
    x = rng.uniform(SPAWN_MARGIN, width - SPAWN_MARGIN)
    y = rng.uniform(SPAWN_MARGIN, height - SPAWN_MARGIN)
    return Point(x, y)


# Fractions of the surface, visited in order
PREDICTABLE_SPOTS = [
    (0.25, 0.25),
    (0.75, 0.25),
    (0.5, 0.5),
    (0.25, 0.75),
    (0.75, 0.75),
]


class PredictablePlacer:
    """Cycles through five fixed spots, for kids who like to know where things appear."""

    def __init__(self):
        self._index = 0

    def next_position(self, size: Size) -> Point:
        fx, fy = PREDICTABLE_SPOTS[self._index % len(PREDICTABLE_SPOTS)]
        self._index += 1
        return Point(size[0] * fx, size[1] * fy)

    def reset(self) -> None:
        self._index = 0
