"""
Drawing board - freehand mouse trails.

Pointer samples build up strokes (DrawingTrail). Every change hands the
complete set of trails to a publish callback, which the session points at
EntityStore.set_trails. Trail points fade out on their own a couple of
seconds after they were drawn.
"""

import logging
import math
import random
import time
from typing import Callable, Optional

from .constants import (
    TRAIL_FADE_START, TRAIL_LIFETIME, TRAIL_MAX_POINTS, TRAIL_MIN_DISTANCE,
    TRAIL_MAX_WIDTH, TRAIL_MIN_WIDTH,
)
from .figures import DrawingTrail, Point, TrailPoint
from .themes import CLASSIC_PALETTE

logger = logging.getLogger(__name__)


class DrawingBoard:
    """
    Owns the live drawing trails.

    Args:
        publish: Called with a fresh list of trail copies after every change
        on_stroke_start: Called once when a new stroke begins (plays a sound)
        clock: Time source, injectable for tests
        rng: Random source for trail color and width
    """

    def __init__(
        self,
        publish: Callable[[list[DrawingTrail]], None],
        on_stroke_start: Optional[Callable[[], None]] = None,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
        min_distance: float = TRAIL_MIN_DISTANCE,
        max_points: int = TRAIL_MAX_POINTS,
    ):
        self._publish = publish
        self._on_stroke_start = on_stroke_start
        self._clock = clock
        self._rng = rng or random.Random()
        self.min_distance = min_distance
        self.max_points = max_points
        self._trails: list[DrawingTrail] = []
        self._current: Optional[DrawingTrail] = None

    @property
    def is_drawing(self) -> bool:
        return self._current is not None

    @property
    def trails(self) -> list[DrawingTrail]:
        return [t.copy() for t in self._trails]

    def add_point(self, position: Point, surface_index: int = 0) -> None:
        """Add a pointer sample to the current stroke, starting one if needed."""
        now = self._clock()
        current = self._current

        # A stroke never jumps between surfaces
        if current is not None and current.surface_index != surface_index:
            self.end_drawing()
            current = None

        if current is not None and current.last_point is not None:
            last = current.last_point.position
            if math.hypot(position[0] - last[0], position[1] - last[1]) < self.min_distance:
                return

        if current is None:
            current = DrawingTrail(
                surface_index=surface_index,
                color=self._rng.choice(CLASSIC_PALETTE),
                width=self._rng.uniform(TRAIL_MIN_WIDTH, TRAIL_MAX_WIDTH),
                created_at=now,
            )
            self._trails.append(current)
            self._current = current
            if self._on_stroke_start:
                self._on_stroke_start()

        current.points.append(TrailPoint(Point(*position), now))
        self._enforce_limit()
        self._publish(self.trails)

    def end_drawing(self) -> None:
        """Close the current stroke. The next sample starts a new one."""
        if self._current is None:
            return
        self._current.closed = True
        logger.debug(f"DrawingBoard: stroke ended with {len(self._current.points)} point(s)")
        self._current = None
        self._publish(self.trails)

    def prune(self, now: Optional[float] = None) -> None:
        """Fade trail points by age and drop the ones that have expired."""
        if not self._trails:
            return
        if now is None:
            now = self._clock()

        changed = False
        kept: list[DrawingTrail] = []
        for trail in self._trails:
            points = []
            for point in trail.points:
                age = now - point.created_at
                if age > TRAIL_LIFETIME:
                    changed = True
                    continue
                if age > TRAIL_FADE_START:
                    opacity = max(0.0, 1.0 - (age - TRAIL_FADE_START) / (TRAIL_LIFETIME - TRAIL_FADE_START))
                    if opacity != point.opacity:
                        point = TrailPoint(point.position, point.created_at, opacity)
                        changed = True
                points.append(point)
            trail.points = points
            if points:
                kept.append(trail)
                continue
            changed = True
            # A fully faded open stroke ends; the next sample starts a fresh one
            if trail is self._current:
                self._current = None

        self._trails = kept
        if changed:
            self._publish(self.trails)

    def clear(self) -> None:
        self._trails = []
        self._current = None
        self._publish([])

    def _enforce_limit(self) -> None:
        total = sum(len(t.points) for t in self._trails)
        while total > self.max_points and self._trails:
            oldest = self._trails[0]
            del oldest.points[0]
            total -= 1
            if not oldest.points and oldest is not self._current:
                self._trails.pop(0)
