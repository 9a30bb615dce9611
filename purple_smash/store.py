"""
Entity Store - the canonical list of figures and drawing trails.

Only the session writes here. Readers (the surface widgets) take snapshots,
which are tuples and never change under them: every mutation builds a new
tuple and swaps it in.
"""

import logging
from typing import Callable, Iterable, Optional

from .constants import DEFAULT_MAX_FIGURES, FADE_TAIL
from .figures import DrawingTrail, Figure

logger = logging.getLogger(__name__)


class EntityStore:
    """
    Holds the figures and trails currently on screen.

    Usage:
        store = EntityStore(max_figures=50)
        store.add_listener(lambda: widget.refresh())
        store.add_figure(figure)
        store.age_step(now=time.monotonic(), fade_after=10.0)
    """

    def __init__(self, max_figures: int = DEFAULT_MAX_FIGURES, fade_tail: float = FADE_TAIL):
        self.max_figures = max_figures
        self.fade_tail = fade_tail
        self._figures: tuple[Figure, ...] = ()
        self._trails: tuple[DrawingTrail, ...] = ()
        self._listeners: list[Callable[[], None]] = []

    # -------------------------------------------------------------------------
    # Change notification
    # -------------------------------------------------------------------------

    def add_listener(self, callback: Callable[[], None]) -> None:
        """Register a callback fired after every change."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self) -> None:
        """Fire all listeners. Never raises."""
        for callback in list(self._listeners):
            try:
                callback()
            except Exception as e:
                logger.warning(f"EntityStore: listener {callback!r} failed: {e}")

    # -------------------------------------------------------------------------
    # Figures
    # -------------------------------------------------------------------------

    def add_figure(self, figure: Figure) -> None:
        """Append a figure, evicting the oldest if over capacity."""
        figures = self._figures + (figure,)
        limit = max(0, self.max_figures)
        if len(figures) > limit:
            evicted = len(figures) - limit
            figures = figures[evicted:]
            logger.debug(f"EntityStore: evicted {evicted} oldest figure(s)")
        self._figures = figures
        self._notify()

    def current_figures(self, surface_index: Optional[int] = None) -> tuple[Figure, ...]:
        """Snapshot of live figures in insertion order, optionally for one surface."""
        if surface_index is None:
            return self._figures
        return tuple(f for f in self._figures if f.surface_index == surface_index)

    def age_step(self, now: float, fade_after: float) -> None:
        """
        Fade and retire figures by age.

        Figures older than fade_after start fading; after a further fade_tail
        seconds they are removed. Opacity is recomputed from age alone, so
        calling this twice with the same `now` gives the same result.
        """
        if not self._figures:
            return

        tail = self.fade_tail
        survivors = []
        changed = False
        for figure in self._figures:
            age = figure.age(now)
            if age > fade_after + tail:
                changed = True
                continue
            if age > fade_after:
                opacity = max(0.0, 1.0 - (age - fade_after) / tail)
                if opacity != figure.opacity:
                    figure = figure.with_opacity(opacity)
                    changed = True
            survivors.append(figure)

        if changed:
            self._figures = tuple(survivors)
            self._notify()

    def clear(self) -> None:
        """Remove every figure."""
        if self._figures:
            self._figures = ()
            self._notify()

    # -------------------------------------------------------------------------
    # Trails
    # -------------------------------------------------------------------------

    def set_trails(self, trails: Iterable[DrawingTrail]) -> None:
        """Replace the whole trail collection."""
        self._trails = tuple(trails)
        self._notify()

    def current_trails(self, surface_index: Optional[int] = None) -> tuple[DrawingTrail, ...]:
        if surface_index is None:
            return self._trails
        return tuple(t for t in self._trails if t.surface_index == surface_index)

    def __len__(self) -> int:
        return len(self._figures)
