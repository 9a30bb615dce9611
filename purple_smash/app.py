#!/usr/bin/env python3
"""
Purple Smash - Textual front end

One SmashSurface widget per surface, side by side. Keys, clicks, drags and
scrolls become normalized events for the session; the session's store is
drawn back onto the surfaces with Rich segments.

Keyboard controls:
- Any printable key: a letter, number or shape
- Escape (long hold) or Ctrl+Q: Quit
"""

import argparse
import logging
import os
import time
from pathlib import Path
from typing import Optional

from rich.cells import cell_len
from rich.color import Color, blend_rgb
from rich.segment import Segment
from rich.style import Style
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.logging import TextualHandler
from textual.strip import Strip
from textual.widget import Widget
from textual.widgets import Static

from .config import SmashConfig, SoundMode, load_config
from .constants import (
    ANIMATION_INTERVAL, ESCAPE_HOLD_THRESHOLD, ESCAPE_REPEAT_GAP,
    ICON_LOCK, ICON_SPEECH, ICON_VOLUME_OFF, ICON_VOLUME_ON,
    LARGE_ELEMENT_MIN_SIZE, UNITS_PER_COL, UNITS_PER_ROW,
)
from .figures import AnimationStyle, Figure, Point, Size
from .input import (
    DragEnded, HoldState, PointerEvent, ScrollEvent, TapEvent, TopologyChanged,
    normalize_key,
)
from .keyblock import ESCAPE, SystemKeyBlocker
from .placement import SurfaceTopology
from .session import SmashSession
from .sound import SoundPlayer
from .tts import Speaker
from .words import WordFinder

logger = logging.getLogger(__name__)

FACE_GLYPH = "☺"
TRAIL_GLYPH = "•"
WIDE_TRAIL_GLYPH = "●"
WIDE_TRAIL_WIDTH = 20.0


def fade_color(hex_color: str, background: str, opacity: float) -> Color:
    """Blend a color toward the background as opacity drops."""
    fg = Color.parse(hex_color).get_truecolor()
    bg = Color.parse(background).get_truecolor()
    return Color.from_triplet(blend_rgb(bg, fg, opacity))


def animation_frame(figure: Figure, now: float) -> tuple[int, bool]:
    """Column offset and boldness for a figure at this moment."""
    age = figure.age(now)
    phase = int(age / ANIMATION_INTERVAL)
    style = figure.animation_style

    if style == AnimationStyle.JIGGLE:
        return (phase % 2, False)
    if style == AnimationStyle.THROB:
        return (0, phase % 2 == 0)
    if style == AnimationStyle.ROTATE:
        return ((0, 1, 0, -1)[phase % 4], False)
    if style == AnimationStyle.SNAP:
        return (0, age < 1.0)
    return (0, False)


class SurfaceInput:
    """Gate between Textual's input messages and the session.

    Surfaces only forward input while capture is started.
    """

    def __init__(self):
        self.active = False

    def start(self) -> None:
        self.active = True
        logger.debug("SurfaceInput: capturing")

    def stop(self) -> None:
        self.active = False
        logger.debug("SurfaceInput: released")


class SmashSurface(Widget):
    """Renders one surface's figures and trails, and reports its mouse input."""

    DEFAULT_CSS = """
    SmashSurface {
        width: 1fr;
        height: 100%;
    }
    """

    def __init__(self, session: SmashSession, surface_index: int, capture: SurfaceInput,
                 clock=time.monotonic, **kwargs) -> None:
        super().__init__(**kwargs)
        self.session = session
        self.surface_index = surface_index
        self._capture = capture
        self._clock = clock
        self._cells: dict[tuple[int, int], tuple[str, Style]] = {}
        self._dragging = False
        self._drag_moved = False

    # -------------------------------------------------------------------------
    # Coordinates
    # -------------------------------------------------------------------------

    @property
    def logical_size(self) -> Size:
        return Size(self.size.width * UNITS_PER_COL, self.size.height * UNITS_PER_ROW)

    def to_logical(self, x: int, y: int) -> Point:
        """Center of a cell, in logical units."""
        return Point((x + 0.5) * UNITS_PER_COL, (y + 0.5) * UNITS_PER_ROW)

    @staticmethod
    def to_cell(point) -> tuple[int, int]:
        return (int(point[0] // UNITS_PER_COL), int(point[1] // UNITS_PER_ROW))

    @property
    def has_figures(self) -> bool:
        return bool(self.session.store.current_figures(self.surface_index))

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    @property
    def background(self) -> str:
        return self.session.themes.theme.background

    def rebuild(self) -> None:
        """Recompute which cells show what, then repaint."""
        store = self.session.store
        background = self.background
        now = self._clock()
        cells = {}

        for trail in store.current_trails(self.surface_index):
            glyph = WIDE_TRAIL_GLYPH if trail.width >= WIDE_TRAIL_WIDTH else TRAIL_GLYPH
            for point in trail.points:
                color = fade_color(trail.color.hex, background, point.opacity)
                cells[self.to_cell(point.position)] = (glyph, Style(color=color, bgcolor=background))

        # Later figures draw over earlier ones
        for figure in store.current_figures(self.surface_index):
            x, y = self.to_cell(figure.position)
            dx, bold = animation_frame(figure, now)
            style = Style(
                color=fade_color(figure.color.hex, background, figure.opacity),
                bgcolor=background,
                bold=bold or figure.size >= LARGE_ELEMENT_MIN_SIZE,
            )
            cells[(x + dx, y)] = (figure.glyph, style)
            if figure.show_face:
                cells[(x + dx + cell_len(figure.glyph), y)] = (FACE_GLYPH, style)

        self._cells = cells
        self.refresh()

    def render_line(self, y: int) -> Strip:
        width = self.size.width
        bg_style = Style(bgcolor=self.background)

        segments = []
        x = 0
        while x < width:
            cell = self._cells.get((x, y))
            if cell is None:
                segments.append(Segment(" ", bg_style))
                x += 1
                continue
            glyph, style = cell
            glyph_width = cell_len(glyph)
            if x + glyph_width > width:
                segments.append(Segment(" ", bg_style))
                x += 1
                continue
            segments.append(Segment(glyph, style))
            x += glyph_width

        return Strip(segments)

    # -------------------------------------------------------------------------
    # Input
    # -------------------------------------------------------------------------

    def on_resize(self, event: events.Resize) -> None:
        self.session.topology.set_surface_size(self.surface_index, self.logical_size)
        self.rebuild()

    def on_mouse_down(self, event: events.MouseDown) -> None:
        if not self._capture.active:
            return
        self._dragging = True
        self._drag_moved = False
        self.capture_mouse()

    def on_mouse_move(self, event: events.MouseMove) -> None:
        if not self._capture.active:
            return
        if self._dragging:
            self._drag_moved = True
        self._post_pointer(event.x, event.y)

    def on_mouse_up(self, event: events.MouseUp) -> None:
        if not self._dragging:
            return
        self._dragging = False
        self.release_mouse()
        if not self._capture.active:
            return
        self.session.post(DragEnded(self.surface_index))
        if not self._drag_moved:
            self.session.post(TapEvent(
                position=self.to_logical(event.x, event.y),
                surface_index=self.surface_index,
                surface_size=self.logical_size,
            ))

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        if self._capture.active:
            self.session.post(ScrollEvent(1.0, self.surface_index))

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        if self._capture.active:
            self.session.post(ScrollEvent(-1.0, self.surface_index))

    def _post_pointer(self, x: int, y: int) -> None:
        self.session.post(PointerEvent(
            position=self.to_logical(x, y),
            surface_index=self.surface_index,
            is_dragging=self._dragging,
            surface_size=self.logical_size,
        ))


class StatusLine(Static):
    """Sound mode and key-lock icons along the bottom edge."""

    DEFAULT_CSS = """
    StatusLine {
        dock: bottom;
        height: 1;
        width: 100%;
        text-align: right;
        color: $text-muted;
    }
    """

    def __init__(self, session: SmashSession, **kwargs):
        super().__init__(**kwargs)
        self.session = session

    def render(self) -> str:
        mode = self.session.config.sound_mode
        if mode == SoundMode.SPEECH:
            icons = [ICON_SPEECH]
        elif mode == SoundMode.LAUGHTER:
            icons = [ICON_VOLUME_ON]
        else:
            icons = [ICON_VOLUME_OFF]
        blocker = self.session.key_blocker
        if blocker is not None and blocker.is_blocking:
            icons.append(ICON_LOCK)
        return " ".join(icons) + " "


class SmashApp(App):
    """
    Purple Smash - keyboard smashing for little ones.

    Escape (long hold): Quit
    Ctrl+Q: Quit
    """

    CSS = """
    Screen {
        layout: horizontal;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        config: Optional[SmashConfig] = None,
        surface_count: int = 1,
        sound: Optional[SoundPlayer] = None,
        speaker: Optional[Speaker] = None,
        words: Optional[WordFinder] = None,
        clock=time.monotonic,
    ):
        super().__init__()
        self.config = config or SmashConfig()
        self.surface_count = max(1, surface_count)
        self._clock = clock
        self.capture = SurfaceInput()
        self.session = SmashSession(
            self.config,
            topology=SurfaceTopology(self.surface_count),
            sound=sound,
            speaker=speaker,
            words=words,
            key_blocker=SystemKeyBlocker(on_key=self._on_blocked_key),
            input_capture=self.capture,
            clock=clock,
        )

        self._escape_hold = HoldState(threshold=ESCAPE_HOLD_THRESHOLD, clock=clock)
        self._last_escape = 0.0
        self._escape_timer = None

    def compose(self) -> ComposeResult:
        for index in range(self.surface_count):
            yield SmashSurface(self.session, index, self.capture, clock=self._clock, id=f"surface-{index}")
        yield StatusLine(self.session, id="status-line")

    @property
    def surfaces(self) -> list[SmashSurface]:
        return list(self.query(SmashSurface))

    async def on_mount(self) -> None:
        self.session.store.add_listener(self._on_store_changed)
        self.session.add_topology_listener(self._on_topology_changed)
        await self.session.start()
        self.session.post(TopologyChanged(self.surface_count))
        self.session.play_startup_sound()
        if self.config.sound_mode == SoundMode.SPEECH and self.session.speaker is not None:
            self.session.speaker.warm_up()
        self.set_interval(ANIMATION_INTERVAL, self._animate)
        self.query_one(StatusLine).refresh()

    async def on_unmount(self) -> None:
        await self.session.stop()
        if self.session.speaker is not None:
            self.session.speaker.stop()
        if self.session.sound is not None:
            self.session.sound.stop_all()

    # -------------------------------------------------------------------------
    # Store -> screen
    # -------------------------------------------------------------------------

    def _on_store_changed(self) -> None:
        for surface in self.surfaces:
            surface.rebuild()

    def _on_topology_changed(self, topology: SurfaceTopology) -> None:
        logger.debug(f"SmashApp: topology now {topology.surface_count} surface(s)")
        self.query_one(StatusLine).refresh()

    def _animate(self) -> None:
        for surface in self.surfaces:
            if surface.has_figures:
                surface.rebuild()

    # -------------------------------------------------------------------------
    # Keys
    # -------------------------------------------------------------------------

    def on_key(self, event: events.Key) -> None:
        """Terminal keys. Not used while the key blocker owns the keyboard."""
        event.stop()
        event.prevent_default()

        if event.key == "escape":
            self._handle_escape_repeat()
            return
        self._escape_hold.reset()

        if not self.capture.active:
            return
        key_event = normalize_key(event.character)
        if key_event is not None:
            self.session.post(key_event)

    def _handle_escape_repeat(self) -> None:
        # Terminals repeat Escape while it's held; a gap means it was released
        now = self._clock()
        if now - self._last_escape > ESCAPE_REPEAT_GAP:
            self._escape_hold.reset()
        self._last_escape = now

        if self._escape_hold.check("escape"):
            logger.info("SmashApp: escape held, quitting")
            self.exit()
            return
        self._escape_hold.start("escape")

    def _on_blocked_key(self, key: str, is_down: bool) -> None:
        """Keys read straight from the grabbed keyboard (real press/release)."""
        if key == ESCAPE:
            if is_down:
                if self._escape_timer is None:
                    self._escape_timer = self.set_timer(ESCAPE_HOLD_THRESHOLD, self._escape_held)
            elif self._escape_timer is not None:
                self._escape_timer.stop()
                self._escape_timer = None
            return

        if is_down and self.capture.active:
            key_event = normalize_key(key)
            if key_event is not None:
                self.session.post(key_event)

    def _escape_held(self) -> None:
        self._escape_timer = None
        logger.info("SmashApp: escape held, quitting")
        self.exit()


def setup_logging(level: str, log_file: Optional[Path] = None) -> None:
    """Send log records to a file, or to the Textual devtools console."""
    handler = logging.FileHandler(log_file) if log_file else TextualHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))


def main(argv: Optional[list[str]] = None):
    """Entry point for Purple Smash"""
    parser = argparse.ArgumentParser(
        prog="purple-smash",
        description="Keyboard smashing for little ones",
    )
    parser.add_argument("--surfaces", type=int, default=1,
                        help="Number of side-by-side surfaces (default: 1)")
    parser.add_argument("--config", type=Path, default=None,
                        help="Settings file (default: $PURPLE_SMASH_CONFIG or ~/.config/purple/smash.json)")
    parser.add_argument("--sounds-dir", type=Path, default=None,
                        help="Directory of sound effects")
    parser.add_argument("--words", type=Path, default=None,
                        help="Extra words to spot, one per line")
    parser.add_argument("--log-file", type=Path, default=None,
                        help="Write logs here instead of the Textual console")
    parser.add_argument("--log-level", default=os.environ.get("PURPLE_SMASH_LOG", "WARNING"),
                        help="DEBUG, INFO, WARNING or ERROR (default: $PURPLE_SMASH_LOG or WARNING)")
    args = parser.parse_args(argv)

    setup_logging(args.log_level, args.log_file)

    config = load_config(args.config)
    words = WordFinder.from_file(args.words) if args.words else WordFinder()

    app = SmashApp(
        config,
        surface_count=args.surfaces,
        sound=SoundPlayer(args.sounds_dir),
        speaker=Speaker(),
        words=words,
    )
    app.run()


if __name__ == "__main__":
    main()
