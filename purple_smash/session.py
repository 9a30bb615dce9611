"""
Smash session - turns input events into figures, trails and sounds.

The session owns the entity store and is the only thing that writes to it.
Everything it talks to (sound, speech, themes, word spotting, drawing, key
blocking, input capture) is handed in, so tests can swap any of them for a
mock.

Everything runs on one asyncio event loop: input handlers, the fade
scheduler, the trail sweep and auto-play. None of them ever run at the same
time, so nothing here takes a lock.

Usage:
    session = SmashSession(config, sound=SoundPlayer(), speaker=Speaker())
    await session.start()
    session.handle(KeyEvent("a"))
    ...
    await session.stop()
"""

import asyncio
import logging
import random
import string
import time
from typing import Callable, Optional

from .config import FocusMode, SmashConfig, SoundMode
from .constants import LARGE_ELEMENT_MIN_SIZE, LARGE_ELEMENT_SPREAD, TRAIL_SWEEP_INTERVAL
from .drawing import DrawingBoard
from .figures import ALL_ANIMATION_STYLES, NON_ROTATING_STYLES, Figure, Point
from .input import (
    DisplayModeChanged, DragEnded, KeyEvent, PointerEvent, ScrollEvent,
    SwitchAction, TapEvent, TopologyChanged,
)
from .placement import PredictablePlacer, SurfaceTopology, random_position, resolve_target
from .scheduler import FadeScheduler, PeriodicTask
from .sound import Sound
from .store import EntityStore
from .themes import ThemePicker, get_theme
from .words import WordFinder

logger = logging.getLogger(__name__)


class SmashSession:
    """
    The session state engine.

    Args:
        config: Live settings. Read on every event, so changes apply at once.
        store: Entity store (created from config if not given)
        topology: Surfaces and their sizes
        themes: Random colors, shapes and sizes
        sound: Object with play(sound) and play_random_laughter()
        speaker: Object with speak_letter(), speak_word() and speak_shape()
        words: Word spotter with add_letter() and reset()
        drawing: Drawing board (created on top of the store if not given)
        key_blocker: Object with start() -> bool and stop()
        input_capture: Object with start() and stop()
        clock: Monotonic time source
        rng: Random source for every random choice the session makes
    """

    def __init__(
        self,
        config: Optional[SmashConfig] = None,
        store: Optional[EntityStore] = None,
        topology: Optional[SurfaceTopology] = None,
        themes: Optional[ThemePicker] = None,
        sound=None,
        speaker=None,
        words: Optional[WordFinder] = None,
        drawing: Optional[DrawingBoard] = None,
        key_blocker=None,
        input_capture=None,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or SmashConfig()
        self.clock = clock
        self.rng = rng or random.Random()

        self.store = store or EntityStore(max_figures=self.config.effective_max_figures)
        self.topology = topology or SurfaceTopology()
        self.themes = themes or ThemePicker(get_theme(self.config.theme), rng=self.rng)
        self.sound = sound
        self.speaker = speaker
        self.words = words or WordFinder()
        self.drawing = drawing or DrawingBoard(
            publish=self.store.set_trails,
            on_stroke_start=lambda: self._play(Sound.BUMBLEBEE),
            clock=clock,
            rng=self.rng,
        )
        self.key_blocker = key_blocker
        self.input_capture = input_capture

        self._placer = PredictablePlacer()
        self._fade_scheduler = FadeScheduler(self.store, self.config, clock=clock)
        self._trail_sweep = PeriodicTask(TRAIL_SWEEP_INTERVAL, self.sweep_trails, name="TrailSweep")
        self._auto_play = PeriodicTask(
            self.config.auto_play_interval, self.auto_play_tick,
            name="AutoPlay", fire_immediately=True,
        )

        self._queue: Optional[asyncio.Queue] = None
        self._consumer: Optional[asyncio.Task] = None
        self._topology_listeners: list[Callable[[SurfaceTopology], None]] = []
        self._started = False
        self._closed = False

    @property
    def is_running(self) -> bool:
        return self._started and not self._closed

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Start input capture, key blocking and the timed tasks."""
        if self._started:
            return
        self._started = True
        self._closed = False
        self.apply_config()

        if self.input_capture is not None:
            self.input_capture.start()

        if self.config.block_system_keys and self.key_blocker is not None:
            if not self.key_blocker.start():
                logger.warning("SmashSession: system keys are not blocked")

        self._fade_scheduler.start()
        self._trail_sweep.start()
        if self.config.auto_play:
            self._auto_play.start()

        self._queue = asyncio.Queue()
        self._consumer = asyncio.get_running_loop().create_task(
            self._consume(), name="SmashSession.events"
        )
        logger.info("SmashSession: started")

    async def stop(self) -> None:
        """
        Stop everything. Timed tasks and the event consumer are cancelled
        first, so no tick or queued event runs after collaborators are
        released. Events handed in afterwards are dropped.
        """
        if self._closed:
            return
        self._closed = True

        await self._fade_scheduler.stop()
        await self._trail_sweep.stop()
        await self._auto_play.stop()

        if self._consumer:
            self._consumer.cancel()
            try:
                await self._consumer
            except asyncio.CancelledError:
                pass
            self._consumer = None
        self._queue = None

        if self.input_capture is not None:
            self.input_capture.stop()
        if self.key_blocker is not None:
            self.key_blocker.stop()
        self.drawing.end_drawing()
        logger.info("SmashSession: stopped")

    def apply_config(self) -> None:
        """Push settings that live outside the session (capacity, theme) to their owners."""
        self.store.max_figures = self.config.effective_max_figures
        if self.themes.theme.name != self.config.theme:
            self.themes.select(self.config.theme)
        self._auto_play.interval = self.config.auto_play_interval

    async def set_auto_play(self, enabled: bool) -> None:
        """Turn auto-play on or off while running."""
        self.config.auto_play = enabled
        if not self.is_running:
            return
        if enabled:
            self._auto_play.interval = self.config.auto_play_interval
            self._auto_play.start()
        else:
            await self._auto_play.stop()

    # =========================================================================
    # Event intake
    # =========================================================================

    def post(self, event) -> None:
        """Queue an event for the consumer task. Handles directly if not started."""
        if self._closed:
            return
        if self._queue is None:
            self.handle(event)
            return
        self._queue.put_nowait(event)

    async def _consume(self) -> None:
        try:
            while True:
                event = await self._queue.get()
                self.handle(event)
        except asyncio.CancelledError:
            pass

    def handle(self, event) -> None:
        """Apply one normalized event. Never raises."""
        if self._closed:
            return

        handler = self._handlers.get(type(event))
        if handler is None:
            logger.debug(f"SmashSession: ignoring {event!r}")
            return

        try:
            handler(self, event)
        except Exception as e:
            logger.error(f"SmashSession: error handling {event!r}: {e}")

    # =========================================================================
    # Handlers
    # =========================================================================

    def _handle_key(self, event: KeyEvent) -> None:
        character = event.character
        focus = self.config.focus_mode
        is_glyph = event.is_letter or event.is_digit

        if is_glyph and focus == FocusMode.LETTERS and event.is_digit:
            return
        if is_glyph and focus == FocusMode.NUMBERS and event.is_letter:
            return

        surface = self._keyboard_surface()
        position = self._spawn_position(surface)

        if not is_glyph or focus == FocusMode.SHAPES:
            self.words.reset()
            self.add_random_shape(position, surface)
            return

        if self.config.force_uppercase:
            upper = character.upper()
            # Some letters grow when uppercased ("ß" -> "SS")
            if len(upper) == 1:
                character = upper
        self.add_character(character, position, surface)
        self._character_feedback(character)

        word = self.words.add_letter(character)
        if word:
            self._announce_word(word)

    def _handle_pointer(self, event: PointerEvent) -> None:
        if event.surface_size is not None:
            self.topology.set_surface_size(event.surface_index, event.surface_size)
        if not self.config.mouse_draw_enabled:
            return
        if not (event.is_dragging or self.config.clickless_mouse_draw):
            return
        self.drawing.add_point(event.position, event.surface_index)

    def _handle_drag_ended(self, event: DragEnded) -> None:
        self.drawing.end_drawing()

    def _handle_scroll(self, event: ScrollEvent) -> None:
        if event.delta_y > 0:
            self._play(Sound.RISING)
        elif event.delta_y < 0:
            self._play(Sound.FALLING)

    def _handle_tap(self, event: TapEvent) -> None:
        if event.surface_size is not None:
            self.topology.set_surface_size(event.surface_index, event.surface_size)
        self.add_random_shape(Point(*event.position), event.surface_index)

    def _handle_topology(self, event: TopologyChanged) -> None:
        self.topology.update(event.surface_count)
        self._fire_topology_changed()

    def _handle_display_mode(self, event: DisplayModeChanged) -> None:
        self.config.display_mode = event.display_mode
        self.config.selected_display_index = event.selected_index
        logger.info(f"SmashSession: display mode {event.display_mode.value} ({event.selected_index})")
        self._fire_topology_changed()

    def handle_switch_action(self, action: SwitchAction) -> None:
        """Accessibility switch input: one press, one figure (or a clean screen)."""
        if action == SwitchAction.CLEAR_SCREEN:
            self.clear_screen()
            return

        surface = self._keyboard_surface()
        position = self._spawn_position(surface)
        if action == SwitchAction.SHOW_RANDOM_SHAPE:
            self.add_random_shape(position, surface)
        elif action == SwitchAction.SHOW_RANDOM_LETTER:
            self._add_random_character(string.ascii_uppercase, position, surface)
        elif action == SwitchAction.SHOW_RANDOM_NUMBER:
            self._add_random_character(string.digits, position, surface)

    _handlers = {
        KeyEvent: _handle_key,
        PointerEvent: _handle_pointer,
        DragEnded: _handle_drag_ended,
        ScrollEvent: _handle_scroll,
        TapEvent: _handle_tap,
        TopologyChanged: _handle_topology,
        DisplayModeChanged: _handle_display_mode,
        SwitchAction: handle_switch_action,
    }

    # =========================================================================
    # Timed work
    # =========================================================================

    def auto_play_tick(self) -> None:
        """Spawn one figure of a kind the focus mode allows."""
        if self._closed:
            return
        surface = self._keyboard_surface()
        position = self._spawn_position(surface)

        focus = self.config.focus_mode
        if focus == FocusMode.ALL:
            kind = self.rng.choice(("shape", "letter", "number"))
        else:
            kind = {
                FocusMode.LETTERS: "letter",
                FocusMode.NUMBERS: "number",
                FocusMode.SHAPES: "shape",
            }[focus]

        if kind == "shape":
            self.add_random_shape(position, surface)
        elif kind == "letter":
            self._add_random_character(string.ascii_uppercase, position, surface)
        else:
            self._add_random_character(string.digits, position, surface)

    def sweep_trails(self) -> None:
        self.drawing.prune(self.clock())

    def play_startup_sound(self) -> None:
        self._play(Sound.STARTUP)

    def clear_screen(self) -> None:
        self.store.clear()

    # =========================================================================
    # Figures
    # =========================================================================

    def add_character(self, character: str, position: Point, surface_index: int) -> Figure:
        figure = Figure(
            shape=None,
            character=character,
            color=self.themes.random_color(),
            position=position,
            size=self._figure_size(),
            created_at=self.clock(),
            animation_style=self._animation_style(),
            font_name=self.themes.font_name,
            surface_index=surface_index,
        )
        self._store_figure(figure)
        return figure

    def _store_figure(self, figure: Figure) -> None:
        # Capacity follows config so simplified mode and cap changes apply to the next figure
        self.store.max_figures = self.config.effective_max_figures
        self.store.add_figure(figure)

    def add_random_shape(self, position: Point, surface_index: int) -> Figure:
        """Add a random theme shape and give shape feedback."""
        shape = self.themes.random_enabled_shape()
        color = self.themes.random_color()
        figure = Figure(
            shape=shape,
            character=None,
            color=color,
            position=position,
            size=self._figure_size(),
            created_at=self.clock(),
            show_face=self.themes.supports_faces and self.config.show_faces,
            animation_style=self._animation_style(),
            font_name=self.themes.font_name,
            surface_index=surface_index,
        )
        self._store_figure(figure)

        # Speech mode names the shape instead of playing a sound
        if self.config.sound_mode == SoundMode.SPEECH:
            self._speak("speak_shape", shape, color)
        elif self.config.sound_mode == SoundMode.LAUGHTER:
            self._laugh()
        return figure

    def _add_random_character(self, alphabet: str, position: Point, surface_index: int) -> None:
        character = self.rng.choice(alphabet)
        self.add_character(character, position, surface_index)
        self._character_feedback(character)

    def _figure_size(self) -> float:
        if self.config.large_elements:
            return self.rng.uniform(LARGE_ELEMENT_MIN_SIZE, LARGE_ELEMENT_MIN_SIZE + LARGE_ELEMENT_SPREAD)
        return self.themes.random_size()

    def _animation_style(self):
        if self.config.disable_rotation:
            return self.rng.choice(NON_ROTATING_STYLES)
        return self.rng.choice(ALL_ANIMATION_STYLES)

    # =========================================================================
    # Placement
    # =========================================================================

    def _keyboard_surface(self) -> int:
        return resolve_target(
            self.config.display_mode,
            self.config.selected_display_index,
            self.topology,
            self.rng,
        )

    def _spawn_position(self, surface_index: int) -> Point:
        size = self.topology.size_for(surface_index)
        if self.config.predictable_mode:
            return self._placer.next_position(size)
        return random_position(size, self.rng)

    # =========================================================================
    # Topology listeners
    # =========================================================================

    def add_topology_listener(self, callback: Callable[[SurfaceTopology], None]) -> None:
        self._topology_listeners.append(callback)

    def _fire_topology_changed(self) -> None:
        for callback in list(self._topology_listeners):
            try:
                callback(self.topology)
            except Exception as e:
                logger.error(f"SmashSession: topology listener failed: {e}")

    # =========================================================================
    # Feedback (fire and forget)
    # =========================================================================

    def _character_feedback(self, character: str) -> None:
        mode = self.config.sound_mode
        if mode == SoundMode.LAUGHTER:
            self._laugh()
        elif mode == SoundMode.SPEECH:
            self._speak("speak_letter", character)

    def _announce_word(self, word: str) -> None:
        if self.config.sound_mode == SoundMode.OFF:
            return
        logger.debug(f"SmashSession: found word {word!r}")
        self._speak("speak_word", word)

    def _laugh(self) -> None:
        if self.sound is None:
            return
        try:
            self.sound.play_random_laughter()
        except Exception as e:
            logger.warning(f"SmashSession: laughter failed: {e}")

    def _play(self, sound: Sound) -> None:
        if self.sound is None:
            return
        try:
            self.sound.play(sound)
        except Exception as e:
            logger.warning(f"SmashSession: sound {sound.value} failed: {e}")

    def _speak(self, method: str, *args) -> None:
        if self.speaker is None:
            return
        try:
            getattr(self.speaker, method)(*args)
        except Exception as e:
            logger.warning(f"SmashSession: {method} failed: {e}")
