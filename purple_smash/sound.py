"""
Sound effects via pygame.mixer.

The mixer is opened lazily on the first play, so a machine with no audio
device (or a test run) never touches ALSA until something is actually heard.
Every failure here is swallowed: a toddler toy with no sound is still a toy.
"""

import ctypes
import ctypes.util
import logging
import os
import random
from enum import Enum
from pathlib import Path
from typing import Optional


# Declared without arguments: the error and log handlers take different ones,
# and a cdecl callback may ignore whatever it is passed
_ALSA_HANDLER = ctypes.CFUNCTYPE(None)

# Kept alive for as long as libasound may call them
_alsa_handlers = []


def _open_asound():
    for name in (ctypes.util.find_library("asound"), "libasound.so.2", "libasound.so"):
        if not name:
            continue
        try:
            return ctypes.CDLL(name)
        except OSError:
            continue
    return None


def silence_alsa() -> bool:
    """Install no-op error and log handlers in libasound.

    ALSA prints straight to stderr, on top of the Textual screen. Returns
    False when there is no libasound to silence.
    """
    asound = _open_asound()
    if asound is None:
        return False

    quiet = _ALSA_HANDLER(lambda: None)
    _alsa_handlers.append(quiet)
    asound.snd_lib_error_set_handler(quiet)
    # Older alsa-lib has no separate log handler
    if hasattr(asound, "snd_lib_log_set_handler"):
        asound.snd_lib_log_set_handler(quiet)
    return True


silence_alsa()

# Suppress pygame welcome message (must be set before import)
os.environ['PYGAME_HIDE_SUPPORT_PROMPT'] = '1'
import pygame
import pygame.mixer

logger = logging.getLogger(__name__)

SOUND_EXTENSIONS = (".wav", ".ogg", ".mp3")
DEFAULT_VOLUME = 0.6


class Sound(Enum):
    """Named sound effects. The value is the file stem in the sounds directory."""
    GIGGLE = "giggle"
    BABY_LAUGH = "babylaugh"
    BABY_GIGGLE = "babygigl2"
    CC_GIGGLE = "ccgiggle"
    LAUGHING_MICE = "laughingmice"
    SCOOBY = "scooby2"
    BUMBLEBEE = "smallbumblebee"
    RISING = "rising"
    FALLING = "falling"
    STARTUP = "startup"


LAUGHTER = (
    Sound.GIGGLE,
    Sound.BABY_LAUGH,
    Sound.BABY_GIGGLE,
    Sound.CC_GIGGLE,
    Sound.LAUGHING_MICE,
    Sound.SCOOBY,
)


def ensure_mixer() -> bool:
    """Open the pygame mixer if nobody has yet. Returns False without audio."""
    if pygame.mixer.get_init():
        return True
    try:
        # Larger buffer prevents ALSA underrun errors on slower hardware
        pygame.mixer.init(frequency=44100, size=-16, channels=2, buffer=2048)
        pygame.mixer.set_num_channels(16)
        return True
    except pygame.error as e:
        logger.warning(f"SoundPlayer: no audio device ({e})")
        return False


def default_sounds_dirs() -> list[Path]:
    """Places sound files may live, most specific first."""
    paths = []
    override = os.environ.get("PURPLE_SMASH_SOUNDS")
    if override:
        paths.append(Path(override))
    paths.extend([
        Path(__file__).parent / "sounds",
        Path.home() / ".purple" / "smash" / "sounds",
        Path("/opt/purple/smash/sounds"),
    ])
    return paths


class SoundPlayer:
    """
    Plays named sound effects.

    Usage:
        player = SoundPlayer()
        player.play(Sound.RISING)
        player.play_random_laughter()
    """

    def __init__(
        self,
        sounds_dir: Optional[Path] = None,
        rng: Optional[random.Random] = None,
        volume: float = DEFAULT_VOLUME,
    ):
        self.sounds_dir = sounds_dir
        self.volume = volume
        self._rng = rng or random.Random()
        self._sounds: dict[Sound, "pygame.mixer.Sound"] = {}
        self._initialized = False
        self._available = False

    def _find_sounds_dir(self) -> Optional[Path]:
        if self.sounds_dir is not None:
            return self.sounds_dir if self.sounds_dir.is_dir() else None
        for path in default_sounds_dirs():
            if path.is_dir():
                return path
        return None

    def _init_audio(self) -> None:
        """Open the mixer and load every sound we can find. Runs once."""
        if self._initialized:
            return
        self._initialized = True

        if not ensure_mixer():
            return
        self._available = True

        sounds_dir = self._find_sounds_dir()
        if sounds_dir is None:
            logger.warning("SoundPlayer: no sounds directory found")
            return
        self._load_sounds(sounds_dir)

    def _load_sounds(self, sounds_dir: Path) -> None:
        for sound in Sound:
            for ext in SOUND_EXTENSIONS:
                path = sounds_dir / f"{sound.value}{ext}"
                if not path.exists():
                    continue
                try:
                    loaded = pygame.mixer.Sound(str(path))
                    loaded.set_volume(self.volume)
                    self._sounds[sound] = loaded
                    break
                except pygame.error as e:
                    logger.debug(f"SoundPlayer: could not load {path}: {e}")
        logger.info(f"SoundPlayer: loaded {len(self._sounds)} sound(s) from {sounds_dir}")

    def play(self, sound: Sound) -> None:
        """Play a sound. Missing sounds and mixer errors are silent."""
        self._init_audio()
        loaded = self._sounds.get(sound)
        if loaded is None:
            return
        try:
            loaded.play()
        except pygame.error as e:
            logger.debug(f"SoundPlayer: play {sound.value} failed: {e}")

    def play_random_laughter(self) -> None:
        self.play(self._rng.choice(LAUGHTER))

    def stop_all(self) -> None:
        """Stop every playing sound and close the mixer."""
        if self._available:
            try:
                pygame.mixer.stop()
                pygame.mixer.quit()
            except pygame.error:
                pass
        self._available = False
        self._initialized = False
        self._sounds.clear()
