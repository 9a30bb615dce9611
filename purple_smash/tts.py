"""
Text-to-Speech using Piper TTS

Piper is a fast, local, neural TTS system.
https://github.com/rhasspy/piper

Speech runs on daemon threads so the event loop never waits on it. A newer
request cancels an older one: each speak() bumps a speech id, and the worker
threads give up as soon as they notice their id is stale.
"""

import logging
import os
import tempfile
import threading
import wave
from pathlib import Path
from typing import Optional

import pygame
import pygame.mixer

from .figures import NamedColor, ShapeType
from .sound import ensure_mixer

logger = logging.getLogger(__name__)

# Voice model configuration
VOICE_MODEL = "en_US-libritts-high"
VOICE_SPEAKER = 166  # p6006

# Pre-generated voice clips ("a.wav", "red_circle.wav", ...)
DEFAULT_CLIPS_DIR = Path(__file__).parent / "sounds" / "voice"


def voice_search_paths() -> list[Path]:
    """Directories searched for the Piper voice model."""
    paths = [
        Path.home() / ".local" / "share" / "piper-voices",
        Path.home() / ".cache" / "piper",
        Path("/opt/purple/piper-voices"),
        Path("/opt/piper"),
    ]
    # Also check the real home, in case HOME is overridden
    try:
        import pwd
        real_home = Path(pwd.getpwuid(os.getuid()).pw_dir)
        paths.insert(0, real_home / ".local" / "share" / "piper-voices")
    except (ImportError, KeyError):
        pass
    return paths


def clip_name(text: str) -> str:
    """File name of the pre-generated clip for some text."""
    return text.strip().lower().replace(" ", "_") + ".wav"


class Speaker:
    """
    Says letters, words and shape names out loud.

    Usage:
        speaker = Speaker()
        speaker.speak_letter("A")
        speaker.speak_shape(ShapeType.CIRCLE, RED)   # "Red circle"

    All methods return immediately. When neither a clip nor a Piper voice is
    available, nothing is said and nothing fails.
    """

    def __init__(self, clips_dir: Optional[Path] = None, enabled: bool = True):
        self.clips_dir = clips_dir or DEFAULT_CLIPS_DIR
        self.enabled = enabled
        self._voice = None
        self._voice_available: Optional[bool] = None
        self._voice_lock = threading.Lock()
        self._current_channel = None
        self._speech_id = 0

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def warm_up(self) -> None:
        """Load the voice model in the background so the first word is quick."""
        threading.Thread(target=self._get_voice, daemon=True).start()

    def speak(self, text: str) -> bool:
        """
        Speak text in the background, cancelling anything already speaking.

        Returns:
            True if speech was started, False otherwise
        """
        if not self.enabled or not text or not text.strip():
            return False

        self.stop()
        my_id = self._speech_id
        threading.Thread(target=self._speak_sync, args=(text, my_id), daemon=True).start()
        return True

    def speak_letter(self, character: str) -> bool:
        return self.speak(character)

    def speak_word(self, word: str) -> bool:
        return self.speak(word)

    def speak_shape(self, shape: ShapeType, color: NamedColor) -> bool:
        return self.speak(f"{color.name} {shape.value}".capitalize())

    def stop(self) -> None:
        """Stop current speech and cancel anything pending."""
        self._speech_id += 1  # Invalidate pending speech (atomic due to GIL)
        channel = self._current_channel
        self._current_channel = None
        if channel:
            try:
                channel.stop()
            except pygame.error:
                pass

    # -------------------------------------------------------------------------
    # Worker side
    # -------------------------------------------------------------------------

    def _is_stale(self, speech_id: int) -> bool:
        return speech_id != self._speech_id

    def _find_clip(self, text: str) -> Optional[Path]:
        path = self.clips_dir / clip_name(text)
        return path if path.exists() else None

    def _get_voice(self):
        """Load the Piper voice once. Returns None if Piper or the model is missing."""
        with self._voice_lock:
            if self._voice_available is False:
                return None
            if self._voice is not None:
                return self._voice

            try:
                from piper import PiperVoice
            except ImportError:
                logger.info("Speaker: piper not installed, speech limited to clips")
                self._voice_available = False
                return None

            model_path = None
            for base_path in voice_search_paths():
                candidate = base_path / f"{VOICE_MODEL}.onnx"
                if candidate.exists():
                    model_path = candidate
                    break

            if model_path is None:
                logger.info(f"Speaker: voice model {VOICE_MODEL} not found")
                self._voice_available = False
                return None

            try:
                self._voice = PiperVoice.load(str(model_path))
            except Exception as e:
                logger.warning(f"Speaker: failed to load {model_path}: {e}")
                self._voice_available = False
                return None

            self._voice_available = True
            logger.info(f"Speaker: loaded voice {model_path}")
            return self._voice

    def _speak_sync(self, text: str, speech_id: int) -> bool:
        """Runs on a daemon thread."""
        if self._is_stale(speech_id):
            return False
        if not ensure_mixer():
            return False

        clip_path = self._find_clip(text)
        if clip_path:
            return self._play_file(clip_path, speech_id)

        voice = self._get_voice()
        if voice is None or self._is_stale(speech_id):
            return False

        wav_path = None
        try:
            with tempfile.NamedTemporaryFile(suffix='.wav', delete=False) as f:
                wav_path = Path(f.name)

            from piper.config import SynthesisConfig
            config = SynthesisConfig(speaker_id=VOICE_SPEAKER)

            # Pad with pauses so short words aren't clipped
            chunks = list(voice.synthesize(f"... {text} ...", config))
            if not chunks or self._is_stale(speech_id):
                return False

            first = chunks[0]
            with wave.open(str(wav_path), 'wb') as wav_file:
                wav_file.setnchannels(first.sample_channels)
                wav_file.setsampwidth(first.sample_width)
                wav_file.setframerate(first.sample_rate)
                for chunk in chunks:
                    wav_file.writeframes(chunk.audio_int16_bytes)

            return self._play_file(wav_path, speech_id)

        except Exception as e:
            logger.warning(f"Speaker: could not say {text!r}: {e}")
            return False
        finally:
            if wav_path:
                wav_path.unlink(missing_ok=True)

    def _play_file(self, path: Path, speech_id: int) -> bool:
        if self._is_stale(speech_id):
            return False
        try:
            sound = pygame.mixer.Sound(str(path))
            channel = sound.play()
            self._current_channel = channel

            if channel:
                while channel.get_busy():
                    if self._is_stale(speech_id):
                        channel.stop()
                        break
                    pygame.time.wait(50)

            if self._current_channel is channel:
                self._current_channel = None
            return True
        except pygame.error as e:
            logger.debug(f"Speaker: playback of {path.name} failed: {e}")
            return False
