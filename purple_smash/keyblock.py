"""
System key blocking (Linux evdev).

Grabs the keyboard exclusively so shortcuts like Alt+Tab or Ctrl+Alt+F2 never
reach the desktop. Because a grabbed keyboard no longer types into the
terminal either, the blocker reads the keys itself and hands them to a
callback.

evdev is imported lazily: on other platforms, or without permission to open
/dev/input, start() just returns False and the toy keeps running unblocked.
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)

# evdev key names to the character they type (unshifted US layout)
_PUNCTUATION = {
    "KEY_SPACE": " ",
    "KEY_MINUS": "-",
    "KEY_EQUAL": "=",
    "KEY_LEFTBRACE": "[",
    "KEY_RIGHTBRACE": "]",
    "KEY_BACKSLASH": "\\",
    "KEY_SEMICOLON": ";",
    "KEY_APOSTROPHE": "'",
    "KEY_GRAVE": "`",
    "KEY_COMMA": ",",
    "KEY_DOT": ".",
    "KEY_SLASH": "/",
}

ESCAPE = "escape"


def build_key_map(ecodes) -> dict[int, str]:
    """Key code -> character (or "escape") for the keys the toy cares about."""
    key_map = {}
    for letter in "abcdefghijklmnopqrstuvwxyz0123456789":
        key_map[getattr(ecodes, f"KEY_{letter.upper()}")] = letter
    for name, char in _PUNCTUATION.items():
        key_map[getattr(ecodes, name)] = char
    key_map[ecodes.KEY_ESC] = ESCAPE
    return key_map


class SystemKeyBlocker:
    """
    Exclusive keyboard grab with key forwarding.

    Args:
        on_key: Called with (key, is_down) for every mapped key. `key` is a
            single character or "escape". Auto-repeat is dropped.
        device_path: Use this evdev device instead of searching for one
    """

    def __init__(
        self,
        on_key: Optional[Callable[[str, bool], None]] = None,
        device_path: Optional[str] = None,
    ):
        self._on_key = on_key
        self._device_path = device_path
        self._device = None
        self._key_map: dict[int, str] = {}
        self._task: Optional[asyncio.Task] = None
        self.is_blocking = False

    def start(self) -> bool:
        """Grab the keyboard. Returns False if blocking isn't possible here."""
        if self.is_blocking:
            return True

        try:
            import evdev
        except ImportError:
            logger.warning("SystemKeyBlocker: evdev not available, system keys not blocked")
            return False

        try:
            device = evdev.InputDevice(self._device_path) if self._device_path else self._find_keyboard()
        except (PermissionError, OSError) as e:
            logger.warning(f"SystemKeyBlocker: cannot open keyboard: {e}")
            return False

        if device is None:
            logger.warning("SystemKeyBlocker: no keyboard found")
            return False

        try:
            device.grab()
        except (IOError, OSError) as e:
            logger.warning(f"SystemKeyBlocker: could not grab {device.path}: {e}")
            device.close()
            return False

        self._device = device
        self._key_map = build_key_map(evdev.ecodes)
        self.is_blocking = True
        logger.info(f"SystemKeyBlocker: grabbed {device.path} ({device.name})")

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None and self._on_key is not None:
            self._task = loop.create_task(self._read_loop(), name="SystemKeyBlocker")
        return True

    def stop(self) -> None:
        """Release the keyboard. Safe to call when not blocking."""
        if self._task:
            self._task.cancel()
            self._task = None

        if self._device:
            try:
                self._device.ungrab()
            except (IOError, OSError):
                pass
            self._device.close()
            self._device = None
            logger.info("SystemKeyBlocker: released keyboard")

        self.is_blocking = False

    async def _read_loop(self) -> None:
        from evdev import ecodes

        try:
            async for event in self._device.async_read_loop():
                # Ignore repeats: value=2
                if event.type != ecodes.EV_KEY or event.value not in (0, 1):
                    continue
                key = self._key_map.get(event.code)
                if key is None:
                    continue
                try:
                    self._on_key(key, event.value == 1)
                except Exception as e:
                    logger.error(f"SystemKeyBlocker: key handler failed: {e}")
        except asyncio.CancelledError:
            pass
        except OSError as e:
            # Keyboard unplugged
            logger.warning(f"SystemKeyBlocker: read failed: {e}")

    def _find_keyboard(self):
        """Find the first device with letter keys, preferring stable by-id paths."""
        import evdev
        from evdev import InputDevice

        letter_keys = {getattr(evdev.ecodes, f"KEY_{c}") for c in "ABCDEFGHIJKLMNOPQRSTUVWXYZ"}

        def is_keyboard(dev) -> bool:
            caps = dev.capabilities().get(evdev.ecodes.EV_KEY, [])
            return bool(set(caps) & letter_keys)

        by_id = Path("/dev/input/by-id")
        if by_id.exists():
            for path in sorted(by_id.iterdir()):
                name = path.name.lower()
                if "kbd" in name or "keyboard" in name:
                    try:
                        dev = InputDevice(str(path.resolve()))
                        if is_keyboard(dev):
                            return dev
                        dev.close()
                    except (PermissionError, OSError):
                        continue

        for dev_path in sorted(evdev.list_devices()):
            try:
                dev = InputDevice(dev_path)
                if "virtual" not in dev.name.lower() and is_keyboard(dev):
                    return dev
                dev.close()
            except (PermissionError, OSError):
                continue

        return None
