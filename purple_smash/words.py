"""
Word spotting for smashed letters.

Keeps the last few letters typed and checks whether they end in a real word.
"cat" typed anywhere in a smash ("xqcat") is found and said out loud.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

MAX_LETTER_HISTORY = 20
MIN_WORD_LENGTH = 2

# Built-in words a toddler might bash out, or a parent might type for them
DEFAULT_WORDS = {
    # People
    "mom", "mommy", "mama", "dad", "daddy", "dada", "papa", "baby", "nana",
    "grandma", "grandpa", "me", "you", "hi", "bye", "yes", "no", "go", "up",
    # Animals
    "cat", "dog", "cow", "pig", "hen", "fox", "owl", "bee", "ant", "bat",
    "duck", "fish", "frog", "bird", "bear", "lion", "goat", "horse", "sheep",
    "mouse", "zebra", "tiger", "puppy", "kitty", "bunny",
    # Things
    "ball", "car", "bus", "cup", "hat", "bed", "toy", "book", "sock", "shoe",
    "boat", "train", "truck", "block", "drum", "kite", "moon", "sun", "star",
    "tree", "milk", "cake", "egg", "apple", "juice", "water",
    # Colors
    "red", "blue", "green", "pink", "yellow", "orange", "purple", "black",
    "white", "brown",
    # Numbers
    "one", "two", "three", "four", "five", "six", "seven", "eight", "nine", "ten",
    # Feelings and sounds
    "love", "hug", "kiss", "fun", "happy", "moo", "baa", "woof", "meow", "oink",
    "quack", "boo", "yay", "wow",
}


def load_words(path: Path) -> set[str]:
    """
    Read a word list, one word per line.

    Blank lines and single letters are skipped. A missing or unreadable file
    gives an empty set.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (IOError, OSError, UnicodeDecodeError) as e:
        logger.warning(f"WordFinder: could not read {path}: {e}")
        return set()

    return {
        line.strip().lower()
        for line in text.splitlines()
        if len(line.strip()) >= MIN_WORD_LENGTH
    }


class WordFinder:
    """
    Spots words at the end of the recent letter history.

    Usage:
        finder = WordFinder()
        finder.add_letter('c')  # None
        finder.add_letter('a')  # None
        finder.add_letter('t')  # "Cat"

    The longest matching suffix wins ("cat" beats "at"). A hit clears the
    history so the same letters don't fire twice. Anything that isn't a
    letter breaks the current word.
    """

    def __init__(self, words: Optional[Iterable[str]] = None, max_history: int = MAX_LETTER_HISTORY):
        source = DEFAULT_WORDS if words is None else words
        self.words = {w.strip().lower() for w in source if len(w.strip()) >= MIN_WORD_LENGTH}
        self.max_history = max_history
        self._letters: list[str] = []

    @classmethod
    def from_file(cls, path: Path) -> "WordFinder":
        """Built-in words plus any found in the file."""
        return cls(DEFAULT_WORDS | load_words(path))

    def add_letter(self, letter: str) -> Optional[str]:
        """Record one typed character. Returns the completed word, capitalized, or None."""
        if not letter or not letter.isalpha():
            self._letters.clear()
            return None

        self._letters.append(letter.lower())
        if len(self._letters) > self.max_history:
            del self._letters[0]

        return self._find_word()

    def _find_word(self) -> Optional[str]:
        # Start from the oldest letter so the longest suffix is tried first
        for start in range(len(self._letters) - MIN_WORD_LENGTH + 1):
            suffix = "".join(self._letters[start:])
            if suffix in self.words:
                self._letters.clear()
                return suffix.capitalize()
        return None

    def reset(self) -> None:
        self._letters.clear()
