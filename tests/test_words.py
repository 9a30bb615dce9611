"""
Tests for WordFinder

Pure logic: letters in, words out.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from purple_smash.words import DEFAULT_WORDS, WordFinder, load_words


def type_letters(finder, letters):
    """Feed letters one by one, returning every word found."""
    found = []
    for letter in letters:
        word = finder.add_letter(letter)
        if word:
            found.append(word)
    return found


class TestWordFinder:

    def test_spots_word(self):
        finder = WordFinder(["cat"])
        assert finder.add_letter("c") is None
        assert finder.add_letter("a") is None
        assert finder.add_letter("t") == "Cat"

    def test_word_inside_smash(self):
        finder = WordFinder(["cat"])
        assert type_letters(finder, "xqzcat") == ["Cat"]

    def test_uppercase_input(self):
        finder = WordFinder(["dog"])
        assert type_letters(finder, "DOG") == ["Dog"]

    def test_history_cleared_after_hit(self):
        finder = WordFinder(["at", "cat"])
        assert finder.add_letter("c") is None
        assert finder.add_letter("a") is None
        assert finder.add_letter("t") == "Cat"
        # "t" from the last word must not count again
        assert finder.add_letter("a") is None

    def test_longest_suffix_wins(self):
        finder = WordFinder(["at", "cat"])
        assert type_letters(finder, "cat") == ["Cat"]

    def test_non_letter_breaks_word(self):
        finder = WordFinder(["cat"])
        assert type_letters(finder, "ca1t") == []
        assert type_letters(finder, "ca t") == []

    def test_history_limit(self):
        finder = WordFinder(["abcd"], max_history=3)
        assert type_letters(finder, "abcd") == []

    def test_single_letters_never_match(self):
        finder = WordFinder(["a", "i"])
        assert type_letters(finder, "ai") == []

    def test_reset(self):
        finder = WordFinder(["cat"])
        type_letters(finder, "ca")
        finder.reset()
        assert finder.add_letter("t") is None

    def test_default_words(self):
        finder = WordFinder()
        assert "mom" in finder.words
        assert type_letters(finder, "mom") == ["Mom"]


class TestLoadWords:

    def test_reads_one_per_line(self, tmp_path):
        path = tmp_path / "words.txt"
        path.write_text("Zebu\n\nx\n  kiwi  \n")
        assert load_words(path) == {"zebu", "kiwi"}

    def test_missing_file(self, tmp_path):
        assert load_words(tmp_path / "nope.txt") == set()

    def test_from_file_adds_to_defaults(self, tmp_path):
        path = tmp_path / "words.txt"
        path.write_text("zebu\n")
        finder = WordFinder.from_file(path)
        assert "zebu" in finder.words
        assert DEFAULT_WORDS <= finder.words
