#!/usr/bin/env python3
"""Tests for DrawingBoard - strokes, throttling and trail fading.

Run with: pytest tests/test_drawing.py -v
"""

import random
import sys
from pathlib import Path
from unittest.mock import MagicMock

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from purple_smash.drawing import DrawingBoard
from purple_smash.figures import Point
from purple_smash.store import EntityStore


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return EntityStore()


@pytest.fixture
def stroke_start():
    return MagicMock()


@pytest.fixture
def board(store, stroke_start, clock):
    return DrawingBoard(
        publish=store.set_trails,
        on_stroke_start=stroke_start,
        clock=clock,
        rng=random.Random(5),
    )


class TestStrokes:

    def test_first_point_starts_trail(self, board, store, stroke_start):
        board.add_point(Point(100, 100))
        trails = store.current_trails()
        assert len(trails) == 1
        assert len(trails[0].points) == 1
        stroke_start.assert_called_once()

    def test_points_join_open_trail(self, board, store, stroke_start):
        for x in range(100, 160, 10):
            board.add_point(Point(x, 100))
        assert len(store.current_trails()) == 1
        assert len(store.current_trails()[0].points) == 6
        stroke_start.assert_called_once()

    def test_close_points_ignored(self, board, store):
        board.add_point(Point(100, 100))
        board.add_point(Point(102, 103))
        assert len(store.current_trails()[0].points) == 1

    def test_end_drawing_starts_new_trail(self, board, store, stroke_start):
        board.add_point(Point(100, 100))
        board.end_drawing()
        board.add_point(Point(101, 101))
        trails = store.current_trails()
        assert len(trails) == 2
        assert trails[0].closed is True
        assert stroke_start.call_count == 2

    def test_new_surface_starts_new_trail(self, board, store):
        board.add_point(Point(100, 100), surface_index=0)
        board.add_point(Point(200, 200), surface_index=1)
        assert len(store.current_trails(0)) == 1
        assert len(store.current_trails(1)) == 1

    def test_end_drawing_without_stroke_is_noop(self, board, store):
        publish = MagicMock()
        board = DrawingBoard(publish=publish)
        board.end_drawing()
        publish.assert_not_called()

    def test_trail_width_in_range(self, board, store):
        board.add_point(Point(0, 0))
        assert 15.0 <= store.current_trails()[0].width <= 25.0

    def test_point_cap(self, store, clock):
        board = DrawingBoard(publish=store.set_trails, clock=clock, max_points=10)
        for i in range(15):
            board.add_point(Point(i * 10, 0))
        trail = store.current_trails()[0]
        assert len(trail.points) == 10
        assert trail.points[0].position == Point(50, 0)

    def test_store_gets_copies(self, board, store):
        board.add_point(Point(0, 0))
        published = store.current_trails()[0]
        board.add_point(Point(50, 50))
        assert len(published.points) == 1


class TestPrune:

    def test_fresh_points_kept(self, board, store, clock):
        board.add_point(Point(0, 0))
        clock.now = 0.5
        board.prune()
        assert store.current_trails()[0].points[0].opacity == 1.0

    def test_points_fade_after_one_second(self, board, store, clock):
        board.add_point(Point(0, 0))
        clock.now = 1.75
        board.prune()
        assert store.current_trails()[0].points[0].opacity == pytest.approx(0.5)

    def test_expired_points_removed(self, board, store, clock):
        board.add_point(Point(0, 0))
        clock.now = 1.0
        board.add_point(Point(50, 0))
        clock.now = 2.6
        board.prune()
        points = store.current_trails()[0].points
        assert len(points) == 1
        assert points[0].position == Point(50, 0)

    def test_empty_closed_trail_removed(self, board, store, clock):
        board.add_point(Point(0, 0))
        board.end_drawing()
        clock.now = 3.0
        board.prune()
        assert store.current_trails() == ()

    def test_faded_open_stroke_ends(self, board, store, clock, stroke_start):
        board.add_point(Point(0, 0))
        clock.now = 3.0
        board.prune()
        assert store.current_trails() == ()
        board.add_point(Point(1, 1))
        assert stroke_start.call_count == 2

    def test_clear(self, board, store):
        board.add_point(Point(0, 0))
        board.clear()
        assert store.current_trails() == ()
        assert board.is_drawing is False
