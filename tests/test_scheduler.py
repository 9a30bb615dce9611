#!/usr/bin/env python3
"""Tests for PeriodicTask and FadeScheduler.

Run with: pytest tests/test_scheduler.py -v
"""

import asyncio
import sys
from pathlib import Path
from unittest.mock import MagicMock

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from purple_smash.config import SmashConfig
from purple_smash.figures import Figure, Point
from purple_smash.scheduler import FadeScheduler, PeriodicTask
from purple_smash.store import EntityStore
from purple_smash.themes import RED


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class TestFadeSchedulerTick:
    """The tick itself, without an event loop."""

    def test_disabled_fade_is_noop(self):
        store = MagicMock()
        scheduler = FadeScheduler(store, SmashConfig(fade_enabled=False), clock=FakeClock(100.0))
        scheduler.tick()
        store.age_step.assert_not_called()

    def test_tick_ages_with_clock_and_config(self):
        store = MagicMock()
        scheduler = FadeScheduler(store, SmashConfig(fade_after=4.0), clock=FakeClock(7.5))
        scheduler.tick()
        store.age_step.assert_called_once_with(7.5, 4.0)

    def test_config_changes_apply_on_next_tick(self):
        store = MagicMock()
        config = SmashConfig()
        scheduler = FadeScheduler(store, config, clock=FakeClock(1.0))
        config.fade_enabled = False
        scheduler.tick()
        store.age_step.assert_not_called()

    def test_fade_scenario_through_ticks(self):
        clock = FakeClock(0.0)
        store = EntityStore()
        store.add_figure(Figure(shape=None, character="A", color=RED,
                                position=Point(200, 200), size=150, created_at=0.0))
        scheduler = FadeScheduler(store, SmashConfig(fade_after=10.0), clock=clock)

        clock.now = 10.5
        scheduler.tick()
        assert store.current_figures()[0].opacity == pytest.approx(0.75)

        clock.now = 12.5
        scheduler.tick()
        assert len(store) == 0

    def test_uses_one_second_interval(self):
        scheduler = FadeScheduler(MagicMock(), SmashConfig())
        assert scheduler.interval == 1.0


class TestPeriodicTask:
    """Start/stop behavior on a real event loop."""

    def test_ticks_until_stopped(self):
        calls = []

        async def run():
            task = PeriodicTask(0.01, lambda: calls.append(1))
            task.start()
            await asyncio.sleep(0.08)
            await task.stop()
            stopped_at = len(calls)
            await asyncio.sleep(0.05)
            return stopped_at

        stopped_at = asyncio.run(run())
        assert stopped_at >= 1
        assert len(calls) == stopped_at

    def test_fire_immediately(self):
        calls = []

        async def run():
            task = PeriodicTask(10.0, lambda: calls.append(1), fire_immediately=True)
            task.start()
            await asyncio.sleep(0.01)
            await task.stop()

        asyncio.run(run())
        assert calls == [1]

    def test_waits_a_full_interval_by_default(self):
        calls = []

        async def run():
            task = PeriodicTask(10.0, lambda: calls.append(1))
            task.start()
            await asyncio.sleep(0.01)
            await task.stop()

        asyncio.run(run())
        assert calls == []

    def test_failing_callback_keeps_ticking(self):
        calls = []

        def callback():
            calls.append(1)
            raise RuntimeError("boom")

        async def run():
            task = PeriodicTask(0.01, callback)
            task.start()
            await asyncio.sleep(0.06)
            await task.stop()

        asyncio.run(run())
        assert len(calls) >= 2

    def test_stop_without_start(self):
        task = PeriodicTask(1.0, lambda: None)
        asyncio.run(task.stop())
        assert task.running is False

    def test_running_flag(self):
        async def run():
            task = PeriodicTask(1.0, lambda: None)
            task.start()
            running = task.running
            await task.stop()
            return running, task.running

        assert asyncio.run(run()) == (True, False)

    def test_restart_after_stop(self):
        calls = []

        async def run():
            task = PeriodicTask(10.0, lambda: calls.append(1), fire_immediately=True)
            task.start()
            await asyncio.sleep(0.01)
            await task.stop()
            task.start()
            await asyncio.sleep(0.01)
            await task.stop()

        asyncio.run(run())
        assert calls == [1, 1]
