"""Shared fixtures: a manually fired spawn timer and seeded randomness."""
from __future__ import annotations

import random
from typing import Callable, List

import pytest

from handcatch.config import GameConfig
from handcatch.game import CatcherGame


class FakeTimer:
    """Stands in for RepeatingTimer; tests call fire() instead of waiting."""

    def __init__(self, interval_s: float, callback: Callable[[], None]) -> None:
        self.interval_s = interval_s
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if self.started and not self.cancelled:
            self.callback()


class TimerRecorder:
    def __init__(self) -> None:
        self.timers: List[FakeTimer] = []

    def __call__(self, interval_s: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(interval_s, callback)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> FakeTimer:
        return self.timers[-1]


@pytest.fixture
def timers() -> TimerRecorder:
    return TimerRecorder()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def config() -> GameConfig:
    return GameConfig()


@pytest.fixture
def game(config: GameConfig, rng: random.Random, timers: TimerRecorder):
    g = CatcherGame(config, rng=rng, timer_factory=timers)
    yield g
    g.close()
