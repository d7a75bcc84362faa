from __future__ import annotations

import logging
import queue
import random
from typing import Callable, Optional

from .config import GameConfig
from .presence import PresenceTracker
from .simulation import advance_balls, advance_particles, smooth_catcher
from .spawner import RepeatingTimer, Spawner, TimerFactory
from .types import Ball, GameState, LandmarkEvent


logger = logging.getLogger(__name__)


class CatcherGame:
    """
    The ball catcher: presence, spawning and the per-frame step around one GameState.

    Landmark events and spawn ticks may be produced on other threads; both only go
    into queues, and `frame()` is the single consumer that applies them.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
        timer_factory: TimerFactory = RepeatingTimer,
        on_score: Optional[Callable[[int], None]] = None,
        on_catch: Optional[Callable[[Ball], None]] = None,
    ) -> None:
        self.config = (config or GameConfig()).validate()
        self._rng = rng or random.Random()
        self.state = GameState(catcher_x=float(self.config.catcher_initial_x))
        self.presence = PresenceTracker(self.config.presence_timeout_ms)
        self.spawner = Spawner(self.config, self._rng, timer_factory=timer_factory)
        self._landmarks: "queue.SimpleQueue[LandmarkEvent]" = queue.SimpleQueue()
        self._on_score = on_score
        self._on_catch = on_catch
        self.pause_overlay_visible = True

    @property
    def paused(self) -> bool:
        return self.presence.paused

    @property
    def score(self) -> int:
        return self.state.score

    @property
    def score_text(self) -> str:
        return f"Score: {self.state.score}"

    def push_landmark(self, event: LandmarkEvent) -> None:
        """Thread-safe; the event is applied on the next frame."""
        self._landmarks.put(event)

    def on_landmark(self, event: LandmarkEvent) -> None:
        target_x = event.x_norm * self.config.canvas.width
        smooth_catcher(self.state, target_x, self.config.sensitivity)

        if self.presence.on_landmark(event.timestamp_ms):
            self.pause_overlay_visible = False
            self.state.balls.append(self.spawner.on_enter_running())

    def frame(self, now_ms: float) -> None:
        while True:
            try:
                event = self._landmarks.get_nowait()
            except queue.Empty:
                break
            self.on_landmark(event)

        spawned = self.spawner.drain()
        if spawned:
            self.state.balls.extend(spawned)
            logger.debug("spawned %d ball(s), %d airborne", len(spawned), len(self.state.balls))

        if self.presence.tick(now_ms):
            self.pause_overlay_visible = True
            self.spawner.on_enter_paused()

        if not self.presence.paused:
            for ball in advance_balls(self.state, self.config, self._rng):
                logger.debug("caught ball at x=%.1f, score=%d", ball.x, self.state.score)
                if self._on_catch is not None:
                    self._on_catch(ball)
                if self._on_score is not None:
                    self._on_score(self.state.score)

        advance_particles(self.state, self.config)

    def close(self) -> None:
        self.spawner.close()

    def __enter__(self) -> "CatcherGame":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
