from __future__ import annotations

import logging
import queue
import random
import threading
from typing import Callable, List, Optional

from .config import GameConfig
from .types import Ball


logger = logging.getLogger(__name__)


class RepeatingTimer:
    """Calls `callback` every `interval_s` seconds on a daemon thread until cancelled."""

    def __init__(self, interval_s: float, callback: Callable[[], None]) -> None:
        self.interval_s = interval_s
        self._callback = callback
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="spawn-timer", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        # Event.wait returns True as soon as cancel() is called.
        while not self._stopped.wait(self.interval_s):
            self._callback()

    def cancel(self) -> None:
        self._stopped.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)

    @property
    def active(self) -> bool:
        return self._thread is not None and not self._stopped.is_set()


TimerFactory = Callable[[float, Callable[[], None]], RepeatingTimer]


class Spawner:
    """
    Emits balls: one right away on resume, then one per interval while running.

    The periodic timer never touches game state. Each tick only queues a request,
    and the frame step collects them with `drain()`.
    """

    def __init__(
        self,
        config: GameConfig,
        rng: Optional[random.Random] = None,
        timer_factory: TimerFactory = RepeatingTimer,
    ) -> None:
        self._config = config
        self._rng = rng or random.Random()
        self._timer_factory = timer_factory
        self._timer: Optional[RepeatingTimer] = None
        self._ticks: "queue.SimpleQueue[None]" = queue.SimpleQueue()

    @property
    def timer_active(self) -> bool:
        return self._timer is not None

    def make_ball(self) -> Ball:
        lo, hi = self._config.ball_spawn_x_range
        rng = self._rng
        color = (rng.randint(0, 255), rng.randint(0, 255), rng.randint(0, 255))
        return Ball(x=rng.uniform(lo, hi), y=0.0, color=color)

    def on_enter_running(self) -> Ball:
        ball = self.make_ball()
        if self._timer is None:
            self._timer = self._timer_factory(self._config.spawn_interval_ms / 1000.0, self._on_tick)
            self._timer.start()
            logger.debug("spawn timer started (every %.0f ms)", self._config.spawn_interval_ms)
        return ball

    def on_enter_paused(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.debug("spawn timer stopped")
        # A tick that raced the cancel must not spawn into a paused game.
        self._discard_ticks()

    def _discard_ticks(self) -> None:
        while True:
            try:
                self._ticks.get_nowait()
            except queue.Empty:
                return

    def _on_tick(self) -> None:
        self._ticks.put(None)

    def drain(self) -> List[Ball]:
        balls: List[Ball] = []
        while True:
            try:
                self._ticks.get_nowait()
            except queue.Empty:
                break
            balls.append(self.make_ball())
        return balls

    def close(self) -> None:
        self.on_enter_paused()
