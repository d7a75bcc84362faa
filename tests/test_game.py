"""Tests for handcatch.game - CatcherGame frame loop and presence-driven spawning."""
from __future__ import annotations

import random

import pytest

from handcatch.config import GameConfig
from handcatch.game import CatcherGame
from handcatch.types import Ball, LandmarkEvent


def hand(x: float, t: float) -> LandmarkEvent:
    return LandmarkEvent(x_norm=x, timestamp_ms=t)


class TestInitialState:
    def test_starts_paused_with_overlay(self, game: CatcherGame) -> None:
        assert game.paused is True
        assert game.pause_overlay_visible is True
        assert game.score == 0
        assert game.score_text == "Score: 0"
        assert game.state.catcher_x == 200
        assert game.state.balls == []

    def test_frames_without_hand_do_nothing(self, game: CatcherGame, timers) -> None:
        for t in range(0, 5000, 16):
            game.frame(t)
        assert game.paused is True
        assert game.state.balls == []
        assert timers.timers == []

    def test_rejects_bad_config(self) -> None:
        with pytest.raises(ValueError):
            CatcherGame(GameConfig(sensitivity=0.0))


class TestResumeEdge:
    def test_landmark_resumes_and_spawns_one_ball(self, game: CatcherGame, timers) -> None:
        game.push_landmark(hand(0.5, 0))
        game.frame(0)
        assert game.paused is False
        assert game.pause_overlay_visible is False
        assert len(game.state.balls) == 1
        assert len(timers.timers) == 1

    def test_many_landmarks_one_edge(self, game: CatcherGame, timers) -> None:
        for t in range(0, 500, 33):
            game.push_landmark(hand(0.5, t))
            game.frame(t)
        assert len(game.state.balls) == 1
        assert len(timers.timers) == 1

    def test_each_pause_resume_edge_spawns_exactly_one(self, game: CatcherGame, timers) -> None:
        for cycle in range(3):
            start = cycle * 5000
            game.push_landmark(hand(0.5, start))
            game.frame(start)
            assert game.paused is False
            game.frame(start + 1001)
            assert game.paused is True
        assert len(timers.timers) == 3
        assert all(t.cancelled for t in timers.timers)
        assert len(game.state.balls) == 3

    def test_catcher_moves_only_on_landmarks(self, game: CatcherGame) -> None:
        game.push_landmark(hand(0.5, 0))
        game.frame(0)
        assert game.state.catcher_x == pytest.approx(220)
        game.frame(16)
        game.frame(32)
        assert game.state.catcher_x == pytest.approx(220)

    def test_catcher_holds_while_paused(self, game: CatcherGame) -> None:
        game.push_landmark(hand(0.9, 0))
        game.frame(0)
        x = game.state.catcher_x
        for t in range(1100, 3000, 16):
            game.frame(t)
        assert game.paused is True
        assert game.state.catcher_x == x


class TestPausedFreeze:
    def test_airborne_balls_freeze_and_stay(self, game: CatcherGame) -> None:
        game.push_landmark(hand(0.5, 0))
        game.frame(0)
        game.frame(16)
        y = game.state.balls[0].y
        game.frame(1100)
        assert game.paused is True
        for t in range(1116, 2000, 16):
            game.frame(t)
        assert len(game.state.balls) == 1
        assert game.state.balls[0].y == y

    def test_particles_keep_fading_while_paused(self, game: CatcherGame, config: GameConfig) -> None:
        game.push_landmark(hand(0.5, 0))
        game.frame(0)
        game.state.balls[:] = [Ball(250, 360, (0, 0, 0))]
        game.state.catcher_x = 250
        game.frame(16)
        assert game.score == 1
        assert len(game.state.particles) == 8
        game.frame(1100)
        assert game.paused is True
        for i in range(40):
            game.frame(1200 + i * 16)
        assert game.state.particles == []


class TestScoring:
    def test_callbacks_fire_per_catch(self, config: GameConfig, rng: random.Random, timers) -> None:
        scores = []
        caught = []
        g = CatcherGame(config, rng=rng, timer_factory=timers, on_score=scores.append, on_catch=caught.append)
        g.push_landmark(hand(0.5, 0))
        g.frame(0)
        g.state.balls[:] = [Ball(g.state.catcher_x, 358, (1, 1, 1))]
        g.frame(16)
        assert scores == [1]
        assert len(caught) == 1
        assert g.score_text == "Score: 1"
        g.close()

    def test_no_motion_or_catch_while_paused(self, game: CatcherGame) -> None:
        game.state.balls.append(Ball(200, 390, (0, 0, 0)))
        for t in range(0, 500, 16):
            game.frame(t)
        assert game.score == 0
        assert game.state.balls[0].y == 390


class TestEndToEnd:
    def test_timeline(self, game: CatcherGame, timers) -> None:
        # Hand enters at t=0 at the middle of the camera image.
        game.push_landmark(hand(0.5, 0))
        game.frame(0)
        assert game.paused is False
        assert game.pause_overlay_visible is False
        assert len(game.state.balls) == 1
        assert 20 <= game.state.balls[0].x <= 480
        assert game.state.catcher_x == pytest.approx(250 - 50 * 0.6)

        # Hand stays until t=1500; the catcher keeps closing in on 250.
        for n, t in enumerate(range(100, 1600, 100), start=2):
            game.push_landmark(hand(0.5, t))
            game.frame(t)
            assert game.state.catcher_x == pytest.approx(250 - 50 * 0.6**n)

        # The periodic spawn at t=1500.
        spawned_before = len(game.state.balls) + game.score
        timers.last.fire()
        game.frame(1516)
        assert len(game.state.balls) + game.score == spawned_before + 1

        # Hand gone from t=1500: still running at exactly 1000 ms of absence...
        game.frame(2500)
        assert game.paused is False
        # ...paused right after, with the timer cancelled.
        game.frame(2516)
        assert game.paused is True
        assert game.pause_overlay_visible is True
        assert timers.last.cancelled is True
        assert game.spawner.timer_active is False

        # The 3000 ms tick would have fired here; nothing spawns.
        balls_at_pause = list(game.state.balls)
        timers.last.fire()
        for t in range(2532, 3200, 16):
            game.frame(t)
        assert game.state.balls == balls_at_pause


class TestThreadedInput:
    def test_push_from_other_thread_applies_on_next_frame(self, game: CatcherGame) -> None:
        import threading

        t = threading.Thread(target=game.push_landmark, args=(hand(0.2, 5),))
        t.start()
        t.join()
        assert game.paused is True
        game.frame(10)
        assert game.paused is False
        assert game.presence.last_seen_ms == 5


class TestShutdown:
    def test_close_mid_game_stops_spawning(self, game: CatcherGame, timers) -> None:
        game.push_landmark(hand(0.5, 0))
        game.frame(0)
        game.state.balls[:] = [Ball(game.state.catcher_x, 358, (2, 2, 2))]
        game.frame(16)
        assert game.score == 1
        assert game.state.particles
        assert game.spawner.timer_active is True

        game.close()
        assert timers.last.cancelled is True
        assert game.spawner.timer_active is False
        game.close()

    def test_ticks_after_close_spawn_nothing(self, game: CatcherGame, timers) -> None:
        game.push_landmark(hand(0.5, 0))
        game.frame(0)
        game.close()
        timers.last.fire()
        assert game.spawner.drain() == []
