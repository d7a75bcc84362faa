from __future__ import annotations

import random
from typing import List

from .config import GameConfig
from .types import Ball, GameState, Particle


def smooth_catcher(state: GameState, target_x: float, sensitivity: float) -> float:
    """One exponential smoothing step of the catcher toward `target_x`."""
    state.catcher_x += (target_x - state.catcher_x) * sensitivity
    return state.catcher_x


def is_caught(ball: Ball, catcher_x: float, config: GameConfig) -> bool:
    half = config.catcher_half_width
    in_band = ball.y > config.canvas.height - config.catch_band_offset
    return in_band and (catcher_x - half) < ball.x < (catcher_x + half)


def spawn_burst(state: GameState, x: float, y: float, config: GameConfig, rng: random.Random) -> List[Particle]:
    vx_lo, vx_hi = config.particle_vx_range
    vy_lo, vy_hi = config.particle_vy_range
    burst = [
        Particle(
            x=x,
            y=y,
            vx=rng.uniform(vx_lo, vx_hi),
            vy=rng.uniform(vy_lo, vy_hi),
            alpha=float(config.particle_alpha),
        )
        for _ in range(config.burst_size)
    ]
    state.particles.extend(burst)
    return burst


def advance_balls(state: GameState, config: GameConfig, rng: random.Random) -> List[Ball]:
    """
    Move every ball down one step, resolve catches and misses.

    Iterates in reverse so balls can be deleted in place. Returns the balls caught
    this frame; the score has already been incremented for each of them.
    """

    caught: List[Ball] = []
    balls = state.balls
    for i in range(len(balls) - 1, -1, -1):
        ball = balls[i]
        ball.y += config.ball_speed

        if is_caught(ball, state.catcher_x, config):
            state.score += 1
            spawn_burst(state, ball.x, ball.y, config, rng)
            del balls[i]
            caught.append(ball)
        elif ball.y > config.canvas.height:
            del balls[i]

    return caught


def advance_particles(state: GameState, config: GameConfig) -> None:
    particles = state.particles
    for i in range(len(particles) - 1, -1, -1):
        p = particles[i]
        p.x += p.vx
        p.y += p.vy
        p.alpha -= config.particle_fade
        if p.alpha <= 0:
            del particles[i]
