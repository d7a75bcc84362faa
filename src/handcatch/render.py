from __future__ import annotations

from typing import Iterable, Sequence, Tuple

import cv2
import numpy as np

from .config import GameConfig
from .detector import HAND_CONNECTIONS
from .types import Ball, Color, HandPosition, Particle


BACKGROUND_BGR = (24, 18, 18)
CYAN_BGR = (255, 255, 0)
WHITE_BGR = (255, 255, 255)

PAUSED_TEXT = "Game Paused (Show your hand to start)"


def rgb_to_bgr(color: Color) -> Tuple[int, int, int]:
    r, g, b = color
    return (int(b), int(g), int(r))


def new_canvas(config: GameConfig) -> np.ndarray:
    canvas = np.empty((config.canvas.height, config.canvas.width, 3), dtype=np.uint8)
    canvas[:] = BACKGROUND_BGR
    return canvas


def _add_glow(canvas: np.ndarray, shape: np.ndarray, sigma: float) -> None:
    """Blur a shape layer and add it onto the canvas (saturating)."""
    halo = cv2.GaussianBlur(shape, (0, 0), sigma)
    canvas[:] = cv2.add(canvas, halo)


def draw_catcher(canvas: np.ndarray, catcher_x: float, config: GameConfig) -> np.ndarray:
    half = config.catcher_half_width
    top = config.canvas.height - config.catcher_bottom_margin
    p0 = (int(round(catcher_x - half)), top)
    p1 = (int(round(catcher_x + half)), top + config.catcher_height)

    layer = np.zeros_like(canvas)
    cv2.rectangle(layer, p0, p1, CYAN_BGR, -1, cv2.LINE_AA)
    _add_glow(canvas, layer, sigma=8)

    # 80% opaque body on top of the glow
    body = canvas.copy()
    cv2.rectangle(body, p0, p1, CYAN_BGR, -1, cv2.LINE_AA)
    canvas[:] = cv2.addWeighted(body, 0.8, canvas, 0.2, 0)
    return canvas


def draw_balls(canvas: np.ndarray, balls: Iterable[Ball], config: GameConfig) -> np.ndarray:
    balls = list(balls)
    if not balls:
        return canvas
    radius = max(1, int(round(config.ball_diameter / 2)))

    glow = np.zeros_like(canvas)
    for b in balls:
        cv2.circle(glow, (int(round(b.x)), int(round(b.y))), radius, WHITE_BGR, -1, cv2.LINE_AA)
    _add_glow(canvas, glow, sigma=6)

    for b in balls:
        cv2.circle(canvas, (int(round(b.x)), int(round(b.y))), radius, rgb_to_bgr(b.color), -1, cv2.LINE_AA)
    return canvas


def draw_particles(canvas: np.ndarray, particles: Iterable[Particle], config: GameConfig) -> np.ndarray:
    radius = max(1, config.particle_diameter // 2)
    h, w = canvas.shape[:2]
    for p in particles:
        a = max(0.0, min(1.0, p.alpha / 255.0))
        cx, cy = int(round(p.x)), int(round(p.y))
        x0, y0 = max(0, cx - radius), max(0, cy - radius)
        x1, y1 = min(w, cx + radius + 1), min(h, cy + radius + 1)
        if x0 >= x1 or y0 >= y1:
            continue
        roi = canvas[y0:y1, x0:x1]
        dot = roi.copy()
        cv2.circle(dot, (cx - x0, cy - y0), radius, CYAN_BGR, -1, cv2.LINE_AA)
        roi[:] = cv2.addWeighted(dot, a, roi, 1.0 - a, 0)
    return canvas


def draw_text(canvas: np.ndarray, text: str, org: Tuple[int, int], color=WHITE_BGR, scale=0.6, thickness=2):
    cv2.putText(canvas, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, (0, 0, 0), thickness + 2, cv2.LINE_AA)
    cv2.putText(canvas, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, color, thickness, cv2.LINE_AA)
    return canvas


def draw_score(canvas: np.ndarray, score_text: str) -> np.ndarray:
    return draw_text(canvas, score_text, (12, 28), color=CYAN_BGR, scale=0.7)


def draw_pause_overlay(canvas: np.ndarray) -> np.ndarray:
    shade = np.zeros_like(canvas)
    canvas[:] = cv2.addWeighted(canvas, 0.55, shade, 0.45, 0)

    h, w = canvas.shape[:2]
    scale = 0.55
    (tw, th), _ = cv2.getTextSize(PAUSED_TEXT, cv2.FONT_HERSHEY_SIMPLEX, scale, 1)
    org = (max(0, (w - tw) // 2), (h + th) // 2)
    return draw_text(canvas, PAUSED_TEXT, org, scale=scale, thickness=1)


def render_frame(canvas: np.ndarray, game) -> np.ndarray:
    """Draw one frame of `game` (a CatcherGame). Drawing does not depend on pause state."""
    cfg = game.config
    state = game.state
    draw_catcher(canvas, state.catcher_x, cfg)
    draw_balls(canvas, state.balls, cfg)
    draw_particles(canvas, state.particles, cfg)
    draw_score(canvas, game.score_text)
    if game.pause_overlay_visible:
        draw_pause_overlay(canvas)
    return canvas


def draw_hand_preview(frame_bgr: np.ndarray, hands: Sequence[HandPosition], fingertip_index: int) -> np.ndarray:
    """Annotate a camera frame with landmarks and the tracked fingertip (debug window)."""
    for hand in hands:
        for a, b in HAND_CONNECTIONS:
            if a < len(hand.landmarks) and b < len(hand.landmarks):
                p0 = (hand.landmarks[a].x_px, hand.landmarks[a].y_px)
                p1 = (hand.landmarks[b].x_px, hand.landmarks[b].y_px)
                cv2.line(frame_bgr, p0, p1, (0, 255, 255), 2, cv2.LINE_AA)
        for lm in hand.landmarks:
            cv2.circle(frame_bgr, (lm.x_px, lm.y_px), 3, (40, 255, 120), -1, lineType=cv2.LINE_AA)

    if hands:
        tip = hands[0].fingertip(fingertip_index)
        if tip is not None:
            cv2.circle(frame_bgr, (tip.x_px, tip.y_px), 8, (0, 0, 255), -1, cv2.LINE_AA)
            draw_text(frame_bgr, f"x={tip.x_norm:.2f}", (tip.x_px + 10, max(16, tip.y_px - 10)))

    draw_text(frame_bgr, f"hands: {len(hands)} | q/esc quit", (12, 28))
    return frame_bgr
