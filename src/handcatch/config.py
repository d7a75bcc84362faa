from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


# --- Tuning knobs (the game exposes none of these to the player) ---
SENSITIVITY = 0.4  # catcher smoothing factor toward the fingertip target
PRESENCE_TIMEOUT_MS = 1000
SPAWN_INTERVAL_MS = 1500
BALL_SPEED = 4  # px per frame
BURST_SIZE = 8
PARTICLE_FADE = 8  # alpha lost per frame (0..255 scale)

INDEX_FINGER_TIP = 8


@dataclass(frozen=True)
class CanvasConfig:
    width: int = 500
    height: int = 400


@dataclass(frozen=True)
class GameConfig:
    canvas: CanvasConfig = CanvasConfig()

    sensitivity: float = SENSITIVITY
    presence_timeout_ms: float = PRESENCE_TIMEOUT_MS
    spawn_interval_ms: float = SPAWN_INTERVAL_MS

    ball_speed: float = BALL_SPEED
    ball_diameter: int = 25
    ball_spawn_x_range: Tuple[float, float] = (20, 480)

    catcher_initial_x: float = 200
    catcher_width: int = 100
    catcher_height: int = 20
    catcher_bottom_margin: int = 30  # paddle top edge sits at height - margin
    catch_band_offset: int = 40  # ball is in the band once y > height - offset

    burst_size: int = BURST_SIZE
    particle_vx_range: Tuple[float, float] = (-2, 2)
    particle_vy_range: Tuple[float, float] = (-3, -1)
    particle_alpha: int = 255
    particle_fade: int = PARTICLE_FADE
    particle_diameter: int = 6

    @property
    def catcher_half_width(self) -> float:
        return self.catcher_width / 2

    def validate(self) -> "GameConfig":
        """Raise ValueError for values that would break the frame step."""
        if not (0.0 < self.sensitivity <= 1.0):
            raise ValueError(f"sensitivity must be in (0, 1], got {self.sensitivity}")
        if self.presence_timeout_ms <= 0:
            raise ValueError("presence_timeout_ms must be positive")
        if self.spawn_interval_ms <= 0:
            raise ValueError("spawn_interval_ms must be positive")
        if self.ball_speed <= 0:
            raise ValueError("ball_speed must be positive")
        lo, hi = self.ball_spawn_x_range
        if lo > hi:
            raise ValueError(f"ball_spawn_x_range is empty: {self.ball_spawn_x_range}")
        if self.burst_size < 0:
            raise ValueError("burst_size must be >= 0")
        if self.particle_fade <= 0:
            raise ValueError("particle_fade must be positive")
        if self.canvas.width <= 0 or self.canvas.height <= 0:
            raise ValueError(f"canvas must have a positive size, got {self.canvas}")
        return self


@dataclass(frozen=True)
class InferenceConfig:
    max_num_hands: int = 1
    model_complexity: int = 1
    min_detection_confidence: float = 0.7
    min_tracking_confidence: float = 0.7
    tasks_model_path: str = "models/hand_landmarker.task"
    fingertip_index: int = INDEX_FINGER_TIP


@dataclass(frozen=True)
class CaptureConfig:
    camera_index: int = 0
    width: int = 640
    height: int = 480
    mirror: bool = True
