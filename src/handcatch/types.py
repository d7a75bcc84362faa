from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


Color = Tuple[int, int, int]  # (r, g, b), 0..255


@dataclass(frozen=True)
class HandLandmark:
    """A single hand landmark with both normalized and pixel coordinates."""

    idx: int
    x_norm: float
    y_norm: float
    z_norm: float
    x_px: int
    y_px: int


@dataclass(frozen=True)
class HandPosition:
    """One detected hand."""

    handedness_label: Optional[str]  # "Left" / "Right" (may be None)
    handedness_score: Optional[float]
    landmarks: List[HandLandmark]  # length 21

    def fingertip(self, idx: int) -> Optional[HandLandmark]:
        if 0 <= idx < len(self.landmarks):
            return self.landmarks[idx]
        return None


@dataclass(frozen=True)
class LandmarkEvent:
    """The tracked fingertip of one camera frame, as pushed by the landmark source."""

    x_norm: float
    timestamp_ms: float


@dataclass
class Ball:
    x: float
    y: float
    color: Color


@dataclass
class Particle:
    x: float
    y: float
    vx: float
    vy: float
    alpha: float


@dataclass
class GameState:
    """Everything the frame step mutates. Owned by one CatcherGame."""

    catcher_x: float
    balls: List[Ball] = field(default_factory=list)
    particles: List[Particle] = field(default_factory=list)
    score: int = 0
