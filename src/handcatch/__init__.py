from .config import CanvasConfig, CaptureConfig, GameConfig, InferenceConfig
from .game import CatcherGame
from .presence import PresenceTracker
from .spawner import RepeatingTimer, Spawner
from .types import Ball, GameState, HandLandmark, HandPosition, LandmarkEvent, Particle

__all__ = [
    "CanvasConfig",
    "CaptureConfig",
    "GameConfig",
    "InferenceConfig",
    "CatcherGame",
    "PresenceTracker",
    "RepeatingTimer",
    "Spawner",
    "Ball",
    "GameState",
    "HandLandmark",
    "HandPosition",
    "LandmarkEvent",
    "Particle",
]
