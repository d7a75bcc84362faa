from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import cv2

from .config import InferenceConfig
from .model_assets import ensure_hand_landmarker_task
from .types import HandLandmark, HandPosition
from .utils import clamp_int


logger = logging.getLogger(__name__)


HAND_CONNECTIONS: List[Tuple[int, int]] = [
    # thumb
    (0, 1),
    (1, 2),
    (2, 3),
    (3, 4),
    # index
    (0, 5),
    (5, 6),
    (6, 7),
    (7, 8),
    # middle
    (5, 9),
    (9, 10),
    (10, 11),
    (11, 12),
    # ring
    (9, 13),
    (13, 14),
    (14, 15),
    (15, 16),
    # pinky
    (13, 17),
    (17, 18),
    (18, 19),
    (19, 20),
    # palm base
    (0, 17),
]


@dataclass(frozen=True)
class _SolutionsBackend:
    hands: object


@dataclass(frozen=True)
class _TasksBackend:
    mp: object
    landmarker: object


def _create_solutions_backend(cfg: InferenceConfig) -> Optional[_SolutionsBackend]:
    import mediapipe as mp  # type: ignore

    if not hasattr(mp, "solutions"):
        return None
    hands = mp.solutions.hands.Hands(
        static_image_mode=False,
        max_num_hands=cfg.max_num_hands,
        model_complexity=cfg.model_complexity,
        min_detection_confidence=cfg.min_detection_confidence,
        min_tracking_confidence=cfg.min_tracking_confidence,
    )
    return _SolutionsBackend(hands=hands)


def _create_tasks_backend(cfg: InferenceConfig) -> _TasksBackend:
    """
    Fallback for MediaPipe distributions that no longer ship `mp.solutions`.

    Uses the Tasks HandLandmarker in VIDEO mode, which needs a `.task` model on disk.
    The Tasks API has no model complexity knob, so `cfg.model_complexity` is unused here.
    """

    import mediapipe as mp  # type: ignore

    try:
        from mediapipe.tasks.python import BaseOptions  # type: ignore
        from mediapipe.tasks.python.vision import HandLandmarker, HandLandmarkerOptions, RunningMode  # type: ignore
    except ImportError:  # pragma: no cover
        from mediapipe.tasks import python as mp_python  # type: ignore

        BaseOptions = mp_python.BaseOptions
        HandLandmarker = mp_python.vision.HandLandmarker
        HandLandmarkerOptions = mp_python.vision.HandLandmarkerOptions
        RunningMode = mp_python.vision.RunningMode

    model_path = ensure_hand_landmarker_task(cfg.tasks_model_path)

    options = HandLandmarkerOptions(
        base_options=BaseOptions(model_asset_path=model_path),
        running_mode=RunningMode.VIDEO,
        num_hands=cfg.max_num_hands,
        min_hand_detection_confidence=cfg.min_detection_confidence,
        min_tracking_confidence=cfg.min_tracking_confidence,
    )
    return _TasksBackend(mp=mp, landmarker=HandLandmarker.create_from_options(options))


class HandLandmarkDetector:
    """
    Hand landmark detector using MediaPipe Hands.

    Input frames are expected as **BGR** images (OpenCV default).
    """

    def __init__(self, config: Optional[InferenceConfig] = None) -> None:
        self.config = config or InferenceConfig()
        self._solutions: Optional[_SolutionsBackend] = None
        self._tasks: Optional[_TasksBackend] = None
        self._tasks_timestamp_ms = 0

        self._solutions = _create_solutions_backend(self.config)
        if self._solutions is not None:
            logger.info("using MediaPipe solutions backend")
            return

        try:
            self._tasks = _create_tasks_backend(self.config)
        except FileNotFoundError as e:
            raise RuntimeError(
                "MediaPipe does not provide `mp.solutions` in your environment, so the\n"
                "Tasks HandLandmarker fallback is used, which needs a model file on disk:\n"
                f"  {self.config.tasks_model_path}\n\n"
                "Download the model (or pass --tasks-model) and try again."
            ) from e
        except RuntimeError:
            raise
        except Exception as e:  # pragma: no cover
            raise RuntimeError(
                "Could not initialize MediaPipe Hands.\n"
                "Your installed `mediapipe` package does not expose `mp.solutions`, and the Tasks\n"
                "fallback could not be initialized either."
            ) from e
        logger.info("using MediaPipe Tasks backend (%s)", self.config.tasks_model_path)

    def close(self) -> None:
        solutions, self._solutions = self._solutions, None
        tasks, self._tasks = self._tasks, None
        if solutions is not None:
            solutions.hands.close()
        if tasks is not None:
            tasks.landmarker.close()

    def __enter__(self) -> "HandLandmarkDetector":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def detect(self, frame_bgr) -> List[HandPosition]:
        h, w = frame_bgr.shape[:2]
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)

        if self._solutions is not None:
            results = self._solutions.hands.process(frame_rgb)
            if not results.multi_hand_landmarks:
                return []

            handedness_list = results.multi_handedness or []
            positions: List[HandPosition] = []
            for i, hand_landmarks in enumerate(results.multi_hand_landmarks):
                label: Optional[str] = None
                score: Optional[float] = None
                if i < len(handedness_list) and handedness_list[i].classification:
                    c = handedness_list[i].classification[0]
                    label = getattr(c, "label", None)
                    score = float(getattr(c, "score", 0.0))
                positions.append(build_hand_position(hand_landmarks.landmark, label, score, w, h))
            return positions

        if self._tasks is None:
            return []

        mp = self._tasks.mp
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)

        # VIDEO mode requires monotonically increasing timestamps.
        self._tasks_timestamp_ms += 33
        result = self._tasks.landmarker.detect_for_video(mp_image, self._tasks_timestamp_ms)

        hand_landmarks_list = getattr(result, "hand_landmarks", None) or []
        handedness_list = getattr(result, "handedness", None) or []

        positions = []
        for i, landmarks in enumerate(hand_landmarks_list):
            label = None
            score = None
            if i < len(handedness_list) and handedness_list[i]:
                cat0 = handedness_list[i][0]
                label = getattr(cat0, "category_name", None) or getattr(cat0, "display_name", None)
                score = float(getattr(cat0, "score", 0.0))
            positions.append(build_hand_position(landmarks, label, score, w, h))
        return positions


def build_hand_position(landmarks, label: Optional[str], score: Optional[float], w: int, h: int) -> HandPosition:
    """Convert raw MediaPipe landmarks (anything with .x/.y[/.z]) to a HandPosition."""
    lm_px: List[HandLandmark] = []
    for idx, lm in enumerate(landmarks):
        lm_px.append(
            HandLandmark(
                idx=idx,
                x_norm=float(lm.x),
                y_norm=float(lm.y),
                z_norm=float(getattr(lm, "z", 0.0)),
                x_px=clamp_int(int(round(float(lm.x) * w)), 0, w - 1),
                y_px=clamp_int(int(round(float(lm.y) * h)), 0, h - 1),
            )
        )
    return HandPosition(handedness_label=label, handedness_score=score, landmarks=lm_px)
