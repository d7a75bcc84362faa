from __future__ import annotations

import logging
import platform
import threading
from typing import Callable, List, Optional, Sequence

import cv2

from .config import CaptureConfig, INDEX_FINGER_TIP
from .types import HandPosition, LandmarkEvent


logger = logging.getLogger(__name__)


def event_from_hands(
    hands: Sequence[HandPosition], timestamp_ms: float, fingertip_index: int = INDEX_FINGER_TIP
) -> Optional[LandmarkEvent]:
    """First hand's fingertip as an event; None when there is nothing to report."""
    if not hands:
        return None
    tip = hands[0].fingertip(fingertip_index)
    if tip is None:
        return None
    return LandmarkEvent(x_norm=tip.x_norm, timestamp_ms=timestamp_ms)


def open_camera(cfg: CaptureConfig):
    # On macOS, AVFoundation is the backend that triggers the camera permission prompt.
    if platform.system() == "Darwin":
        cap = cv2.VideoCapture(cfg.camera_index, cv2.CAP_AVFOUNDATION)
    else:
        cap = cv2.VideoCapture(cfg.camera_index)

    if not cap.isOpened():
        cap.release()
        raise RuntimeError(
            f"Could not open camera index {cfg.camera_index}.\n\n"
            "If you're on macOS, grant Camera access to the app you launched this from in:\n"
            "  System Settings -> Privacy & Security -> Camera\n\n"
            "Then quit and re-run."
        )

    cap.set(cv2.CAP_PROP_FRAME_WIDTH, cfg.width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, cfg.height)
    return cap


class LandmarkSource:
    """
    Camera + hand detector on a background thread.

    Each frame with a hand produces one LandmarkEvent passed to `sink`; frames without a
    hand produce nothing. `sink` must be thread-safe (CatcherGame.push_landmark is).
    """

    def __init__(
        self,
        detector,
        sink: Callable[[LandmarkEvent], None],
        clock: Callable[[], float],
        capture_config: Optional[CaptureConfig] = None,
        capture_factory: Callable[[CaptureConfig], object] = open_camera,
        fingertip_index: int = INDEX_FINGER_TIP,
    ) -> None:
        self.capture_config = capture_config or CaptureConfig()
        self._detector = detector
        self._sink = sink
        self._clock = clock
        self._capture_factory = capture_factory
        self._fingertip_index = fingertip_index

        self._cap = None
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._preview = None
        self._preview_hands: List[HandPosition] = []
        self.error: Optional[Exception] = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._cap = self._capture_factory(self.capture_config)
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="landmark-source", daemon=True)
        self._thread.start()
        logger.info("landmark source started (camera %d)", self.capture_config.camera_index)

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                if not self.step():
                    logger.warning("camera stopped delivering frames")
                    break
            except Exception as e:
                logger.exception("landmark source failed")
                self.error = e
                break

    def step(self) -> bool:
        """Read, detect and emit for one frame. Returns False once the camera fails."""
        ok, frame = self._cap.read()
        if not ok:
            return False
        if self.capture_config.mirror:
            frame = cv2.flip(frame, 1)

        hands = self._detector.detect(frame)
        event = event_from_hands(hands, self._clock(), self._fingertip_index)
        if event is not None:
            self._sink(event)

        with self._lock:
            self._preview = frame
            self._preview_hands = hands
        return True

    def latest_frame(self):
        """(frame, hands) of the most recent camera frame, for the debug preview."""
        with self._lock:
            return self._preview, list(self._preview_hands)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def stop(self) -> None:
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None:
            # No timeout: the detector and camera must not be released under a running read.
            thread.join()
        cap, self._cap = self._cap, None
        if cap is not None:
            cap.release()
            logger.info("camera released")

    def __enter__(self) -> "LandmarkSource":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
