from __future__ import annotations

import argparse
import contextlib
import logging
import random
import time
from typing import List, Optional

import cv2

from .audio import CatchChime
from .config import CaptureConfig, GameConfig, InferenceConfig
from .detector import HandLandmarkDetector
from .game import CatcherGame
from .render import draw_hand_preview, new_canvas, render_frame
from .source import LandmarkSource
from .utils import make_ms_clock


logger = logging.getLogger(__name__)

WINDOW_NAME = "handcatch"
PREVIEW_WINDOW_NAME = "handcatch - camera"


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Catch falling balls by steering the paddle with your index finger.")
    ap.add_argument("--camera", type=int, default=0, help="Camera index (default: 0)")
    ap.add_argument(
        "--no-mirror",
        action="store_true",
        help="Disable horizontal mirroring (default is mirrored/selfie mode)",
    )
    ap.add_argument(
        "--tasks-model",
        default="models/hand_landmarker.task",
        help="Path to MediaPipe Tasks model (auto-downloaded if missing, only used without mp.solutions)",
    )
    ap.add_argument("--sound", action="store_true", help="Play a blip on every catch")
    ap.add_argument("--preview", action="store_true", help="Show the annotated camera feed in a second window")
    ap.add_argument("--fps", type=float, default=60.0, help="Target frame rate of the game loop (default: 60)")
    ap.add_argument("--seed", type=int, default=None, help="Seed for ball positions/colors and particles")
    ap.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    return ap


def run(args: argparse.Namespace) -> int:
    if args.fps <= 0:
        raise ValueError("--fps must be positive")

    config = GameConfig()
    inference = InferenceConfig(tasks_model_path=args.tasks_model)
    capture = CaptureConfig(camera_index=args.camera, mirror=not args.no_mirror)
    clock = make_ms_clock()
    frame_budget_s = 1.0 / args.fps

    with contextlib.ExitStack() as stack:
        chime: Optional[CatchChime] = None
        if args.sound:
            chime = stack.enter_context(CatchChime())

        def on_catch(_ball) -> None:
            if chime is not None and chime.active:
                chime.play()

        def on_score(score: int) -> None:
            logger.info("Score: %d", score)

        game = stack.enter_context(
            CatcherGame(config, rng=random.Random(args.seed), on_catch=on_catch, on_score=on_score)
        )
        detector = stack.enter_context(HandLandmarkDetector(inference))
        source = stack.enter_context(LandmarkSource(detector, game.push_landmark, clock, capture_config=capture))
        stack.callback(cv2.destroyAllWindows)

        cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_AUTOSIZE)
        while True:
            started = time.monotonic()

            game.frame(clock())
            cv2.imshow(WINDOW_NAME, render_frame(new_canvas(config), game))

            if args.preview:
                frame, hands = source.latest_frame()
                if frame is not None:
                    preview = draw_hand_preview(frame.copy(), hands, inference.fingertip_index)
                    cv2.imshow(PREVIEW_WINDOW_NAME, preview)

            if not source.running:
                if source.error is not None:
                    logger.error("landmark source failed, quitting (final score %d)", game.score)
                else:
                    logger.error("camera feed ended, quitting (final score %d)", game.score)
                return 1

            remaining_ms = int((frame_budget_s - (time.monotonic() - started)) * 1000)
            key = cv2.waitKey(max(1, remaining_ms)) & 0xFF
            if key in (ord("q"), 27):
                break

        logger.info("quit with score %d", game.score)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return run(args)


if __name__ == "__main__":
    raise SystemExit(main())
