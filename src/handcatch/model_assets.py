from __future__ import annotations

import logging
import os
import shutil
import subprocess
import urllib.error
import urllib.request


logger = logging.getLogger(__name__)


HAND_LANDMARKER_TASK_URL = (
    "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/latest/hand_landmarker.task"
)


def _remove_partial(path: str) -> None:
    if os.path.exists(path):
        os.remove(path)


def _download_with_curl(model_path: str, url: str) -> bool:
    if shutil.which("curl") is None:
        return False
    proc = subprocess.run(
        ["curl", "-fL", "-o", model_path, url],
        check=False,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )
    if proc.returncode == 0 and os.path.exists(model_path) and os.path.getsize(model_path) > 0:
        return True
    logger.warning("curl download failed: %s", proc.stderr.strip())
    _remove_partial(model_path)
    return False


def ensure_hand_landmarker_task(model_path: str, *, url: str = HAND_LANDMARKER_TASK_URL, timeout_s: int = 30) -> str:
    """
    Ensure `hand_landmarker.task` exists at `model_path`, downloading it if missing.

    Only the MediaPipe Tasks backend needs this file; the solutions backend bundles its model.
    """

    if os.path.exists(model_path):
        return model_path

    os.makedirs(os.path.dirname(model_path) or ".", exist_ok=True)
    logger.info("downloading hand landmarker model to %s", model_path)

    try:
        with urllib.request.urlopen(url, timeout=timeout_s) as r, open(model_path, "wb") as f:
            f.write(r.read())
        return model_path
    except (urllib.error.URLError, OSError) as e:
        _remove_partial(model_path)
        # curl often succeeds where Python's certificate store is misconfigured.
        if _download_with_curl(model_path, url):
            return model_path

        raise RuntimeError(
            "Missing MediaPipe Tasks model file and auto-download failed.\n\n"
            f"Expected model at: {model_path}\n"
            f"URL: {url}\n\n"
            "Download it manually:\n"
            f'  mkdir -p "{os.path.dirname(model_path) or "."}"\n'
            f'  curl -L -o "{model_path}" "{url}"\n'
        ) from e
