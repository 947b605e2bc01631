from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional, Protocol

import numpy as np

from fingerspell.exceptions import LandmarkerUnavailableError

logger = logging.getLogger(__name__)

Point = tuple[float, float, float]
Hands = list[list[Point]]
LandmarkListener = Callable[[Any, Hands], None]


class HandDetector(Protocol):
    def detect(self, frame_bgr: np.ndarray) -> Hands: ...

    def close(self) -> None: ...


def resolve_model_path(model_path: Optional[str] = None) -> Path:
    """
    Locate ``hand_landmarker.task``.

    Priority:
      1) explicit ``model_path``
      2) env FINGERSPELL_HAND_TASK_PATH
      3) repository root
      4) next to this file
      5) current directory
    """
    if model_path:
        p = Path(model_path).expanduser().resolve()
        if not p.exists():
            raise FileNotFoundError(f"hand_landmarker.task not found: {p}")
        return p

    envp = os.getenv("FINGERSPELL_HAND_TASK_PATH", "").strip()
    if envp:
        p = Path(envp).expanduser().resolve()
        if not p.exists():
            raise FileNotFoundError(f"FINGERSPELL_HAND_TASK_PATH points to a missing file: {p}")
        return p

    here = Path(__file__).resolve()
    # .../fingerspell/ml/landmarks.py -> repo root = parents[2]
    candidates = [
        here.parents[2] / "hand_landmarker.task",
        here.parent / "hand_landmarker.task",
        Path.cwd() / "hand_landmarker.task",
    ]
    for c in candidates:
        if c.exists():
            return c.resolve()

    raise FileNotFoundError(
        "hand_landmarker.task not found.\n"
        "Put it in the repository root or set FINGERSPELL_HAND_TASK_PATH."
    )


class MediaPipeHandDetector:
    """MediaPipe Tasks hand landmarker in IMAGE mode (no tracking state between calls)."""

    def __init__(
        self,
        model_path: Optional[str] = None,
        num_hands: int = 1,
        min_hand_detection_confidence: float = 0.7,
        min_hand_presence_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
    ):
        import mediapipe as mp

        self._mp = mp
        self.model_path = resolve_model_path(model_path)

        BaseOptions = mp.tasks.BaseOptions
        HandLandmarker = mp.tasks.vision.HandLandmarker
        HandLandmarkerOptions = mp.tasks.vision.HandLandmarkerOptions
        RunningMode = mp.tasks.vision.RunningMode

        options = HandLandmarkerOptions(
            base_options=BaseOptions(model_asset_path=str(self.model_path)),
            running_mode=RunningMode.IMAGE,
            num_hands=num_hands,
            min_hand_detection_confidence=min_hand_detection_confidence,
            min_hand_presence_confidence=min_hand_presence_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        self._landmarker = HandLandmarker.create_from_options(options)
        logger.info("hand landmarker loaded from %s", self.model_path)

    def detect(self, frame_bgr: np.ndarray) -> Hands:
        if frame_bgr is None or frame_bgr.ndim != 3 or frame_bgr.shape[2] != 3:
            return []

        # BGR -> RGB
        frame_rgb = frame_bgr[:, :, ::-1].copy()
        mp_image = self._mp.Image(image_format=self._mp.ImageFormat.SRGB, data=frame_rgb)
        result = self._landmarker.detect(mp_image)

        return [[(lm.x, lm.y, lm.z) for lm in hand] for hand in (result.hand_landmarks or [])]

    def close(self) -> None:
        self._landmarker.close()


class SharedHandLandmarker:
    """
    One hand detector shared by every feed in the process.

    Feeds ``acquire()`` it while they have listeners and ``release()`` it
    afterwards; the detector is created on first use and closed when the
    last user leaves. All detector calls run on one worker thread.
    """

    def __init__(self, factory: Callable[[], HandDetector]):
        self._factory = factory
        self._lock = threading.Lock()
        self._detector: Optional[HandDetector] = None
        self._init_error: Optional[str] = None
        self._refs = 0
        self._executor: Optional[concurrent.futures.ThreadPoolExecutor] = None

    @property
    def refcount(self) -> int:
        return self._refs

    @property
    def is_initialized(self) -> bool:
        return self._detector is not None

    def acquire(self) -> None:
        with self._lock:
            self._refs += 1
            logger.debug("landmarker acquired (refs=%d)", self._refs)

    def release(self) -> None:
        with self._lock:
            if self._refs == 0:
                return
            self._refs -= 1
            logger.debug("landmarker released (refs=%d)", self._refs)
            if self._refs == 0:
                self._close_detector()

    def _close_detector(self) -> None:
        if self._detector is None:
            return
        detector, self._detector = self._detector, None
        if self._executor is not None:
            # queued behind any detection still running on the worker
            self._executor.submit(self._close_quietly, detector)
        else:
            self._close_quietly(detector)

    @staticmethod
    def _close_quietly(detector: HandDetector) -> None:
        try:
            detector.close()
        except Exception:
            logger.exception("failed to close hand detector")

    def _ensure_detector(self) -> HandDetector:
        if self._detector is not None:
            return self._detector
        if self._init_error is not None:
            raise LandmarkerUnavailableError(self._init_error)
        try:
            self._detector = self._factory()
        except Exception as exc:
            self._init_error = "Failed to initialize hand detection"
            logger.exception("hand detector initialization failed")
            raise LandmarkerUnavailableError(self._init_error) from exc
        return self._detector

    def detect(self, frame_bgr: np.ndarray) -> Hands:
        with self._lock:
            if self._refs == 0:
                raise LandmarkerUnavailableError("Hand landmarker has no registered users")
            detector = self._ensure_detector()
        return detector.detect(frame_bgr)

    async def detect_async(self, frame_bgr: np.ndarray) -> Hands:
        if self._executor is None:
            self._executor = concurrent.futures.ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="landmarker"
            )
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self.detect, frame_bgr)

    def shutdown(self) -> None:
        with self._lock:
            self._refs = 0
            self._close_detector()
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None


class LandmarkFeed:
    """
    Landmarks for one camera stream, fanned out to registered listeners.

    The feed holds a reference on the shared landmarker only while it has
    listeners.
    """

    def __init__(self, landmarker: SharedHandLandmarker):
        self._landmarker = landmarker
        self._listeners: list[LandmarkListener] = []
        self._acquired = False

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def register(self, listener: LandmarkListener) -> Callable[[], None]:
        if listener not in self._listeners:
            self._listeners.append(listener)
        if not self._acquired:
            self._landmarker.acquire()
            self._acquired = True
        return lambda: self.unregister(listener)

    def unregister(self, listener: LandmarkListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)
        if not self._listeners and self._acquired:
            self._acquired = False
            self._landmarker.release()

    async def send(self, frame_bgr: np.ndarray) -> Hands:
        if not self._listeners:
            return []
        hands = await self._landmarker.detect_async(frame_bgr)
        for listener in list(self._listeners):
            listener(frame_bgr, hands)
        return hands
