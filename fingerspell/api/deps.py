from functools import lru_cache
from typing import Optional

from fastapi import Depends

from fingerspell.config import Settings
from fingerspell.ml.gestures import build_asl_dictionary
from fingerspell.ml.landmarks import MediaPipeHandDetector, SharedHandLandmarker
from fingerspell.ml.relay import ModelRelay
from fingerspell.ml.scorer import GestureEstimator


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()


@lru_cache
def get_gesture_estimator() -> GestureEstimator:
    return GestureEstimator(build_asl_dictionary())


@lru_cache
def _landmarker_for(settings: Settings) -> SharedHandLandmarker:
    return SharedHandLandmarker(
        lambda: MediaPipeHandDetector(
            model_path=settings.hand_task_path,
            num_hands=1,
            min_hand_detection_confidence=settings.min_detection_confidence,
            min_tracking_confidence=settings.min_tracking_confidence,
        )
    )


def get_landmarker(settings: Settings = Depends(get_settings)) -> SharedHandLandmarker:
    return _landmarker_for(settings)


@lru_cache
def _relay_for(settings: Settings) -> ModelRelay:
    return ModelRelay(
        settings.model_api_url,
        max_attempts=settings.relay_max_attempts,
        backoff_s=settings.relay_backoff_s,
        timeout_s=settings.relay_timeout_s,
        retry_after_s=settings.relay_retry_after_s,
    )


def get_relay(settings: Settings = Depends(get_settings)) -> Optional[ModelRelay]:
    if not settings.model_api_url:
        return None
    return _relay_for(settings)


def shutdown_landmarker() -> None:
    _landmarker_for(get_settings()).shutdown()
