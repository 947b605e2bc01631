from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


@dataclass(frozen=True)
class Settings:
    model_api_url: Optional[str] = None
    min_score: float = 7.5

    relay_max_attempts: int = 5
    relay_backoff_s: float = 3.0
    relay_timeout_s: float = 30.0
    relay_retry_after_s: float = 15.0

    remote_interval_s: float = 1.0
    remote_cooldown_s: float = 15.0
    word_hold_s: float = 0.8

    hand_task_path: Optional[str] = None
    min_detection_confidence: float = 0.7
    min_tracking_confidence: float = 0.5

    ws_debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    @classmethod
    def from_env(cls) -> Settings:
        load_dotenv()
        return cls(
            model_api_url=os.getenv("ASL_MODEL_API_URL", "").strip() or None,
            min_score=_env_float("FINGERSPELL_MIN_SCORE", 7.5),
            relay_max_attempts=_env_int("FINGERSPELL_RELAY_MAX_ATTEMPTS", 5),
            relay_backoff_s=_env_float("FINGERSPELL_RELAY_BACKOFF_S", 3.0),
            relay_timeout_s=_env_float("FINGERSPELL_RELAY_TIMEOUT_S", 30.0),
            relay_retry_after_s=_env_float("FINGERSPELL_RELAY_RETRY_AFTER_S", 15.0),
            remote_interval_s=_env_float("FINGERSPELL_REMOTE_INTERVAL_S", 1.0),
            remote_cooldown_s=_env_float("FINGERSPELL_REMOTE_COOLDOWN_S", 15.0),
            word_hold_s=_env_float("FINGERSPELL_WORD_HOLD_S", 0.8),
            hand_task_path=os.getenv("FINGERSPELL_HAND_TASK_PATH", "").strip() or None,
            min_detection_confidence=_env_float("FINGERSPELL_MIN_DETECTION_CONF", 0.7),
            min_tracking_confidence=_env_float("FINGERSPELL_MIN_TRACKING_CONF", 0.5),
            ws_debug=os.getenv("FINGERSPELL_WS_DEBUG", "0") == "1",
            host=os.getenv("FINGERSPELL_HOST", "0.0.0.0"),
            port=_env_int("FINGERSPELL_PORT", 8000),
        )
