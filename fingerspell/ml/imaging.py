from __future__ import annotations

import base64
from typing import Any, Optional

import cv2
import numpy as np

from fingerspell.ml.geometry import as_points

CROP_SIZE = 224
CROP_PADDING = 0.2
JPEG_QUALITY = 80


def decode_data_url(data_url: str) -> np.ndarray:
    """Decode a ``data:image/...;base64,`` URL (or bare base64) into a BGR frame."""
    encoded = data_url.split(",", 1)[1] if "," in data_url else data_url
    try:
        img_bytes = base64.b64decode(encoded, validate=False)
    except ValueError as exc:
        raise ValueError("frame is not valid base64") from exc
    if not img_bytes:
        raise ValueError("frame is empty")
    img = cv2.imdecode(np.frombuffer(img_bytes, np.uint8), cv2.IMREAD_COLOR)
    if img is None:
        raise ValueError("cv2.imdecode returned None")
    return img


def encode_jpeg_data_url(frame_bgr: np.ndarray, quality: int = JPEG_QUALITY) -> str:
    ok, buf = cv2.imencode(".jpg", frame_bgr, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not ok:
        raise ValueError("cv2.imencode failed")
    return "data:image/jpeg;base64," + base64.b64encode(buf.tobytes()).decode("ascii")


def hand_bbox(
    landmarks: Any,
    width: int,
    height: int,
    padding: float = CROP_PADDING,
) -> Optional[tuple[int, int, int, int]]:
    """
    Pixel box ``(x0, y0, x1, y1)`` around the hand, grown by ``padding`` of its
    size on every side and clipped to the frame. None if nothing is left.
    """
    pts = as_points(landmarks)
    if pts is None:
        return None

    xs = pts[:, 0] * width
    ys = pts[:, 1] * height
    x0, x1 = float(xs.min()), float(xs.max())
    y0, y1 = float(ys.min()), float(ys.max())
    pad_x = (x1 - x0) * padding
    pad_y = (y1 - y0) * padding

    x0 = max(0, int(np.floor(x0 - pad_x)))
    y0 = max(0, int(np.floor(y0 - pad_y)))
    x1 = min(width, int(np.ceil(x1 + pad_x)))
    y1 = min(height, int(np.ceil(y1 + pad_y)))
    if x1 - x0 < 2 or y1 - y0 < 2:
        return None
    return x0, y0, x1, y1


def crop_hand(
    frame_bgr: np.ndarray,
    landmarks: Any,
    padding: float = CROP_PADDING,
    size: int = CROP_SIZE,
) -> Optional[np.ndarray]:
    h, w = frame_bgr.shape[:2]
    box = hand_bbox(landmarks, w, h, padding=padding)
    if box is None:
        return None
    x0, y0, x1, y1 = box
    crop = frame_bgr[y0:y1, x0:x1]
    return cv2.resize(crop, (size, size), interpolation=cv2.INTER_LINEAR)
