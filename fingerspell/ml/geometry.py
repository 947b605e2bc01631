from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any, Optional

import numpy as np

from fingerspell.ml.fingers import LANDMARK_COUNT


def _point(entry: Any) -> tuple[float, float, float]:
    if hasattr(entry, "x") and hasattr(entry, "y") and hasattr(entry, "z"):
        return (float(entry.x), float(entry.y), float(entry.z))
    if isinstance(entry, Mapping):
        return (float(entry["x"]), float(entry["y"]), float(entry.get("z", 0.0)))
    if isinstance(entry, (Sequence, np.ndarray)) and not isinstance(entry, str) and len(entry) >= 3:
        return (float(entry[0]), float(entry[1]), float(entry[2]))
    raise ValueError(f"Unsupported landmark format: {entry!r}")


def as_points(landmarks: Any, count: int = LANDMARK_COUNT) -> Optional[np.ndarray]:
    """
    Convert one hand's landmarks into a ``(count, 3)`` float array.

    Accepts ``(x, y, z)`` sequences, ``{"x", "y", "z"}`` mappings and
    objects with ``x/y/z`` attributes (MediaPipe landmarks).
    Returns None when the input has the wrong size or holds anything that
    is not a finite number.
    """
    if landmarks is None:
        return None
    try:
        entries = list(landmarks)
    except TypeError:
        return None
    if len(entries) != count:
        return None
    try:
        pts = np.array([_point(e) for e in entries], dtype=np.float64)
    except (KeyError, TypeError, ValueError):
        return None
    if not np.all(np.isfinite(pts)):
        return None
    return pts


def joint_angle(a, b, c) -> float:
    """Angle ABC in degrees (at vertex b), 3D."""
    ba = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    bc = np.asarray(c, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    na = np.linalg.norm(ba)
    nc = np.linalg.norm(bc)
    if na < 1e-9 or nc < 1e-9:
        return 180.0
    cosv = float(np.dot(ba, bc) / (na * nc))
    cosv = max(-1.0, min(1.0, cosv))
    return math.degrees(math.acos(cosv))


def bend_angle(a, b, c) -> float:
    """How far the chain a -> b -> c deviates from a straight line, in degrees."""
    return 180.0 - joint_angle(a, b, c)


def unit(v) -> Optional[np.ndarray]:
    v = np.asarray(v, dtype=np.float64)
    n = np.linalg.norm(v)
    if n < 1e-9:
        return None
    return v / n


def cosine_similarity(u, v) -> float:
    u = np.asarray(u, dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)
    nu = np.linalg.norm(u)
    nv = np.linalg.norm(v)
    if nu < 1e-9 or nv < 1e-9:
        return 0.0
    return max(-1.0, min(1.0, float(np.dot(u, v) / (nu * nv))))
