from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from carewatch.common.landmarks import PoseLandmark
from carewatch.common.schemas import BoundingBox, Landmark, Landmarks, ZoneRect

VISIBILITY_FLOOR = 0.5


def landmarks_to_array(landmarks: Landmarks) -> np.ndarray:
    """Stack landmarks into a float array of shape (N, 4): x, y, z, visibility."""
    return np.array([[p.x, p.y, p.z, p.visibility] for p in landmarks], dtype=np.float64)


def midpoint(a: Landmark, b: Landmark) -> Tuple[float, float]:
    return (0.5 * (a.x + b.x), 0.5 * (a.y + b.y))


def shoulder_midpoint(landmarks: Landmarks) -> Tuple[float, float]:
    return midpoint(landmarks[PoseLandmark.LEFT_SHOULDER], landmarks[PoseLandmark.RIGHT_SHOULDER])


def hip_midpoint(landmarks: Landmarks) -> Tuple[float, float]:
    return midpoint(landmarks[PoseLandmark.LEFT_HIP], landmarks[PoseLandmark.RIGHT_HIP])


def visible_bounding_box(
    landmarks: Landmarks, visibility_floor: float = VISIBILITY_FLOOR
) -> Optional[BoundingBox]:
    """Min/max box over landmarks with visibility >= floor.

    Returns None when no landmark passes the floor; callers treat that as
    "cannot evaluate posture", not as a zero-area box.
    """
    arr = landmarks_to_array(landmarks)
    if arr.size == 0:
        return None
    visible = arr[arr[:, 3] >= visibility_floor]
    if visible.shape[0] == 0:
        return None
    return BoundingBox(
        min_x=float(visible[:, 0].min()),
        min_y=float(visible[:, 1].min()),
        max_x=float(visible[:, 0].max()),
        max_y=float(visible[:, 1].max()),
    )


def displacement(
    prev: Landmarks,
    curr: Landmarks,
    dead_zone: float,
    visibility_floor: float = VISIBILITY_FLOOR,
) -> float:
    """Visibility-weighted movement score between two index-aligned frames.

    Each pair contributes dist_xy * min(vis_prev, vis_curr), but only when that
    min visibility reaches the floor and the point moved at least dead_zone.
    Jitter is filtered per point, before aggregation. z is ignored.
    """
    n = min(len(prev), len(curr))
    if n == 0:
        return 0.0
    a = landmarks_to_array(prev[:n])
    b = landmarks_to_array(curr[:n])
    vis = np.minimum(a[:, 3], b[:, 3])
    dist = np.linalg.norm(b[:, :2] - a[:, :2], axis=1)
    keep = (vis >= visibility_floor) & (dist >= dead_zone)
    return float(np.sum(dist[keep] * vis[keep]))


def contains(rect: ZoneRect, point: Tuple[float, float]) -> bool:
    """Inclusive containment: a point on the boundary counts as inside."""
    px, py = point
    return rect.x1 <= px <= rect.x2 and rect.y1 <= py <= rect.y2
