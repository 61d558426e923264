"""Synthetic 33-point poses for detector tests.

hip_x/hip_y place the hip midpoint (mean of LEFT_HIP and RIGHT_HIP); every
other point is laid out relative to it.
"""
from __future__ import annotations

from typing import Dict, List, Tuple

from carewatch.common.landmarks import LANDMARK_COUNT, PoseLandmark as L
from carewatch.common.schemas import Landmark

VIS = 0.99


def _build(points: Dict[L, Tuple[float, float]]) -> List[Landmark]:
    assert len(points) == LANDMARK_COUNT
    return [Landmark(x=points[i][0], y=points[i][1], visibility=VIS) for i in L]


def _upright(hip_x: float, hip_y: float, head_dy: float, shoulder_dy: float, shoulder_dx: float) -> Dict[L, Tuple[float, float]]:
    head_y = hip_y - head_dy
    shoulder_y = hip_y - shoulder_dy
    knee_y = hip_y + 0.18
    ankle_y = hip_y + 0.35
    return {
        L.NOSE: (hip_x, head_y),
        L.LEFT_EYE_INNER: (hip_x - 0.01, head_y - 0.02),
        L.LEFT_EYE: (hip_x - 0.02, head_y - 0.02),
        L.LEFT_EYE_OUTER: (hip_x - 0.03, head_y - 0.02),
        L.RIGHT_EYE_INNER: (hip_x + 0.01, head_y - 0.02),
        L.RIGHT_EYE: (hip_x + 0.02, head_y - 0.02),
        L.RIGHT_EYE_OUTER: (hip_x + 0.03, head_y - 0.02),
        L.LEFT_EAR: (hip_x - 0.05, head_y - 0.01),
        L.RIGHT_EAR: (hip_x + 0.05, head_y - 0.01),
        L.MOUTH_LEFT: (hip_x - 0.02, head_y + 0.03),
        L.MOUTH_RIGHT: (hip_x + 0.02, head_y + 0.03),
        L.LEFT_SHOULDER: (hip_x - shoulder_dx, shoulder_y),
        L.RIGHT_SHOULDER: (hip_x + shoulder_dx, shoulder_y),
        L.LEFT_ELBOW: (hip_x - 0.10, hip_y - 0.12),
        L.RIGHT_ELBOW: (hip_x + 0.10, hip_y - 0.12),
        L.LEFT_WRIST: (hip_x - 0.10, hip_y),
        L.RIGHT_WRIST: (hip_x + 0.10, hip_y),
        L.LEFT_PINKY: (hip_x - 0.11, hip_y + 0.02),
        L.RIGHT_PINKY: (hip_x + 0.11, hip_y + 0.02),
        L.LEFT_INDEX: (hip_x - 0.11, hip_y + 0.03),
        L.RIGHT_INDEX: (hip_x + 0.11, hip_y + 0.03),
        L.LEFT_THUMB: (hip_x - 0.09, hip_y + 0.01),
        L.RIGHT_THUMB: (hip_x + 0.09, hip_y + 0.01),
        L.LEFT_HIP: (hip_x - 0.06, hip_y),
        L.RIGHT_HIP: (hip_x + 0.06, hip_y),
        L.LEFT_KNEE: (hip_x - 0.05, knee_y),
        L.RIGHT_KNEE: (hip_x + 0.05, knee_y),
        L.LEFT_ANKLE: (hip_x - 0.05, ankle_y),
        L.RIGHT_ANKLE: (hip_x + 0.05, ankle_y),
        L.LEFT_HEEL: (hip_x - 0.05, ankle_y + 0.02),
        L.RIGHT_HEEL: (hip_x + 0.05, ankle_y + 0.02),
        L.LEFT_FOOT_INDEX: (hip_x - 0.05, ankle_y + 0.04),
        L.RIGHT_FOOT_INDEX: (hip_x + 0.05, ankle_y + 0.04),
    }


def standing_pose(hip_x: float = 0.5, hip_y: float = 0.55) -> List[Landmark]:
    """Upright; shoulders 0.25 above hips, box taller than wide."""
    return _build(_upright(hip_x, hip_y, head_dy=0.40, shoulder_dy=0.25, shoulder_dx=0.08))


def sitting_pose(hip_x: float = 0.5, hip_y: float = 0.55) -> List[Landmark]:
    """Shoulders 0.20 above hips, well clear of the collapse threshold."""
    pts = _upright(hip_x, hip_y, head_dy=0.32, shoulder_dy=0.20, shoulder_dx=0.10)
    pts[L.LEFT_KNEE] = (hip_x - 0.08, hip_y + 0.05)
    pts[L.RIGHT_KNEE] = (hip_x + 0.08, hip_y + 0.05)
    pts[L.LEFT_ANKLE] = (hip_x - 0.07, hip_y + 0.20)
    pts[L.RIGHT_ANKLE] = (hip_x + 0.07, hip_y + 0.20)
    return _build(pts)


def fallen_pose(hip_x: float = 0.5, hip_y: float = 0.7) -> List[Landmark]:
    """Lying along x: shoulders level with hips, box roughly 6x wider than tall."""
    s = 0.15
    head_x = hip_x - s - 0.14
    pts = {i: (head_x, hip_y) for i in L}
    pts.update({
        L.NOSE: (hip_x - s - 0.15, hip_y - 0.01),
        L.LEFT_EAR: (hip_x - s - 0.16, hip_y - 0.03),
        L.RIGHT_EAR: (hip_x - s - 0.16, hip_y + 0.01),
        L.LEFT_SHOULDER: (hip_x - s, hip_y - 0.01),
        L.RIGHT_SHOULDER: (hip_x - s, hip_y + 0.01),
        L.LEFT_ELBOW: (hip_x - s - 0.05, hip_y - 0.03),
        L.RIGHT_ELBOW: (hip_x - s - 0.05, hip_y + 0.03),
        L.LEFT_WRIST: (hip_x - s - 0.10, hip_y - 0.04),
        L.RIGHT_WRIST: (hip_x - s - 0.10, hip_y + 0.04),
        L.LEFT_PINKY: (hip_x - s - 0.12, hip_y - 0.05),
        L.RIGHT_PINKY: (hip_x + s + 0.12, hip_y + 0.05),
        L.LEFT_HIP: (hip_x - 0.02, hip_y - 0.01),
        L.RIGHT_HIP: (hip_x + 0.02, hip_y + 0.01),
        L.LEFT_KNEE: (hip_x + s, hip_y - 0.01),
        L.RIGHT_KNEE: (hip_x + s, hip_y + 0.01),
        L.LEFT_ANKLE: (hip_x + s + 0.12, hip_y - 0.01),
        L.RIGHT_ANKLE: (hip_x + s + 0.12, hip_y + 0.01),
        L.LEFT_FOOT_INDEX: (hip_x + s + 0.16, hip_y - 0.01),
        L.RIGHT_FOOT_INDEX: (hip_x + s + 0.16, hip_y + 0.01),
    })
    return _build(pts)


def shift_pose(pose: List[Landmark], dx: float, dy: float) -> List[Landmark]:
    return [p.model_copy(update={"x": p.x + dx, "y": p.y + dy}) for p in pose]


def with_hips(pose: List[Landmark], x: float, y: float) -> List[Landmark]:
    """Put both hip points exactly at (x, y)."""
    out = list(pose)
    for i in (L.LEFT_HIP, L.RIGHT_HIP):
        out[i] = out[i].model_copy(update={"x": x, "y": y})
    return out


def with_visibility(pose: List[Landmark], visibility: float) -> List[Landmark]:
    return [p.model_copy(update={"visibility": visibility}) for p in pose]
