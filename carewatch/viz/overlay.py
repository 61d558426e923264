from __future__ import annotations

from typing import Dict, Optional, Tuple

import cv2
import numpy as np

from carewatch.common.landmarks import POSE_CONNECTIONS
from carewatch.common.schemas import DetectorStatus, FrameReport, Landmarks, ZoneRect

# BGR
STATUS_COLORS: Dict[DetectorStatus, Tuple[int, int, int]] = {
    DetectorStatus.OK: (94, 197, 34),
    DetectorStatus.WARNING: (8, 179, 234),
    DetectorStatus.ALERT: (68, 68, 239),
}
SKELETON_COLOR = (246, 130, 59)
VISIBILITY_FLOOR = 0.5


def _put_text(img, text: str, org: Tuple[int, int], color=(255, 255, 255)):
    cv2.putText(img, text, org, cv2.FONT_HERSHEY_SIMPLEX, 0.5, color, 1, cv2.LINE_AA)


def draw_skeleton(frame_bgr: np.ndarray, landmarks: Landmarks) -> None:
    h, w = frame_bgr.shape[:2]
    pts = [(int(p.x * w), int(p.y * h)) for p in landmarks]
    for a, b in POSE_CONNECTIONS:
        if landmarks[a].visibility < VISIBILITY_FLOOR or landmarks[b].visibility < VISIBILITY_FLOOR:
            continue
        cv2.line(frame_bgr, pts[a], pts[b], SKELETON_COLOR, 2, cv2.LINE_AA)
    for p, (x, y) in zip(landmarks, pts):
        if p.visibility >= VISIBILITY_FLOOR:
            cv2.circle(frame_bgr, (x, y), 3, (255, 255, 255), -1, cv2.LINE_AA)


def draw_zone(
    frame_bgr: np.ndarray,
    rect: ZoneRect,
    status: DetectorStatus = DetectorStatus.OK,
    preview: bool = False,
) -> None:
    """Translucent fill plus outline; the color follows the zone detector status."""
    h, w = frame_bgr.shape[:2]
    p1 = (int(rect.x1 * w), int(rect.y1 * h))
    p2 = (int(rect.x2 * w), int(rect.y2 * h))
    color = (246, 130, 59) if preview else STATUS_COLORS[status]
    tint = frame_bgr.copy()
    cv2.rectangle(tint, p1, p2, color, -1)
    cv2.addWeighted(tint, 0.1, frame_bgr, 0.9, 0, dst=frame_bgr)
    cv2.rectangle(frame_bgr, p1, p2, color, 1 if preview else 2)


def draw_overlays(
    frame_bgr: np.ndarray,
    frame_idx: int,
    fps_est: float,
    landmarks: Optional[Landmarks],
    report: FrameReport,
    zone: Optional[ZoneRect],
    zone_preview: Optional[ZoneRect] = None,
    muted: bool = False,
) -> None:
    h, w = frame_bgr.shape[:2]

    if zone is not None:
        draw_zone(frame_bgr, zone, report.results["zone"].status)
    if zone_preview is not None:
        draw_zone(frame_bgr, zone_preview, preview=True)
    if landmarks is not None:
        draw_skeleton(frame_bgr, landmarks)

    # HUD
    hud = f"{w}x{h} | frame {frame_idx} | {fps_est:.1f} FPS"
    if muted:
        hud += " | muted"
    _put_text(frame_bgr, hud, (10, 20), (180, 255, 180))

    # One status chip per detector
    y = 44
    for name, result in report.results.items():
        text = f"{name}: {result.status.value.upper()}"
        if result.message:
            text += f"  {result.message}"
        (tw, th), _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, 0.5, 1)
        pad = 4
        cv2.rectangle(frame_bgr, (10 - pad, y - th - pad), (10 + tw + pad, y + pad), STATUS_COLORS[result.status], -1)
        _put_text(frame_bgr, text, (10, y))
        y += th + 14
