from __future__ import annotations

import json
import time

import cv2

from .schemas import AlertEvent


def now_ms() -> float:
    """Monotonic milliseconds for frame timestamps."""
    return time.monotonic() * 1000.0


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def lerp(lo: float, hi: float, frac: float) -> float:
    return lo + (hi - lo) * frac


def format_event_json(event: AlertEvent) -> str:
    """Compact one-line JSON suitable for stdout."""
    def round_if_float(v):
        if isinstance(v, float):
            return round(v, 3)
        return v

    data = event.model_dump(mode="json")
    data = {k: round_if_float(v) for k, v in data.items()}
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def make_video_writer(path: str, width: int, height: int, fps: int):
    """Create a cross-platform MP4 writer. Returns cv2.VideoWriter or None on failure."""
    # Prefer mp4v for Windows/macOS. If unavailable, try avc1.
    for fourcc_str in ("mp4v", "avc1", "H264", "XVID"):
        fourcc = cv2.VideoWriter_fourcc(*fourcc_str)
        writer = cv2.VideoWriter(path, fourcc, fps, (width, height))
        if writer.isOpened():
            return writer
    return None
