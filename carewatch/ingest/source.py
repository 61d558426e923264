from __future__ import annotations

from typing import Literal, Optional, Tuple

import cv2
import numpy as np
import time

from carewatch.common.utils import now_ms


class VideoSource:
    """Unified webcam/file reader with resize and FPS pacing.

    read() returns (ok, frame_bgr, ts_ms) with ts_ms a monotonic millisecond
    timestamp, which is what the detectors consume.
    """

    def __init__(
        self,
        kind: Literal["webcam", "file"],
        path: Optional[str],
        target_w: int,
        target_h: int,
        target_fps: int,
        camera_index: int = 0,
        mirror: bool = False,
    ):
        self.kind = kind
        self.path = path
        self.target_w = int(target_w)
        self.target_h = int(target_h)
        self.target_fps = max(1, int(target_fps))
        self.mirror = mirror

        if kind == "webcam":
            self.cap = cv2.VideoCapture(int(camera_index))
        else:
            if not path:
                raise ValueError("File source requires a valid --path")
            self.cap = cv2.VideoCapture(path)

        if not self.cap.isOpened():
            raise RuntimeError(f"Failed to open video source: {kind} {path or camera_index}")

        self._last_emit_ms = now_ms()
        self._min_dt_ms = 1000.0 / float(self.target_fps)

    def _resize(self, frame: np.ndarray) -> np.ndarray:
        if frame.shape[1] == self.target_w and frame.shape[0] == self.target_h:
            return frame
        return cv2.resize(frame, (self.target_w, self.target_h), interpolation=cv2.INTER_LINEAR)

    def read(self) -> Tuple[bool, np.ndarray, float]:
        dt = now_ms() - self._last_emit_ms
        if dt < self._min_dt_ms:
            time.sleep(max(0.0, (self._min_dt_ms - dt) / 1000.0))

        ok, frame = self.cap.read()
        if not ok:
            return False, np.zeros((1, 1, 3), dtype=np.uint8), now_ms()

        frame = self._resize(frame)
        if self.mirror:
            # selfie view; landmarks come out in mirrored space, same as the zone
            frame = cv2.flip(frame, 1)
        ts = now_ms()
        self._last_emit_ms = ts
        return True, frame, ts

    def release(self) -> None:
        if getattr(self, "cap", None) is not None:
            self.cap.release()
