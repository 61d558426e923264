from __future__ import annotations

from typing import Callable, Optional, Tuple

import cv2

from carewatch.common.schemas import ZoneRect

ZoneCallback = Callable[[Optional[ZoneRect]], None]


class ZoneEditor:
    """Mouse-drag safe-zone editor bound to an OpenCV window.

    Owns the current zone rect; every change (including clearing) is pushed to
    on_change so the host can forward it to the zone detector.
    """

    def __init__(self, window_name: str, frame_size: Tuple[int, int], on_change: ZoneCallback):
        self.window_name = window_name
        self.frame_w, self.frame_h = frame_size
        self.on_change = on_change
        self.zone: Optional[ZoneRect] = None
        self.drawing_mode = False
        self._drag_start: Optional[Tuple[float, float]] = None
        self._drag_now: Optional[Tuple[float, float]] = None
        cv2.setMouseCallback(window_name, self._on_mouse)

    def _norm(self, x: int, y: int) -> Tuple[float, float]:
        return (
            min(1.0, max(0.0, x / float(self.frame_w))),
            min(1.0, max(0.0, y / float(self.frame_h))),
        )

    def _on_mouse(self, event, x, y, flags, param) -> None:
        if not self.drawing_mode:
            return
        if event == cv2.EVENT_LBUTTONDOWN:
            self._drag_start = self._norm(x, y)
            self._drag_now = self._drag_start
        elif event == cv2.EVENT_MOUSEMOVE and self._drag_start is not None:
            self._drag_now = self._norm(x, y)
        elif event == cv2.EVENT_LBUTTONUP and self._drag_start is not None:
            self.set_zone(ZoneRect.from_corners(self._drag_start, self._norm(x, y)))
            self._drag_start = None
            self._drag_now = None

    def preview(self) -> Optional[ZoneRect]:
        """Rect being dragged right now, if any."""
        if self._drag_start is None or self._drag_now is None:
            return None
        return ZoneRect.from_corners(self._drag_start, self._drag_now)

    def toggle_drawing(self) -> bool:
        self.drawing_mode = not self.drawing_mode
        if not self.drawing_mode:
            self._drag_start = None
            self._drag_now = None
        return self.drawing_mode

    def set_zone(self, rect: Optional[ZoneRect]) -> None:
        self.zone = rect
        self.on_change(rect)

    def clear(self) -> None:
        self._drag_start = None
        self._drag_now = None
        self.set_zone(None)
