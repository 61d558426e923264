from __future__ import annotations

from typing import Optional

from carewatch.common.schemas import DetectorResult, DetectorStatus, FallConfig, Landmarks
from carewatch.detectors.base import Settings, numeric_setting
from carewatch.geometry.pose import hip_midpoint, shoulder_midpoint, visible_bounding_box

# Shoulder/hip vertical gap below this means the torso has collapsed.
TORSO_COLLAPSE_MAX = 0.05
# Visible box wider than tall by this factor means the body is lying down.
HORIZONTAL_ASPECT_MIN = 1.4


def is_fallen_posture(landmarks: Landmarks) -> bool:
    """Both collapsed torso and a horizontal body box must hold."""
    _, shoulder_y = shoulder_midpoint(landmarks)
    _, hip_y = hip_midpoint(landmarks)
    if abs(shoulder_y - hip_y) >= TORSO_COLLAPSE_MAX:
        return False
    box = visible_bounding_box(landmarks)
    if box is None or box.aspect is None:
        return False
    return box.aspect > HORIZONTAL_ASPECT_MIN


class FallDetector:
    """Alerts when a fallen posture is held continuously for hold_duration ms.

    States: idle (no timer), confirming (WARNING while elapsed < hold) and
    alerting (ALERT once elapsed >= hold). Escalating to ALERT does not restart
    the timer, so the reported time keeps counting from posture onset.
    """

    def __init__(self, config: Optional[FallConfig] = None):
        config = config or FallConfig()
        self.hold_duration = float(config.hold_duration)
        self._fallen_since: Optional[float] = None

    def update(self, landmarks: Optional[Landmarks], timestamp: float) -> DetectorResult:
        if landmarks is None or not is_fallen_posture(landmarks):
            self._fallen_since = None
            return DetectorResult()

        if self._fallen_since is None:
            self._fallen_since = timestamp
        elapsed = timestamp - self._fallen_since
        secs = elapsed / 1000.0

        if elapsed >= self.hold_duration:
            return DetectorResult(status=DetectorStatus.ALERT, message=f"Fall detected ({secs:.1f}s)")
        return DetectorResult(status=DetectorStatus.WARNING, message=f"Possible fall ({secs:.1f}s)")

    def configure(self, settings: Settings) -> None:
        hold = numeric_setting(settings, "hold_duration")
        if hold is not None:
            self.hold_duration = hold

    def reset(self) -> None:
        self._fallen_since = None
