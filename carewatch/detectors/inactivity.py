from __future__ import annotations

from typing import Optional

from carewatch.common.schemas import DetectorResult, DetectorStatus, InactivityConfig, Landmarks
from carewatch.common.utils import clamp, lerp
from carewatch.detectors.base import Settings, elapsed_since, numeric_setting
from carewatch.geometry.pose import displacement

SENSITIVITY_MIN = 1.0
SENSITIVITY_MAX = 10.0

# (sensitivity 1, sensitivity 10) endpoints, normalized frame units.
DEAD_ZONE_RANGE = (0.002, 0.0005)
MOVEMENT_THRESHOLD_RANGE = (0.01, 0.002)


def _sensitivity_frac(sensitivity: float) -> float:
    s = clamp(sensitivity, SENSITIVITY_MIN, SENSITIVITY_MAX)
    return (s - SENSITIVITY_MIN) / (SENSITIVITY_MAX - SENSITIVITY_MIN)


def dead_zone(sensitivity: float) -> float:
    """Per-landmark displacement below which motion is treated as jitter."""
    return lerp(*DEAD_ZONE_RANGE, _sensitivity_frac(sensitivity))


def movement_threshold(sensitivity: float) -> float:
    """Aggregate movement score that counts as meaningful movement."""
    return lerp(*MOVEMENT_THRESHOLD_RANGE, _sensitivity_frac(sensitivity))


class InactivityDetector:
    """Alerts after `duration` ms without meaningful movement.

    The inactivity accumulator pauses on frames with no subject; absence is
    the presence detector's concern.
    """

    def __init__(self, config: Optional[InactivityConfig] = None):
        config = config or InactivityConfig()
        self.duration = float(config.duration)
        self.sensitivity = float(config.sensitivity)
        self.dead_zone = dead_zone(self.sensitivity)
        self.movement_threshold = movement_threshold(self.sensitivity)
        self._prev: Optional[Landmarks] = None
        self._last_ts: Optional[float] = None
        self._inactive_ms = 0.0

    @property
    def inactive_ms(self) -> float:
        return self._inactive_ms

    def update(self, landmarks: Optional[Landmarks], timestamp: float) -> DetectorResult:
        if landmarks is None:
            self._last_ts = timestamp
            return self._result()

        if self._prev is None:
            self._prev = list(landmarks)
            self._last_ts = timestamp
            return DetectorResult()

        score = displacement(self._prev, landmarks, self.dead_zone)
        if score >= self.movement_threshold:
            self._inactive_ms = 0.0
        else:
            self._inactive_ms += elapsed_since(self._last_ts, timestamp)

        self._prev = list(landmarks)
        self._last_ts = timestamp
        return self._result()

    def _result(self) -> DetectorResult:
        if self._inactive_ms <= 0:
            return DetectorResult()
        secs = int(self._inactive_ms // 1000)
        if self._inactive_ms >= self.duration:
            return DetectorResult(status=DetectorStatus.ALERT, message=f"Inactive for {secs}s")
        return DetectorResult(status=DetectorStatus.WARNING, message=f"No movement for {secs}s")

    def configure(self, settings: Settings) -> None:
        duration = numeric_setting(settings, "duration")
        if duration is not None:
            self.duration = duration
        sensitivity = numeric_setting(settings, "sensitivity")
        if sensitivity is not None:
            self.sensitivity = clamp(sensitivity, SENSITIVITY_MIN, SENSITIVITY_MAX)
            self.dead_zone = dead_zone(self.sensitivity)
            self.movement_threshold = movement_threshold(self.sensitivity)

    def reset(self) -> None:
        self._prev = None
        self._last_ts = None
        self._inactive_ms = 0.0
