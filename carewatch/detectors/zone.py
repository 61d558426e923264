from __future__ import annotations

from typing import Optional

from carewatch.common.schemas import DetectorResult, DetectorStatus, Landmarks, ZoneConfig, ZoneRect
from carewatch.detectors.base import Settings, elapsed_since, numeric_setting
from carewatch.geometry.pose import contains, hip_midpoint


class ZoneDetector:
    """Alerts when the hip midpoint stays outside the safe zone for breach_duration ms.

    The zone rect is owned by the host and pushed in through set_zone_rect().
    Frames without a subject count as outside while a zone is set.
    """

    def __init__(self, config: Optional[ZoneConfig] = None):
        config = config or ZoneConfig()
        self.breach_duration = float(config.breach_duration)
        self._zone: Optional[ZoneRect] = None
        self._outside_ms = 0.0
        self._last_ts: Optional[float] = None

    @property
    def zone_rect(self) -> Optional[ZoneRect]:
        return self._zone

    @property
    def outside_ms(self) -> float:
        return self._outside_ms

    def set_zone_rect(self, rect: Optional[ZoneRect]) -> None:
        """Replace (or clear) the zone; breach timing always restarts."""
        self._zone = rect.model_copy() if rect is not None else None
        self._outside_ms = 0.0

    def update(self, landmarks: Optional[Landmarks], timestamp: float) -> DetectorResult:
        if self._zone is None:
            self._last_ts = timestamp
            return DetectorResult(message="No zone set")

        delta = elapsed_since(self._last_ts, timestamp)
        inside = landmarks is not None and contains(self._zone, hip_midpoint(landmarks))
        if inside:
            self._outside_ms = 0.0
        else:
            self._outside_ms += delta
        self._last_ts = timestamp

        if inside or self._outside_ms <= 0:
            return DetectorResult(message="Inside zone")

        secs = self._outside_ms / 1000.0
        if self._outside_ms >= self.breach_duration:
            return DetectorResult(status=DetectorStatus.ALERT, message=f"Outside zone for {secs:.1f}s")
        return DetectorResult(status=DetectorStatus.WARNING, message=f"Leaving zone ({secs:.1f}s)")

    def configure(self, settings: Settings) -> None:
        breach = numeric_setting(settings, "breach_duration")
        if breach is not None:
            self.breach_duration = breach

    def reset(self) -> None:
        self._outside_ms = 0.0
        self._last_ts = None
