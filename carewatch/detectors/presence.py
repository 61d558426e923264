from __future__ import annotations

from typing import Optional

from carewatch.common.schemas import DetectorResult, DetectorStatus, Landmarks, PresenceConfig
from carewatch.detectors.base import Settings, elapsed_since, numeric_setting


class PresenceDetector:
    """Alerts when no subject has been detected for `timeout` ms."""

    def __init__(self, config: Optional[PresenceConfig] = None):
        config = config or PresenceConfig()
        self.timeout = float(config.timeout)
        self._absent_ms = 0.0
        self._last_ts: Optional[float] = None

    @property
    def absent_ms(self) -> float:
        return self._absent_ms

    def update(self, landmarks: Optional[Landmarks], timestamp: float) -> DetectorResult:
        delta = elapsed_since(self._last_ts, timestamp)
        self._last_ts = timestamp

        if landmarks is not None:
            self._absent_ms = 0.0
            return DetectorResult(message="Person visible")

        self._absent_ms += delta
        if self._absent_ms <= 0:
            return DetectorResult()

        secs = int(self._absent_ms // 1000)
        if self._absent_ms >= self.timeout:
            return DetectorResult(status=DetectorStatus.ALERT, message=f"Not seen for {secs}s")
        return DetectorResult(status=DetectorStatus.WARNING, message=f"Not seen for {secs}s")

    def configure(self, settings: Settings) -> None:
        timeout = numeric_setting(settings, "timeout")
        if timeout is not None:
            self.timeout = timeout

    def reset(self) -> None:
        self._absent_ms = 0.0
        self._last_ts = None
