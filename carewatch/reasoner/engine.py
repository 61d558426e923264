from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from carewatch.common.schemas import (
    DetectorResult,
    FallConfig,
    FrameReport,
    InactivityConfig,
    Landmarks,
    PresenceConfig,
    ZoneConfig,
    ZoneRect,
)
from carewatch.detectors.base import Detector, Settings
from carewatch.detectors.fall import FallDetector
from carewatch.detectors.inactivity import InactivityDetector
from carewatch.detectors.presence import PresenceDetector
from carewatch.detectors.zone import ZoneDetector

logger = logging.getLogger(__name__)


def select_subject(poses: Optional[Sequence[Landmarks]]) -> Optional[Landmarks]:
    """Only the first detected subject is tracked; an empty result means nobody."""
    if not poses:
        return None
    return poses[0]


class MonitorEngine:
    """Fans each frame out to the four detectors and collects their results.

    Detectors do not interact, so the order below is only the report order.
    """

    def __init__(
        self,
        fall: Optional[FallConfig] = None,
        inactivity: Optional[InactivityConfig] = None,
        zone: Optional[ZoneConfig] = None,
        presence: Optional[PresenceConfig] = None,
    ):
        self.fall = FallDetector(fall)
        self.inactivity = InactivityDetector(inactivity)
        self.zone = ZoneDetector(zone)
        self.presence = PresenceDetector(presence)

    def detectors(self) -> List[Tuple[str, Detector]]:
        return [
            ("fall", self.fall),
            ("inactivity", self.inactivity),
            ("zone", self.zone),
            ("presence", self.presence),
        ]

    def step(self, landmarks: Optional[Landmarks], timestamp: float) -> FrameReport:
        results: Dict[str, DetectorResult] = {}
        for name, det in self.detectors():
            results[name] = det.update(landmarks, timestamp)
        return FrameReport(ts_ms=timestamp, subject_seen=landmarks is not None, results=results)

    def configure(self, settings: Settings) -> None:
        """Apply one settings bag to every detector; each takes only its own keys."""
        for _, det in self.detectors():
            det.configure(settings)
        logger.debug(
            "configured hold=%.0fms inactivity=%.0fms/s%.1f breach=%.0fms timeout=%.0fms",
            self.fall.hold_duration,
            self.inactivity.duration,
            self.inactivity.sensitivity,
            self.zone.breach_duration,
            self.presence.timeout,
        )

    def set_zone_rect(self, rect: Optional[ZoneRect]) -> None:
        self.zone.set_zone_rect(rect)
        if rect is None:
            logger.info("safe zone cleared")
        else:
            logger.info("safe zone set to (%.2f,%.2f)-(%.2f,%.2f)", rect.x1, rect.y1, rect.x2, rect.y2)

    def reset(self) -> None:
        for _, det in self.detectors():
            det.reset()
        logger.info("detectors reset")
