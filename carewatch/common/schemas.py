from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Landmark(BaseModel):
    """One tracked body point as produced by the pose source.

    - x, y: normalized to [0, 1] in frame space, top-left origin.
    - z: relative depth; sign and scale are not used for detection.
    - visibility: confidence in [0, 1] that the point is genuinely observed.
    """

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    z: float = 0.0
    visibility: float = Field(default=1.0, ge=0.0, le=1.0)


# A frame is either None (nobody detected) or 33 landmarks in PoseLandmark order.
Landmarks = Sequence[Landmark]


class ZoneRect(BaseModel):
    """Safe-zone rectangle in normalized frame coordinates, x1<=x2 and y1<=y2."""

    model_config = ConfigDict(frozen=True)

    x1: float
    y1: float
    x2: float
    y2: float

    @model_validator(mode="before")
    @classmethod
    def _order_corners(cls, data: Any) -> Any:
        # inverted corners would never contain anything; swap them into order
        if isinstance(data, dict) and all(k in data for k in ("x1", "y1", "x2", "y2")):
            data = dict(data)
            data["x1"], data["x2"] = sorted((data["x1"], data["x2"]))
            data["y1"], data["y2"] = sorted((data["y1"], data["y2"]))
        return data

    @classmethod
    def from_corners(cls, a: Tuple[float, float], b: Tuple[float, float]) -> "ZoneRect":
        """Build a rect from two drag corners given in any order."""
        return cls(
            x1=min(a[0], b[0]),
            y1=min(a[1], b[1]),
            x2=max(a[0], b[0]),
            y2=max(a[1], b[1]),
        )


class DetectorStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"
    ALERT = "alert"


class DetectorResult(BaseModel):
    """Per-frame output of a detector. Hosts branch on status, never on message."""

    status: DetectorStatus = DetectorStatus.OK
    message: str = ""


class FallConfig(BaseModel):
    hold_duration: float = Field(default=2000.0, ge=0.0, description="ms of fallen posture before ALERT")


class InactivityConfig(BaseModel):
    duration: float = Field(default=30000.0, ge=0.0, description="ms without movement before ALERT")
    sensitivity: float = Field(default=1.0, ge=1.0, le=10.0, description="1=tolerant, 10=fine")


class ZoneConfig(BaseModel):
    breach_duration: float = Field(default=3000.0, ge=0.0, description="ms outside zone before ALERT")


class PresenceConfig(BaseModel):
    timeout: float = Field(default=10000.0, ge=0.0, description="ms without a subject before ALERT")


class FrameReport(BaseModel):
    """All detector results for one processed frame."""

    ts_ms: float
    subject_seen: bool
    results: Dict[str, DetectorResult] = Field(description="detector name -> result")

    def statuses(self) -> Dict[str, DetectorStatus]:
        return {name: r.status for name, r in self.results.items()}

    def alerting(self) -> List[str]:
        return [name for name, r in self.results.items() if r.status is DetectorStatus.ALERT]


class AlertEvent(BaseModel):
    """Emitted once per detector on each transition into ALERT."""

    detector: str
    ts_ms: float
    status: DetectorStatus = DetectorStatus.ALERT
    message: str = ""
    should_sound: bool = Field(default=True, description="False when muted or within cooldown")


class BoundingBox(BaseModel):
    """Axis-aligned box over visible landmarks, normalized coordinates."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def aspect(self) -> Optional[float]:
        """width / height, or None for a degenerate (flat) box."""
        if self.height <= 0:
            return None
        return self.width / self.height
