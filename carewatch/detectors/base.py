from __future__ import annotations

import math
from numbers import Real
from typing import Any, Mapping, Optional, Protocol, Union

from pydantic import BaseModel

from carewatch.common.schemas import DetectorResult, Landmarks

Settings = Union[Mapping[str, Any], BaseModel]


class Detector(Protocol):
    """Shared lifecycle every detector implements so the host can drive them uniformly.

    Timestamps are monotonic milliseconds supplied by the caller. Passing a
    decreasing timestamp, or a landmark sequence shorter than 33 entries, is a
    caller contract violation and the resulting state is undefined.
    """

    def update(self, landmarks: Optional[Landmarks], timestamp: float) -> DetectorResult:
        ...

    def configure(self, settings: Settings) -> None:
        ...

    def reset(self) -> None:
        ...


def numeric_setting(settings: Settings, key: str) -> Optional[float]:
    """Return settings[key] as float if it is a finite, non-negative number, else None.

    Missing keys, values of any other type (bool included), NaN, infinities and
    negatives are ignored so a host can hand one settings bag to every detector.
    """
    if isinstance(settings, BaseModel):
        settings = settings.model_dump()
    if not isinstance(settings, Mapping):
        return None
    value = settings.get(key)
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    value = float(value)
    if not math.isfinite(value) or value < 0:
        return None
    return value


def elapsed_since(last_ts: Optional[float], ts: float) -> float:
    """Delta from the previous update, 0 when there was none."""
    if last_ts is None:
        return 0.0
    return ts - last_ts
