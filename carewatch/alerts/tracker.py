from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, List

from carewatch.common.schemas import AlertEvent, DetectorStatus, FrameReport

logger = logging.getLogger(__name__)

ALERT_LOG_MAX = 100
SOUND_COOLDOWN_MS = 3000.0


class AlertTracker:
    """Host-side edge trigger over detector statuses.

    Detectors report ALERT on every frame while the condition holds; this
    turns that into one AlertEvent per OK/WARNING -> ALERT transition and keeps
    a bounded log of them, newest first.
    """

    def __init__(self, muted: bool = False, cooldown_ms: float = SOUND_COOLDOWN_MS):
        self.muted = muted
        self.cooldown_ms = float(cooldown_ms)
        self._prev: Dict[str, DetectorStatus] = {}
        self._last_sound_ts: Dict[str, float] = {}
        self._log: Deque[AlertEvent] = deque(maxlen=ALERT_LOG_MAX)

    def observe(self, report: FrameReport) -> List[AlertEvent]:
        events: List[AlertEvent] = []
        for name, result in report.results.items():
            prev = self._prev.get(name)
            self._prev[name] = result.status
            if result.status is not DetectorStatus.ALERT or prev is DetectorStatus.ALERT:
                continue
            ev = AlertEvent(
                detector=name,
                ts_ms=report.ts_ms,
                message=result.message,
                should_sound=self._claim_sound(name, report.ts_ms),
            )
            self._log.appendleft(ev)
            events.append(ev)
            logger.warning("%s alert: %s", name, result.message)
        return events

    def _claim_sound(self, name: str, ts_ms: float) -> bool:
        if self.muted:
            return False
        last = self._last_sound_ts.get(name)
        if last is not None and ts_ms - last < self.cooldown_ms:
            return False
        self._last_sound_ts[name] = ts_ms
        return True

    def entries(self) -> List[AlertEvent]:
        return list(self._log)

    def clear(self) -> None:
        """Empty the alert log; transition memory is kept."""
        self._log.clear()

    def reset(self) -> None:
        self._prev.clear()
        self._last_sound_ts.clear()
