from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path("carewatch-settings.json")

# env var -> Settings field
ENV_OVERRIDES = {
    "CAREWATCH_FALL_HOLD_MS": "fall_hold_duration",
    "CAREWATCH_INACTIVITY_MS": "inactivity_duration",
    "CAREWATCH_INACTIVITY_SENSITIVITY": "inactivity_sensitivity",
    "CAREWATCH_ZONE_BREACH_MS": "zone_breach_duration",
    "CAREWATCH_PRESENCE_TIMEOUT_MS": "presence_timeout",
    "CAREWATCH_MUTED": "muted",
}


class Settings(BaseModel):
    """User-tunable monitor settings, persisted as JSON by the host."""

    fall_hold_duration: float = Field(default=2000.0, ge=0.0)
    inactivity_duration: float = Field(default=30000.0, ge=0.0)
    inactivity_sensitivity: float = Field(default=1.0, ge=1.0, le=10.0)
    zone_breach_duration: float = Field(default=3000.0, ge=0.0)
    presence_timeout: float = Field(default=10000.0, ge=0.0)
    muted: bool = False

    def detector_config(self) -> Dict[str, float]:
        """One key bag every detector accepts; each picks out its own keys."""
        return {
            "hold_duration": self.fall_hold_duration,
            "duration": self.inactivity_duration,
            "sensitivity": self.inactivity_sensitivity,
            "breach_duration": self.zone_breach_duration,
            "timeout": self.presence_timeout,
        }


def _env_values() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for env_name, field in ENV_OVERRIDES.items():
        v = os.getenv(env_name)
        if v is not None and v != "":
            out[field] = v
    return out


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """Defaults, overlaid by the JSON file at `path`, overlaid by CAREWATCH_* env vars.

    An unreadable or invalid file falls back to defaults; a bad env override is
    skipped. Neither raises.
    """
    data: Dict[str, Any] = Settings().model_dump()
    p = Path(path) if path is not None else DEFAULT_SETTINGS_PATH
    if p.exists():
        try:
            stored = json.loads(p.read_text(encoding="utf-8"))
            data = Settings.model_validate({**data, **stored}).model_dump()
        except (OSError, ValueError, TypeError, ValidationError) as e:
            logger.warning("ignoring settings file %s: %s", p, e)

    settings = Settings.model_validate(data)
    for field, raw in _env_values().items():
        try:
            settings = Settings.model_validate({**settings.model_dump(), field: raw})
        except ValidationError as e:
            logger.warning("ignoring env override for %s: %s", field, e.errors()[0]["msg"])
    return settings


def save_settings(settings: Settings, path: Optional[Union[str, Path]] = None) -> None:
    p = Path(path) if path is not None else DEFAULT_SETTINGS_PATH
    p.write_text(settings.model_dump_json(indent=2), encoding="utf-8")
