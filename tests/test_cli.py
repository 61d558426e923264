import argparse
import json

import pytest

from carewatch.alerts.tracker import AlertTracker
from carewatch.cli.main import apply_overrides, handle_key, parse_args, parse_zone, toggle_mute
from carewatch.common.schemas import DetectorStatus
from carewatch.common.settings import Settings, load_settings, save_settings
from carewatch.reasoner.engine import MonitorEngine


class FakeEditor:
    def __init__(self):
        self.drawing = False
        self.cleared = 0

    def toggle_drawing(self):
        self.drawing = not self.drawing
        return self.drawing

    def clear(self):
        self.cleared += 1


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "CAREWATCH_FALL_HOLD_MS",
        "CAREWATCH_INACTIVITY_MS",
        "CAREWATCH_INACTIVITY_SENSITIVITY",
        "CAREWATCH_ZONE_BREACH_MS",
        "CAREWATCH_PRESENCE_TIMEOUT_MS",
        "CAREWATCH_MUTED",
    ):
        monkeypatch.delenv(name, raising=False)


def test_parse_zone_orders_corners():
    rect = parse_zone("0.8,0.9,0.1,0.2")
    assert (rect.x1, rect.y1, rect.x2, rect.y2) == (0.1, 0.2, 0.8, 0.9)


@pytest.mark.parametrize("text", ["a,b", "0.1,0.2,0.3", "0.1,0.2,0.3,0.4,0.5", ""])
def test_parse_zone_rejects_malformed(text):
    with pytest.raises(argparse.ArgumentTypeError):
        parse_zone(text)


def test_apply_overrides_only_touches_given_flags():
    base = Settings(presence_timeout=5000)
    settings = apply_overrides(base, parse_args(["--fall-hold", "500", "--sensitivity", "7"]))
    assert settings.fall_hold_duration == 500
    assert settings.inactivity_sensitivity == 7
    assert settings.presence_timeout == 5000
    assert settings.zone_breach_duration == 3000
    assert not settings.muted
    assert apply_overrides(base, parse_args(["--muted"])).muted


def test_apply_overrides_without_flags_is_identity():
    base = Settings(inactivity_duration=12000, muted=True)
    assert apply_overrides(base, parse_args([])) == base


def test_mute_key_persists_file_settings_not_flags(tmp_path):
    path = str(tmp_path / "settings.json")
    save_settings(Settings(), path)
    args = parse_args(["--settings", path, "--fall-hold", "500"])
    stored = load_settings(args.settings)
    settings = apply_overrides(stored, args)
    tracker = AlertTracker(muted=settings.muted)

    keep_running, stored = handle_key(ord("m"), MonitorEngine(), tracker, FakeEditor(), stored, path)

    assert keep_running
    assert tracker.muted
    saved = json.loads((tmp_path / "settings.json").read_text())
    assert saved["fall_hold_duration"] == 2000
    assert saved["muted"] is True
    reloaded = load_settings(path)
    assert reloaded.fall_hold_duration == 2000
    assert reloaded.muted
    assert stored == reloaded


def test_mute_toggles_back(tmp_path):
    path = tmp_path / "settings.json"
    tracker = AlertTracker()
    stored = toggle_mute(tracker, Settings(), str(path))
    stored = toggle_mute(tracker, stored, str(path))
    assert not tracker.muted
    assert not stored.muted
    assert not load_settings(path).muted


def test_mute_survives_unwritable_settings_path(tmp_path, caplog):
    path = str(tmp_path / "missing" / "settings.json")
    tracker = AlertTracker()
    with caplog.at_level("WARNING", logger="carewatch"):
        keep_running, stored = handle_key(ord("m"), MonitorEngine(), tracker, FakeEditor(), Settings(), path)
    assert keep_running
    assert tracker.muted
    assert stored.muted
    assert "could not save settings" in caplog.text


@pytest.mark.parametrize("key", [27, ord("q")])
def test_quit_keys_stop_the_loop(key, tmp_path):
    keep_running, _ = handle_key(key, MonitorEngine(), AlertTracker(), FakeEditor(), Settings(), str(tmp_path / "s.json"))
    assert not keep_running


def test_zone_keys_drive_editor(tmp_path):
    editor = FakeEditor()
    path = str(tmp_path / "s.json")
    assert handle_key(ord("z"), MonitorEngine(), AlertTracker(), editor, Settings(), path)[0]
    assert editor.drawing
    handle_key(ord("c"), MonitorEngine(), AlertTracker(), editor, Settings(), path)
    assert editor.cleared == 1
    assert not (tmp_path / "s.json").exists()


def test_reset_key_clears_detector_state(tmp_path):
    engine = MonitorEngine()
    engine.step(None, 0)
    assert engine.step(None, 20000).statuses()["presence"] is DetectorStatus.ALERT
    handle_key(ord("r"), engine, AlertTracker(), FakeEditor(), Settings(), str(tmp_path / "s.json"))
    assert engine.step(None, 20100).statuses()["presence"] is DetectorStatus.OK
