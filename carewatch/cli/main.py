from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional, Tuple

import cv2
from dotenv import load_dotenv

from carewatch.alerts.tracker import AlertTracker
from carewatch.common.schemas import ZoneRect
from carewatch.common.settings import DEFAULT_SETTINGS_PATH, Settings, load_settings, save_settings
from carewatch.common.utils import format_event_json, make_video_writer, now_ms
from carewatch.ingest.source import VideoSource
from carewatch.reasoner.engine import MonitorEngine, select_subject
from carewatch.viz.overlay import draw_overlays

logger = logging.getLogger("carewatch")


def _env_or(name: str, default: str) -> str:
    v = os.getenv(name)
    return v if v is not None and v != "" else default


def parse_zone(text: str) -> ZoneRect:
    """'x1,y1,x2,y2' in normalized coordinates; corners may come in any order."""
    try:
        x1, y1, x2, y2 = (float(v) for v in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"zone must be 'x1,y1,x2,y2', got {text!r}")
    return ZoneRect.from_corners((x1, y1), (x2, y2))


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser("CareWatch - pose monitor")
    p.add_argument("--source", choices=["webcam", "file"], default=_env_or("DEFAULT_SOURCE", "webcam"))
    p.add_argument("--path", type=str, default=_env_or("DEFAULT_VIDEO_PATH", "./data/samples/test.mp4"))
    p.add_argument("--camera", type=int, default=int(_env_or("CAMERA_INDEX", "0")))
    p.add_argument("--width", type=int, default=int(_env_or("TARGET_WIDTH", "1280")))
    p.add_argument("--height", type=int, default=int(_env_or("TARGET_HEIGHT", "720")))
    p.add_argument("--fps", type=int, default=int(_env_or("TARGET_FPS", "15")))
    p.add_argument("--mirror", action="store_true", help="flip webcam frames horizontally")
    p.add_argument("--settings", type=str, default=_env_or("CAREWATCH_SETTINGS", str(DEFAULT_SETTINGS_PATH)))
    # Detector overrides; unset means "use the settings file"
    p.add_argument("--fall-hold", type=float, default=None, help="ms")
    p.add_argument("--inactivity", type=float, default=None, help="ms")
    p.add_argument("--sensitivity", type=float, default=None, help="1 (tolerant) .. 10 (fine)")
    p.add_argument("--zone-breach", type=float, default=None, help="ms")
    p.add_argument("--presence-timeout", type=float, default=None, help="ms")
    p.add_argument("--zone", type=parse_zone, default=None, help="x1,y1,x2,y2 normalized")
    p.add_argument("--muted", action="store_true")
    p.add_argument("--save-debug", type=str, default="")
    p.add_argument("--no-display", action="store_true")
    p.add_argument("--log-level", type=str, default=_env_or("LOG_LEVEL", "INFO"))
    return p.parse_args(argv)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    overrides = {
        "fall_hold_duration": args.fall_hold,
        "inactivity_duration": args.inactivity,
        "inactivity_sensitivity": args.sensitivity,
        "zone_breach_duration": args.zone_breach,
        "presence_timeout": args.presence_timeout,
    }
    data = settings.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    if args.muted:
        data["muted"] = True
    return Settings.model_validate(data)


def toggle_mute(tracker: AlertTracker, stored: Settings, path: str) -> Settings:
    """Flip mute and persist it on top of the file settings, never the CLI overrides.

    A failed write is logged; monitoring carries on.
    """
    tracker.muted = not tracker.muted
    stored = stored.model_copy(update={"muted": tracker.muted})
    try:
        save_settings(stored, path)
    except OSError as e:
        logger.warning("could not save settings to %s: %s", path, e)
    logger.info("sound %s", "muted" if tracker.muted else "on")
    return stored


def handle_key(
    key: int,
    engine: MonitorEngine,
    tracker: AlertTracker,
    editor,
    stored: Settings,
    path: str,
) -> Tuple[bool, Settings]:
    """Apply one keypress; returns (keep_running, stored settings)."""
    if key in (27, ord("q")):
        return False, stored
    if key == ord("z"):
        logger.info("zone drawing %s", "on" if editor.toggle_drawing() else "off")
    elif key == ord("c"):
        editor.clear()
    elif key == ord("m"):
        stored = toggle_mute(tracker, stored, path)
    elif key == ord("r"):
        engine.reset()
        tracker.reset()
    return True, stored


def main(argv: Optional[list] = None) -> None:
    # Load environment defaults if present
    load_dotenv(dotenv_path=os.getenv("CAREWATCH_DOTENV", ".env"), override=False)
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    cap = None
    writer = None
    poser = None
    window_name = "CareWatch"

    try:
        # flags are one-off; only the file contents are ever written back
        stored = load_settings(args.settings)
        settings = apply_overrides(stored, args)

        # imported late so --help works without the pose model installed
        from carewatch.pose.mediapipe_pose import PoseEstimator

        cap = VideoSource(
            kind=args.source,
            path=args.path if args.source == "file" else None,
            target_w=args.width,
            target_h=args.height,
            target_fps=args.fps,
            camera_index=args.camera,
            mirror=args.mirror,
        )
        poser = PoseEstimator()
        engine = MonitorEngine()
        engine.configure(settings.detector_config())
        tracker = AlertTracker(muted=settings.muted)
        if args.zone is not None:
            engine.set_zone_rect(args.zone)

        if args.save_debug:
            writer = make_video_writer(args.save_debug, args.width, args.height, args.fps)
            if writer is None:
                logger.error("could not open writer for %s", args.save_debug)

        editor = None
        if not args.no_display:
            from carewatch.viz.zone_editor import ZoneEditor

            cv2.namedWindow(window_name, cv2.WINDOW_NORMAL)
            editor = ZoneEditor(window_name, (args.width, args.height), engine.set_zone_rect)
            editor.zone = args.zone
            logger.info("keys: z=draw zone  c=clear zone  m=mute  r=reset  q=quit")

        ema_fps = 0.0
        last_time = now_ms()
        frame_idx = 0

        while True:
            ok, frame, ts = cap.read()
            if not ok:
                break
            frame_idx += 1

            landmarks = select_subject(poser.infer(frame))
            report = engine.step(landmarks, ts)
            for ev in tracker.observe(report):
                print(format_event_json(ev), flush=True)
                if ev.should_sound:
                    sys.stderr.write("\a")
                    sys.stderr.flush()

            # FPS
            now = now_ms()
            inst_fps = 1000.0 / max(1e-3, now - last_time)
            ema_fps = 0.9 * ema_fps + 0.1 * inst_fps if ema_fps > 0 else inst_fps
            last_time = now

            draw_overlays(
                frame,
                frame_idx,
                ema_fps,
                landmarks,
                report,
                engine.zone.zone_rect,
                zone_preview=editor.preview() if editor is not None else None,
                muted=tracker.muted,
            )
            if writer is not None:
                writer.write(frame)
            if editor is None:
                continue

            cv2.imshow(window_name, frame)
            keep_running, stored = handle_key(
                cv2.waitKey(1) & 0xFF, engine, tracker, editor, stored, args.settings
            )
            if not keep_running:
                break

    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.exception("fatal error: %s", e)
        sys.exit(1)
    finally:
        if writer is not None:
            writer.release()
        if cap is not None:
            cap.release()
        if poser is not None:
            poser.close()
        if not args.no_display:
            cv2.destroyAllWindows()


if __name__ == "__main__":
    main()
