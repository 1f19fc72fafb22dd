#!/usr/bin/env python3
"""
PosturePal Development Runner
Runs live webcam monitoring (or replays a landmark recording) and prints
the session status periodically for manual verification.

Usage:
    python dev_runner.py [--camera INDEX] [--sensitivity 0-100] [--preview]
    python dev_runner.py --replay recording.npy [--replay-fps 10]
"""

import argparse
import sys
import time

from posturepal import (
    AnalysisConfig,
    AnalysisSession,
    EventLogger,
    LoopConfig,
    NotificationEngine,
    SensitivityPreset,
    StatusBus,
    StatusChangeEvent,
    create_snapshot_from_session,
    load_recording,
    replay,
)


transition_events = []


def status_change_callback(event: StatusChangeEvent):
    """Callback for reported status changes."""
    transition_events.append(event)
    print()
    print("=" * 80)
    print(f"STATUS CHANGE: {event.from_status.upper()} → {event.to_status.upper()}")
    print(f"Reason: {event.reason}")
    print(f"Time in previous status: {event.time_in_previous_status:.1f}s")
    print("=" * 80)
    print()


def format_status_line(summary, loop_stats=None):
    """Format a single line of session output."""
    status = summary["status"].upper()
    analysis = summary["analysis"]

    if analysis is None:
        line = f"[{status}] No analysis"
    else:
        line = (
            f"[{status}] "
            f"Raw: {summary['raw_status']:<12} | "
            f"Slope: {analysis['shoulder_slope']:5.2f} | "
            f"Neck: {analysis['neck_angle']:5.2f} | "
            f"Conf: {analysis['confidence']:4.2f}"
        )

    line += f" | Calibrated: {'yes' if summary['calibrated'] else 'no'}"
    line += f" | Sens: {summary['sensitivity']:.0f}"

    if loop_stats:
        line += f" | FPS: {loop_stats['actual_fps']:4.1f}"

    return line


def print_final_stats(summary):
    stats = summary["stats"]
    print()
    print("Final Statistics:")
    print(f"  Frames processed: {stats['frames_processed']}")
    print(f"  Good time: {stats['good_time_sec']:.1f}s")
    print(f"  Bad time: {stats['bad_time_sec']:.1f}s")
    if stats["good_ratio"] is not None:
        print(f"  Good ratio: {stats['good_ratio']:.0%}")
    print(f"  Alerts sent: {stats['alerts_sent']}")
    print(f"  Status changes: {len(transition_events)}")


def run_replay(args, config):
    """Replay a recording with a simulated clock."""
    recording = load_recording(args.replay)
    print(f"Replaying {len(recording)} frames at {args.replay_fps} FPS")

    result = replay(
        recording,
        fps=args.replay_fps,
        config=config,
        on_status_change=status_change_callback,
        dry_run=True
    )

    summary = result.session.get_state_summary()
    print(format_status_line(summary))
    print_final_stats(summary)


def run_live(args, config):
    """Run live webcam monitoring."""
    # Needs the camera extra
    from posturepal.pose_loop import PoseLoop

    loop_config = LoopConfig.quality() if args.perf_mode == "quality" else LoopConfig.lightweight()
    loop_config.camera_index = args.camera
    loop_config.show_preview = args.preview
    if args.fps is not None:
        loop_config.target_fps = args.fps

    engine = NotificationEngine()
    if not args.no_notifications:
        engine.request_permission()

    session = AnalysisSession(
        config=config,
        notification_engine=engine,
        event_logger=EventLogger(),
        on_status_change=status_change_callback,
        dry_run=args.dry_run
    )
    pose_loop = PoseLoop(session, loop_config)

    status_bus = StatusBus(update_interval_sec=1.0)
    status_bus.set_snapshot_provider(lambda: create_snapshot_from_session(session, pose_loop))

    print(f"Loop: {loop_config}")
    print(f"Notifications: {'enabled' if engine.permission_granted else 'disabled'}"
          f"{' (dry run)' if args.dry_run else ''}")
    print()
    print("PRIVACY: No frames are saved. Only landmarks are analysed.")
    print("Sit in your ideal posture to calibrate. Press Ctrl+C to stop"
          f"{' (q / r in the preview window)' if args.preview else ''}.")
    print("=" * 80)

    session.start()
    status_bus.start()

    try:
        if args.preview:
            # Preview window must run on the main thread
            pose_loop.run()
        else:
            pose_loop.start()
            last_print = time.time()
            while pose_loop.running:
                time.sleep(0.5)
                now = time.time()
                if now - last_print >= args.interval:
                    print(format_status_line(session.get_state_summary(), pose_loop.get_stats()))
                    last_print = now
    except KeyboardInterrupt:
        print()
        print("Stopping...")
    finally:
        pose_loop.stop()
        status_bus.stop()
        summary = session.get_state_summary()
        session.stop()

    print_final_stats(summary)
    print("=" * 80)


def main():
    parser = argparse.ArgumentParser(description="PosturePal Dev Runner")
    parser.add_argument("--camera", type=int, default=0, help="Camera index (default: 0)")
    parser.add_argument("--fps", type=float, help="Override target FPS while visible")
    parser.add_argument("--perf-mode", type=str, choices=["lightweight", "quality"],
                        default="lightweight", help="Loop preset (default: lightweight)")
    parser.add_argument("--preset", type=str, choices=["sensitive", "standard", "conservative"],
                        default="standard", help="Sensitivity preset (default: standard)")
    parser.add_argument("--sensitivity", type=float, help="Sensitivity 0-100 (overrides --preset)")
    parser.add_argument("--preview", action="store_true", help="Show preview window")
    parser.add_argument("--interval", type=float, default=2.0, help="Print interval in seconds (default: 2.0)")
    parser.add_argument("--dry-run", action="store_true", help="Print alerts instead of posting notifications")
    parser.add_argument("--no-notifications", action="store_true", help="Disable desktop notifications")
    parser.add_argument("--no-sound", action="store_true", help="Disable the bad-posture sound cue")
    parser.add_argument("--replay", type=str, help="Replay a (T, 33, 3) .npy landmark recording")
    parser.add_argument("--replay-fps", type=float, default=10.0, help="Replay frame rate (default: 10)")
    args = parser.parse_args()

    overrides = {}
    if args.sensitivity is not None:
        if not (0 <= args.sensitivity <= 100):
            print("ERROR: --sensitivity must be between 0 and 100")
            sys.exit(1)
        overrides["sensitivity"] = args.sensitivity

    if args.no_notifications:
        overrides["notifications_enabled"] = False
    if args.no_sound:
        overrides["sound_enabled"] = False

    config = AnalysisConfig.from_preset(SensitivityPreset(args.preset), **overrides)

    print("=" * 80)
    print("PosturePal - Dev Runner")
    print("=" * 80)
    print(f"Sensitivity: {config.sensitivity:.0f} (preset {args.preset})")
    print(f"Sound cue: {'on' if config.sound_enabled else 'off'}")

    if args.replay:
        run_replay(args, config)
    else:
        run_live(args, config)


if __name__ == "__main__":
    main()
