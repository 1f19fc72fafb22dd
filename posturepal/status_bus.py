"""
Status Bus - publishes live session status for UI consumers.

Writes the current session snapshot to storage/status.json at a fixed rate.
PRIVACY: No frames, only feature values and state.
"""

import json
import os
import time
import threading
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any, Callable
from pathlib import Path


@dataclass
class StatusSnapshot:
    """
    Single snapshot of session state.

    PRIVACY: Contains only feature values, timestamps and flags.
    """
    ts_unix: float

    # Reported status
    status: str  # "good", "sit-straight", "move-back", "initializing", "no-person"
    raw_status: str
    time_in_status_sec: float
    running: bool

    # Calibration and thresholds
    calibrated: bool
    sensitivity: float
    baseline: Dict[str, Any]
    thresholds: Dict[str, float]

    # Latest analysis record (None while no person / stopped)
    analysis: Optional[Dict[str, Any]]

    # Alerts and statistics
    alerts: Dict[str, Any]
    stats: Dict[str, Any]

    fps: float = 0.0


class StatusBus:
    """
    Background publisher that writes status snapshots to a JSON file.

    Atomic writes, best-effort delivery.
    """

    def __init__(
        self,
        status_file: str = "storage/status.json",
        update_interval_sec: float = 1.0
    ):
        """
        Initialize status bus.

        Args:
            status_file: Path to status JSON file
            update_interval_sec: How often to publish (default: 1 Hz)
        """
        self.status_file = Path(status_file)
        self.status_file.parent.mkdir(parents=True, exist_ok=True)

        self.update_interval_sec = update_interval_sec

        self._running = False
        self._thread: Optional[threading.Thread] = None
        self._snapshot_provider: Optional[Callable[[], Optional[StatusSnapshot]]] = None

        self._error_count = 0
        self._last_error_time = 0.0
        self._backoff_sec = 1.0

    def set_snapshot_provider(self, provider: Callable[[], Optional[StatusSnapshot]]):
        """
        Set the callback that provides status snapshots.

        Args:
            provider: Function that returns current StatusSnapshot or None
        """
        self._snapshot_provider = provider

    def start(self):
        """Start the publisher thread."""
        if self._running:
            return

        if not self._snapshot_provider:
            raise ValueError("Must set snapshot provider before starting")

        self._running = True
        self._thread = threading.Thread(target=self._publish_loop, daemon=True)
        self._thread.start()

    def stop(self):
        """Stop the publisher thread."""
        self._running = False
        if self._thread:
            self._thread.join(timeout=2.0)
            self._thread = None

    def publish_once(self) -> bool:
        """
        Write one snapshot now.

        Returns:
            True if a snapshot was written
        """
        snapshot = self._snapshot_provider() if self._snapshot_provider else None
        if snapshot is None:
            return False
        self._write_snapshot(snapshot)
        return True

    def _publish_loop(self):
        """Main publisher loop (runs in background thread)."""
        while self._running:
            try:
                if self.publish_once():
                    self._error_count = 0
                    self._backoff_sec = 1.0

                time.sleep(self.update_interval_sec)

            except Exception as e:
                # Best-effort: a bad snapshot or write must not end the thread
                self._error_count += 1
                current_time = time.time()

                # Only log errors occasionally to avoid spam
                if current_time - self._last_error_time > 10.0:
                    print(f"[STATUS_BUS] Error publishing status: {e}")
                    self._last_error_time = current_time

                if self._error_count > 3:
                    self._backoff_sec = min(self._backoff_sec * 2, 30.0)
                    time.sleep(self._backoff_sec)
                else:
                    time.sleep(self.update_interval_sec)

    def _write_snapshot(self, snapshot: StatusSnapshot):
        """
        Write snapshot to file atomically (temp file + os.replace()).
        """
        json_str = json.dumps(asdict(snapshot), indent=2)

        temp_file = self.status_file.with_suffix('.tmp')
        with open(temp_file, 'w') as f:
            f.write(json_str)

        os.replace(temp_file, self.status_file)


def read_status(status_file: str = "storage/status.json") -> Optional[Dict[str, Any]]:
    """Read the last published snapshot, or None if absent or unreadable."""
    path = Path(status_file)
    if not path.exists():
        return None
    try:
        with open(path, "r") as f:
            return json.load(f)
    except (json.JSONDecodeError, IOError):
        return None


def create_snapshot_from_session(session, pose_loop=None) -> StatusSnapshot:
    """
    Create StatusSnapshot from an AnalysisSession.

    Args:
        session: AnalysisSession instance
        pose_loop: Optional PoseLoop, for the measured frame rate

    Returns:
        StatusSnapshot
    """
    summary = session.get_state_summary()
    fps = pose_loop.get_stats()["actual_fps"] if pose_loop is not None else 0.0

    return StatusSnapshot(
        ts_unix=time.time(),
        status=summary["status"],
        raw_status=summary["raw_status"],
        time_in_status_sec=summary["time_in_status"],
        running=summary["running"],
        calibrated=summary["calibrated"],
        sensitivity=summary["sensitivity"],
        baseline=summary["baseline"],
        thresholds=summary["thresholds"],
        analysis=summary["analysis"],
        alerts=summary["alerts"],
        stats=summary["stats"],
        fps=fps
    )
