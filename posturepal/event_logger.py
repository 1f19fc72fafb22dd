"""
Event logger for session and alert events.

Logs status changes, baseline captures, session control, notifications
and sound cues.
PRIVACY: Only logs feature values and text, never frames.
"""

import json
import time
from pathlib import Path
from typing import Dict, Any, Optional
from datetime import datetime


class EventLogger:
    """
    Append-only JSONL event log (one JSON object per line).
    """

    def __init__(self, log_path: Optional[str] = None):
        """
        Initialize event logger.

        Args:
            log_path: Path to log file (default: storage/events.jsonl)
        """
        if log_path is None:
            log_path = "storage/events.jsonl"

        self.log_path = Path(log_path)
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

    def log_event(
        self,
        event_type: str,
        status: str,
        reason: str,
        metadata: Optional[Dict[str, Any]] = None
    ):
        """
        Append one event.

        Args:
            event_type: Type of event (notified, status_changed, ...)
            status: Posture status at time of event
            reason: Brief reason string
            metadata: Additional metadata
        """
        event = {
            "timestamp": datetime.now().isoformat(),
            "unix_time": time.time(),
            "event_type": event_type,
            "status": status,
            "reason": reason,
            "metadata": metadata or {}
        }

        with open(self.log_path, "a") as f:
            f.write(json.dumps(event) + "\n")

    def log_notification(self, status: str, title: str, message: str):
        """Log a posted notification."""
        self.log_event(
            event_type="notified",
            status=status,
            reason=message,
            metadata={"title": title}
        )

    def log_notify_failed(self, status: str, message: str):
        """Log a notification the sink could not post."""
        self.log_event(
            event_type="notify_failed",
            status=status,
            reason=message
        )

    def log_sound_cue(self, status: str, from_status: str):
        """Log a played sound cue."""
        self.log_event(
            event_type="sound_cue",
            status=status,
            reason="Posture turned bad",
            metadata={"from_status": from_status}
        )

    def log_status_change(
        self,
        from_status: str,
        to_status: str,
        reason: str,
        time_in_previous_status: float
    ):
        """Log a reported status change."""
        self.log_event(
            event_type="status_changed",
            status=to_status,
            reason=reason,
            metadata={
                "from_status": from_status,
                "time_in_previous_status_sec": time_in_previous_status
            }
        )

    def log_baseline(self, baseline: Dict[str, Any]):
        """Log a captured baseline."""
        self.log_event(
            event_type="baseline_captured",
            status="good",
            reason="Baseline captured from full smoothing window",
            metadata={"baseline": baseline}
        )

    def log_session(self, event_type: str, status: str, reason: str = ""):
        """Log a session control event (started, stopped, baseline reset)."""
        self.log_event(event_type=event_type, status=status, reason=reason)

    def get_recent_events(self, limit: int = 100) -> list:
        """
        Get recent events from log.

        Args:
            limit: Maximum number of events to return

        Returns:
            List of event dictionaries
        """
        if not self.log_path.exists():
            return []

        events = []
        with open(self.log_path, "r") as f:
            for line in f:
                try:
                    events.append(json.loads(line.strip()))
                except json.JSONDecodeError:
                    continue

        return events[-limit:]

    def purge_logs(self):
        """Delete all logged events (privacy purge)."""
        if self.log_path.exists():
            self.log_path.unlink()
