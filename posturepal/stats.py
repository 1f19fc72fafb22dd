"""
Per-session posture statistics.
"""

from typing import Dict, Any, Optional

from .classifier import PostureStatus


class SessionStats:
    """
    Accumulates frame counts and time spent in each reported status.

    Time between two consecutive frames is credited to the status reported
    on the earlier frame.
    """

    def __init__(self):
        self.reset()

    def reset(self):
        """Clear all counters."""
        self.frames_processed = 0
        self.status_counts: Dict[str, int] = {status.value: 0 for status in PostureStatus}
        self.status_time_sec: Dict[str, float] = {status.value: 0.0 for status in PostureStatus}
        self.alerts_sent = 0
        self._last_frame_time: Optional[float] = None
        self._last_status: Optional[PostureStatus] = None

    def record_frame(self, status: PostureStatus, now: float):
        """Record one processed frame with its reported status."""
        if self._last_frame_time is not None and self._last_status is not None:
            self.status_time_sec[self._last_status.value] += max(0.0, now - self._last_frame_time)

        self.frames_processed += 1
        self.status_counts[status.value] += 1
        self._last_frame_time = now
        self._last_status = status

    def record_alert(self):
        self.alerts_sent += 1

    def mark_gap(self):
        """Stop crediting time until the next frame (session stopped)."""
        self._last_frame_time = None
        self._last_status = None

    @property
    def good_time_sec(self) -> float:
        return self.status_time_sec[PostureStatus.GOOD.value]

    @property
    def bad_time_sec(self) -> float:
        return (
            self.status_time_sec[PostureStatus.SIT_STRAIGHT.value]
            + self.status_time_sec[PostureStatus.MOVE_BACK.value]
        )

    @property
    def good_ratio(self) -> Optional[float]:
        """Fraction of monitored time in good posture (None before any time accrues)."""
        total = self.good_time_sec + self.bad_time_sec
        if total <= 0:
            return None
        return self.good_time_sec / total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frames_processed": self.frames_processed,
            "status_counts": dict(self.status_counts),
            "good_time_sec": self.good_time_sec,
            "bad_time_sec": self.bad_time_sec,
            "good_ratio": self.good_ratio,
            "alerts_sent": self.alerts_sent
        }
