"""
Minimum-dwell hysteresis for bad posture.

A non-good raw status must persist continuously for the dwell time before
it is reported. A single good frame resets the dwell timer entirely.
"""

from enum import Enum
from typing import NamedTuple, Optional

from .classifier import PostureStatus
from .timing import elapsed_ms, to_ms


class GatePhase(Enum):
    """Hysteresis gate phases."""
    TRACKING_GOOD = "tracking_good"
    BAD_PENDING = "bad_pending"
    REPORTING_BAD = "reporting_bad"


class GateResult(NamedTuple):
    """Outcome of one gate update."""
    status: PostureStatus  # status to report
    confirmed: bool  # True when a bad status has satisfied the dwell time


class HysteresisGate:
    """
    Converts raw classifier output into a stable reported status.

    States:
    - TRACKING_GOOD: no deviation in progress
    - BAD_PENDING: deviation seen, dwell not yet satisfied (reports GOOD)
    - REPORTING_BAD: deviation held for >= dwell_sec (reports raw status)

    Elapsed time is compared in whole milliseconds.
    """

    def __init__(self, dwell_sec: float = 2.0):
        """
        Initialize hysteresis gate.

        Args:
            dwell_sec: Minimum continuous bad duration before reporting
        """
        self.dwell_sec = dwell_sec
        self.bad_posture_start: Optional[float] = None
        self.phase = GatePhase.TRACKING_GOOD

    def update(self, raw_status: PostureStatus, now: float) -> GateResult:
        """
        Feed one raw status.

        Args:
            raw_status: Classifier output for this frame
            now: Current clock reading (seconds)

        Returns:
            GateResult with the status to report
        """
        if raw_status == PostureStatus.GOOD:
            self.bad_posture_start = None
            self.phase = GatePhase.TRACKING_GOOD
            return GateResult(PostureStatus.GOOD, False)

        if self.bad_posture_start is None:
            self.bad_posture_start = now
            self.phase = GatePhase.BAD_PENDING
            return GateResult(PostureStatus.GOOD, False)

        if elapsed_ms(self.bad_posture_start, now) < to_ms(self.dwell_sec):
            self.phase = GatePhase.BAD_PENDING
            return GateResult(PostureStatus.GOOD, False)

        self.phase = GatePhase.REPORTING_BAD
        return GateResult(raw_status, True)

    def get_bad_duration(self, now: float) -> float:
        """Seconds the current deviation has lasted (0 if none)."""
        if self.bad_posture_start is None:
            return 0.0
        return now - self.bad_posture_start

    def reset(self):
        """Clear the dwell timer."""
        self.bad_posture_start = None
        self.phase = GatePhase.TRACKING_GOOD
