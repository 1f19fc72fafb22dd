"""
Offline replay of recorded landmark sequences.

A recording is a numpy array of shape (T, N, 3): T frames of N landmarks
with x, y, visibility. A frame whose values are all NaN stands for
"no person detected". Frames are replayed at a fixed rate against a
simulated clock, so a replay takes no wall-clock time.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .classifier import PostureStatus
from .config import AnalysisConfig
from .landmarks import LandmarkFrame
from .session import AnalysisSession


class SimulatedClock:
    """Manually advanced clock (seconds)."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def set(self, seconds: float):
        self.now = seconds

    def advance(self, seconds: float):
        self.now += seconds


@dataclass
class ReplayResult:
    """Per-frame outcome of a replay."""
    session: AnalysisSession
    timeline: List[Tuple[float, PostureStatus, PostureStatus]] = field(default_factory=list)  # (t, reported, raw)

    def statuses(self) -> List[PostureStatus]:
        return [status for _, status, _ in self.timeline]

    def first_time_of(self, status: PostureStatus) -> Optional[float]:
        """Time of the first frame reporting `status`."""
        for t, reported, _ in self.timeline:
            if reported == status:
                return t
        return None


def load_recording(path: str) -> np.ndarray:
    """
    Load a landmark recording saved with np.save.

    Raises:
        ValueError: If the array is not (T, N, 2|3+)
    """
    recording = np.load(path)
    if recording.ndim != 3 or recording.shape[2] < 2:
        raise ValueError(f"Expected (T, N, 3) landmark recording, got shape {recording.shape}")
    return recording


def replay(
    recording: np.ndarray,
    fps: float = 10.0,
    config: Optional[AnalysisConfig] = None,
    **session_kwargs
) -> ReplayResult:
    """
    Run a recording through a fresh session.

    Args:
        recording: (T, N, 3) landmark array
        fps: Replay frame rate
        config: Analysis configuration
        **session_kwargs: Extra AnalysisSession arguments (clock is supplied)

    Returns:
        ReplayResult with the session and per-frame statuses
    """
    clock = SimulatedClock()
    start = clock.now
    session = AnalysisSession(config=config, clock=clock, **session_kwargs)
    session.start()

    result = ReplayResult(session=session)
    interval = 1.0 / fps

    for index, frame_array in enumerate(recording):
        # Frame time from the index; summing intervals drifts
        clock.set(start + index * interval)
        frame = LandmarkFrame.from_array(frame_array)
        session.process_frame(frame)
        result.timeline.append((clock.now, session.status, session.raw_status))

    return result
