"""
Self-calibrating baseline capture.

The first time every smoothing buffer is full, the current smoothed
features are frozen as the user's personal neutral posture. Until then,
classification falls back to population defaults.

PRIVACY: Only feature values are captured, never frames.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional, Dict, Any

from .features import FeatureSet
from .smoothing import FeatureSmoother


@dataclass(frozen=True)
class Baseline:
    """Personal reference feature values (immutable once captured)."""
    shoulder_slope: float
    neck_angle: float
    head_yaw: float
    face_size: float
    spinal_ratio: float
    captured_at: Optional[str] = None  # ISO timestamp, None for the fallback

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_features(cls, features: FeatureSet, captured_at: Optional[str] = None) -> 'Baseline':
        return cls(
            shoulder_slope=features.shoulder_slope,
            neck_angle=features.neck_angle,
            head_yaw=features.head_yaw,
            face_size=features.face_size,
            spinal_ratio=features.spinal_ratio,
            captured_at=captured_at,
        )


# Used for classification until a personal baseline exists
FALLBACK_BASELINE = Baseline(
    shoulder_slope=0.03,
    neck_angle=0.05,
    head_yaw=0.02,
    face_size=0.15,
    spinal_ratio=1.5,
)


class BaselineCalibrator:
    """
    Captures the session baseline exactly once.

    Capture happens on the first frame where every smoothing buffer holds
    a full window. The baseline is then left untouched until reset().
    """

    def __init__(self):
        self.baseline: Optional[Baseline] = None

    def update(self, smoother: FeatureSmoother, smoothed: FeatureSet) -> Optional[Baseline]:
        """
        Capture the baseline if it is due.

        Args:
            smoother: Feature buffers (checked for full windows)
            smoothed: Current smoothed features

        Returns:
            The newly captured Baseline on the capturing frame, None otherwise
        """
        if self.baseline is not None or not smoother.all_full():
            return None

        self.baseline = Baseline.from_features(smoothed, captured_at=datetime.now().isoformat())
        return self.baseline

    def effective(self) -> Baseline:
        """Baseline to classify against (captured, or fallback)."""
        return self.baseline if self.baseline is not None else FALLBACK_BASELINE

    def is_calibrated(self) -> bool:
        return self.baseline is not None

    def reset(self):
        """Forget the captured baseline."""
        self.baseline = None
