"""
Session output records: per-frame analysis and status change events.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any

from .classifier import PostureStatus
from .features import FeatureSet


@dataclass
class PostureAnalysis:
    """
    Per-frame analysis record for display.

    The scaled values and confidence are telemetry only; they play no
    part in classification.
    """
    status: PostureStatus
    shoulder_slope: float  # smoothed shoulder slope x 100
    neck_angle: float  # smoothed neck offset x 100
    confidence: float  # mean visibility of shoulders and nose

    @classmethod
    def from_features(cls, status: PostureStatus, features: FeatureSet, confidence: float) -> 'PostureAnalysis':
        return cls(
            status=status,
            shoulder_slope=features.shoulder_slope * 100,
            neck_angle=features.neck_angle * 100,
            confidence=confidence,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class StatusChangeEvent:
    """
    Event emitted when the reported status changes.
    """
    timestamp: str  # ISO format
    from_status: str
    to_status: str
    raw_status: str
    reason: str
    time_in_previous_status: float  # seconds
    features_snapshot: Dict[str, float]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)
