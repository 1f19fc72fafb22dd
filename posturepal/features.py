"""
Posture feature extraction from landmark frames.
Derives five scalar features from the nose, ears and shoulders.

All features are computed in normalized image coordinates (y grows
downward) and are recomputed every frame.
"""

import math
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Tuple

from .landmarks import LandmarkFrame, Landmark


FEATURE_NAMES = ("shoulder_slope", "neck_angle", "head_yaw", "face_size", "spinal_ratio")


@dataclass
class FeatureSet:
    """Container for the five posture features."""
    shoulder_slope: float  # |left shoulder y - right shoulder y|
    neck_angle: float  # |nose x - shoulder mid x|
    head_yaw: float  # |nose x - ear mid x|
    face_size: float  # |left ear x - right ear x|, proxy for camera distance
    spinal_ratio: float  # nose-to-shoulder vertical distance / face size

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> 'FeatureSet':
        """Create from dictionary."""
        return cls(**{name: data[name] for name in FEATURE_NAMES})


@dataclass
class FrameFeatures:
    """Raw features and landmark confidence for one frame."""
    features: FeatureSet
    confidence: float  # mean visibility of shoulders and nose


class FeatureExtractor:
    """
    Computes raw posture features from a landmark frame.

    Frames that cannot be measured (missing key landmarks, non-finite
    values, or ears too close together to normalize the spinal ratio)
    yield None instead of raising.
    """

    def __init__(self, min_face_size: float = 1e-3):
        """
        Initialize feature extractor.

        Args:
            min_face_size: Smallest ear-to-ear distance accepted; below this
                the spinal ratio is undefined and the frame is rejected
        """
        self.min_face_size = min_face_size

    def extract(self, frame: Optional[LandmarkFrame]) -> Optional[FrameFeatures]:
        """
        Extract raw features from a frame.

        Args:
            frame: Landmark frame, or None when no subject was detected

        Returns:
            FrameFeatures if the frame is measurable, None otherwise
        """
        if frame is None or not frame.is_valid():
            return None

        nose = frame.nose
        left_ear, right_ear = frame.left_ear, frame.right_ear
        left_shoulder, right_shoulder = frame.left_shoulder, frame.right_shoulder

        face_size = abs(left_ear.x - right_ear.x)
        if face_size < self.min_face_size:
            return None

        shoulder_mid = self._midpoint(left_shoulder, right_shoulder)
        ear_mid = self._midpoint(left_ear, right_ear)

        features = FeatureSet(
            shoulder_slope=abs(left_shoulder.y - right_shoulder.y),
            neck_angle=abs(nose.x - shoulder_mid[0]),
            head_yaw=abs(nose.x - ear_mid[0]),
            face_size=face_size,
            # Slouching shortens the nose-to-shoulder drop relative to face width
            spinal_ratio=abs(shoulder_mid[1] - nose.y) / face_size,
        )

        if not all(math.isfinite(v) for v in features.to_dict().values()):
            return None

        confidence = (left_shoulder.visibility + right_shoulder.visibility + nose.visibility) / 3
        return FrameFeatures(features=features, confidence=confidence)

    def _midpoint(self, p1: Landmark, p2: Landmark) -> Tuple[float, float]:
        """Compute midpoint between two landmarks (x, y only)."""
        return ((p1.x + p2.x) / 2, (p1.y + p2.y) / 2)
