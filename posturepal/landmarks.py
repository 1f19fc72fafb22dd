"""
Landmark frame types consumed by the analysis pipeline.

A frame is the ordered landmark list produced by a pose detector for one
video frame (MediaPipe Pose layout, 33 points). Only the nose, ears and
shoulders are read; everything else is carried along untouched.

PRIVACY: Frames hold normalized coordinates only, never image data.
"""

import math
from dataclasses import dataclass
from typing import List, Sequence, Any, Optional

import numpy as np


# MediaPipe Pose landmark indices
NOSE = 0
LEFT_EAR = 7
RIGHT_EAR = 8
LEFT_SHOULDER = 11
RIGHT_SHOULDER = 12

# Indices 0-12 must be present for a frame to be usable
MIN_LANDMARKS = RIGHT_SHOULDER + 1

KEY_LANDMARKS = (NOSE, LEFT_EAR, RIGHT_EAR, LEFT_SHOULDER, RIGHT_SHOULDER)


@dataclass(frozen=True)
class Landmark:
    """Single keypoint: normalized position and visibility confidence."""
    x: float
    y: float
    visibility: float = 1.0

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.visibility)


class LandmarkFrame:
    """
    Ordered landmark list for one video frame.

    Construction never rejects a short frame; use is_valid() to decide
    whether the frame can be analysed.
    """

    def __init__(self, landmarks: Sequence[Landmark]):
        self.landmarks: List[Landmark] = list(landmarks)

    def __len__(self) -> int:
        return len(self.landmarks)

    def __getitem__(self, index: int) -> Landmark:
        return self.landmarks[index]

    def is_valid(self) -> bool:
        """True if all key landmarks are present and have finite values."""
        if len(self.landmarks) < MIN_LANDMARKS:
            return False
        return all(self.landmarks[i].is_finite() for i in KEY_LANDMARKS)

    @property
    def nose(self) -> Landmark:
        return self.landmarks[NOSE]

    @property
    def left_ear(self) -> Landmark:
        return self.landmarks[LEFT_EAR]

    @property
    def right_ear(self) -> Landmark:
        return self.landmarks[RIGHT_EAR]

    @property
    def left_shoulder(self) -> Landmark:
        return self.landmarks[LEFT_SHOULDER]

    @property
    def right_shoulder(self) -> Landmark:
        return self.landmarks[RIGHT_SHOULDER]

    @classmethod
    def from_points(cls, points: Sequence[Any]) -> 'LandmarkFrame':
        """
        Build a frame from landmark-like objects or (x, y[, visibility]) tuples.

        Args:
            points: Objects with x/y/visibility attributes, or tuples

        Returns:
            LandmarkFrame

        Raises:
            ValueError: If an entry cannot be read as a landmark
        """
        landmarks = []
        for i, point in enumerate(points):
            try:
                if hasattr(point, "x"):
                    visibility = getattr(point, "visibility", 1.0)
                    landmarks.append(Landmark(float(point.x), float(point.y), float(visibility)))
                else:
                    values = tuple(point)
                    visibility = values[2] if len(values) > 2 else 1.0
                    landmarks.append(Landmark(float(values[0]), float(values[1]), float(visibility)))
            except (TypeError, ValueError, IndexError) as e:
                raise ValueError(f"Malformed landmark at index {i}: {e}") from e
        return cls(landmarks)

    @classmethod
    def from_mediapipe(cls, pose_landmarks) -> 'LandmarkFrame':
        """Build a frame from a MediaPipe NormalizedLandmarkList."""
        return cls.from_points(pose_landmarks.landmark)

    @classmethod
    def from_array(cls, array: np.ndarray) -> Optional['LandmarkFrame']:
        """
        Build a frame from an (N, 2) or (N, 3+) array of x, y[, visibility].

        Returns:
            LandmarkFrame, or None if every value is NaN (no subject recorded)

        Raises:
            ValueError: If the array does not have a landmark shape
        """
        arr = np.asarray(array, dtype=float)
        if arr.ndim != 2 or arr.shape[1] < 2:
            raise ValueError(f"Expected (N, 2) or (N, 3) landmark array, got shape {arr.shape}")
        if arr.size and np.all(np.isnan(arr)):
            return None
        if arr.shape[1] == 2:
            arr = np.column_stack([arr, np.ones(len(arr))])
        return cls([Landmark(float(x), float(y), float(v)) for x, y, v in arr[:, :3]])

    def to_array(self) -> np.ndarray:
        """Return an (N, 3) array of x, y, visibility."""
        return np.array([[lm.x, lm.y, lm.visibility] for lm in self.landmarks], dtype=float).reshape(-1, 3)
