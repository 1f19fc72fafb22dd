"""
Posture status classification.

Compares smoothed features against baseline-relative thresholds scaled by
the user's sensitivity setting. Rules are evaluated in a fixed priority
order and the first match wins:

1. Too close to the camera          -> MOVE_BACK
2. Shoulders tilted                 -> SIT_STRAIGHT
3. Head forward of shoulders        -> SIT_STRAIGHT
4. Head turned                      -> SIT_STRAIGHT
5. Nose sunk toward shoulders       -> SIT_STRAIGHT
6. Otherwise                        -> GOOD

Distance is checked first since the angle signals are unreliable when
the subject is too close.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

from .calibration import Baseline
from .features import FeatureSet


class PostureStatus(Enum):
    """Reported posture statuses."""
    GOOD = "good"
    SIT_STRAIGHT = "sit-straight"
    MOVE_BACK = "move-back"
    INITIALIZING = "initializing"
    NO_PERSON = "no-person"

    @property
    def is_bad(self) -> bool:
        return self in (PostureStatus.SIT_STRAIGHT, PostureStatus.MOVE_BACK)


# Base deltas at sensitivity 50
SHOULDER_DELTA = 0.04
NECK_DELTA = 0.06
HEAD_YAW_DELTA = 0.03
SPINAL_RATIO_DELTA = 0.18
SPINAL_RATIO_DAMPING = 1.2
DISTANCE_FACTOR = 1.4

MIN_SENSITIVITY = 0.0
MAX_SENSITIVITY = 100.0


def clamp_sensitivity(sensitivity: float) -> float:
    return max(MIN_SENSITIVITY, min(MAX_SENSITIVITY, float(sensitivity)))


def sensitivity_multiplier(sensitivity: float) -> float:
    """
    Map a 0-100 sensitivity to a threshold multiplier in [0.5, 1.5].
    Higher sensitivity gives a larger multiplier and tighter thresholds.
    """
    return 1 + (clamp_sensitivity(sensitivity) - 50) / 100


@dataclass
class Thresholds:
    """Sensitivity-scaled thresholds for one baseline."""
    shoulder: float  # allowed shoulder slope above baseline
    neck: float  # allowed neck offset above baseline
    head_yaw: float  # allowed head yaw above baseline
    spinal_ratio: float  # allowed spinal ratio drop below baseline
    distance: float  # absolute face size limit

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    def limits(self, baseline: Baseline) -> Dict[str, float]:
        """Absolute feature limits for display."""
        return {
            "face_size_max": self.distance,
            "shoulder_slope_max": baseline.shoulder_slope + self.shoulder,
            "neck_angle_max": baseline.neck_angle + self.neck,
            "head_yaw_max": baseline.head_yaw + self.head_yaw,
            "spinal_ratio_min": baseline.spinal_ratio - self.spinal_ratio,
        }


def compute_thresholds(baseline: Baseline, sensitivity: float) -> Thresholds:
    """Compute thresholds for a baseline at the given sensitivity."""
    multiplier = sensitivity_multiplier(sensitivity)
    return Thresholds(
        shoulder=SHOULDER_DELTA / multiplier,
        neck=NECK_DELTA / multiplier,
        head_yaw=HEAD_YAW_DELTA / multiplier,
        spinal_ratio=SPINAL_RATIO_DELTA / (multiplier * SPINAL_RATIO_DAMPING),
        distance=baseline.face_size * DISTANCE_FACTOR / multiplier,
    )


class ClassificationRule(NamedTuple):
    """One entry of the decision list."""
    name: str
    predicate: Callable[[FeatureSet, Baseline, Thresholds], bool]
    status: PostureStatus


DEFAULT_RULES: List[ClassificationRule] = [
    ClassificationRule(
        "too_close",
        lambda f, b, t: f.face_size > t.distance,
        PostureStatus.MOVE_BACK,
    ),
    ClassificationRule(
        "shoulder_slope",
        lambda f, b, t: f.shoulder_slope > b.shoulder_slope + t.shoulder,
        PostureStatus.SIT_STRAIGHT,
    ),
    ClassificationRule(
        "neck_angle",
        lambda f, b, t: f.neck_angle > b.neck_angle + t.neck,
        PostureStatus.SIT_STRAIGHT,
    ),
    ClassificationRule(
        "head_yaw",
        lambda f, b, t: f.head_yaw > b.head_yaw + t.head_yaw,
        PostureStatus.SIT_STRAIGHT,
    ),
    ClassificationRule(
        "spinal_ratio",
        lambda f, b, t: f.spinal_ratio < b.spinal_ratio - t.spinal_ratio,
        PostureStatus.SIT_STRAIGHT,
    ),
]


class StatusClassifier:
    """Ordered decision list over smoothed features."""

    def __init__(self, rules: Optional[List[ClassificationRule]] = None):
        self.rules = list(rules) if rules is not None else list(DEFAULT_RULES)

    def evaluate(
        self,
        features: FeatureSet,
        baseline: Baseline,
        sensitivity: float
    ) -> Tuple[PostureStatus, str]:
        """
        Classify features and report which rule fired.

        Returns:
            (status, rule name) - rule name is "" when the posture is good
        """
        thresholds = compute_thresholds(baseline, sensitivity)
        for rule in self.rules:
            if rule.predicate(features, baseline, thresholds):
                return rule.status, rule.name
        return PostureStatus.GOOD, ""

    def classify(self, features: FeatureSet, baseline: Baseline, sensitivity: float) -> PostureStatus:
        """Classify features into a raw status."""
        status, _ = self.evaluate(features, baseline, sensitivity)
        return status
