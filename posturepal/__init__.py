"""
PosturePal Core Module
Landmark-driven posture analysis with calibration, hysteresis and alerts.

The webcam driver lives in posturepal.pose_loop and needs the `camera`
extra (opencv-python, mediapipe).
"""

from .landmarks import Landmark, LandmarkFrame
from .smoothing import SmoothingBuffer, FeatureSmoother
from .features import FeatureSet, FeatureExtractor, FrameFeatures, FEATURE_NAMES
from .calibration import Baseline, BaselineCalibrator, FALLBACK_BASELINE
from .classifier import (
    PostureStatus,
    StatusClassifier,
    ClassificationRule,
    Thresholds,
    compute_thresholds,
    sensitivity_multiplier
)
from .hysteresis import HysteresisGate, GatePhase, GateResult
from .notifications import NotificationEngine
from .alerts import AlertDispatcher
from .event_logger import EventLogger
from .events import PostureAnalysis, StatusChangeEvent
from .config import AnalysisConfig, LoopConfig, SensitivityPreset
from .stats import SessionStats
from .session import AnalysisSession
from .status_bus import StatusBus, StatusSnapshot, create_snapshot_from_session, read_status
from .replay import SimulatedClock, ReplayResult, load_recording, replay

__all__ = [
    "Landmark",
    "LandmarkFrame",
    "SmoothingBuffer",
    "FeatureSmoother",
    "FeatureSet",
    "FeatureExtractor",
    "FrameFeatures",
    "FEATURE_NAMES",
    "Baseline",
    "BaselineCalibrator",
    "FALLBACK_BASELINE",
    "PostureStatus",
    "StatusClassifier",
    "ClassificationRule",
    "Thresholds",
    "compute_thresholds",
    "sensitivity_multiplier",
    "HysteresisGate",
    "GatePhase",
    "GateResult",
    "NotificationEngine",
    "AlertDispatcher",
    "EventLogger",
    "PostureAnalysis",
    "StatusChangeEvent",
    "AnalysisConfig",
    "LoopConfig",
    "SensitivityPreset",
    "SessionStats",
    "AnalysisSession",
    "StatusBus",
    "StatusSnapshot",
    "create_snapshot_from_session",
    "read_status",
    "SimulatedClock",
    "ReplayResult",
    "load_recording",
    "replay"
]
