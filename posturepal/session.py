"""
Analysis session: the per-frame posture pipeline and its control surface.

Each frame flows through
    FeatureExtractor -> FeatureSmoother -> BaselineCalibrator
    -> StatusClassifier -> HysteresisGate -> AlertDispatcher
and produces a reported status plus an analysis record.

All mutable pipeline state (buffers, baseline, dwell timer, cooldown) is
owned by one AnalysisSession. Frames may arrive from a background thread
while control calls come from the main thread, so every entry point is
serialized by a single lock.

PRIVACY: Only landmark coordinates are processed, never frames.
"""

import threading
import time
from datetime import datetime
from typing import Optional, Callable, Dict, Any, List, Sequence

from .alerts import AlertDispatcher
from .calibration import BaselineCalibrator
from .classifier import (
    PostureStatus,
    StatusClassifier,
    clamp_sensitivity,
    compute_thresholds,
)
from .config import AnalysisConfig
from .event_logger import EventLogger
from .events import PostureAnalysis, StatusChangeEvent
from .features import FeatureExtractor, FeatureSet, FEATURE_NAMES
from .hysteresis import HysteresisGate
from .landmarks import LandmarkFrame
from .notifications import NotificationEngine
from .smoothing import FeatureSmoother
from .stats import SessionStats


class AnalysisSession:
    """
    One posture analysis session.

    Lifecycle:
    - start(): re-arm buffers, baseline, dwell timer and cooldown; report GOOD
    - process_frame(): analyse one frame (ignored while stopped)
    - reset_baseline(): recalibrate without stopping
    - stop(): discard accumulated state; report INITIALIZING
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        classifier: Optional[StatusClassifier] = None,
        notification_engine: Optional[NotificationEngine] = None,
        is_visible: Optional[Callable[[], bool]] = None,
        event_logger: Optional[EventLogger] = None,
        on_status_change: Optional[Callable[[StatusChangeEvent], None]] = None,
        clock: Callable[[], float] = time.monotonic,
        dry_run: bool = False
    ):
        """
        Initialize analysis session.

        Args:
            config: Analysis configuration (uses defaults if None)
            classifier: Status classifier (default decision list if None)
            notification_engine: Notification sink for alerts
            is_visible: Returns True while the host window is visible
            event_logger: Event logger (no event log if None)
            on_status_change: Callback for reported status changes
            clock: Monotonic clock in seconds
            dry_run: If True, alerts are printed instead of posted
        """
        self.config = config or AnalysisConfig()
        self.classifier = classifier or StatusClassifier()
        self.event_logger = event_logger
        self.on_status_change = on_status_change
        self.clock = clock

        self.extractor = FeatureExtractor(min_face_size=self.config.min_face_size)
        self.smoother = FeatureSmoother(FEATURE_NAMES, capacity=self.config.smoothing_window)
        self.calibrator = BaselineCalibrator()
        self.gate = HysteresisGate(dwell_sec=self.config.bad_posture_dwell_sec)
        self.dispatcher = AlertDispatcher(
            notification_engine=notification_engine,
            is_visible=is_visible,
            cooldown_sec=self.config.notification_cooldown_sec,
            event_logger=event_logger,
            dry_run=dry_run,
            notifications_enabled=self.config.notifications_enabled,
            sound_enabled=self.config.sound_enabled
        )
        self.stats = SessionStats()

        self.running = False
        self.status = PostureStatus.INITIALIZING
        self.raw_status = PostureStatus.INITIALIZING
        self.status_entered_at = clock()
        self.latest_analysis: Optional[PostureAnalysis] = None
        self.latest_features: Optional[FeatureSet] = None
        self.transition_events: List[StatusChangeEvent] = []

        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Control surface

    def start(self):
        """Start (or restart) the session from a clean state."""
        with self._lock:
            self._rearm()
            self.running = True
            self.status = PostureStatus.GOOD
            self.raw_status = PostureStatus.GOOD
            self.status_entered_at = self.clock()
            self._log_session("session_started", "Monitoring started, calibrating")

    def stop(self):
        """Stop the session and discard all accumulated state."""
        with self._lock:
            self._rearm()
            self.running = False
            self.status = PostureStatus.INITIALIZING
            self.raw_status = PostureStatus.INITIALIZING
            self.status_entered_at = self.clock()
            self.stats.mark_gap()
            self._log_session("session_stopped", "Monitoring stopped")

    def reset_baseline(self):
        """Forget the baseline and recalibrate on the next full window."""
        with self._lock:
            self._rearm()
            self._log_session("baseline_reset", "Recalibration requested")

    def set_sensitivity(self, sensitivity: float):
        """Change sensitivity (0-100); applies from the next frame."""
        with self._lock:
            self.config.sensitivity = clamp_sensitivity(sensitivity)

    def set_notifications_enabled(self, enabled: bool):
        """Turn desktop notifications on or off."""
        with self._lock:
            self.config.notifications_enabled = enabled
            self.dispatcher.notifications_enabled = enabled

    def set_sound_enabled(self, enabled: bool):
        """Turn the bad-posture sound cue on or off."""
        with self._lock:
            self.config.sound_enabled = enabled
            self.dispatcher.sound_enabled = enabled

    def set_visibility_provider(self, is_visible: Callable[[], bool]):
        """Set the callback reporting whether the host window is visible."""
        with self._lock:
            self.dispatcher.is_visible = is_visible

    def _rearm(self):
        """Clear buffers, baseline, dwell timer and cooldown."""
        self.smoother.clear()
        self.calibrator.reset()
        self.gate.reset()
        self.dispatcher.reset()
        self.latest_analysis = None
        self.latest_features = None

    # ------------------------------------------------------------------
    # Frame processing

    def process_frame(self, frame: Optional[LandmarkFrame]) -> Optional[PostureAnalysis]:
        """
        Analyse one frame.

        Args:
            frame: Landmarks for this frame, or None if no subject was detected

        Returns:
            PostureAnalysis, or None if the session is stopped or the frame
            had no usable subject (reported status NO_PERSON)
        """
        with self._lock:
            if not self.running:
                return None

            now = self.clock()
            analysis, event = self._analyse(frame, now)

        if event and self.on_status_change:
            self.on_status_change(event)

        return analysis

    def process_landmarks(self, points: Optional[Sequence[Any]]) -> Optional[PostureAnalysis]:
        """
        Analyse raw detector output (landmark objects or tuples).

        Malformed input is treated as a frame without a subject.
        """
        frame = None
        if points is not None:
            try:
                frame = LandmarkFrame.from_points(points)
            except ValueError as e:
                print(f"[SESSION] Rejected frame: {e}")
        return self.process_frame(frame)

    def _analyse(self, frame: Optional[LandmarkFrame], now: float):
        """Run the pipeline for one frame (lock held)."""
        extracted = self.extractor.extract(frame)

        if extracted is None:
            # No subject: leave buffers, baseline and dwell timer untouched
            self.raw_status = PostureStatus.NO_PERSON
            self.latest_analysis = None
            event = self._set_status(PostureStatus.NO_PERSON, "No person detected", now)
            self.stats.record_frame(PostureStatus.NO_PERSON, now)
            return None, event

        smoothed = FeatureSet.from_dict(self.smoother.push(extracted.features.to_dict()))

        captured = self.calibrator.update(self.smoother, smoothed)
        if captured is not None:
            print(f"[SESSION] Baseline captured: face={captured.face_size:.3f}, "
                  f"spinal={captured.spinal_ratio:.2f}")
            if self.event_logger:
                self.event_logger.log_baseline(captured.to_dict())

        baseline = self.calibrator.effective()
        raw_status, rule = self.classifier.evaluate(smoothed, baseline, self.config.sensitivity)
        self.raw_status = raw_status

        result = self.gate.update(raw_status, now)
        if result.confirmed:
            if self.dispatcher.maybe_notify(raw_status, now):
                self.stats.record_alert()

        if result.status == PostureStatus.GOOD:
            reason = "Posture within thresholds"
        else:
            reason = f"{rule} held for {self.gate.get_bad_duration(now):.1f}s"

        analysis = PostureAnalysis.from_features(result.status, smoothed, extracted.confidence)
        self.latest_analysis = analysis
        self.latest_features = smoothed

        event = self._set_status(result.status, reason, now)
        self.stats.record_frame(result.status, now)
        return analysis, event

    def _set_status(self, new_status: PostureStatus, reason: str, now: float) -> Optional[StatusChangeEvent]:
        """Update reported status and build a change event (lock held)."""
        if new_status == self.status:
            return None

        features = self.latest_features.to_dict() if self.latest_features else {}
        event = StatusChangeEvent(
            timestamp=datetime.now().isoformat(),
            from_status=self.status.value,
            to_status=new_status.value,
            raw_status=self.raw_status.value,
            reason=reason,
            time_in_previous_status=now - self.status_entered_at,
            features_snapshot=features
        )

        previous = self.status
        self.status = new_status
        self.status_entered_at = now
        self.transition_events.append(event)

        self.dispatcher.play_cue(new_status, previous)

        if self.event_logger:
            self.event_logger.log_status_change(
                event.from_status,
                event.to_status,
                reason,
                event.time_in_previous_status
            )

        return event

    def _log_session(self, event_type: str, reason: str):
        if self.event_logger:
            self.event_logger.log_session(event_type, self.status.value, reason)

    # ------------------------------------------------------------------
    # Introspection

    def get_status(self) -> PostureStatus:
        """Get the reported status."""
        with self._lock:
            return self.status

    def get_latest_analysis(self) -> Optional[PostureAnalysis]:
        """Get the most recent analysis record."""
        with self._lock:
            return self.latest_analysis

    def is_calibrated(self) -> bool:
        with self._lock:
            return self.calibrator.is_calibrated()

    def reset_stats(self):
        with self._lock:
            self.stats.reset()

    def get_state_summary(self) -> Dict[str, Any]:
        """
        Get summary of the session.

        Returns:
            Dictionary with status, baseline, thresholds, alert and stats info
        """
        with self._lock:
            now = self.clock()
            baseline = self.calibrator.effective()
            thresholds = compute_thresholds(baseline, self.config.sensitivity)

            return {
                "running": self.running,
                "status": self.status.value,
                "raw_status": self.raw_status.value,
                "time_in_status": now - self.status_entered_at,
                "gate_phase": self.gate.phase.value,
                "bad_duration_sec": self.gate.get_bad_duration(now),
                "sensitivity": self.config.sensitivity,
                "calibrated": self.calibrator.is_calibrated(),
                "baseline": baseline.to_dict(),
                "thresholds": thresholds.limits(baseline),
                "buffer_sizes": self.smoother.sizes(),
                "analysis": self.latest_analysis.to_dict() if self.latest_analysis else None,
                "alerts": self.dispatcher.get_status(now),
                "stats": self.stats.to_dict(),
                "transition_count": len(self.transition_events)
            }
