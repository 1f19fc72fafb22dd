"""
Configuration: analysis settings, sensitivity presets and host loop settings.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Tuple

from .classifier import clamp_sensitivity


class SensitivityPreset(Enum):
    """
    Sensitivity presets.

    SENSITIVE: tighter thresholds, flags smaller deviations
    STANDARD: neutral thresholds (sensitivity 50)
    CONSERVATIVE: looser thresholds, fewer false positives
    """
    SENSITIVE = "sensitive"
    STANDARD = "standard"
    CONSERVATIVE = "conservative"


PRESET_SENSITIVITY = {
    SensitivityPreset.SENSITIVE: 70.0,
    SensitivityPreset.STANDARD: 50.0,
    SensitivityPreset.CONSERVATIVE: 30.0,
}


@dataclass
class AnalysisConfig:
    """
    Configuration for one analysis session.

    All durations in seconds.
    """
    sensitivity: float = 50.0  # 0-100, higher = stricter
    smoothing_window: int = 5  # samples per feature buffer
    bad_posture_dwell_sec: float = 2.0  # deviation must persist this long
    notification_cooldown_sec: float = 5.0  # minimum gap between notifications
    min_face_size: float = 1e-3  # ear distance below this rejects the frame
    notifications_enabled: bool = True  # desktop notifications while hidden
    sound_enabled: bool = True  # sound cue when posture turns bad

    def __post_init__(self):
        """Validate configuration."""
        self.sensitivity = clamp_sensitivity(self.sensitivity)
        if self.smoothing_window < 1:
            raise ValueError("smoothing_window must be >= 1")
        if self.bad_posture_dwell_sec < 0 or self.notification_cooldown_sec < 0:
            raise ValueError("durations must be >= 0")

    @staticmethod
    def from_preset(preset: SensitivityPreset, **overrides) -> 'AnalysisConfig':
        """
        Create config from preset with optional overrides.

        Args:
            preset: Sensitivity preset to use
            **overrides: Override specific config values

        Returns:
            AnalysisConfig instance

        Raises:
            ValueError: If an override is out of range
        """
        values = {"sensitivity": PRESET_SENSITIVITY[preset]}

        names = {f.name for f in fields(AnalysisConfig)}
        for key, value in overrides.items():
            if key in names:
                values[key] = value

        # Built in one go so overrides are validated too
        return AnalysisConfig(**values)


@dataclass
class LoopConfig:
    """
    Host frame loop configuration.

    The loop runs at target_fps while its preview window is visible and
    falls back to one frame per hidden_poll_interval_sec otherwise.
    """
    camera_index: int = 0
    camera_width: int = 640
    camera_height: int = 480
    target_fps: float = 15.0
    hidden_poll_interval_sec: float = 1.0

    # MediaPipe settings
    model_complexity: int = 0  # 0=lite, 1=full, 2=heavy
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5

    show_preview: bool = False

    @classmethod
    def lightweight(cls) -> 'LoopConfig':
        """Low CPU: 10 FPS, 424x240, lite model."""
        return cls(
            target_fps=10.0,
            camera_width=424,
            camera_height=240,
            model_complexity=0
        )

    @classmethod
    def quality(cls) -> 'LoopConfig':
        """Better landmarks: 30 FPS, 1280x720, full model."""
        return cls(
            target_fps=30.0,
            camera_width=1280,
            camera_height=720,
            model_complexity=1
        )

    def get_resolution(self) -> Tuple[int, int]:
        """Get camera resolution as (width, height)."""
        return (self.camera_width, self.camera_height)

    def __str__(self) -> str:
        """String representation for logging."""
        return (
            f"LoopConfig(fps={self.target_fps}, "
            f"res={self.camera_width}×{self.camera_height}, "
            f"model={'lite' if self.model_complexity == 0 else 'full' if self.model_complexity == 1 else 'heavy'}, "
            f"preview={'on' if self.show_preview else 'off'})"
        )
