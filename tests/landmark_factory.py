"""
Synthetic landmark frames for tests.

The neutral frame is a subject centred in view:
    face_size 0.15, spinal_ratio 1.5, shoulder_slope 0, neck_angle 0, head_yaw 0
"""

import numpy as np

from posturepal import Landmark, LandmarkFrame


NUM_LANDMARKS = 33
NEUTRAL = {
    0: (0.50, 0.300),  # nose
    7: (0.575, 0.300),  # left ear
    8: (0.425, 0.300),  # right ear
    11: (0.65, 0.525),  # left shoulder
    12: (0.35, 0.525),  # right shoulder
}


def make_points(scale=1.0, nose_dy=0.0, nose_dx=0.0, shoulder_tilt=0.0, visibility=0.9):
    """
    Build landmark points around the neutral pose.

    Args:
        scale: Zoom about the nose (>1 = subject closer to the camera)
        nose_dy: Move the nose down toward the shoulders (slouch)
        nose_dx: Move the nose sideways (head forward / turned)
        shoulder_tilt: Raise the left shoulder by this much
        visibility: Visibility for every landmark
    """
    cx, cy = NEUTRAL[0]
    points = [(0.5, 0.8, visibility)] * NUM_LANDMARKS
    for index, (x, y) in NEUTRAL.items():
        sx = cx + (x - cx) * scale
        sy = cy + (y - cy) * scale
        points[index] = (sx, sy, visibility)

    nx, ny, nv = points[0]
    points[0] = (nx + nose_dx, ny + nose_dy, nv)
    lx, ly, lv = points[11]
    points[11] = (lx, ly - shoulder_tilt, lv)
    return points


def make_frame(**kwargs) -> LandmarkFrame:
    return LandmarkFrame([Landmark(x, y, v) for x, y, v in make_points(**kwargs)])


def make_array(**kwargs) -> np.ndarray:
    return np.array(make_points(**kwargs), dtype=float)


def empty_array() -> np.ndarray:
    return np.full((NUM_LANDMARKS, 3), np.nan)


class FakeClock:
    """Manually set clock."""

    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class FakeNotificationEngine:
    """Records posted notifications instead of showing them."""

    def __init__(self, available=True, permission_granted=True, fail=False, raise_error=False):
        self.available = available
        self.permission_granted = permission_granted
        self.fail = fail
        self.raise_error = raise_error
        self.posts = []
        self.sounds = 0

    def is_available(self):
        return self.available

    def request_permission(self):
        self.permission_granted = self.available
        return self.permission_granted

    def post(self, title, message):
        if self.raise_error:
            raise RuntimeError("notifier crashed")
        if self.fail:
            return False
        self.posts.append((title, message))
        return True

    def play_sound(self):
        if self.raise_error:
            raise RuntimeError("sound player crashed")
        if self.fail:
            return False
        self.sounds += 1
        return True
