"""
Host frame loop.
Captures webcam frames, runs MediaPipe Pose, and feeds one landmark frame
per iteration into an AnalysisSession.

The loop runs at the configured frame rate while its preview window is
visible and drops to a coarse poll while hidden (no preview, or preview
closed). Hidden is also what allows desktop alerts to fire.

PRIVACY: Never writes frames to disk. Only landmarks reach the session.
"""

import os
import time
import threading
from typing import Optional, Dict, Any

import cv2
import mediapipe as mp

from .classifier import PostureStatus
from .config import LoopConfig
from .landmarks import LandmarkFrame, KEY_LANDMARKS
from .platform import is_macos
from .session import AnalysisSession


WINDOW_NAME = "Posture Pal"

# BGR
STATUS_COLORS = {
    PostureStatus.GOOD: (129, 185, 16),
    PostureStatus.SIT_STRAIGHT: (0, 0, 255),
    PostureStatus.MOVE_BACK: (0, 165, 255),
    PostureStatus.INITIALIZING: (200, 200, 200),
    PostureStatus.NO_PERSON: (150, 150, 150),
}


class PoseLoop:
    """
    Webcam + MediaPipe driver for an analysis session.

    Frames are processed strictly one at a time; the session sees exactly
    one process_frame() call per captured frame.
    """

    def __init__(
        self,
        session: AnalysisSession,
        config: Optional[LoopConfig] = None
    ):
        """
        Initialize pose loop.

        Args:
            session: Session to feed (started by the loop if not running)
            config: Loop configuration (uses defaults if None)
        """
        self.session = session
        self.config = config or LoopConfig()
        self.session.set_visibility_provider(self.is_visible)

        self.mp_pose = mp.solutions.pose
        self.mp_drawing = mp.solutions.drawing_utils
        self.pose = None
        self.cap: Optional[cv2.VideoCapture] = None

        self.running = False
        self._thread: Optional[threading.Thread] = None
        self._visible = False
        self._lock = threading.Lock()

        # Stats
        self.frames_processed = 0
        self.start_time: Optional[float] = None

    def is_visible(self) -> bool:
        """True while the preview window is open and shown."""
        with self._lock:
            return self._visible

    def start(self):
        """Start the loop in a background thread (no preview window)."""
        if self.running:
            return

        if self.config.show_preview:
            print("[POSE_LOOP] Preview needs the main thread; use run() instead. Preview disabled.")
            self.config.show_preview = False

        self.running = True
        self._thread = threading.Thread(target=self._run_loop, daemon=True)
        self._thread.start()

    def run(self):
        """Run the loop in the calling thread until stop() or 'q'."""
        self.running = True
        self._run_loop()

    def stop(self):
        """Stop the loop and release resources."""
        self.running = False
        if self._thread:
            self._thread.join(timeout=2.0)
            self._thread = None

    def get_stats(self) -> Dict[str, Any]:
        """Get runtime statistics."""
        elapsed = time.time() - self.start_time if self.start_time else 0
        return {
            "frames_processed": self.frames_processed,
            "elapsed_seconds": elapsed,
            "actual_fps": self.frames_processed / elapsed if elapsed > 0 else 0.0,
            "target_fps": self.config.target_fps,
            "visible": self.is_visible()
        }

    def _run_loop(self):
        """Main processing loop."""
        if not self._init_camera():
            print("[POSE_LOOP] ERROR: Failed to initialize camera")
            self.running = False
            return

        self.pose = self.mp_pose.Pose(
            static_image_mode=False,
            model_complexity=self.config.model_complexity,
            smooth_landmarks=True,
            min_detection_confidence=self.config.min_detection_confidence,
            min_tracking_confidence=self.config.min_tracking_confidence
        )

        if not self.session.running:
            self.session.start()

        self.start_time = time.time()
        print(f"[POSE_LOOP] Started ({self.config})")

        try:
            while self.running:
                loop_start = time.time()

                if not self._process_frame():
                    break

                interval = (
                    1.0 / self.config.target_fps if self.is_visible()
                    else self.config.hidden_poll_interval_sec
                )
                sleep_time = interval - (time.time() - loop_start)
                if sleep_time > 0:
                    time.sleep(sleep_time)
        except Exception as e:
            print(f"[POSE_LOOP] ERROR: {e}")
        finally:
            self.running = False
            self._cleanup()

    def _init_camera(self) -> bool:
        """Initialize camera capture."""
        try:
            if is_macos():
                os.environ.setdefault('OPENCV_AVFOUNDATION_SKIP_AUTH', '1')

            self.cap = cv2.VideoCapture(self.config.camera_index)
            if not self.cap.isOpened():
                print("[POSE_LOOP] Camera not accessible. Check that no other application "
                      "is using it and that camera permission is granted.")
                return False

            width, height = self.config.get_resolution()
            self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
            self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)

            ret, frame = self.cap.read()
            if not ret or frame is None:
                print("[POSE_LOOP] Camera opened but cannot read frames. Check permissions.")
                return False

            return True
        except cv2.error as e:
            print(f"[POSE_LOOP] Camera init error: {e}")
            return False

    def _process_frame(self) -> bool:
        """
        Capture one frame, detect landmarks and feed the session.

        Returns:
            False if the loop should end
        """
        ret, frame = self.cap.read()
        if not ret or frame is None:
            # Frames simply stop arriving; the session keeps its last status
            return True

        frame_rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        results = self.pose.process(frame_rgb)

        landmark_frame = None
        if results.pose_landmarks:
            landmark_frame = LandmarkFrame.from_mediapipe(results.pose_landmarks)

        self.session.process_frame(landmark_frame)
        self.frames_processed += 1

        if self.config.show_preview:
            return self._show_preview(frame, results.pose_landmarks)
        return True

    def _show_preview(self, frame, pose_landmarks) -> bool:
        """Draw skeleton and status; handle keys. Returns False on quit."""
        with self._lock:
            was_visible = self._visible

        if was_visible and cv2.getWindowProperty(WINDOW_NAME, cv2.WND_PROP_VISIBLE) < 1:
            # Window closed by the user: keep monitoring in the background
            with self._lock:
                self._visible = False
            self.config.show_preview = False
            print("[POSE_LOOP] Preview closed, monitoring in background")
            return True

        status = self.session.get_status()
        color = STATUS_COLORS[status]

        if pose_landmarks:
            self.mp_drawing.draw_landmarks(frame, pose_landmarks, self.mp_pose.POSE_CONNECTIONS)
            h, w = frame.shape[:2]
            for index in KEY_LANDMARKS:
                lm = pose_landmarks.landmark[index]
                cv2.circle(frame, (int(lm.x * w), int(lm.y * h)), 8, color, -1)
                cv2.circle(frame, (int(lm.x * w), int(lm.y * h)), 8, (255, 255, 255), 2)

        analysis = self.session.get_latest_analysis()
        cv2.putText(frame, status.value.upper(), (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.9, color, 2)
        if analysis:
            cv2.putText(
                frame,
                f"slope {analysis.shoulder_slope:.1f}  neck {analysis.neck_angle:.1f}  "
                f"conf {analysis.confidence:.2f}",
                (10, 60), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (235, 235, 235), 1
            )

        cv2.imshow(WINDOW_NAME, frame)
        with self._lock:
            self._visible = True

        key = cv2.waitKey(1) & 0xFF
        if key == ord('q'):
            return False
        if key == ord('r'):
            self.session.reset_baseline()
            print("[POSE_LOOP] Baseline reset, sit in your ideal posture")
        return True

    def _cleanup(self):
        """Release camera and MediaPipe resources."""
        if self.cap:
            self.cap.release()
            self.cap = None

        if self.pose:
            self.pose.close()
            self.pose = None

        if self.config.show_preview or self._visible:
            cv2.destroyAllWindows()
        with self._lock:
            self._visible = False

        print("[POSE_LOOP] Stopped")
