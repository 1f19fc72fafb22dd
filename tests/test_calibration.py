"""
Unit tests for baseline capture.
"""

import unittest

from posturepal import (
    Baseline,
    BaselineCalibrator,
    FALLBACK_BASELINE,
    FEATURE_NAMES,
    FeatureSet,
    FeatureSmoother,
)


def features(value):
    return FeatureSet(**{name: value for name in FEATURE_NAMES})


class TestBaselineCalibrator(unittest.TestCase):
    """Test BaselineCalibrator"""

    def setUp(self):
        self.smoother = FeatureSmoother(FEATURE_NAMES, capacity=5)
        self.calibrator = BaselineCalibrator()

    def push(self, value):
        smoothed = FeatureSet.from_dict(self.smoother.push(features(value).to_dict()))
        return self.calibrator.update(self.smoother, smoothed)

    def test_fallback_values(self):
        self.assertEqual(FALLBACK_BASELINE.shoulder_slope, 0.03)
        self.assertEqual(FALLBACK_BASELINE.neck_angle, 0.05)
        self.assertEqual(FALLBACK_BASELINE.face_size, 0.15)
        self.assertEqual(FALLBACK_BASELINE.head_yaw, 0.02)
        self.assertEqual(FALLBACK_BASELINE.spinal_ratio, 1.5)
        self.assertIs(self.calibrator.effective(), FALLBACK_BASELINE)

    def test_captures_on_first_full_window(self):
        for value in [1.0, 2.0, 3.0, 4.0]:
            self.assertIsNone(self.push(value))
            self.assertFalse(self.calibrator.is_calibrated())

        baseline = self.push(5.0)
        self.assertIsNotNone(baseline)
        self.assertAlmostEqual(baseline.face_size, 3.0)
        self.assertIsNotNone(baseline.captured_at)
        self.assertIs(self.calibrator.effective(), baseline)

    def test_captured_once_and_stable(self):
        for value in [1.0] * 5:
            self.push(value)
        captured = self.calibrator.baseline
        snapshot = captured.to_dict()

        for value in [9.0] * 20:
            self.assertIsNone(self.push(value))

        self.assertIs(self.calibrator.baseline, captured)
        self.assertEqual(self.calibrator.baseline.to_dict(), snapshot)

    def test_reset_allows_recapture(self):
        for value in [1.0] * 5:
            self.push(value)

        self.calibrator.reset()
        self.smoother.clear()
        self.assertIs(self.calibrator.effective(), FALLBACK_BASELINE)

        for value in [2.0] * 4:
            self.assertIsNone(self.push(value))
        baseline = self.push(2.0)
        self.assertAlmostEqual(baseline.spinal_ratio, 2.0)

    def test_baseline_is_immutable(self):
        baseline = Baseline.from_features(features(0.1))
        with self.assertRaises(AttributeError):
            baseline.face_size = 0.5


if __name__ == "__main__":
    unittest.main()
