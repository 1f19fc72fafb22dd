"""
Unit tests for session statistics.
"""

import unittest

from posturepal import PostureStatus, SessionStats


class TestSessionStats(unittest.TestCase):
    """Test SessionStats"""

    def setUp(self):
        self.stats = SessionStats()

    def test_empty(self):
        self.assertEqual(self.stats.frames_processed, 0)
        self.assertIsNone(self.stats.good_ratio)

    def test_time_credited_to_previous_status(self):
        self.stats.record_frame(PostureStatus.GOOD, 0.0)
        self.stats.record_frame(PostureStatus.GOOD, 3.0)
        self.stats.record_frame(PostureStatus.SIT_STRAIGHT, 4.0)
        self.stats.record_frame(PostureStatus.MOVE_BACK, 5.0)
        self.stats.record_frame(PostureStatus.GOOD, 6.0)

        self.assertAlmostEqual(self.stats.good_time_sec, 4.0)
        self.assertAlmostEqual(self.stats.bad_time_sec, 2.0)
        self.assertAlmostEqual(self.stats.good_ratio, 4.0 / 6.0)
        self.assertEqual(self.stats.status_counts["good"], 3)

    def test_no_person_time_excluded_from_ratio(self):
        self.stats.record_frame(PostureStatus.GOOD, 0.0)
        self.stats.record_frame(PostureStatus.NO_PERSON, 1.0)
        self.stats.record_frame(PostureStatus.GOOD, 11.0)

        self.assertAlmostEqual(self.stats.status_time_sec["no-person"], 10.0)
        self.assertAlmostEqual(self.stats.good_ratio, 1.0)

    def test_gap_not_credited(self):
        self.stats.record_frame(PostureStatus.GOOD, 0.0)
        self.stats.mark_gap()
        self.stats.record_frame(PostureStatus.GOOD, 100.0)
        self.assertEqual(self.stats.good_time_sec, 0.0)
        self.assertEqual(self.stats.frames_processed, 2)

    def test_alerts_and_reset(self):
        self.stats.record_alert()
        self.stats.record_frame(PostureStatus.GOOD, 0.0)
        self.assertEqual(self.stats.to_dict()["alerts_sent"], 1)

        self.stats.reset()
        data = self.stats.to_dict()
        self.assertEqual(data["alerts_sent"], 0)
        self.assertEqual(data["frames_processed"], 0)
        self.assertIsNone(data["good_ratio"])


if __name__ == "__main__":
    unittest.main()
