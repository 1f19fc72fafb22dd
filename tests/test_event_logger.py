"""
Unit tests for the JSONL event logger.
"""

import json
import os
import tempfile
import unittest

from posturepal import EventLogger


class TestEventLogger(unittest.TestCase):
    """Test EventLogger"""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.log_path = os.path.join(self.temp_dir, "nested", "events.jsonl")
        self.logger = EventLogger(self.log_path)

    def tearDown(self):
        self.logger.purge_logs()
        os.rmdir(os.path.dirname(self.log_path))
        os.rmdir(self.temp_dir)

    def test_creates_parent_directory(self):
        self.assertTrue(os.path.isdir(os.path.dirname(self.log_path)))

    def test_empty_log(self):
        self.assertEqual(self.logger.get_recent_events(), [])

    def test_one_json_object_per_line(self):
        self.logger.log_session("session_started", "good", "start")
        self.logger.log_status_change("good", "sit-straight", "shoulder_slope", 12.5)

        with open(self.log_path) as f:
            lines = f.read().splitlines()
        self.assertEqual(len(lines), 2)
        second = json.loads(lines[1])
        self.assertEqual(second["event_type"], "status_changed")
        self.assertEqual(second["status"], "sit-straight")
        self.assertEqual(second["metadata"]["from_status"], "good")
        self.assertEqual(second["metadata"]["time_in_previous_status_sec"], 12.5)
        self.assertIn("timestamp", second)
        self.assertIn("unix_time", second)

    def test_baseline_event(self):
        self.logger.log_baseline({"face_size": 0.15})
        event = self.logger.get_recent_events()[0]
        self.assertEqual(event["event_type"], "baseline_captured")
        self.assertEqual(event["metadata"]["baseline"], {"face_size": 0.15})

    def test_recent_limit_and_corrupt_lines(self):
        for i in range(5):
            self.logger.log_event("status_changed", "good", str(i))
        with open(self.log_path, "a") as f:
            f.write("not json\n")

        events = self.logger.get_recent_events(limit=2)
        self.assertEqual([e["reason"] for e in events], ["3", "4"])

    def test_purge(self):
        self.logger.log_notification("move-back", "Posture Pal", "You are too close to the screen!")
        self.logger.purge_logs()
        self.assertFalse(os.path.exists(self.log_path))


if __name__ == "__main__":
    unittest.main()
