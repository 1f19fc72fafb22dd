"""
Unit tests for the cooldown-gated alert dispatcher.
"""

import os
import tempfile
import unittest

from posturepal import AlertDispatcher, EventLogger, PostureStatus
from posturepal.alerts import MOVE_BACK_MESSAGE, NOTIFICATION_TITLE, SIT_STRAIGHT_MESSAGE, build_message
from landmark_factory import FakeNotificationEngine


class TestAlertDispatcher(unittest.TestCase):
    """Test AlertDispatcher"""

    def setUp(self):
        self.engine = FakeNotificationEngine()
        self.visible = False
        self.dispatcher = AlertDispatcher(
            notification_engine=self.engine,
            is_visible=lambda: self.visible,
            cooldown_sec=5.0,
        )

    def test_first_alert_fires(self):
        self.assertTrue(self.dispatcher.maybe_notify(PostureStatus.SIT_STRAIGHT, now=100.0))
        self.assertEqual(self.engine.posts, [(NOTIFICATION_TITLE, SIT_STRAIGHT_MESSAGE)])
        self.assertEqual(self.dispatcher.notifications_sent, 1)

    def test_cooldown_within_window(self):
        self.dispatcher.maybe_notify(PostureStatus.SIT_STRAIGHT, now=0.0)
        for t in [0.5, 1.0, 2.5, 4.9]:
            self.assertFalse(self.dispatcher.maybe_notify(PostureStatus.SIT_STRAIGHT, now=t))
        self.assertEqual(len(self.engine.posts), 1)

    def test_cooldown_with_fractional_frame_times(self):
        self.dispatcher.maybe_notify(PostureStatus.SIT_STRAIGHT, now=0.0)
        now = 0.0
        for _ in range(100):
            now += 0.05
        self.assertTrue(self.dispatcher.maybe_notify(PostureStatus.SIT_STRAIGHT, now=now))

    def test_cooldown_elapsed(self):
        self.dispatcher.maybe_notify(PostureStatus.SIT_STRAIGHT, now=0.0)
        self.assertTrue(self.dispatcher.maybe_notify(PostureStatus.MOVE_BACK, now=5.0))
        self.assertEqual(len(self.engine.posts), 2)
        self.assertEqual(self.engine.posts[1][1], MOVE_BACK_MESSAGE)

    def test_suppressed_while_visible(self):
        self.visible = True
        self.assertFalse(self.dispatcher.maybe_notify(PostureStatus.SIT_STRAIGHT, now=0.0))
        self.assertEqual(self.engine.posts, [])
        self.assertIsNone(self.dispatcher.last_notification_time)

    def test_suppressed_without_permission(self):
        self.engine.permission_granted = False
        self.assertFalse(self.dispatcher.maybe_notify(PostureStatus.SIT_STRAIGHT, now=0.0))
        self.assertEqual(self.engine.posts, [])

    def test_suppressed_when_unavailable(self):
        self.engine.available = False
        self.assertFalse(self.dispatcher.maybe_notify(PostureStatus.SIT_STRAIGHT, now=0.0))

    def test_good_status_never_notifies(self):
        self.assertFalse(self.dispatcher.maybe_notify(PostureStatus.GOOD, now=0.0))
        self.assertFalse(self.dispatcher.maybe_notify(PostureStatus.NO_PERSON, now=0.0))

    def test_failed_post_keeps_cooldown_clear(self):
        self.engine.fail = True
        self.assertFalse(self.dispatcher.maybe_notify(PostureStatus.SIT_STRAIGHT, now=0.0))
        self.assertIsNone(self.dispatcher.last_notification_time)

        self.engine.fail = False
        self.assertTrue(self.dispatcher.maybe_notify(PostureStatus.SIT_STRAIGHT, now=1.0))

    def test_post_exception_is_contained(self):
        self.engine.raise_error = True
        self.assertFalse(self.dispatcher.maybe_notify(PostureStatus.MOVE_BACK, now=0.0))
        self.assertEqual(self.dispatcher.notifications_sent, 0)

    def test_visibility_exception_is_contained(self):
        def broken():
            raise RuntimeError("window gone")

        dispatcher = AlertDispatcher(notification_engine=self.engine, is_visible=broken)
        self.assertFalse(dispatcher.maybe_notify(PostureStatus.SIT_STRAIGHT, now=0.0))

    def test_dry_run_needs_no_permission(self):
        self.engine.permission_granted = False
        dispatcher = AlertDispatcher(notification_engine=self.engine, dry_run=True)
        self.assertTrue(dispatcher.maybe_notify(PostureStatus.SIT_STRAIGHT, now=0.0))
        self.assertEqual(self.engine.posts, [])

    def test_cooldown_remaining_and_reset(self):
        self.assertEqual(self.dispatcher.cooldown_remaining(0.0), 0.0)
        self.dispatcher.maybe_notify(PostureStatus.SIT_STRAIGHT, now=10.0)
        self.assertAlmostEqual(self.dispatcher.cooldown_remaining(12.0), 3.0)

        status = self.dispatcher.get_status(12.0)
        self.assertAlmostEqual(status["last_notification_sec_ago"], 2.0)
        self.assertEqual(status["notifications_sent"], 1)

        self.dispatcher.reset()
        self.assertTrue(self.dispatcher.maybe_notify(PostureStatus.SIT_STRAIGHT, now=12.0))

    def test_messages(self):
        self.assertEqual(build_message(PostureStatus.MOVE_BACK), "You are too close to the screen!")
        self.assertEqual(build_message(PostureStatus.SIT_STRAIGHT), "Sit up straight!")


class TestSoundCue(unittest.TestCase):
    """Test the bad-posture sound cue"""

    def setUp(self):
        self.engine = FakeNotificationEngine()
        self.dispatcher = AlertDispatcher(notification_engine=self.engine, is_visible=lambda: True)

    def test_plays_when_turning_bad(self):
        self.assertTrue(self.dispatcher.play_cue(PostureStatus.SIT_STRAIGHT, PostureStatus.GOOD))
        self.assertTrue(self.dispatcher.play_cue(PostureStatus.MOVE_BACK, PostureStatus.NO_PERSON))
        self.assertEqual(self.engine.sounds, 2)
        self.assertEqual(self.dispatcher.cues_played, 2)

    def test_silent_between_bad_statuses(self):
        self.assertFalse(self.dispatcher.play_cue(PostureStatus.MOVE_BACK, PostureStatus.SIT_STRAIGHT))
        self.assertFalse(self.dispatcher.play_cue(PostureStatus.GOOD, PostureStatus.MOVE_BACK))
        self.assertEqual(self.engine.sounds, 0)

    def test_sound_disabled(self):
        self.dispatcher.sound_enabled = False
        self.assertFalse(self.dispatcher.play_cue(PostureStatus.SIT_STRAIGHT, PostureStatus.GOOD))
        self.assertEqual(self.engine.sounds, 0)

    def test_player_errors_contained(self):
        self.engine.raise_error = True
        self.assertFalse(self.dispatcher.play_cue(PostureStatus.SIT_STRAIGHT, PostureStatus.GOOD))
        self.assertEqual(self.dispatcher.cues_played, 0)

    def test_notifications_disabled_keeps_cue(self):
        dispatcher = AlertDispatcher(notification_engine=self.engine, notifications_enabled=False)
        self.assertFalse(dispatcher.maybe_notify(PostureStatus.SIT_STRAIGHT, now=0.0))
        self.assertEqual(self.engine.posts, [])
        self.assertTrue(dispatcher.play_cue(PostureStatus.SIT_STRAIGHT, PostureStatus.GOOD))

    def test_status_flags(self):
        status = AlertDispatcher(notification_engine=self.engine, sound_enabled=False).get_status(0.0)
        self.assertFalse(status["sound_enabled"])
        self.assertTrue(status["notifications_enabled"])


class TestAlertEventLog(unittest.TestCase):
    """Test alert events written to the event log"""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.logger = EventLogger(os.path.join(self.temp_dir, "events.jsonl"))
        self.engine = FakeNotificationEngine()

    def tearDown(self):
        self.logger.purge_logs()
        os.rmdir(self.temp_dir)

    def test_logs_notification(self):
        dispatcher = AlertDispatcher(notification_engine=self.engine, event_logger=self.logger)
        dispatcher.maybe_notify(PostureStatus.MOVE_BACK, now=0.0)

        events = self.logger.get_recent_events()
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0]["event_type"], "notified")
        self.assertEqual(events[0]["status"], "move-back")
        self.assertEqual(events[0]["metadata"]["title"], "Posture Pal")

    def test_logs_sound_cue(self):
        dispatcher = AlertDispatcher(notification_engine=self.engine, event_logger=self.logger)
        dispatcher.play_cue(PostureStatus.SIT_STRAIGHT, PostureStatus.GOOD)

        event = self.logger.get_recent_events()[0]
        self.assertEqual(event["event_type"], "sound_cue")
        self.assertEqual(event["metadata"]["from_status"], "good")

    def test_logs_failure(self):
        self.engine.fail = True
        dispatcher = AlertDispatcher(notification_engine=self.engine, event_logger=self.logger)
        dispatcher.maybe_notify(PostureStatus.SIT_STRAIGHT, now=0.0)

        events = self.logger.get_recent_events()
        self.assertEqual([e["event_type"] for e in events], ["notify_failed"])


if __name__ == "__main__":
    unittest.main()
