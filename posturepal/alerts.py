"""
Alert dispatcher.

Decides whether a confirmed bad posture should produce a desktop
notification. A notification fires only when all of these hold:
- notifications are enabled
- the notification capability is available
- permission has been granted
- the host window is not visible to the user
- the cooldown since the last fired notification has elapsed

Separately, a sound cue plays once each time the reported status turns
bad (regardless of visibility or cooldown) while sound is enabled.

Dispatch is best-effort: failures are logged and otherwise ignored.
"""

import time
from typing import Optional, Callable, Dict, Any

from .classifier import PostureStatus
from .event_logger import EventLogger
from .notifications import NotificationEngine
from .timing import elapsed_ms, to_ms


NOTIFICATION_TITLE = "Posture Pal"
MOVE_BACK_MESSAGE = "You are too close to the screen!"
SIT_STRAIGHT_MESSAGE = "Sit up straight!"


def build_message(status: PostureStatus) -> str:
    """Notification body for a bad status."""
    if status == PostureStatus.MOVE_BACK:
        return MOVE_BACK_MESSAGE
    return SIT_STRAIGHT_MESSAGE


class AlertDispatcher:
    """
    Cooldown-gated notification dispatcher.

    Holds the last-notification timestamp; everything else is read fresh
    from the notification engine and visibility callback on each call.
    """

    def __init__(
        self,
        notification_engine: Optional[NotificationEngine] = None,
        is_visible: Optional[Callable[[], bool]] = None,
        cooldown_sec: float = 5.0,
        event_logger: Optional[EventLogger] = None,
        dry_run: bool = False,
        notifications_enabled: bool = True,
        sound_enabled: bool = True
    ):
        """
        Initialize alert dispatcher.

        Args:
            notification_engine: Notification sink
            is_visible: Returns True while the host window is visible
            cooldown_sec: Minimum seconds between fired notifications
            event_logger: Event logger (no event log if None)
            dry_run: If True, print instead of posting (no capability or
                permission needed)
            notifications_enabled: Desktop notification switch
            sound_enabled: Sound cue switch
        """
        self.notification_engine = notification_engine or NotificationEngine()
        self.is_visible = is_visible or (lambda: False)
        self.cooldown_sec = cooldown_sec
        self.event_logger = event_logger
        self.dry_run = dry_run
        self.notifications_enabled = notifications_enabled
        self.sound_enabled = sound_enabled

        self.last_notification_time: Optional[float] = None
        self.notifications_sent = 0
        self.cues_played = 0

    def maybe_notify(self, status: PostureStatus, now: Optional[float] = None) -> bool:
        """
        Fire a notification for a confirmed bad status if allowed.

        Args:
            status: Raw bad status that passed the dwell time
            now: Current clock reading (seconds, default time.monotonic())

        Returns:
            True if a notification was fired
        """
        if not status.is_bad:
            return False

        if now is None:
            now = time.monotonic()

        if not self._should_notify(now):
            return False

        message = build_message(status)

        if self.dry_run:
            print(f"  [ALERT] DRY RUN: Would post notification")
            print(f"    Title: {NOTIFICATION_TITLE}")
            print(f"    Message: {message}")
            success = True
        else:
            try:
                success = self.notification_engine.post(NOTIFICATION_TITLE, message)
            except Exception as e:
                print(f"  [ALERT] Notification dispatch failed: {e}")
                success = False

        if not success:
            if self.event_logger:
                self.event_logger.log_notify_failed(status.value, message)
            return False

        self.last_notification_time = now
        self.notifications_sent += 1

        if self.event_logger:
            self.event_logger.log_notification(status.value, NOTIFICATION_TITLE, message)

        return True

    def play_cue(self, status: PostureStatus, previous: PostureStatus) -> bool:
        """
        Play the sound cue if the reported status just turned bad.

        Args:
            status: Newly reported status
            previous: Status reported before this change

        Returns:
            True if the cue was played
        """
        if not self.sound_enabled or not status.is_bad or previous.is_bad:
            return False

        if self.dry_run:
            print(f"  [ALERT] DRY RUN: Would play sound cue ({status.value})")
            played = True
        else:
            try:
                played = self.notification_engine.play_sound()
            except Exception as e:
                print(f"  [ALERT] Sound cue failed: {e}")
                played = False

        if played:
            self.cues_played += 1
            if self.event_logger:
                self.event_logger.log_sound_cue(status.value, previous.value)

        return played

    def _should_notify(self, now: float) -> bool:
        """Check switch, capability, permission, visibility and cooldown."""
        if not self.notifications_enabled:
            return False

        engine = self.notification_engine

        try:
            if not self.dry_run:
                if not engine.is_available() or not engine.permission_granted:
                    return False
            if self.is_visible():
                return False
        except Exception as e:
            print(f"  [ALERT] Could not determine notification state: {e}")
            return False

        if self.last_notification_time is not None:
            if elapsed_ms(self.last_notification_time, now) < to_ms(self.cooldown_sec):
                return False

        return True

    def cooldown_remaining(self, now: Optional[float] = None) -> float:
        """Seconds until another notification may fire."""
        if self.last_notification_time is None:
            return 0.0
        if now is None:
            now = time.monotonic()
        return max(0.0, self.cooldown_sec - (now - self.last_notification_time))

    def get_status(self, now: Optional[float] = None) -> Dict[str, Any]:
        """
        Get dispatcher status for diagnostics.

        Returns:
            Dictionary with cooldown, permission and counters
        """
        if now is None:
            now = time.monotonic()

        return {
            "cooldown_remaining_sec": self.cooldown_remaining(now),
            "last_notification_sec_ago": (
                now - self.last_notification_time
                if self.last_notification_time is not None else None
            ),
            "notifications_sent": self.notifications_sent,
            "cues_played": self.cues_played,
            "notifications_enabled": self.notifications_enabled,
            "sound_enabled": self.sound_enabled,
            "permission_granted": self.notification_engine.permission_granted,
            "dry_run": self.dry_run
        }

    def reset(self):
        """Clear the cooldown."""
        self.last_notification_time = None
