"""
Desktop notification sink.

Posts notifications through terminal-notifier or osascript on macOS and
notify-send on Linux, and plays a short alert sound through the system
sound player. Both are best-effort: every failure is reported as a False
return, never raised.

PRIVACY: No frames, only text notifications.
"""

import shutil
import subprocess
import time
from typing import Optional, Dict, Any, List, Sequence

from .platform import notifier_commands, sound_commands


# Sound player invocations, keyed by command
SOUND_PLAYERS = {
    "afplay": ["afplay", "/System/Library/Sounds/Tink.aiff"],
    "canberra-gtk-play": ["canberra-gtk-play", "--id", "bell"],
    "paplay": ["paplay", "/usr/share/sounds/freedesktop/stereo/bell.oga"],
}


class NotificationEngine:
    """
    Desktop notification engine.

    Capability is whatever notifier command the platform provides;
    permission must be requested once before anything is posted.
    """

    def __init__(self, app_name: str = "Posture Pal"):
        """
        Initialize notification engine.

        Args:
            app_name: Application name for notifications
        """
        self.app_name = app_name
        self.permission_granted = False
        self.last_notification: Optional[Dict[str, Any]] = None

        # Helpers still running after their launch check
        self._pending: List[subprocess.Popen] = []

    def _find_command(self, candidates: Sequence[str]) -> Optional[str]:
        """Return the first of `candidates` installed on this system."""
        for cmd in candidates:
            if shutil.which(cmd):
                return cmd
        return None

    def _find_notifier(self) -> Optional[str]:
        return self._find_command(notifier_commands())

    def is_available(self) -> bool:
        """Check if notifications can be posted on this system."""
        return self._find_notifier() is not None

    def request_permission(self) -> bool:
        """
        Request permission to post notifications.

        Granted iff a notifier is available.

        Returns:
            True if permission is granted
        """
        self.permission_granted = self.is_available()
        if not self.permission_granted:
            print("  [NOTIFICATION] No notifier found; notifications disabled")
        return self.permission_granted

    def post(self, title: str, message: str) -> bool:
        """
        Post a silent notification.

        Args:
            title: Notification title
            message: Notification body

        Returns:
            True if posted successfully
        """
        notifier = self._find_notifier()
        if notifier is None:
            return False

        if notifier == "terminal-notifier":
            cmd = ["terminal-notifier", "-title", title, "-message", message, "-group", self.app_name]
        elif notifier == "osascript":
            script = f'display notification "{_escape(message)}" with title "{_escape(title)}"'
            cmd = ["osascript", "-e", script]
        else:
            cmd = ["notify-send", "--app-name", self.app_name, title, message]

        if not self._launch(cmd, notifier):
            return False

        self.last_notification = {
            "title": title,
            "message": message,
            "posted_at": time.time()
        }
        return True

    def play_sound(self) -> bool:
        """
        Play a short alert sound.

        Returns:
            True if a sound player was launched
        """
        player = self._find_command(sound_commands())
        if player is None:
            return False
        return self._launch(SOUND_PLAYERS[player], player)

    def pending_count(self) -> int:
        """Number of helper processes not yet reaped."""
        self._reap()
        return len(self._pending)

    def _reap(self):
        """Drop helpers that have exited."""
        self._pending = [proc for proc in self._pending if proc.poll() is None]

    def _launch(self, cmd: List[str], name: str) -> bool:
        """Start a helper command, failing only on immediate errors."""
        self._reap()

        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True
            )

            # Don't wait for completion, only catch immediate failures
            try:
                _, stderr = proc.communicate(timeout=0.1)
                if proc.returncode:
                    print(f"  [NOTIFICATION] Error: {stderr.strip() or name + ' failed'}")
                    return False
            except subprocess.TimeoutExpired:
                # Still running; reaped on a later launch
                self._pending.append(proc)

        except (OSError, subprocess.SubprocessError) as e:
            print(f"  [NOTIFICATION] Error: {e}")
            return False

        return True


def _escape(text: str) -> str:
    """Escape a string for an AppleScript literal."""
    return text.replace("\\", "\\\\").replace('"', '\\"')
