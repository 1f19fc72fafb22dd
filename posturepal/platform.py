import sys
from typing import Tuple


def is_macos() -> bool:
    return sys.platform == "darwin"


def is_linux() -> bool:
    return sys.platform.startswith("linux")


def notifier_commands() -> Tuple[str, ...]:
    """Desktop notifier commands to try on this OS, in preference order."""
    if is_macos():
        return ("terminal-notifier", "osascript")
    if is_linux():
        return ("notify-send",)
    return ()


def sound_commands() -> Tuple[str, ...]:
    """Sound player commands to try on this OS, in preference order."""
    if is_macos():
        return ("afplay",)
    if is_linux():
        return ("canberra-gtk-play", "paplay")
    return ()
