"""
Clock helpers.

Durations are compared in whole milliseconds, so timestamps built from
fractional frame intervals (e.g. 20 FPS = 0.05 s) reach a threshold on
the frame they nominally should instead of one frame late.
"""


def to_ms(seconds: float) -> int:
    """Convert seconds to whole milliseconds."""
    return int(round(seconds * 1000))


def elapsed_ms(start: float, now: float) -> int:
    """Milliseconds from start to now, rounded to the nearest millisecond."""
    return to_ms(now - start)
