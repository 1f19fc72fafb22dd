"""
Sliding-window mean smoothing for posture features.
One buffer per feature; buffers never share state.
"""

from typing import Dict, List, Optional


class SmoothingBuffer:
    """
    Fixed-capacity sliding-window mean filter.

    Holds at most `capacity` raw values, oldest evicted first. The output is
    the arithmetic mean of whatever is currently held, so it is defined
    from the very first sample.
    """

    def __init__(self, capacity: int = 5):
        """
        Initialize smoothing buffer.

        Args:
            capacity: Maximum number of samples kept (window size)
        """
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self.values: List[float] = []

    def push(self, value: float) -> float:
        """Add a raw value and return the smoothed (mean) value."""
        self.values.append(value)
        if len(self.values) > self.capacity:
            self.values.pop(0)
        return self.get()

    def get(self) -> Optional[float]:
        """Get current mean, or None if empty."""
        if not self.values:
            return None
        return sum(self.values) / len(self.values)

    def is_full(self) -> bool:
        return len(self.values) >= self.capacity

    def size(self) -> int:
        return len(self.values)

    def clear(self):
        self.values = []


class FeatureSmoother:
    """Owns one SmoothingBuffer per named feature."""

    def __init__(self, feature_names, capacity: int = 5):
        self.capacity = capacity
        self.buffers: Dict[str, SmoothingBuffer] = {
            name: SmoothingBuffer(capacity) for name in feature_names
        }

    def push(self, raw: Dict[str, float]) -> Dict[str, float]:
        """
        Push one raw value into each feature's buffer.

        Args:
            raw: Mapping of feature name to raw value (must cover every feature)

        Returns:
            Mapping of feature name to smoothed value
        """
        return {name: buffer.push(raw[name]) for name, buffer in self.buffers.items()}

    def all_full(self) -> bool:
        """True once every buffer has reached capacity."""
        return all(buffer.is_full() for buffer in self.buffers.values())

    def sizes(self) -> Dict[str, int]:
        return {name: buffer.size() for name, buffer in self.buffers.items()}

    def clear(self):
        for buffer in self.buffers.values():
            buffer.clear()
