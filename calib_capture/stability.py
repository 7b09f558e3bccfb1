"""
Motion-based stability filter for calibration captures.

The capture pipeline only accepts a detection once the target has been held
still for a number of frames. Motion is approximated by tracking a single
representative point per successful detection and comparing the newest and
oldest tracked positions once the track spans the full stability window.
"""

import logging
import math
from typing import Sequence, Tuple

import numpy as np

from calib_capture.types import Frames, PixelsFloat

logger = logging.getLogger(__name__)

# Maximum accepted motion as a fraction of the frame diagonal
DIAGONAL_FRACTION = 20.0

DEFAULT_STABILITY_WINDOW = Frames(30)


def max_template_offset(frame_shape: Sequence[int]) -> PixelsFloat:
    """Motion threshold for a frame of the given shape.

    Args:
        frame_shape: numpy shape of the frame, (height, width[, channels])

    Returns:
        Frame diagonal divided by DIAGONAL_FRACTION, in pixels
    """
    height, width = frame_shape[:2]
    return PixelsFloat(math.hypot(width, height) / DIAGONAL_FRACTION)


class TemplateTrack:
    """Fixed-capacity circular buffer of representative points.

    Index 0 is the most recent point, index len-1 the oldest. Pushing into a
    full track overwrites the oldest entry.
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError(f"Track capacity must be positive, got {capacity}")
        self._points = np.zeros((capacity, 2), dtype=np.float64)
        self._capacity = capacity
        self._head = -1
        self._count = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return self._count

    def __getitem__(self, age: int) -> np.ndarray:
        if not 0 <= age < self._count:
            raise IndexError(f"Track index {age} out of range for {self._count} entries")
        return self._points[(self._head - age) % self._capacity].copy()

    def is_full(self) -> bool:
        return self._count == self._capacity

    def push(self, point: Tuple[float, float]) -> None:
        """Record a new most-recent point, dropping the oldest when full."""
        self._head = (self._head + 1) % self._capacity
        self._points[self._head] = point
        self._count = min(self._count + 1, self._capacity)

    def newest(self) -> np.ndarray:
        return self[0]

    def oldest(self) -> np.ndarray:
        return self[self._count - 1]

    def clear(self) -> None:
        self._head = -1
        self._count = 0


class StabilityFilter:
    """Decides whether a target has been stationary over the stability window.

    The track holds window + 1 entries, so a stationary target is accepted on
    its (window + 1)-th successful detection. Frames without a detection
    neither extend nor clear the track; they only make it older.

    Example:
        >>> stability = StabilityFilter(window=30)
        >>> for frame in frames:
        ...     if stability.update(point_or_none, frame.shape):
        ...         save_sample()
        ...         stability.reset()
    """

    def __init__(self, window: Frames = DEFAULT_STABILITY_WINDOW):
        if window <= 0:
            raise ValueError(f"Stability window must be positive, got {window}")
        self.window = window
        self.track = TemplateTrack(window + 1)

    def update(self, point, frame_shape: Sequence[int]) -> bool:
        """Feed the representative point of one frame.

        Args:
            point: (x, y) representative point, or None when detection failed
            frame_shape: Shape of the frame the point was found in

        Returns:
            True if the target is judged stationary on this frame
        """
        if point is None:
            return False

        self.track.push(point)
        if not self.track.is_full():
            return False

        offset = float(np.linalg.norm(self.track.newest() - self.track.oldest()))
        threshold = max_template_offset(frame_shape)
        logger.debug(f"Template offset over window: {offset:.2f}px (threshold {threshold:.2f}px)")
        return offset < threshold

    def is_full(self) -> bool:
        return self.track.is_full()

    def reset(self) -> None:
        self.track.clear()
