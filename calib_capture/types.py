"""
Unit type annotations for calibration capture parameters.

NewType aliases documenting the units flowing through the capture pipeline.
They are erased at runtime and only help static analysis catch mix-ups such as
passing a pixel distance where a board spacing in millimeters is expected.

Usage Example:
    >>> from calib_capture.types import Millimeters, Frames
    >>>
    >>> def make_pipeline(spacing: Millimeters, window: Frames) -> None:
    ...     pass
"""

from typing import NewType

# Image coordinate units
PixelsFloat = NewType('PixelsFloat', float)
"""Floating-point image coordinates in pixels (e.g., subpixel corners, motion distance)"""

# Physical target dimensions
Millimeters = NewType('Millimeters', float)
"""Physical dimensions on the calibration target (e.g., square size, grid gap)"""

# Time measured in processed frames
Frames = NewType('Frames', int)
"""Count of processed frames (e.g., stability window length)"""

Milliseconds = NewType('Milliseconds', int)
"""Wall-clock duration used only by the display loop (e.g., capture pause)"""
