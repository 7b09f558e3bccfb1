"""
Abstract interface for calibration target detection.

Each TemplateType has one TemplateDetector implementation that wraps the
relevant OpenCV detector and normalizes its output into a DetectionResult.
Detectors annotate the frame they are given, so callers pass a private copy.
A detection miss is reported through DetectionResult.found, never raised.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import numpy as np

from calib_capture.templates import BoardSpec


@dataclass
class DetectionResult:
    """Normalized output of a target detector.

    Attributes:
        found: Whether the target was detected on this frame
        points: (N, 1, 2) float32 image points; empty when not found
        ids: (N, 1) int32 board-relative ids for sparse targets (ChArUco),
            None for grid targets
        representative: Single (x, y) point standing in for the whole target
            when measuring motion; None when not found
    """

    found: bool
    points: np.ndarray
    ids: Optional[np.ndarray] = None
    representative: Optional[np.ndarray] = None

    @classmethod
    def missed(cls) -> 'DetectionResult':
        return cls(found=False, points=np.zeros((0, 1, 2), dtype=np.float32))

    @classmethod
    def from_points(
        cls,
        points: np.ndarray,
        ids: Optional[np.ndarray] = None,
        use_centroid: bool = False,
    ) -> 'DetectionResult':
        """Build a successful result, picking the first point or the centroid as representative."""
        points = np.asarray(points, dtype=np.float32).reshape(-1, 1, 2)
        if len(points) == 0:
            return cls.missed()
        flat = points.reshape(-1, 2)
        representative = flat.mean(axis=0) if use_centroid else flat[0]
        if ids is not None:
            ids = np.asarray(ids, dtype=np.int32).reshape(-1, 1)
        return cls(found=True, points=points, ids=ids,
                   representative=representative.astype(np.float64))


class TemplateDetector(ABC):
    """Base class for calibration target detectors.

    Subclasses are constructed from a BoardSpec and implement detect().
    """

    def __init__(self, board: BoardSpec):
        self.board = board

    @property
    def pattern_size(self):
        """Board size in the (width, height) form OpenCV expects."""
        return tuple(self.board.size)

    @abstractmethod
    def detect(self, frame: np.ndarray) -> DetectionResult:
        """Detect the target on a frame and draw the detection onto it.

        Args:
            frame: BGR image, annotated in place

        Returns:
            DetectionResult; found is False when the target is not visible
        """
        pass
