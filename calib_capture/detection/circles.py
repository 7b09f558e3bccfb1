"""
Asymmetric circle grid detection.

Covers the single asymmetric grid and the dual board, where a light grid and
a complementary dark grid are mounted side by side. The dark grid is found by
running the same search on the tonally inverted frame.
"""

import logging

import cv2
import numpy as np

from calib_capture.detection.interface import DetectionResult, TemplateDetector

logger = logging.getLogger(__name__)


def dual_grid_blob_params() -> cv2.SimpleBlobDetector_Params:
    """Blob detector settings tuned for the printed dual circle board."""
    params = cv2.SimpleBlobDetector_Params()

    params.thresholdStep = 40
    params.minThreshold = 20
    params.maxThreshold = 500
    params.minRepeatability = 2
    params.minDistBetweenBlobs = 5

    params.filterByColor = True
    params.blobColor = 0

    params.filterByArea = True
    params.minArea = 5
    params.maxArea = 5000

    params.filterByCircularity = False
    params.minCircularity = 0.8

    params.filterByInertia = True
    params.minInertiaRatio = 0.1

    params.filterByConvexity = True
    params.minConvexity = 0.8

    return params


class AsymmetricCirclesDetector(TemplateDetector):
    """Finds a staggered circle grid; the representative point is the first grid point."""

    def detect(self, frame: np.ndarray) -> DetectionResult:
        found, centers = cv2.findCirclesGrid(frame, self.pattern_size, flags=cv2.CALIB_CB_ASYMMETRIC_GRID)
        if not found or centers is None:
            return DetectionResult.missed()

        cv2.drawChessboardCorners(frame, self.pattern_size, centers, True)
        return DetectionResult.from_points(centers)


class DoubleAsymmetricCirclesDetector(TemplateDetector):
    """Finds both grids of a dual circle board.

    Both grids must be found or the frame is rejected. Light grid points come
    first in the result, followed by the dark grid points.
    """

    def __init__(self, board):
        super().__init__(board)
        self.blob_detector = cv2.SimpleBlobDetector_create(dual_grid_blob_params())

    def detect(self, frame: np.ndarray) -> DetectionResult:
        found_light, light = cv2.findCirclesGrid(
            frame, self.pattern_size, flags=cv2.CALIB_CB_ASYMMETRIC_GRID, blobDetector=self.blob_detector
        )
        if not found_light or light is None:
            return DetectionResult.missed()

        inverted = cv2.bitwise_not(frame)
        found_dark, dark = cv2.findCirclesGrid(
            inverted, self.pattern_size, flags=cv2.CALIB_CB_ASYMMETRIC_GRID, blobDetector=self.blob_detector
        )
        if not found_dark or dark is None:
            logger.debug("Light grid found but dark grid missing, rejecting frame")
            return DetectionResult.missed()

        cv2.drawChessboardCorners(frame, self.pattern_size, light, True)
        cv2.drawChessboardCorners(frame, self.pattern_size, dark, True)
        return DetectionResult.from_points(np.concatenate([light, dark], axis=0))
