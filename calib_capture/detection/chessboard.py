"""Checkerboard corner detection with sub-pixel refinement."""

import cv2
import numpy as np

from calib_capture.detection.interface import DetectionResult, TemplateDetector

CHESSBOARD_FLAGS = cv2.CALIB_CB_ADAPTIVE_THRESH | cv2.CALIB_CB_NORMALIZE_IMAGE | cv2.CALIB_CB_FAST_CHECK

# Sub-pixel refinement window and stop criteria
SUBPIX_WINDOW = (11, 11)
SUBPIX_ZERO_ZONE = (-1, -1)
SUBPIX_CRITERIA = (cv2.TERM_CRITERIA_EPS + cv2.TERM_CRITERIA_COUNT, 30, 0.1)


class ChessboardDetector(TemplateDetector):
    """Finds the inner corners of a planar checkerboard.

    The representative point is the first detected corner.
    """

    def detect(self, frame: np.ndarray) -> DetectionResult:
        found, corners = cv2.findChessboardCorners(frame, self.pattern_size, None, CHESSBOARD_FLAGS)
        if not found or corners is None:
            return DetectionResult.missed()

        gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY) if frame.ndim == 3 else frame
        corners = cv2.cornerSubPix(gray, corners, SUBPIX_WINDOW, SUBPIX_ZERO_ZONE, SUBPIX_CRITERIA)
        cv2.drawChessboardCorners(frame, self.pattern_size, corners, True)
        return DetectionResult.from_points(corners)
