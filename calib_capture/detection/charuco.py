"""
ChArUco board detection.

Markers are detected first, refined against the known board layout, and the
board corners are then interpolated from the marker detections. The result is
a sparse set of identified corners rather than a full grid.
"""

import logging

import cv2
import numpy as np

from calib_capture.detection.interface import DetectionResult, TemplateDetector
from calib_capture.templates import BoardSpec

logger = logging.getLogger(__name__)


def aruco_dictionary(name: str):
    """Look up a predefined ArUco dictionary by its cv2.aruco constant name.

    Raises:
        ValueError: If the name is not a cv2.aruco dictionary constant
    """
    dictionary_id = getattr(cv2.aruco, name, None)
    if not name.startswith("DICT_") or dictionary_id is None:
        raise ValueError(f"Unknown ArUco dictionary '{name}'")
    return cv2.aruco.getPredefinedDictionary(dictionary_id)


def create_charuco_board(board: BoardSpec) -> cv2.aruco.CharucoBoard:
    """Build the OpenCV board matching a BoardSpec (size counts squares)."""
    return cv2.aruco.CharucoBoard(
        tuple(board.size),
        board.charuco_square_length,
        board.charuco_marker_length,
        aruco_dictionary(board.charuco_dictionary),
    )


class CharucoBoardDetector(TemplateDetector):
    """Detects a ChArUco board; the representative point is the corner centroid."""

    def __init__(self, board: BoardSpec):
        super().__init__(board)
        self.charuco_board = create_charuco_board(board)
        dictionary = self.charuco_board.getDictionary()
        self.marker_detector = cv2.aruco.ArucoDetector(dictionary, cv2.aruco.DetectorParameters())
        self.corner_detector = cv2.aruco.CharucoDetector(self.charuco_board)

    def detect(self, frame: np.ndarray) -> DetectionResult:
        markers, marker_ids, rejected = self.marker_detector.detectMarkers(frame)
        if marker_ids is None or len(marker_ids) == 0:
            return DetectionResult.missed()

        markers, marker_ids, rejected, _ = self.marker_detector.refineDetectedMarkers(
            frame, self.charuco_board, markers, marker_ids, rejected
        )
        cv2.aruco.drawDetectedMarkers(frame, markers)

        corners, corner_ids, _, _ = self.corner_detector.detectBoard(
            frame, markerCorners=markers, markerIds=marker_ids
        )
        if corners is None or corner_ids is None or len(corners) == 0:
            logger.debug(f"{len(marker_ids)} markers found but no corners interpolated")
            return DetectionResult.missed()

        # Normalized to (N, 1, 2) / (N, 1); newer OpenCV returns flat arrays
        result = DetectionResult.from_points(corners, ids=corner_ids, use_centroid=True)
        cv2.aruco.drawDetectedCornersCharuco(frame, result.points, result.ids)
        return result
