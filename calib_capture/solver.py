"""
Camera calibration solve over the samples accumulated during capture.

Runs OpenCV's calibrateCamera on the correspondences stored in
CalibrationData and writes the camera matrix, distortion coefficients and RMS
reprojection error back into it. ChArUco samples are first matched against
the board layout to recover their object points.
"""

import logging
from dataclasses import dataclass

import cv2
import numpy as np

from calib_capture.calibration_data import CalibrationData
from calib_capture.detection.charuco import create_charuco_board
from calib_capture.templates import BoardSpec, TemplateType

logger = logging.getLogger(__name__)

# Minimum identified corners for a ChArUco sample to constrain a pose
MIN_CHARUCO_CORNERS = 4

# RMS reprojection error thresholds (pixels) for quality labels
QUALITY_THRESHOLDS = (
    (0.5, "Excellent"),
    (1.0, "Good"),
    (2.0, "Acceptable"),
)


@dataclass
class CalibrationResult:
    """Outcome of a calibration solve.

    Attributes:
        camera_matrix: 3x3 intrinsic matrix
        distortion_coefficients: Distortion vector [k1, k2, p1, p2, k3]
        rms_error: RMS reprojection error in pixels
        sample_count: Number of samples used by the solve
        quality: Human-readable label derived from rms_error
    """

    camera_matrix: np.ndarray
    distortion_coefficients: np.ndarray
    rms_error: float
    sample_count: int
    quality: str

    @property
    def focal_lengths(self):
        return float(self.camera_matrix[0, 0]), float(self.camera_matrix[1, 1])


def assess_quality(rms_error: float) -> str:
    for threshold, label in QUALITY_THRESHOLDS:
        if rms_error < threshold:
            return label
    return "Poor - consider recalibrating"


def _charuco_correspondences(data: CalibrationData, board: BoardSpec):
    charuco_board = create_charuco_board(board)
    object_points, image_points = [], []
    for index, (corners, ids) in enumerate(zip(data.charuco_corners, data.charuco_ids)):
        obj, img = charuco_board.matchImagePoints(corners, ids)
        if obj is None or len(obj) < MIN_CHARUCO_CORNERS:
            logger.warning(f"Skipping ChArUco sample {index}: too few matched corners")
            continue
        object_points.append(obj.astype(np.float32))
        image_points.append(img.astype(np.float32))
    return object_points, image_points


def solve_calibration(data: CalibrationData, board: BoardSpec) -> CalibrationResult:
    """Calibrate the camera from the captured samples.

    Args:
        data: CalibrationData filled by a capture session; receives the result
        board: Board the samples were captured with

    Returns:
        CalibrationResult with the solved parameters

    Raises:
        ValueError: If there are no usable samples or the image size is unknown
    """
    if data.image_size is None:
        raise ValueError("Image size unknown: no samples have been captured")

    if board.template is TemplateType.CHARUCO:
        object_points, image_points = _charuco_correspondences(data, board)
    else:
        object_points, image_points = data.object_points, data.image_points

    if not object_points:
        raise ValueError("No usable calibration samples")

    logger.info(
        f"Calibrating from {len(object_points)} sample(s), "
        f"image size {data.image_size[0]}x{data.image_size[1]}"
    )
    rms_error, camera_matrix, dist_coeffs, _, _ = cv2.calibrateCamera(
        object_points, image_points, data.image_size, None, None
    )

    data.set_parameters(camera_matrix, dist_coeffs, rms_error)
    quality = assess_quality(rms_error)

    logger.info(
        f"Calibration solved: fx={camera_matrix[0, 0]:.2f}, fy={camera_matrix[1, 1]:.2f}, "
        f"RMS={rms_error:.4f}px ({quality})"
    )
    if rms_error >= QUALITY_THRESHOLDS[-1][0]:
        logger.warning(f"High reprojection error {rms_error:.4f}px, consider recalibrating")

    return CalibrationResult(
        camera_matrix=data.camera_matrix,
        distortion_coefficients=data.distortion_coefficients,
        rms_error=float(rms_error),
        sample_count=len(object_points),
        quality=quality,
    )
