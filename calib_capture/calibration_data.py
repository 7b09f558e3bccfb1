"""
Shared accumulator for calibration samples and solved camera parameters.

A CalibrationData instance is shared by reference between the capture
pipeline, the calibration solver and the preview renderer. Access follows a
phase discipline rather than locking:

    1. capture: a single CalibProcessor appends samples
    2. solve: the solver reads samples and writes camera parameters
    3. preview: ShowProcessor instances read camera parameters

No two writers run at the same time and readers only run once the writing
phase is over.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


def _empty_matrix() -> np.ndarray:
    return np.zeros((0, 0), dtype=np.float64)


@dataclass
class CalibrationData:
    """Per-session table of accepted correspondences and camera parameters.

    Attributes:
        image_points: One (N, 1, 2) float32 array of detected 2-D points per
            accepted frame
        object_points: One (N, 3) float32 array of target-space 3-D points per
            accepted frame, parallel to image_points
        charuco_corners: Interpolated ChArUco corners per accepted frame
        charuco_ids: Board-relative corner ids, parallel to charuco_corners
        camera_matrix: 3x3 intrinsic matrix, empty until solved
        distortion_coefficients: Distortion vector, empty until solved
        reprojection_error: RMS reprojection error of the solve, 0.0 until solved
        image_size: (width, height) of the frames the samples came from
    """

    image_points: List[np.ndarray] = field(default_factory=list)
    object_points: List[np.ndarray] = field(default_factory=list)
    charuco_corners: List[np.ndarray] = field(default_factory=list)
    charuco_ids: List[np.ndarray] = field(default_factory=list)
    camera_matrix: np.ndarray = field(default_factory=_empty_matrix)
    distortion_coefficients: np.ndarray = field(default_factory=_empty_matrix)
    reprojection_error: float = 0.0
    image_size: Optional[Tuple[int, int]] = None

    @property
    def sample_count(self) -> int:
        """Number of accepted samples in whichever table is populated."""
        return len(self.object_points) + len(self.charuco_corners)

    def record_image_size(self, frame: np.ndarray) -> None:
        """Remember the frame size of the first accepted sample."""
        height, width = frame.shape[:2]
        if self.image_size is None:
            self.image_size = (width, height)
        elif self.image_size != (width, height):
            logger.warning(
                f"Frame size changed from {self.image_size[0]}x{self.image_size[1]} "
                f"to {width}x{height} during capture"
            )

    def add_correspondence(self, object_points: np.ndarray, image_points: np.ndarray) -> None:
        """Append one (object points, image points) pair.

        Raises:
            RuntimeError: If the two point sets have different cardinality
        """
        object_points = np.asarray(object_points, dtype=np.float32).reshape(-1, 3)
        image_points = np.asarray(image_points, dtype=np.float32).reshape(-1, 1, 2)
        if len(object_points) != len(image_points):
            raise RuntimeError(
                f"Object/image point count mismatch: {len(object_points)} object points "
                f"for {len(image_points)} image points"
            )
        self.object_points.append(object_points)
        self.image_points.append(image_points)

    def add_charuco_sample(self, corners: np.ndarray, ids: np.ndarray) -> None:
        """Append one set of interpolated ChArUco corners with their ids.

        Raises:
            RuntimeError: If corners and ids have different cardinality
        """
        corners = np.asarray(corners, dtype=np.float32).reshape(-1, 1, 2)
        ids = np.asarray(ids, dtype=np.int32).reshape(-1, 1)
        if len(corners) != len(ids):
            raise RuntimeError(
                f"ChArUco corner/id count mismatch: {len(corners)} corners for {len(ids)} ids"
            )
        self.charuco_corners.append(corners)
        self.charuco_ids.append(ids)

    def has_parameters(self) -> bool:
        """True once the solver has written a usable camera matrix and distortion vector."""
        return (
            self.camera_matrix.size > 0
            and self.distortion_coefficients.size > 0
            and bool(np.any(self.camera_matrix))
        )

    def set_parameters(
        self,
        camera_matrix: np.ndarray,
        distortion_coefficients: np.ndarray,
        reprojection_error: float,
    ) -> None:
        """Store solved camera parameters."""
        camera_matrix = np.asarray(camera_matrix, dtype=np.float64)
        if camera_matrix.shape != (3, 3):
            raise ValueError(f"Camera matrix must be 3x3, got shape {camera_matrix.shape}")
        self.camera_matrix = camera_matrix
        self.distortion_coefficients = np.asarray(distortion_coefficients, dtype=np.float64).reshape(1, -1)
        self.reprojection_error = float(reprojection_error)
