"""
Calibration target definitions.

Defines the closed set of calibration targets the capture pipeline understands
and the board description shared by detectors and geometry generation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from calib_capture.types import Millimeters


class TemplateType(Enum):
    """Enumeration of supported calibration targets."""

    CHESSBOARD = "chessboard"
    """Planar checkerboard; detections are the inner corners of the grid."""

    CHARUCO = "charuco"
    """Checkerboard with embedded ArUco markers; detections are sparse,
    identified corners interpolated from the markers."""

    ACIRCLES_GRID = "acircles_grid"
    """Asymmetric (staggered) grid of circles."""

    DOUBLE_ACIRCLES_GRID = "double_acircles_grid"
    """Two asymmetric circle grids mounted side by side: a light grid and a
    complementary dark grid found on the tonally inverted frame."""

    @classmethod
    def parse(cls, name: str) -> 'TemplateType':
        """Parse a template name into a TemplateType.

        Raises:
            ValueError: If name is not a known template
        """
        try:
            return cls(name)
        except ValueError:
            valid = [t.value for t in cls]
            raise ValueError(
                f"Invalid template '{name}'. Must be one of: {', '.join(valid)}"
            ) from None


@dataclass(frozen=True)
class BoardSpec:
    """Physical description of a calibration target.

    Attributes:
        template: Target type
        size: (width, height) in points per row and rows; for ChArUco, the
            number of squares along each side
        square_size: Grid spacing in millimeters
        grid_gap: Distance between the two grids of a dual circle grid (mm)
        charuco_square_length: ChArUco square side length
        charuco_marker_length: ChArUco marker side length
        charuco_dictionary: Name of the cv2.aruco predefined dictionary
    """

    template: TemplateType
    size: Tuple[int, int]
    square_size: Millimeters = Millimeters(16.3)
    grid_gap: Millimeters = Millimeters(295.0)
    charuco_square_length: float = 200.0
    charuco_marker_length: float = 100.0
    charuco_dictionary: str = "DICT_4X4_50"

    def __post_init__(self):
        """Fail fast on malformed boards."""
        if len(self.size) != 2:
            raise ValueError(f"Board size must be (width, height), got {self.size}")
        width, height = self.size
        if width <= 0 or height <= 0:
            raise ValueError(f"Board dimensions must be positive, got {width}x{height}")
        if self.square_size <= 0:
            raise ValueError(f"Square size must be positive, got {self.square_size}")
        if self.grid_gap <= 0:
            raise ValueError(f"Grid gap must be positive, got {self.grid_gap}")
        if self.charuco_marker_length >= self.charuco_square_length:
            raise ValueError(
                f"ChArUco marker length ({self.charuco_marker_length}) must be smaller "
                f"than the square length ({self.charuco_square_length})"
            )

    @property
    def point_count(self) -> int:
        """Number of image points one detection yields (0 for ChArUco, which is sparse)."""
        width, height = self.size
        if self.template is TemplateType.CHARUCO:
            return 0
        if self.template is TemplateType.DOUBLE_ACIRCLES_GRID:
            return 2 * width * height
        return width * height
