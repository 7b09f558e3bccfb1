"""
Object-space geometry of the calibration targets.

All targets lie on the z = 0 plane. Points are generated row-major (rows i,
columns j) so they line up with the order in which OpenCV reports detections.
Units are those of the board spacing, normally millimeters.
"""

from typing import Callable, Dict

import numpy as np

from calib_capture.templates import BoardSpec, TemplateType


def chessboard_points(board: BoardSpec) -> np.ndarray:
    """Regular grid: point (j, i) at (j*s, i*s, 0)."""
    width, height = board.size
    s = board.square_size
    return np.array(
        [(j * s, i * s, 0.0) for i in range(height) for j in range(width)],
        dtype=np.float32,
    )


def asymmetric_grid_points(board: BoardSpec) -> np.ndarray:
    """Staggered grid: point (j, i) at ((2j + i mod 2)*s, i*s, 0)."""
    width, height = board.size
    s = board.square_size
    return np.array(
        [((2 * j + i % 2) * s, i * s, 0.0) for i in range(height) for j in range(width)],
        dtype=np.float32,
    )


def grid_width(board: BoardSpec) -> float:
    """Horizontal extent of one asymmetric grid, first to last column."""
    width, _ = board.size
    return (2 * (width - 1) + 1) * board.square_size


def double_grid_center(board: BoardSpec):
    """Centre of the dual-grid pattern in single-grid coordinates."""
    _, height = board.size
    center_x = grid_width(board) + board.grid_gap / 2
    center_y = (height - 1) * board.square_size / 2
    return center_x, center_y


def double_asymmetric_grid_points(board: BoardSpec) -> np.ndarray:
    """Two staggered grids separated by board.grid_gap, centred on the origin.

    The light grid comes first, then the dark grid, matching the order in
    which the detector concatenates the two point sets. Coordinates are
    negated relative to the single grid to follow the mounting convention of
    the dual board.
    """
    width, height = board.size
    s = board.square_size
    center_x, center_y = double_grid_center(board)
    shift = board.grid_gap + grid_width(board)

    light = [
        (-((2 * j + i % 2) * s + shift - center_x), -(i * s - center_y), 0.0)
        for i in range(height) for j in range(width)
    ]
    dark = [
        (-((2 * j + i % 2) * s - center_x), -(i * s - center_y), 0.0)
        for i in range(height) for j in range(width)
    ]
    return np.array(light + dark, dtype=np.float32)


_GENERATORS: Dict[TemplateType, Callable[[BoardSpec], np.ndarray]] = {
    TemplateType.CHESSBOARD: chessboard_points,
    TemplateType.ACIRCLES_GRID: asymmetric_grid_points,
    TemplateType.DOUBLE_ACIRCLES_GRID: double_asymmetric_grid_points,
}


def object_points_for(board: BoardSpec) -> np.ndarray:
    """Generate the (N, 3) object points for a board.

    Raises:
        ValueError: For ChArUco boards, whose corners are identified
            individually and have no fixed grid geometry
    """
    if board.template not in _GENERATORS:
        raise ValueError(f"No regular geometry for template '{board.template.value}'")
    return _GENERATORS[board.template](board)
