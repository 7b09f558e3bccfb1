"""Calibration target detectors, one per TemplateType."""

from calib_capture.detection.charuco import CharucoBoardDetector, create_charuco_board
from calib_capture.detection.chessboard import ChessboardDetector
from calib_capture.detection.circles import (
    AsymmetricCirclesDetector,
    DoubleAsymmetricCirclesDetector,
    dual_grid_blob_params,
)
from calib_capture.detection.factory import DetectorFactory
from calib_capture.detection.interface import DetectionResult, TemplateDetector

__all__ = [
    "AsymmetricCirclesDetector",
    "CharucoBoardDetector",
    "ChessboardDetector",
    "create_charuco_board",
    "DetectionResult",
    "DetectorFactory",
    "DoubleAsymmetricCirclesDetector",
    "dual_grid_blob_params",
    "TemplateDetector",
]
