"""
Interactive camera calibration capture.

This package drives calibration sample capture from a live video stream: each
frame is searched for a known calibration target, the target must be held
still over a stability window, and accepted detections are turned into 3-D/2-D
correspondences for the calibration solver. Once parameters are solved a
preview processor renders the undistorted view.

Supported targets:
    - Planar checkerboard
    - ChArUco board
    - Asymmetric circle grid
    - Dual (light/dark) asymmetric circle grid

Example Usage:
    >>> from calib_capture import (
    ...     BoardSpec, CalibrationData, CalibProcessor, ShowProcessor, TemplateType,
    ...     solve_calibration,
    ... )
    >>>
    >>> data = CalibrationData()
    >>> board = BoardSpec(TemplateType.ACIRCLES_GRID, (4, 11))
    >>> capture = CalibProcessor(data, board, stability_window=30, required_count=10)
    >>> for frame in frames:
    ...     annotated = capture.process_frame(frame)
    ...     if capture.is_processed():
    ...         break
    >>>
    >>> result = solve_calibration(data, board)
    >>> preview = ShowProcessor(data)

Available Classes:
    Data model:
        - CalibrationData: Shared accumulator of samples and camera parameters
        - TemplateType: Enum of supported targets
        - BoardSpec: Physical description of a target

    Processing:
        - FrameProcessor: Contract shared by the processors
        - CalibProcessor: Stability-gated sample capture
        - ShowProcessor: Undistorted preview
        - DetectorFactory: Creates the detector for a target
"""

from calib_capture.calibration_data import CalibrationData
from calib_capture.capture_config import CaptureConfig, get_default_config
from calib_capture.detection import DetectionResult, DetectorFactory, TemplateDetector
from calib_capture.frame_processor import (
    CalibProcessor,
    CaptureEvent,
    CaptureState,
    FrameProcessor,
    ShowProcessor,
)
from calib_capture.solver import CalibrationResult, solve_calibration
from calib_capture.stability import StabilityFilter, TemplateTrack
from calib_capture.templates import BoardSpec, TemplateType

__all__ = [
    # Data model
    'BoardSpec',
    'CalibrationData',
    'TemplateType',

    # Detection
    'DetectionResult',
    'DetectorFactory',
    'TemplateDetector',

    # Processing
    'CalibProcessor',
    'CaptureEvent',
    'CaptureState',
    'FrameProcessor',
    'ShowProcessor',
    'StabilityFilter',
    'TemplateTrack',

    # Configuration and solving
    'CaptureConfig',
    'CalibrationResult',
    'get_default_config',
    'solve_calibration',
]

__version__ = '0.1.0'
__description__ = 'Stability-gated interactive camera calibration capture'
