"""
Frame processors driven by the capture and preview loops.

Two processors share the FrameProcessor contract so the driver loop can treat
them alike:

    - CalibProcessor: detects the calibration target on each frame, waits for
      it to be held still over the stability window and records the accepted
      samples into CalibrationData.
    - ShowProcessor: renders an undistorted preview once CalibrationData holds
      solved camera parameters.

Processors never block. When a frame is captured, CalibProcessor exposes a
CaptureEvent through last_event and the driver decides how long to pause the
display so the operator can see the confirmation.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import cv2
import numpy as np

from calib_capture.calibration_data import CalibrationData
from calib_capture.detection import DetectionResult, DetectorFactory, TemplateDetector
from calib_capture.geometry import object_points_for
from calib_capture.stability import DEFAULT_STABILITY_WINDOW, StabilityFilter
from calib_capture.templates import BoardSpec, TemplateType
from calib_capture.types import Frames

logger = logging.getLogger(__name__)

VIDEO_TEXT_SIZE = 4
TEXT_FONT = cv2.FONT_HERSHEY_PLAIN
TEXT_THICKNESS = 2
CAPTURE_TEXT = "Frame captured"
UNDISTORTED_TEXT = "Undistorted view"


def put_bottom_right_text(frame: np.ndarray, text: str, color=(0, 255, 0)) -> None:
    """Draw large status text anchored near the bottom-right corner of frame."""
    (text_width, _), baseline = cv2.getTextSize(text, TEXT_FONT, VIDEO_TEXT_SIZE, TEXT_THICKNESS)
    origin = (frame.shape[1] - 2 * text_width - 10, frame.shape[0] - 2 * baseline - 10)
    cv2.putText(frame, text, origin, TEXT_FONT, VIDEO_TEXT_SIZE, color, TEXT_THICKNESS)


class CaptureState(Enum):
    """Observable state of a CalibProcessor."""

    SEARCHING = "searching"
    """Stability track not yet full."""

    STABILIZING = "stabilizing"
    """Track full, waiting for a low-motion frame."""

    DONE = "done"
    """Required number of samples captured."""


@dataclass(frozen=True)
class CaptureEvent:
    """Emitted on the frame where a sample was accepted.

    Attributes:
        capture_index: 1-based number of the accepted sample in this session
        point_count: Number of image points stored for the sample
    """

    capture_index: int
    point_count: int


class FrameProcessor(ABC):
    """Common contract of the processors fed by the driver loop."""

    @abstractmethod
    def process_frame(self, frame: np.ndarray) -> np.ndarray:
        """Consume one frame and return an annotated frame for display.

        The input frame is left untouched.
        """
        pass

    @abstractmethod
    def is_processed(self) -> bool:
        """True once the processor has met its completion criterion."""
        pass

    @abstractmethod
    def reset_state(self) -> None:
        """Clear transient progress, keeping accumulated CalibrationData."""
        pass


class CalibProcessor(FrameProcessor):
    """Stability-gated capture of calibration samples.

    Each frame goes through the detector for the board's template. Successful
    detections feed a StabilityFilter; when the target has stayed within the
    motion threshold over the whole window the detection is converted into
    object/image correspondences (or ChArUco corners and ids) and appended to
    the shared CalibrationData. The stability track is then cleared, so the
    next sample needs a fresh window.

    Attributes:
        data: Shared CalibrationData, written only by this processor while
            capture is running
        board: Target description
        stability: Motion filter over the last window + 1 detections
        captured_count: Samples accepted since construction or reset_state()
        required_count: Samples needed before is_processed() turns True
        current_points: Image points of the latest frame (empty on a miss)
        current_ids: ChArUco ids of the latest frame, None otherwise
        last_event: CaptureEvent for the latest frame, None if nothing captured
    """

    def __init__(
        self,
        data: CalibrationData,
        board: BoardSpec,
        stability_window: Frames = DEFAULT_STABILITY_WINDOW,
        required_count: int = 1,
        detector: Optional[TemplateDetector] = None,
    ):
        if required_count <= 0:
            raise ValueError(f"Required capture count must be positive, got {required_count}")

        self.data = data
        self.board = board
        self.stability = StabilityFilter(stability_window)
        self.required_count = required_count
        self.captured_count = 0
        self.detector = detector if detector is not None else DetectorFactory.create(board)

        # Regular geometry is fixed per board, so it is generated once
        if board.template is TemplateType.CHARUCO:
            self._object_points = None
        else:
            self._object_points = object_points_for(board)

        self.current_points = np.zeros((0, 1, 2), dtype=np.float32)
        self.current_ids: Optional[np.ndarray] = None
        self.last_event: Optional[CaptureEvent] = None

        logger.info(
            f"CalibProcessor ready: {board.template.value} {board.size[0]}x{board.size[1]}, "
            f"window {stability_window} frames, {required_count} capture(s) required"
        )

    @property
    def board_type(self) -> TemplateType:
        return self.board.template

    @property
    def board_size(self):
        return self.board.size

    @property
    def state(self) -> CaptureState:
        if self.is_processed():
            return CaptureState.DONE
        if self.stability.is_full():
            return CaptureState.STABILIZING
        return CaptureState.SEARCHING

    def process_frame(self, frame: np.ndarray) -> np.ndarray:
        frame_copy = frame.copy()
        self.last_event = None

        result = self.detector.detect(frame_copy)
        self.current_points = result.points
        self.current_ids = result.ids

        representative = result.representative if result.found else None
        if not result.found:
            logger.debug("Template not found on frame")

        if self.stability.update(representative, frame_copy.shape):
            self._save_frame_data(result, frame_copy)
            self.captured_count += 1
            self.last_event = CaptureEvent(
                capture_index=self.captured_count,
                point_count=len(result.points),
            )
            put_bottom_right_text(frame_copy, CAPTURE_TEXT)
            self.stability.reset()
            logger.info(
                f"Frame captured ({self.captured_count}/{self.required_count}), "
                f"{len(result.points)} points"
            )

        return frame_copy

    def _save_frame_data(self, result: DetectionResult, frame: np.ndarray) -> None:
        """Append the accepted detection to CalibrationData.

        Raises:
            RuntimeError: If the detection does not have the point count the
                board geometry implies
        """
        if self.board.template is TemplateType.CHARUCO:
            self.data.add_charuco_sample(result.points, result.ids)
            self.data.record_image_size(frame)
            return

        if len(result.points) != len(self._object_points):
            raise RuntimeError(
                f"{self.board.template.value} detection returned {len(result.points)} points, "
                f"board geometry defines {len(self._object_points)}"
            )
        self.data.add_correspondence(self._object_points.copy(), result.points)
        self.data.record_image_size(frame)

    def is_processed(self) -> bool:
        return self.captured_count >= self.required_count

    def reset_state(self) -> None:
        self.captured_count = 0
        self.stability.reset()
        self.last_event = None


class ShowProcessor(FrameProcessor):
    """Undistorted live preview from solved camera parameters.

    Reads CalibrationData only. Until parameters exist it marks the frame with
    a placeholder dot. The preview has no completion criterion and no state of
    its own.
    """

    def __init__(self, data: CalibrationData):
        self.data = data

    def process_frame(self, frame: np.ndarray) -> np.ndarray:
        if not self.data.has_parameters():
            placeholder = frame.copy()
            cv2.circle(placeholder, (100, 100), 10, (0, 255, 0), 10)
            return placeholder

        camera_matrix = self.data.camera_matrix
        dist_coeffs = self.data.distortion_coefficients
        height, width = frame.shape[:2]
        new_matrix, _ = cv2.getOptimalNewCameraMatrix(
            camera_matrix, dist_coeffs, (width, height), 1.0, (width, height)
        )
        undistorted = cv2.undistort(frame, camera_matrix, dist_coeffs, None, new_matrix)
        put_bottom_right_text(undistorted, UNDISTORTED_TEXT)

        message = "Fx = %d Fy = %d RMS = %f" % (
            int(camera_matrix[0, 0]),
            int(camera_matrix[1, 1]),
            self.data.reprojection_error,
        )
        (_, text_height), _ = cv2.getTextSize(message, TEXT_FONT, VIDEO_TEXT_SIZE - 1, TEXT_THICKNESS)
        cv2.putText(undistorted, message, (20, 2 * text_height), TEXT_FONT,
                    VIDEO_TEXT_SIZE, (0, 0, 255), TEXT_THICKNESS)
        return undistorted

    def is_processed(self) -> bool:
        return False

    def reset_state(self) -> None:
        pass
