"""
Interactive display loop around the frame processors.

The loop owns everything the processors leave out: reading frames, showing
the annotated result, key polling and the short pause that lets the operator
see a capture confirmation.
"""

import logging
from typing import Iterable, Iterator, Protocol, Union

import cv2
import numpy as np

from calib_capture.frame_processor import CalibProcessor, FrameProcessor
from calib_capture.types import Milliseconds

logger = logging.getLogger(__name__)

MAIN_WINDOW_NAME = "Calibration"
QUIT_KEYS = (ord('q'), 27)


class DisplaySink(Protocol):
    """Where annotated frames go."""

    def show(self, frame: np.ndarray) -> None:
        ...

    def pause(self, duration_ms: int) -> None:
        ...

    def poll_key(self) -> int:
        """Return the pressed key code, or -1 if none."""
        ...


class OpenCVDisplay:
    """DisplaySink backed by a HighGUI window."""

    def __init__(self, window_name: str = MAIN_WINDOW_NAME):
        self.window_name = window_name
        cv2.namedWindow(self.window_name, cv2.WINDOW_NORMAL)

    def show(self, frame: np.ndarray) -> None:
        cv2.imshow(self.window_name, frame)

    def pause(self, duration_ms: int) -> None:
        cv2.waitKey(max(1, duration_ms))

    def poll_key(self) -> int:
        key = cv2.waitKey(1)
        return key & 0xFF if key >= 0 else -1

    def close(self) -> None:
        cv2.destroyWindow(self.window_name)


def iter_video_frames(source: Union[int, str]) -> Iterator[np.ndarray]:
    """Yield frames from a camera index or video file until the stream ends.

    Raises:
        RuntimeError: If the source cannot be opened
    """
    cap = cv2.VideoCapture(source)
    if not cap.isOpened():
        raise RuntimeError(f"Could not open video source {source!r}")

    try:
        while True:
            ok, frame = cap.read()
            if not ok:
                logger.info("Video source exhausted")
                return
            yield frame
    finally:
        cap.release()


def run_capture_loop(
    frames: Iterable[np.ndarray],
    processor: CalibProcessor,
    display: DisplaySink,
    pause_ms: Milliseconds = Milliseconds(300),
) -> int:
    """Feed frames to a capture processor until it is done.

    Stops when the processor reports completion, the frames run out or a
    quit key is pressed.

    Returns:
        Number of frames processed
    """
    processed = 0
    for frame in frames:
        annotated = processor.process_frame(frame)
        processed += 1
        display.show(annotated)

        if processor.last_event is not None:
            display.pause(pause_ms)

        if processor.is_processed():
            logger.info(f"Capture complete after {processed} frames")
            break

        if display.poll_key() in QUIT_KEYS:
            logger.info("Capture interrupted by user")
            break

    return processed


def run_preview_loop(
    frames: Iterable[np.ndarray],
    processor: FrameProcessor,
    display: DisplaySink,
) -> int:
    """Show processed frames until the source ends or a quit key is pressed.

    Returns:
        Number of frames processed
    """
    processed = 0
    for frame in frames:
        display.show(processor.process_frame(frame))
        processed += 1
        if processor.is_processed() or display.poll_key() in QUIT_KEYS:
            break
    return processed
