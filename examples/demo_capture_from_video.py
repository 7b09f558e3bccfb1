#!/usr/bin/env python3
"""
Demo: capture calibration samples from a recorded video without a display.

Usage:
    python examples/demo_capture_from_video.py board.mp4 examples/capture_config.yaml
"""

import logging
import sys

from calib_capture import CalibProcessor, CalibrationData, CaptureConfig, solve_calibration
from calib_capture.driver import iter_video_frames

logging.basicConfig(level=logging.INFO, format='%(levelname)s - %(message)s')


def main(video_path: str, config_path: str) -> int:
    config = CaptureConfig.from_yaml(config_path)
    board = config.board_spec()
    data = CalibrationData()
    processor = CalibProcessor(data, board, config.stability_window, config.required_captures)

    for frame in iter_video_frames(video_path):
        processor.process_frame(frame)
        if processor.is_processed():
            break

    print(f"Captured {processor.captured_count} sample(s)")
    if data.sample_count == 0:
        return 1

    result = solve_calibration(data, board)
    print(f"RMS reprojection error: {result.rms_error:.4f} px ({result.quality})")
    print(f"Camera matrix:\n{result.camera_matrix}")
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(2)
    sys.exit(main(sys.argv[1], sys.argv[2]))
