"""Capture, solve and preview commands."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import typer

from calib_capture.calibration_data import CalibrationData
from calib_capture.capture_config import CaptureConfig, get_default_config
from calib_capture.cli.main import app
from calib_capture.driver import OpenCVDisplay, iter_video_frames, run_capture_loop, run_preview_loop
from calib_capture.frame_processor import CalibProcessor, ShowProcessor
from calib_capture.solver import solve_calibration

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(levelname)s - %(message)s',
    )


def _parse_source(source: str) -> Union[int, str]:
    """Camera indices are given as digits, anything else is a file path or URL."""
    return int(source) if source.isdigit() else source


def build_config(config_file: Optional[Path], overrides: Dict[str, Any]) -> CaptureConfig:
    """
    Load the base configuration and apply command-line overrides.

    Args:
        config_file: Optional YAML file with a 'capture' section
        overrides: Field values given on the command line; None entries are ignored

    Returns:
        Validated CaptureConfig

    Raises:
        FileNotFoundError: If config_file does not exist
        ValueError: If the resulting configuration is invalid
    """
    base = CaptureConfig.from_yaml(str(config_file)) if config_file else get_default_config()
    merged = base.to_dict()
    merged.update({key: value for key, value in overrides.items() if value is not None})
    return CaptureConfig.from_dict(merged)


@app.command("capture")
def capture_command(
    config_file: Optional[Path] = typer.Option(None, "--config", help="YAML file with a 'capture' section"),
    source: str = typer.Option("0", help="Camera index or video file path"),
    template: Optional[str] = typer.Option(
        None, help="chessboard, charuco, acircles_grid or double_acircles_grid"
    ),
    board_width: Optional[int] = typer.Option(None, help="Points per row (ChArUco: squares along x)"),
    board_height: Optional[int] = typer.Option(None, help="Rows (ChArUco: squares along y)"),
    square_size: Optional[float] = typer.Option(None, help="Grid spacing in millimeters"),
    window: Optional[int] = typer.Option(None, help="Stability window in frames"),
    captures: Optional[int] = typer.Option(None, help="Number of samples to capture"),
    preview: bool = typer.Option(True, help="Show the undistorted preview after calibrating"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """
    Capture calibration samples, solve the camera model and preview the result.

    Hold the target still in front of the camera; a sample is taken once it
    has not moved for the whole stability window. Press 'q' or Esc to stop.

    Example:
        calib-capture capture --template acircles_grid --board-width 4
            --board-height 11 --square-size 16.3 --captures 10
    """
    _configure_logging(verbose)

    try:
        config = build_config(config_file, {
            "template": template,
            "board_width": board_width,
            "board_height": board_height,
            "square_size": square_size,
            "stability_window": window,
            "required_captures": captures,
        })
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    board = config.board_spec()
    data = CalibrationData()
    processor = CalibProcessor(
        data,
        board,
        stability_window=config.stability_window,
        required_count=config.required_captures,
    )

    display = OpenCVDisplay()
    try:
        try:
            run_capture_loop(iter_video_frames(_parse_source(source)), processor, display,
                             pause_ms=config.capture_pause_ms)
        except RuntimeError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)

        typer.echo(f"Captured {processor.captured_count}/{config.required_captures} sample(s)")
        if not processor.is_processed():
            typer.echo("Error: not enough samples captured to calibrate", err=True)
            raise typer.Exit(1)

        try:
            result = solve_calibration(data, board)
        except ValueError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)

        fx, fy = result.focal_lengths
        typer.echo(f"RMS reprojection error: {result.rms_error:.4f} pixels ({result.quality})")
        typer.echo(f"Focal length (fx, fy): ({fx:.2f}, {fy:.2f}) pixels")
        typer.echo(f"Camera matrix:\n{result.camera_matrix}")
        typer.echo(f"Distortion coefficients: {result.distortion_coefficients.ravel()}")

        if preview:
            run_preview_loop(iter_video_frames(_parse_source(source)), ShowProcessor(data), display)
    finally:
        display.close()
