"""Command-line interface for calibration capture."""

from calib_capture.cli.main import app

__all__ = ["app"]
