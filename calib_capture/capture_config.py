"""
Configuration for calibration capture sessions.

Supports loading from YAML files with a top-level 'capture' section:

    capture:
      template: acircles_grid
      board_width: 4
      board_height: 11
      square_size: 16.3
      stability_window: 30
      required_captures: 1
"""

import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict

import yaml

from calib_capture.templates import BoardSpec, TemplateType
from calib_capture.types import Frames, Millimeters, Milliseconds

logger = logging.getLogger(__name__)


@dataclass
class CaptureConfig:
    """Configuration consumed when building a capture session.

    Attributes:
        template: Calibration target type
        board_width: Points per row (ChArUco: squares along x)
        board_height: Rows (ChArUco: squares along y)
        square_size: Grid spacing in millimeters
        grid_gap: Gap between the two grids of a dual circle board (mm)
        stability_window: Frames the target must stay still before capture
        required_captures: Samples to accumulate before capture is complete
        charuco_square_length: ChArUco square side length
        charuco_marker_length: ChArUco marker side length
        charuco_dictionary: cv2.aruco predefined dictionary name
        capture_pause_ms: Display pause after each capture
    """

    template: TemplateType = TemplateType.CHESSBOARD
    board_width: int = 9
    board_height: int = 6
    square_size: Millimeters = Millimeters(16.3)
    grid_gap: Millimeters = Millimeters(295.0)
    stability_window: Frames = Frames(30)
    required_captures: int = 1
    charuco_square_length: float = 200.0
    charuco_marker_length: float = 100.0
    charuco_dictionary: str = "DICT_4X4_50"
    capture_pause_ms: Milliseconds = Milliseconds(300)

    def __post_init__(self):
        if isinstance(self.template, str):
            self.template = TemplateType.parse(self.template)
        self.validate()

    def validate(self) -> None:
        """Check field ranges.

        Raises:
            ValueError: Naming the first invalid field
        """
        positive_ints = ("board_width", "board_height", "stability_window", "required_captures")
        for name in positive_ints:
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValueError(f"'{name}' must be a positive integer, got {value!r}")

        for name in ("square_size", "grid_gap", "charuco_square_length", "charuco_marker_length"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or value <= 0:
                raise ValueError(f"'{name}' must be a positive number, got {value!r}")

        if self.charuco_marker_length >= self.charuco_square_length:
            raise ValueError(
                f"'charuco_marker_length' ({self.charuco_marker_length}) must be smaller "
                f"than 'charuco_square_length' ({self.charuco_square_length})"
            )

        if not isinstance(self.capture_pause_ms, int) or self.capture_pause_ms < 0:
            raise ValueError(f"'capture_pause_ms' must be a non-negative integer, got {self.capture_pause_ms!r}")

    def board_spec(self) -> BoardSpec:
        """Board description for detectors and geometry."""
        return BoardSpec(
            template=self.template,
            size=(self.board_width, self.board_height),
            square_size=Millimeters(float(self.square_size)),
            grid_gap=Millimeters(float(self.grid_gap)),
            charuco_square_length=float(self.charuco_square_length),
            charuco_marker_length=float(self.charuco_marker_length),
            charuco_dictionary=self.charuco_dictionary,
        )

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'CaptureConfig':
        """Create configuration from a dictionary.

        Unknown keys are rejected so typos do not silently fall back to defaults.

        Raises:
            ValueError: If configuration is invalid
        """
        if not isinstance(config, dict):
            raise ValueError(f"Configuration must be a dictionary, got {type(config)}")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config) - known)
        if unknown:
            raise ValueError(
                f"Unknown configuration keys: {', '.join(unknown)}. "
                f"Valid keys: {', '.join(sorted(known))}"
            )

        return cls(**config)

    @classmethod
    def from_yaml(cls, path: str) -> 'CaptureConfig':
        """Load configuration from a YAML file.

        Raises:
            FileNotFoundError: If configuration file does not exist
            ValueError: If the file is malformed, empty or lacks a 'capture' section
        """
        config_path = Path(path)

        if not config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {path}\n"
                f"Please create a configuration file or use get_default_config()"
            )

        try:
            with open(config_path, 'r') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML configuration file: {e}") from e

        if not data:
            raise ValueError(
                f"Configuration file is empty: {path}\n"
                f"Expected a 'capture' section"
            )

        if 'capture' not in data:
            raise ValueError(
                f"Configuration file missing 'capture' section: {path}\n"
                f"Expected structure: capture:\n  template: ...\n  ..."
            )

        logger.info(f"Loaded capture configuration from {path}")
        return cls.from_dict(data['capture'])

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['template'] = self.template.value
        return data


def get_default_config() -> CaptureConfig:
    """Default configuration: 9x6 checkerboard, 30 frame window, one capture."""
    return CaptureConfig()
