"""
Factory for creating target detectors from a board description.

The factory keeps a registry mapping TemplateType to detector classes. Adding
a calibration target means writing a TemplateDetector subclass and registering
it here.
"""

import logging
from typing import Dict, Type

from calib_capture.detection.charuco import CharucoBoardDetector
from calib_capture.detection.chessboard import ChessboardDetector
from calib_capture.detection.circles import AsymmetricCirclesDetector, DoubleAsymmetricCirclesDetector
from calib_capture.detection.interface import TemplateDetector
from calib_capture.templates import BoardSpec, TemplateType

logger = logging.getLogger(__name__)


class DetectorFactory:
    """Factory for creating target detectors.

    Example:
        >>> board = BoardSpec(TemplateType.CHESSBOARD, (9, 6))
        >>> detector = DetectorFactory.create(board)
        >>>
        >>> # Register a custom detector
        >>> DetectorFactory.register(TemplateType.CHESSBOARD, MyChessboardDetector)

    Class Attributes:
        _registry: Dictionary mapping TemplateType to detector classes
    """

    _registry: Dict[TemplateType, Type[TemplateDetector]] = {
        TemplateType.CHESSBOARD: ChessboardDetector,
        TemplateType.CHARUCO: CharucoBoardDetector,
        TemplateType.ACIRCLES_GRID: AsymmetricCirclesDetector,
        TemplateType.DOUBLE_ACIRCLES_GRID: DoubleAsymmetricCirclesDetector,
    }

    @classmethod
    def create(cls, board: BoardSpec) -> TemplateDetector:
        """Create the detector registered for board.template.

        Raises:
            ValueError: If no detector is registered for the template
        """
        if board.template not in cls._registry:
            registered = ', '.join(t.value for t in cls._registry.keys())
            raise ValueError(
                f"Template '{board.template.value}' not registered. "
                f"Available templates: {registered}"
            )

        detector_class = cls._registry[board.template]
        detector = detector_class(board)
        logger.debug(
            f"Created {board.template.value} detector "
            f"(class: {detector_class.__name__}, board: {board.size[0]}x{board.size[1]})"
        )
        return detector

    @classmethod
    def register(cls, template: TemplateType, detector_class: Type[TemplateDetector]) -> None:
        """Register (or replace) the detector class for a template.

        Raises:
            TypeError: If detector_class is not a TemplateDetector subclass
        """
        if not (isinstance(detector_class, type) and issubclass(detector_class, TemplateDetector)):
            raise TypeError(
                f"Detector class must be a subclass of TemplateDetector, got {detector_class}"
            )
        if template in cls._registry:
            logger.warning(
                f"Replacing detector for '{template.value}': "
                f"{cls._registry[template].__name__} -> {detector_class.__name__}"
            )
        cls._registry[template] = detector_class

    @classmethod
    def get_registered_templates(cls):
        return list(cls._registry.keys())
