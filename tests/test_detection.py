#!/usr/bin/env python3
"""
Tests for target detectors and the detector factory.

Every detector is exercised with real OpenCV detection on a rendered
board image.
"""

import os
import sys

import cv2
import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(__file__))

from fakes import ScriptedDetector

from calib_capture.calibration_data import CalibrationData
from calib_capture.detection import (
    AsymmetricCirclesDetector,
    CharucoBoardDetector,
    ChessboardDetector,
    DetectionResult,
    DetectorFactory,
    DoubleAsymmetricCirclesDetector,
    TemplateDetector,
    create_charuco_board,
    dual_grid_blob_params,
)
from calib_capture.frame_processor import CalibProcessor
from calib_capture.templates import BoardSpec, TemplateType

SQUARE_PX = 40
MARGIN_PX = 60


def render_chessboard(pattern_size=(9, 6)):
    """Render a BGR checkerboard with pattern_size inner corners on a white margin."""
    cols, rows = pattern_size[0] + 1, pattern_size[1] + 1
    height = rows * SQUARE_PX + 2 * MARGIN_PX
    width = cols * SQUARE_PX + 2 * MARGIN_PX
    image = np.full((height, width), 255, dtype=np.uint8)
    for r in range(rows):
        for c in range(cols):
            if (r + c) % 2 == 0:
                y0, x0 = MARGIN_PX + r * SQUARE_PX, MARGIN_PX + c * SQUARE_PX
                image[y0:y0 + SQUARE_PX, x0:x0 + SQUARE_PX] = 0
    return np.dstack([image] * 3)


CIRCLE_SPACING_PX = 30
CIRCLE_RADIUS_PX = 9


def asymmetric_grid_centers(pattern_size=(4, 11), origin=(MARGIN_PX, MARGIN_PX)):
    """Pixel centres of a staggered grid, row-major in the same order as the object points."""
    width, height = pattern_size
    return np.array(
        [
            (origin[0] + (2 * j + i % 2) * CIRCLE_SPACING_PX, origin[1] + i * CIRCLE_SPACING_PX)
            for i in range(height)
            for j in range(width)
        ],
        dtype=np.float64,
    )


def render_asymmetric_grid(pattern_size=(4, 11), dark_on_light=True):
    """Render a single-channel staggered circle grid; returns (image, centres)."""
    width, height = pattern_size
    image_width = (2 * (width - 1) + 1) * CIRCLE_SPACING_PX + 2 * MARGIN_PX
    image_height = (height - 1) * CIRCLE_SPACING_PX + 2 * MARGIN_PX
    background, ink = (255, 0) if dark_on_light else (0, 255)
    image = np.full((image_height, image_width), background, dtype=np.uint8)
    centers = asymmetric_grid_centers(pattern_size)
    for cx, cy in centers:
        cv2.circle(image, (int(cx), int(cy)), CIRCLE_RADIUS_PX, ink, -1)
    return image, centers


def render_dual_grid(pattern_size=(4, 11), with_dark_grid=True):
    """Render a dual board: dark circles on white at left, white circles on black at right."""
    light, _ = render_asymmetric_grid(pattern_size, dark_on_light=True)
    if with_dark_grid:
        dark, _ = render_asymmetric_grid(pattern_size, dark_on_light=False)
    else:
        dark = np.full_like(light, 255)
    return cv2.cvtColor(np.hstack([light, dark]), cv2.COLOR_GRAY2BGR), light.shape[1]


def render_charuco(board):
    """Render the ChArUco board as a BGR image with a white border."""
    image = create_charuco_board(board).generateImage((600, 800), marginSize=40)
    image = cv2.copyMakeBorder(image, 40, 40, 40, 40, cv2.BORDER_CONSTANT, value=255)
    return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)


def assert_near_centers(points, centers, tolerance=1.5):
    """Every detected point lies within tolerance of some drawn centre."""
    distances = np.linalg.norm(points[:, None, :] - centers[None, :, :], axis=2)
    assert distances.min(axis=1).max() < tolerance


@pytest.fixture
def chessboard_image():
    return render_chessboard()


# ============================================================================
# Test: DetectionResult
# ============================================================================

class TestDetectionResult:

    def test_missed(self):
        result = DetectionResult.missed()
        assert not result.found
        assert result.points.shape == (0, 1, 2)
        assert result.representative is None

    def test_first_point_representative(self):
        result = DetectionResult.from_points(np.array([[3.0, 4.0], [10.0, 20.0]]))
        assert result.found
        np.testing.assert_allclose(result.representative, [3.0, 4.0])
        assert result.ids is None

    def test_centroid_representative(self):
        result = DetectionResult.from_points(
            np.array([[0.0, 0.0], [10.0, 0.0], [10.0, 10.0], [0.0, 10.0]]),
            ids=[1, 2, 3, 4],
            use_centroid=True,
        )
        np.testing.assert_allclose(result.representative, [5.0, 5.0])
        assert result.ids.shape == (4, 1)

    def test_empty_points_is_a_miss(self):
        assert not DetectionResult.from_points(np.zeros((0, 2))).found


# ============================================================================
# Test: ChessboardDetector on a synthetic image
# ============================================================================

class TestChessboardDetector:

    def test_finds_all_inner_corners(self, chessboard_image):
        detector = ChessboardDetector(BoardSpec(TemplateType.CHESSBOARD, (9, 6)))

        result = detector.detect(chessboard_image.copy())

        assert result.found
        assert result.points.shape == (54, 1, 2)
        corners = result.points.reshape(-1, 2)
        inner = MARGIN_PX + SQUARE_PX
        assert corners[:, 0].min() == pytest.approx(inner, abs=1.5)
        assert corners[:, 1].min() == pytest.approx(inner, abs=1.5)
        np.testing.assert_allclose(result.representative, corners[0])

    def test_annotates_frame(self, chessboard_image):
        detector = ChessboardDetector(BoardSpec(TemplateType.CHESSBOARD, (9, 6)))
        frame = chessboard_image.copy()

        detector.detect(frame)

        assert not np.array_equal(frame, chessboard_image)

    def test_blank_frame_is_a_miss(self):
        detector = ChessboardDetector(BoardSpec(TemplateType.CHESSBOARD, (9, 6)))
        result = detector.detect(np.full((480, 640, 3), 255, dtype=np.uint8))
        assert not result.found

    def test_pipeline_captures_static_board(self, chessboard_image):
        data = CalibrationData()
        board = BoardSpec(TemplateType.CHESSBOARD, (9, 6), square_size=25.0)
        processor = CalibProcessor(data, board, stability_window=5)

        for _ in range(6):
            processor.process_frame(chessboard_image)

        assert processor.is_processed()
        assert data.image_points[0].shape == (54, 1, 2)
        assert data.object_points[0].shape == (54, 3)


# ============================================================================
# Test: circle grid and ChArUco detectors on rendered boards
# ============================================================================

class TestAsymmetricCirclesDetector:

    def test_finds_every_drawn_circle(self):
        image, centers = render_asymmetric_grid()
        detector = AsymmetricCirclesDetector(BoardSpec(TemplateType.ACIRCLES_GRID, (4, 11)))

        result = detector.detect(cv2.cvtColor(image, cv2.COLOR_GRAY2BGR))

        assert result.found
        assert result.points.shape == (44, 1, 2)
        assert_near_centers(result.points.reshape(-1, 2), centers)
        np.testing.assert_allclose(result.representative, result.points[0, 0])

    def test_blank_frame_is_a_miss(self):
        detector = AsymmetricCirclesDetector(BoardSpec(TemplateType.ACIRCLES_GRID, (4, 11)))
        assert not detector.detect(np.full((480, 640, 3), 255, dtype=np.uint8)).found


class TestDoubleAsymmetricCirclesDetector:

    @pytest.fixture
    def detector(self):
        return DoubleAsymmetricCirclesDetector(BoardSpec(TemplateType.DOUBLE_ACIRCLES_GRID, (4, 11)))

    def test_light_grid_points_come_first(self, detector):
        frame, half_width = render_dual_grid()

        result = detector.detect(frame)

        assert result.found
        assert result.points.shape == (88, 1, 2)
        xs = result.points.reshape(-1, 2)[:, 0]
        assert np.all(xs[:44] < half_width)
        assert np.all(xs[44:] >= half_width)
        np.testing.assert_allclose(result.representative, result.points[0, 0])

    def test_dark_grid_found_on_inverted_frame(self, detector):
        frame, half_width = render_dual_grid()
        _, centers = render_asymmetric_grid()

        result = detector.detect(frame)

        dark_points = result.points.reshape(-1, 2)[44:] - [half_width, 0]
        assert_near_centers(dark_points, centers)

    def test_light_grid_alone_is_a_miss(self, detector):
        frame, _ = render_dual_grid(with_dark_grid=False)
        assert not detector.detect(frame).found

    def test_blank_frame_is_a_miss(self, detector):
        assert not detector.detect(np.full((480, 640, 3), 255, dtype=np.uint8)).found

    def test_blob_params_look_for_dark_blobs(self):
        params = dual_grid_blob_params()
        assert params.filterByColor
        assert params.blobColor == 0
        assert params.minArea == 5
        assert params.maxArea == 5000


class TestCharucoDetector:

    @pytest.fixture
    def board(self):
        return BoardSpec(TemplateType.CHARUCO, (6, 8))

    def test_finds_inner_corners_with_ids(self, board):
        detector = CharucoBoardDetector(board)

        result = detector.detect(render_charuco(board))

        assert result.found
        assert result.points.shape == (35, 1, 2)
        assert result.ids.shape == (35, 1)
        assert sorted(result.ids.ravel().tolist()) == list(range(35))
        np.testing.assert_allclose(
            result.representative, result.points.reshape(-1, 2).mean(axis=0), rtol=1e-5
        )

    def test_annotates_frame(self, board):
        image = render_charuco(board)
        frame = image.copy()

        CharucoBoardDetector(board).detect(frame)

        assert not np.array_equal(frame, image)

    def test_pipeline_records_charuco_sample(self, board):
        data = CalibrationData()
        processor = CalibProcessor(data, board, stability_window=2)
        image = render_charuco(board)

        for _ in range(3):
            processor.process_frame(image)

        assert processor.is_processed()
        assert data.charuco_corners[0].shape == (35, 1, 2)
        assert data.charuco_ids[0].shape == (35, 1)
        assert data.image_size == (image.shape[1], image.shape[0])

    def test_blank_frame_is_a_miss(self, board):
        detector = CharucoBoardDetector(board)
        assert not detector.detect(np.full((480, 640, 3), 255, dtype=np.uint8)).found

    def test_unknown_dictionary_rejected(self):
        with pytest.raises(ValueError):
            CharucoBoardDetector(BoardSpec(TemplateType.CHARUCO, (6, 8), charuco_dictionary="DICT_NOPE"))


# ============================================================================
# Test: DetectorFactory
# ============================================================================

class TestDetectorFactory:

    @pytest.mark.parametrize("template,expected", [
        (TemplateType.CHESSBOARD, ChessboardDetector),
        (TemplateType.CHARUCO, CharucoBoardDetector),
        (TemplateType.ACIRCLES_GRID, AsymmetricCirclesDetector),
        (TemplateType.DOUBLE_ACIRCLES_GRID, DoubleAsymmetricCirclesDetector),
    ])
    def test_one_detector_per_template(self, template, expected):
        detector = DetectorFactory.create(BoardSpec(template, (6, 8)))
        assert isinstance(detector, expected)
        assert isinstance(detector, TemplateDetector)

    def test_all_templates_registered(self):
        assert set(DetectorFactory.get_registered_templates()) == set(TemplateType)

    def test_register_custom_detector(self):
        original = DetectorFactory._registry[TemplateType.CHESSBOARD]
        try:
            DetectorFactory.register(TemplateType.CHESSBOARD, ScriptedDetector)
            assert DetectorFactory._registry[TemplateType.CHESSBOARD] is ScriptedDetector
        finally:
            DetectorFactory._registry[TemplateType.CHESSBOARD] = original

    def test_register_rejects_non_detector(self):
        with pytest.raises(TypeError):
            DetectorFactory.register(TemplateType.CHESSBOARD, dict)
