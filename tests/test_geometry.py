#!/usr/bin/env python3
"""
Tests for object-space target geometry.

Covers the checkerboard, asymmetric grid and dual grid layouts, including
property-based checks of the dual grid relationship for arbitrary board sizes.
"""

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from calib_capture.geometry import (
    asymmetric_grid_points,
    chessboard_points,
    double_asymmetric_grid_points,
    double_grid_center,
    grid_width,
    object_points_for,
)
from calib_capture.templates import BoardSpec, TemplateType


class TestChessboard:

    def test_regular_grid_layout(self):
        board = BoardSpec(TemplateType.CHESSBOARD, (3, 2), square_size=10.0)
        points = chessboard_points(board)

        expected = np.array([
            [0, 0, 0], [10, 0, 0], [20, 0, 0],
            [0, 10, 0], [10, 10, 0], [20, 10, 0],
        ], dtype=np.float32)
        np.testing.assert_allclose(points, expected)
        assert points.dtype == np.float32

    def test_planar(self):
        board = BoardSpec(TemplateType.CHESSBOARD, (9, 6), square_size=25.0)
        assert np.all(chessboard_points(board)[:, 2] == 0)


class TestAsymmetricGrid:

    def test_odd_rows_are_staggered(self):
        board = BoardSpec(TemplateType.ACIRCLES_GRID, (4, 11), square_size=16.3)
        points = asymmetric_grid_points(board).reshape(11, 4, 3)

        np.testing.assert_allclose(points[0, :, 0], [0.0, 32.6, 65.2, 97.8], rtol=1e-6)
        np.testing.assert_allclose(points[1, :, 0], [16.3, 48.9, 81.5, 114.1], rtol=1e-6)
        np.testing.assert_allclose(points[:, 0, 1], np.arange(11) * 16.3, rtol=1e-6)

    def test_point_count(self):
        board = BoardSpec(TemplateType.ACIRCLES_GRID, (4, 11))
        assert len(object_points_for(board)) == board.point_count == 44


class TestDoubleAsymmetricGrid:

    @pytest.fixture
    def board(self):
        return BoardSpec(TemplateType.DOUBLE_ACIRCLES_GRID, (4, 11), square_size=16.3, grid_gap=295.0)

    def test_light_grid_first_then_dark(self, board):
        points = double_asymmetric_grid_points(board)
        light, dark = points[:44], points[44:]

        assert len(points) == board.point_count == 88
        # Light grid sits on the negative x side, dark grid on the positive side
        assert np.all(light[:, 0] < 0)
        assert np.all(dark[:, 0] > 0)

    def test_matching_points_offset_by_gap_and_grid_width(self, board):
        points = double_asymmetric_grid_points(board)
        light, dark = points[:44], points[44:]

        np.testing.assert_allclose(dark[:, 0] - light[:, 0], grid_width(board) + board.grid_gap, rtol=1e-5)
        np.testing.assert_allclose(dark[:, 1], light[:, 1])

    def test_pattern_centred_on_origin(self, board):
        points = double_asymmetric_grid_points(board)

        assert points[:, 0].min() == pytest.approx(-points[:, 0].max(), abs=1e-3)
        assert points[:, 1].mean() == pytest.approx(0.0, abs=1e-3)

    def test_mirrored_relative_to_single_grid(self, board):
        single = asymmetric_grid_points(board)
        dark = double_asymmetric_grid_points(board)[44:]
        center_x, center_y = double_grid_center(board)

        np.testing.assert_allclose(dark[:, 0], center_x - single[:, 0], rtol=1e-5, atol=1e-3)
        np.testing.assert_allclose(dark[:, 1], center_y - single[:, 1], rtol=1e-5, atol=1e-3)

    @given(width=st.integers(min_value=1, max_value=12), height=st.integers(min_value=2, max_value=15),
           spacing=st.floats(min_value=1.0, max_value=100.0), gap=st.floats(min_value=1.0, max_value=500.0))
    @settings(max_examples=50)
    def test_grids_related_by_fixed_shift(self, width, height, spacing, gap):
        """Property: each dark point is its light counterpart shifted by gap + grid width."""
        board = BoardSpec(TemplateType.DOUBLE_ACIRCLES_GRID, (width, height), square_size=spacing, grid_gap=gap)
        points = double_asymmetric_grid_points(board).astype(np.float64)
        n = width * height

        shift = points[n:, 0] - points[:n, 0]
        np.testing.assert_allclose(shift, grid_width(board) + gap, rtol=1e-4)
        np.testing.assert_allclose(points[:, 0].min(), -points[:, 0].max(), rtol=1e-4, atol=1e-2)


class TestObjectPointsFor:

    def test_charuco_has_no_regular_geometry(self):
        board = BoardSpec(TemplateType.CHARUCO, (6, 8))
        with pytest.raises(ValueError):
            object_points_for(board)

    @pytest.mark.parametrize("template,expected", [
        (TemplateType.CHESSBOARD, 54),
        (TemplateType.ACIRCLES_GRID, 54),
        (TemplateType.DOUBLE_ACIRCLES_GRID, 108),
    ])
    def test_counts_match_board(self, template, expected):
        board = BoardSpec(template, (9, 6))
        points = object_points_for(board)
        assert points.shape == (expected, 3)
        assert board.point_count == expected
