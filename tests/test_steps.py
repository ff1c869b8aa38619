from __future__ import annotations

import numpy as np
import pytest

from ocrprep.preprocessing import steps
from ocrprep.preprocessing.errors import EmptyContentError
from ocrprep.preprocessing.grid import (
    NEAR_BLACK,
    WHITE,
    BoundingBox,
    Color,
    ColorMatchPolicy,
    DistanceMetric,
    PixelGrid,
    bounding_box,
)

from conftest import BACKGROUND, BLACK, DIGIT, filled, grid_of

TRANSPARENT = (0, 0, 0, 0)
MARKER = ColorMatchPolicy(WHITE, 10)
BACKGROUND_POLICY = ColorMatchPolicy(NEAR_BLACK, 10)


def test_marker_in_all_white_grid_is_column_zero():
    grid = grid_of(filled(4, 4, (255, 255, 255, 255)))
    assert steps.find_marker_column(grid, MARKER) == 0


def test_marker_after_black_columns_and_crop():
    array = filled(10, 1, BLACK)
    array[:, 5:] = (255, 255, 255, 255)
    grid = grid_of(array)

    column = steps.find_marker_column(grid, MARKER)
    assert column == 5

    cropped = steps.crop_columns(grid, column)
    assert cropped.size == (5, 1)
    assert cropped == grid_of(filled(5, 1, (255, 255, 255, 255)))


def test_marker_tolerance_is_near_white():
    array = filled(3, 2, BLACK)
    array[1, 2] = (245, 250, 246, 255)
    grid = grid_of(array)
    assert steps.find_marker_column(grid, MARKER) == 2
    assert steps.find_marker_column(grid, ColorMatchPolicy(WHITE, 5)) is None


def test_marker_missing_returns_none():
    assert steps.find_marker_column(grid_of(filled(5, 5, BLACK)), MARKER) is None
    assert steps.find_marker_column(PixelGrid.blank(0, 0), MARKER) is None


def test_crop_columns_zero_is_identity():
    grid = grid_of(np.random.default_rng(1).integers(0, 256, size=(4, 6, 4), dtype=np.uint8))
    assert steps.crop_columns(grid, 0) == grid


def test_crop_columns_copies_channels_verbatim():
    array = np.random.default_rng(2).integers(0, 256, size=(3, 7, 4), dtype=np.uint8)
    cropped = steps.crop_columns(grid_of(array), 4)
    assert np.array_equal(cropped.to_array(), array[:, 4:])


@pytest.mark.parametrize("start", [-1, 7])
def test_crop_columns_rejects_out_of_range(start):
    with pytest.raises(ValueError):
        steps.crop_columns(grid_of(filled(7, 2, BLACK)), start)


def test_crop_to_bounding_box():
    array = filled(5, 4, TRANSPARENT)
    array[1:3, 2:4] = DIGIT
    grid = grid_of(array)
    cropped = steps.crop_to_bounding_box(grid, BoundingBox(2, 3, 1, 2))
    assert cropped == grid_of(filled(2, 2, DIGIT))
    assert steps.crop_to_content(grid) == cropped


def test_crop_to_bounding_box_without_content():
    with pytest.raises(EmptyContentError):
        steps.crop_to_bounding_box(PixelGrid.blank(3, 3), None)
    with pytest.raises(EmptyContentError):
        steps.crop_to_content(PixelGrid.blank(3, 3))


def test_background_only_grid_becomes_transparent():
    grid = grid_of(filled(3, 3, BACKGROUND))
    result, stats = steps.remove_background(grid, BACKGROUND_POLICY)
    assert result == PixelGrid.blank(3, 3)
    assert stats.total_pixels == 9
    assert stats.background_pixels == 9
    assert stats.preserved_pixels == 0


def test_background_only_grid_cannot_be_recentered():
    grid = grid_of(filled(3, 3, BACKGROUND))
    with pytest.raises(EmptyContentError):
        steps.remove_background(grid, BACKGROUND_POLICY, recenter=True)


def test_background_removal_keeps_foreground_verbatim():
    array = filled(4, 2, BACKGROUND)
    array[0, 1] = (200, 40, 40, 128)
    array[1, 3] = (25, 20, 30, 255)  # within tolerance of the background
    array[1, 0] = (90, 90, 90, 0)  # visible colour but zero alpha
    result, stats = steps.remove_background(grid_of(array), BACKGROUND_POLICY)

    assert result.pixel(1, 0) == (200, 40, 40, 128)
    assert result.pixel(3, 1) == TRANSPARENT
    assert result.pixel(0, 1) == TRANSPARENT
    assert stats.preserved_pixels == 1
    assert stats.background_pixels == 6


def test_background_removal_does_not_touch_input():
    array = filled(2, 2, BACKGROUND)
    grid = grid_of(array)
    before = grid.data
    steps.remove_background(grid, BACKGROUND_POLICY)
    assert grid.data == before


def test_background_removal_with_euclidean_metric():
    array = filled(2, 1, BACKGROUND)
    array[0, 1] = (27, 26, 32, 255)  # delta (8, 8, 8): distance ~13.9
    euclidean = ColorMatchPolicy(NEAR_BLACK, 10, DistanceMetric.EUCLIDEAN)
    result, _ = steps.remove_background(grid_of(array), euclidean)
    assert result.pixel(0, 0) == TRANSPARENT
    assert result.pixel(1, 0) == (27, 26, 32, 255)

    chebyshev_result, _ = steps.remove_background(grid_of(array), BACKGROUND_POLICY)
    assert chebyshev_result.pixel(1, 0) == TRANSPARENT


def test_recenter_drops_outer_columns_and_pads_symmetrically():
    array = filled(10, 2, BACKGROUND)
    array[:, 6:8] = DIGIT
    result, stats = steps.remove_background(grid_of(array), BACKGROUND_POLICY, recenter=True)

    # content width 2, padding (10 - 2) // 2 = 4
    assert result.size == (10, 2)
    assert (stats.leftmost_column, stats.rightmost_column) == (6, 7)
    assert stats.output_width == 10
    assert bounding_box(result) == BoundingBox(4, 5, 0, 1)
    assert result.pixel(4, 0) == DIGIT


def test_recenter_floors_odd_padding():
    array = filled(6, 1, BACKGROUND)
    array[0, 0:3] = DIGIT
    array[0, 1] = BACKGROUND
    result, _ = steps.remove_background(grid_of(array), BACKGROUND_POLICY, recenter=True)
    # content 3 columns, padding (6 - 3) // 2 = 1
    assert result.size == (5, 1)
    assert result.pixel(1, 0) == DIGIT
    assert result.pixel(2, 0) == TRANSPARENT
    assert result.pixel(3, 0) == DIGIT


def test_pad_left_zero_is_identity():
    grid = grid_of(np.random.default_rng(3).integers(0, 256, size=(3, 5, 4), dtype=np.uint8))
    assert steps.pad_left(grid, 0) == grid


def test_pad_left_shifts_content():
    array = filled(2, 2, TRANSPARENT)
    array[1, 0] = DIGIT
    padded = steps.pad_left(grid_of(array), 3)
    assert padded.size == (5, 2)
    assert padded.pixel(3, 1) == DIGIT
    assert bounding_box(padded) == BoundingBox(3, 3, 1, 1)
    with pytest.raises(ValueError):
        steps.pad_left(grid_of(array), -1)


def test_box_padding_single_pixel():
    grid = grid_of(filled(1, 1, DIGIT))
    padded = steps.pad_bounding_box(grid, horizontal=2, vertical=1)
    assert padded.size == (5, 3)
    expected = filled(5, 3, TRANSPARENT)
    expected[1, 2] = DIGIT
    assert np.array_equal(padded.to_array(), expected)


def test_box_padding_shifts_bounding_box_exactly():
    array = filled(12, 9, TRANSPARENT)
    array[3:6, 4:9] = DIGIT
    array[4, 6] = (1, 2, 3, 0)
    grid = grid_of(array)
    original = bounding_box(grid)

    padded = steps.pad_bounding_box(grid, horizontal=30, vertical=10)
    assert padded.size == (original.width + 60, original.height + 20)
    assert bounding_box(padded) == original.shifted(30 - original.min_x, 10 - original.min_y)
    # pixels inside the box are copied verbatim, including zero-alpha ones
    assert padded.pixel(6 - 4 + 30, 4 - 3 + 10) == (1, 2, 3, 0)


def test_box_padding_of_empty_grid():
    with pytest.raises(EmptyContentError) as excinfo:
        steps.pad_bounding_box(PixelGrid.blank(4, 2))
    assert (excinfo.value.width, excinfo.value.height) == (4, 2)


def test_isolate_color_keeps_only_matching_pixels():
    array = filled(2, 1, (191, 189, 199, 255))
    array[0, 1] = DIGIT
    result = steps.isolate_color(grid_of(array), ColorMatchPolicy(Color(191, 189, 199), 0))
    assert result.pixel(0, 0) == (191, 189, 199, 255)
    assert result.pixel(1, 0) == TRANSPARENT


def test_blacken_foreground_keeps_alpha():
    array = filled(2, 1, TRANSPARENT)
    array[0, 0] = (200, 40, 40, 77)
    array[0, 1] = (200, 40, 40, 0)
    result = steps.blacken_foreground(grid_of(array))
    assert result.pixel(0, 0) == (0, 0, 0, 77)
    assert result.pixel(1, 0) == TRANSPARENT
