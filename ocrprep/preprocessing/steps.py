"""Pixel-grid transforms that normalise a digit strip before OCR.

Every function takes a grid and returns a freshly allocated one; inputs are
never modified.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import logging

import numpy as np

from .errors import EmptyContentError
from .grid import BoundingBox, ColorMatchPolicy, PixelGrid, bounding_box

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class BackgroundStats:
    total_pixels: int
    background_pixels: int
    preserved_pixels: int
    original_width: int
    output_width: int
    leftmost_column: Optional[int] = None
    rightmost_column: Optional[int] = None

    @property
    def preserved_ratio(self) -> float:
        if not self.total_pixels:
            return 0.0
        return self.preserved_pixels / self.total_pixels

    def as_dict(self) -> dict[str, object]:
        return {
            "total_pixels": self.total_pixels,
            "background_pixels": self.background_pixels,
            "preserved_pixels": self.preserved_pixels,
            "preserved_ratio": round(self.preserved_ratio, 4),
            "original_width": self.original_width,
            "output_width": self.output_width,
            "leftmost_column": self.leftmost_column,
            "rightmost_column": self.rightmost_column,
        }


def find_marker_column(grid: PixelGrid, policy: ColorMatchPolicy) -> Optional[int]:
    """Index of the first column (left to right) holding a marker pixel.

    Only RGB is compared, alpha is ignored. Returns ``None`` when no column
    matches.
    """
    if grid.width == 0 or grid.height == 0:
        return None
    columns = np.flatnonzero(policy.mask(grid.to_array()).any(axis=0))
    if columns.size == 0:
        return None
    LOGGER.debug("First marker column %s (marker=%s)", columns[0], policy.color.to_hex())
    return int(columns[0])


def crop_columns(grid: PixelGrid, start: int) -> PixelGrid:
    if not 0 <= start < grid.width:
        raise ValueError(f"start column {start} outside [0, {grid.width})")
    if start == 0:
        return PixelGrid(grid.width, grid.height, bytes(grid.data))
    LOGGER.debug("Cropping columns [%s, %s)", start, grid.width)
    return PixelGrid.from_array(grid.to_array()[:, start:, :])


def crop_to_bounding_box(grid: PixelGrid, box: Optional[BoundingBox]) -> PixelGrid:
    if box is None:
        raise EmptyContentError("crop_to_bounding_box", grid.width, grid.height)
    if box.min_x < 0 or box.min_y < 0 or box.max_x >= grid.width or box.max_y >= grid.height:
        raise ValueError(f"{box} does not fit a {grid.width}x{grid.height} grid")
    if box.width <= 0 or box.height <= 0:
        raise EmptyContentError("crop_to_bounding_box", grid.width, grid.height)
    array = grid.to_array()
    return PixelGrid.from_array(array[box.min_y : box.max_y + 1, box.min_x : box.max_x + 1, :])


def crop_to_content(grid: PixelGrid) -> PixelGrid:
    return crop_to_bounding_box(grid, bounding_box(grid))


def remove_background(
    grid: PixelGrid, policy: ColorMatchPolicy, recenter: bool = False
) -> tuple[PixelGrid, BackgroundStats]:
    """Make background-coloured and zero-alpha pixels fully transparent.

    With ``recenter`` the columns outside the leftmost/rightmost foreground
    columns are dropped and ``max(0, width - content) // 2`` transparent
    columns are added on both sides of the retained window.
    """
    array = grid.to_array()
    background = policy.mask(array)
    keep = ~background & (array[..., 3] > 0)
    total = grid.width * grid.height
    background_count = int(background.sum())

    if not recenter:
        output = np.where(keep[..., None], array, 0).astype(np.uint8)
        stats = BackgroundStats(
            total_pixels=total,
            background_pixels=background_count,
            preserved_pixels=int(keep.sum()),
            original_width=grid.width,
            output_width=grid.width,
        )
        LOGGER.debug("Background removal stats: %s", stats)
        return PixelGrid.from_array(output), stats

    foreground_columns = np.flatnonzero((~background).any(axis=0))
    if foreground_columns.size == 0:
        raise EmptyContentError("remove_background", grid.width, grid.height)
    leftmost = int(foreground_columns[0])
    rightmost = int(foreground_columns[-1])
    content_width = rightmost - leftmost + 1
    padding = max(0, grid.width - content_width) // 2
    new_width = content_width + 2 * padding

    window = slice(leftmost, rightmost + 1)
    output = np.zeros((grid.height, new_width, 4), dtype=np.uint8)
    output[:, padding : padding + content_width] = np.where(
        keep[:, window, None], array[:, window, :], 0
    )
    stats = BackgroundStats(
        total_pixels=total,
        background_pixels=background_count,
        preserved_pixels=int(keep[:, window].sum()),
        original_width=grid.width,
        output_width=new_width,
        leftmost_column=leftmost,
        rightmost_column=rightmost,
    )
    LOGGER.debug("Background removal (recentered) stats: %s", stats)
    return PixelGrid.from_array(output), stats


def isolate_color(grid: PixelGrid, policy: ColorMatchPolicy) -> PixelGrid:
    """Keep only pixels matching ``policy``; everything else becomes transparent."""
    array = grid.to_array()
    keep = policy.mask(array)
    return PixelGrid.from_array(np.where(keep[..., None], array, 0).astype(np.uint8))


def pad_left(grid: PixelGrid, padding: int = 20) -> PixelGrid:
    if padding < 0:
        raise ValueError(f"padding must be >= 0, got {padding}")
    output = np.zeros((grid.height, grid.width + padding, 4), dtype=np.uint8)
    output[:, padding:, :] = grid.to_array()
    return PixelGrid.from_array(output)


def pad_bounding_box(grid: PixelGrid, horizontal: int = 30, vertical: int = 10) -> PixelGrid:
    """Crop to the non-transparent bounding box and surround it with margins."""
    if horizontal < 0 or vertical < 0:
        raise ValueError(f"padding must be >= 0, got horizontal={horizontal} vertical={vertical}")
    box = bounding_box(grid)
    if box is None:
        raise EmptyContentError("pad_bounding_box", grid.width, grid.height)
    output = np.zeros((box.height + 2 * vertical, box.width + 2 * horizontal, 4), dtype=np.uint8)
    output[vertical : vertical + box.height, horizontal : horizontal + box.width, :] = grid.to_array()[
        box.min_y : box.max_y + 1, box.min_x : box.max_x + 1, :
    ]
    LOGGER.debug("Padding box %s by h=%s v=%s -> %sx%s", box, horizontal, vertical, output.shape[1], output.shape[0])
    return PixelGrid.from_array(output)


def blacken_foreground(grid: PixelGrid) -> PixelGrid:
    """Paint every visible pixel black, keeping its alpha."""
    output = np.zeros((grid.height, grid.width, 4), dtype=np.uint8)
    output[..., 3] = grid.to_array()[..., 3]
    return PixelGrid.from_array(output)
