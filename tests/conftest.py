from __future__ import annotations

from typing import Sequence, Tuple

import io

import numpy as np
import pytest
from PIL import Image

from ocrprep.preprocessing.codec import encode_image
from ocrprep.preprocessing.grid import PixelGrid

WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)
BACKGROUND = (19, 18, 24, 255)
DIGIT = (200, 40, 40, 255)


def filled(width: int, height: int, rgba: Sequence[int]) -> np.ndarray:
    array = np.zeros((height, width, 4), dtype=np.uint8)
    array[...] = rgba
    return array


def grid_of(array: np.ndarray) -> PixelGrid:
    return PixelGrid.from_array(array)


def strip_image(
    margin: int = 3, width: int = 20, height: int = 8, digit: Tuple[int, int] = (9, 12)
) -> np.ndarray:
    """Black left margin, a white marker column, dark background with a red digit block."""
    array = filled(width, height, BACKGROUND)
    array[:, :margin] = BLACK
    array[:, margin] = WHITE
    array[2:6, digit[0] : digit[1]] = DIGIT
    return array


@pytest.fixture
def strip_png() -> bytes:
    return encode_image(grid_of(strip_image()))


@pytest.fixture
def jpeg_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), (255, 255, 255)).save(buffer, format="JPEG")
    return buffer.getvalue()
