"""In-memory RGBA pixel grids and colour matching helpers."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Union

import logging

import numpy as np

LOGGER = logging.getLogger(__name__)

CHANNELS = 4


@dataclass(frozen=True, slots=True)
class Color:
    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            value = getattr(self, name)
            if not 0 <= int(value) <= 255:
                raise ValueError(f"Color channel '{name}' out of range: {value}")

    @classmethod
    def parse(cls, value: Union[str, Sequence[int], "Color"]) -> "Color":
        """Accept ``#rrggbb``, ``r,g,b`` or a three item sequence."""
        if isinstance(value, Color):
            return value
        if isinstance(value, str):
            text = value.strip()
            if text.startswith("#"):
                if len(text) != 7:
                    raise ValueError(f"Expected '#rrggbb', got {value!r}")
                return cls(int(text[1:3], 16), int(text[3:5], 16), int(text[5:7], 16))
            parts = [part.strip() for part in text.split(",")]
        else:
            parts = list(value)
        if len(parts) != 3:
            raise ValueError(f"Expected three colour channels, got {value!r}")
        return cls(*(int(part) for part in parts))

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def to_hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


WHITE = Color(255, 255, 255)
NEAR_BLACK = Color(19, 18, 24)


class DistanceMetric(str, Enum):
    CHEBYSHEV = "chebyshev"  # |dr| <= t and |dg| <= t and |db| <= t
    EUCLIDEAN = "euclidean"  # sqrt(dr^2 + dg^2 + db^2) <= t

    @classmethod
    def parse(cls, value: Union[str, "DistanceMetric"]) -> "DistanceMetric":
        if isinstance(value, DistanceMetric):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            choices = ", ".join(metric.value for metric in cls)
            raise ValueError(f"Unknown distance metric {value!r} (expected one of: {choices})") from exc


@dataclass(frozen=True, slots=True)
class ColorMatchPolicy:
    """Target colour plus tolerance under a selectable distance metric."""

    color: Color
    tolerance: float = 10
    metric: DistanceMetric = DistanceMetric.CHEBYSHEV

    def __post_init__(self) -> None:
        if self.tolerance < 0:
            raise ValueError(f"tolerance must be >= 0, got {self.tolerance}")

    def mask(self, rgb: np.ndarray) -> np.ndarray:
        """Boolean mask of pixels matching the policy.

        ``rgb`` is any array whose last axis holds at least the R, G and B
        channels; extra channels (alpha) are ignored.
        """
        target = np.array(self.color.as_tuple(), dtype=np.int32)
        delta = rgb[..., :3].astype(np.int32) - target
        if self.metric is DistanceMetric.EUCLIDEAN:
            return (delta * delta).sum(axis=-1) <= self.tolerance * self.tolerance
        return (np.abs(delta) <= self.tolerance).all(axis=-1)

    def matches(self, r: int, g: int, b: int) -> bool:
        return bool(self.mask(np.array([r, g, b])))


@dataclass(frozen=True, slots=True)
class BoundingBox:
    min_x: int
    max_x: int
    min_y: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        return self.max_y - self.min_y + 1

    def shifted(self, dx: int, dy: int) -> "BoundingBox":
        return BoundingBox(self.min_x + dx, self.max_x + dx, self.min_y + dy, self.max_y + dy)


@dataclass(frozen=True, slots=True)
class PixelGrid:
    """Row-major RGBA image buffer of exactly ``width * height * 4`` bytes."""

    width: int
    height: int
    data: bytes

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Grid dimensions must be >= 0, got {self.width}x{self.height}")
        expected = self.width * self.height * CHANNELS
        if len(self.data) != expected:
            raise ValueError(
                f"Buffer holds {len(self.data)} bytes, expected {expected} for {self.width}x{self.height}"
            )

    @classmethod
    def blank(cls, width: int, height: int) -> "PixelGrid":
        """Fully transparent grid (every channel zero)."""
        return cls(width, height, bytes(width * height * CHANNELS))

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelGrid":
        if array.ndim != 3 or array.shape[2] != CHANNELS:
            raise ValueError(f"Expected an (h, w, 4) array, got shape {array.shape}")
        height, width = array.shape[:2]
        return cls(width, height, np.ascontiguousarray(array, dtype=np.uint8).tobytes())

    def to_array(self) -> np.ndarray:
        """Read-only ``(height, width, 4)`` uint8 view over the buffer."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, CHANNELS)

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} grid")
        offset = (y * self.width + x) * CHANNELS
        r, g, b, a = self.data[offset : offset + CHANNELS]
        return (r, g, b, a)

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)


def bounding_box(grid: PixelGrid) -> Optional[BoundingBox]:
    """Smallest rectangle enclosing every pixel with alpha > 0, or ``None``."""
    if grid.width == 0 or grid.height == 0:
        return None
    opaque = grid.to_array()[..., 3] > 0
    columns = np.flatnonzero(opaque.any(axis=0))
    if columns.size == 0:
        return None
    rows = np.flatnonzero(opaque.any(axis=1))
    box = BoundingBox(int(columns[0]), int(columns[-1]), int(rows[0]), int(rows[-1]))
    LOGGER.debug("Bounding box of %sx%s grid: %s", grid.width, grid.height, box)
    return box
