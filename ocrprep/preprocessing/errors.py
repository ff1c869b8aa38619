"""Errors raised by the preprocessing pipeline."""
from __future__ import annotations

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .grid import ColorMatchPolicy


class PreprocessingError(RuntimeError):
    """Base class for fatal pipeline errors."""


class DecodeError(PreprocessingError):
    """Raised when the input bytes are not a decodable image."""

    def __init__(self, reason: str, size: Optional[int] = None) -> None:
        self.reason = reason
        self.size = size
        detail = f" ({size} bytes)" if size is not None else ""
        super().__init__(f"Cannot decode image{detail}: {reason}")


class NoMarkerFoundError(PreprocessingError):
    """Raised when no column contains a pixel matching the marker colour."""

    def __init__(self, width: int, height: int, policy: "ColorMatchPolicy") -> None:
        self.width = width
        self.height = height
        self.policy = policy
        super().__init__(
            f"No column of the {width}x{height} image contains marker colour "
            f"{policy.color.to_hex()} (tolerance={policy.tolerance}, metric={policy.metric.value})"
        )


class EmptyContentError(PreprocessingError):
    """Raised when a stage finds nothing non-transparent or non-background to keep."""

    def __init__(self, stage: str, width: int, height: int) -> None:
        self.stage = stage
        self.width = width
        self.height = height
        super().__init__(f"{stage}: {width}x{height} image has no content left to keep")
