"""Digit-strip preprocessing pipeline feeding the OCR engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import logging
import time

from ocrprep.config import PreprocessingConfig
from . import steps
from .codec import decode_image, encode_image
from .errors import NoMarkerFoundError
from .grid import PixelGrid

LOGGER = logging.getLogger(__name__)


class PipelineState(str, Enum):
    DECODED = "decoded"
    MARKER_FOUND = "marker_found"
    CROPPED = "cropped"
    BACKGROUND_REMOVED = "background_removed"
    COLOR_ISOLATED = "color_isolated"
    LEFT_PADDED = "left_padded"
    BOX_PADDED = "box_padded"
    BLACKENED = "blackened"
    ENCODED = "encoded"


@dataclass(slots=True)
class PreprocessingResult:
    data: bytes
    width: int
    height: int
    marker_column: int
    steps_applied: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    background_stats: Optional[steps.BackgroundStats] = None
    snapshots: Dict[str, Path] = field(default_factory=dict)
    elapsed_seconds: float = 0.0

    def to_payload(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "marker_column": self.marker_column,
            "steps": self.steps_applied,
            "warnings": self.warnings,
            "background_stats": self.background_stats.as_dict() if self.background_stats else None,
            "snapshots": {name: str(path) for name, path in self.snapshots.items()},
            "elapsed_seconds": self.elapsed_seconds,
        }


class PreprocessingPipeline:
    """Decode, crop, strip background, pad and re-encode one image.

    Stages run strictly in order; any error aborts the run and propagates
    to the caller without partial output. When ``snapshot_dir`` is set and
    ``save_intermediates`` is enabled, each stage's grid is written as PNG
    once the whole run has succeeded; a failed run writes nothing.
    """

    def __init__(self, config: Optional[PreprocessingConfig] = None, snapshot_dir: Optional[Path] = None) -> None:
        self.config = config or PreprocessingConfig()
        self.snapshot_dir = snapshot_dir

    def run(self, data: bytes, name: str = "image") -> PreprocessingResult:
        LOGGER.info("Preprocessing %s (%s bytes)", name, len(data))
        start = time.perf_counter()
        cfg = self.config
        steps_applied: List[str] = []
        warnings: List[str] = []
        pending: Dict[str, PixelGrid] = {}

        grid = decode_image(data)
        state = PipelineState.DECODED

        marker_policy = cfg.marker_policy
        marker_column = steps.find_marker_column(grid, marker_policy)
        if marker_column is None:
            raise NoMarkerFoundError(grid.width, grid.height, marker_policy)
        state = self._advance(state, PipelineState.MARKER_FOUND)
        if marker_column == 0:
            warnings.append("Marker found in column 0; nothing cropped.")

        grid = steps.crop_columns(grid, marker_column)
        state = self._advance(state, PipelineState.CROPPED)
        steps_applied.append("crop_columns")
        self._snapshot(pending, "cropped", grid)

        grid, background_stats = steps.remove_background(grid, cfg.background_policy, recenter=cfg.recenter)
        state = self._advance(state, PipelineState.BACKGROUND_REMOVED)
        steps_applied.append("remove_background_recentered" if cfg.recenter else "remove_background")
        if background_stats.preserved_pixels == 0:
            warnings.append("Background removal left no visible pixels.")
        self._snapshot(pending, "no_background", grid)

        if cfg.isolate_color_enabled:
            grid = steps.isolate_color(grid, cfg.isolate_policy)
            state = self._advance(state, PipelineState.COLOR_ISOLATED)
            steps_applied.append("isolate_color")
            self._snapshot(pending, "isolated", grid)

        grid = steps.pad_left(grid, cfg.left_padding)
        state = self._advance(state, PipelineState.LEFT_PADDED)
        steps_applied.append("pad_left")
        self._snapshot(pending, "left_padded", grid)

        grid = steps.pad_bounding_box(grid, cfg.box_padding_h, cfg.box_padding_v)
        state = self._advance(state, PipelineState.BOX_PADDED)
        steps_applied.append("pad_bounding_box")
        self._snapshot(pending, "box_padded", grid)

        if cfg.blacken_foreground:
            grid = steps.blacken_foreground(grid)
            state = self._advance(state, PipelineState.BLACKENED)
            steps_applied.append("blacken_foreground")

        payload = encode_image(grid)
        self._advance(state, PipelineState.ENCODED)
        snapshots = self._write_snapshots(name, pending)

        elapsed = time.perf_counter() - start
        LOGGER.info(
            "Preprocessing finished for %s in %.2fs (steps=%s, output=%sx%s)",
            name,
            elapsed,
            ", ".join(steps_applied),
            grid.width,
            grid.height,
        )
        return PreprocessingResult(
            data=payload,
            width=grid.width,
            height=grid.height,
            marker_column=marker_column,
            steps_applied=steps_applied,
            warnings=warnings,
            background_stats=background_stats,
            snapshots=snapshots,
            elapsed_seconds=elapsed,
        )

    @staticmethod
    def _advance(current: PipelineState, target: PipelineState) -> PipelineState:
        LOGGER.debug("Pipeline state %s -> %s", current.value, target.value)
        return target

    def _snapshot(self, pending: Dict[str, PixelGrid], stage: str, grid: PixelGrid) -> None:
        if self.snapshot_dir is None or not self.config.save_intermediates:
            return
        pending[stage] = grid

    def _write_snapshots(self, name: str, pending: Dict[str, PixelGrid]) -> Dict[str, Path]:
        if not pending or self.snapshot_dir is None:
            return {}
        self.snapshot_dir.mkdir(parents=True, exist_ok=True)
        written: Dict[str, Path] = {}
        for stage, grid in pending.items():
            target = self.snapshot_dir / f"{name}_{stage}.png"
            LOGGER.debug("Writing %s snapshot to %s", stage, target)
            target.write_bytes(encode_image(grid))
            written[stage] = target
        return written


def preprocess_image(data: bytes, config: Optional[PreprocessingConfig] = None) -> bytes:
    """Run the full pipeline on PNG bytes and return the normalised PNG bytes."""
    return PreprocessingPipeline(config).run(data).data
