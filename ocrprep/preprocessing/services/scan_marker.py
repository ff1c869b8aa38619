"""Standalone marker scan + column crop step."""
from __future__ import annotations

from typing import Dict
import logging
import time

from ocrprep.preprocessing import steps
from ocrprep.preprocessing.codec import load_image, save_image
from ocrprep.preprocessing.errors import NoMarkerFoundError
from ocrprep.preprocessing.grid import WHITE, Color, ColorMatchPolicy, DistanceMetric

from ._payload import parse_payload

LOGGER = logging.getLogger(__name__)


def run(payload: Dict[str, object]) -> Dict[str, object]:
    request = parse_payload(payload)
    policy = ColorMatchPolicy(
        Color.parse(request.params.get("marker_color", WHITE)),
        float(request.params.get("tolerance", 10)),
        DistanceMetric.parse(request.params.get("metric", DistanceMetric.CHEBYSHEV)),
    )

    grid = load_image(request.image_path)
    start = time.perf_counter()
    column = steps.find_marker_column(grid, policy)
    if column is None:
        raise NoMarkerFoundError(grid.width, grid.height, policy)
    cropped = steps.crop_columns(grid, column)
    elapsed = time.perf_counter() - start

    output_path = save_image(cropped, request.output_path("crop_columns"))
    LOGGER.info("scan_marker column=%s elapsed=%.2fs output=%s", column, elapsed, output_path)
    return {
        "step": "crop_columns",
        "marker_column": column,
        "width": cropped.width,
        "height": cropped.height,
        "elapsed_seconds": elapsed,
        "output_path": str(output_path),
    }
