"""Standalone background removal step."""
from __future__ import annotations

from typing import Dict
import logging
import time

from ocrprep.preprocessing import steps
from ocrprep.preprocessing.codec import load_image, save_image
from ocrprep.preprocessing.grid import NEAR_BLACK, Color, ColorMatchPolicy, DistanceMetric

from ._payload import parse_payload

LOGGER = logging.getLogger(__name__)


def run(payload: Dict[str, object]) -> Dict[str, object]:
    request = parse_payload(payload)
    policy = ColorMatchPolicy(
        Color.parse(request.params.get("background_color", NEAR_BLACK)),
        float(request.params.get("tolerance", 10)),
        DistanceMetric.parse(request.params.get("metric", DistanceMetric.CHEBYSHEV)),
    )
    recenter = bool(request.params.get("recenter", False))

    grid = load_image(request.image_path)
    start = time.perf_counter()
    result, stats = steps.remove_background(grid, policy, recenter=recenter)
    elapsed = time.perf_counter() - start

    output_path = save_image(result, request.output_path("remove_background"))
    LOGGER.info(
        "remove_background recenter=%s preserved=%s/%s elapsed=%.2fs output=%s",
        recenter,
        stats.preserved_pixels,
        stats.total_pixels,
        elapsed,
        output_path,
    )
    return {
        "step": "remove_background",
        "recenter": recenter,
        "stats": stats.as_dict(),
        "width": result.width,
        "height": result.height,
        "elapsed_seconds": elapsed,
        "output_path": str(output_path),
    }
