"""Standalone bounding-box padding step."""
from __future__ import annotations

from typing import Dict
import logging
import time

from ocrprep.preprocessing import steps
from ocrprep.preprocessing.codec import load_image, save_image
from ocrprep.preprocessing.grid import bounding_box

from ._payload import parse_payload

LOGGER = logging.getLogger(__name__)


def run(payload: Dict[str, object]) -> Dict[str, object]:
    request = parse_payload(payload)
    horizontal = int(request.params.get("horizontal", 30))
    vertical = int(request.params.get("vertical", 10))

    grid = load_image(request.image_path)
    start = time.perf_counter()
    box = bounding_box(grid)
    result = steps.pad_bounding_box(grid, horizontal, vertical)
    elapsed = time.perf_counter() - start

    output_path = save_image(result, request.output_path("pad_bounding_box"))
    LOGGER.info(
        "pad_bounding_box box=%s h=%s v=%s elapsed=%.2fs output=%s",
        box,
        horizontal,
        vertical,
        elapsed,
        output_path,
    )
    return {
        "step": "pad_bounding_box",
        "source_box": [box.min_x, box.max_x, box.min_y, box.max_y] if box else None,
        "width": result.width,
        "height": result.height,
        "elapsed_seconds": elapsed,
        "output_path": str(output_path),
    }
