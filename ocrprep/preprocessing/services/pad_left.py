"""Standalone left padding step."""
from __future__ import annotations

from typing import Dict
import logging
import time

from ocrprep.preprocessing import steps
from ocrprep.preprocessing.codec import load_image, save_image

from ._payload import parse_payload

LOGGER = logging.getLogger(__name__)


def run(payload: Dict[str, object]) -> Dict[str, object]:
    request = parse_payload(payload)
    padding = int(request.params.get("padding", 20))

    grid = load_image(request.image_path)
    start = time.perf_counter()
    result = steps.pad_left(grid, padding)
    elapsed = time.perf_counter() - start

    output_path = save_image(result, request.output_path("pad_left"))
    LOGGER.info("pad_left padding=%s elapsed=%.2fs output=%s", padding, elapsed, output_path)
    return {
        "step": "pad_left",
        "width": result.width,
        "height": result.height,
        "elapsed_seconds": elapsed,
        "output_path": str(output_path),
    }
