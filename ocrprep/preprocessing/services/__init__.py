"""Ready-to-use wrappers for individual preprocessing steps.

Each module exposes `run(payload: dict)` which accepts:
{
    "image_path": "<path to PNG>",
    "params": {...},
    "output_dir": "<optional>"
}
and returns a JSON-friendly dict with step result metadata.
"""

from .scan_marker import run as run_scan_marker
from .remove_background import run as run_remove_background
from .pad_left import run as run_pad_left
from .pad_bounding_box import run as run_pad_bounding_box

__all__ = [
    "run_scan_marker",
    "run_remove_background",
    "run_pad_left",
    "run_pad_bounding_box",
]
