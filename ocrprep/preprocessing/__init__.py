"""Pixel-level preprocessing of digit strips for OCR.

The pipeline itself lives in :mod:`ocrprep.preprocessing.pipeline`.
"""

from .codec import decode_image, encode_image, load_image, save_image
from .errors import DecodeError, EmptyContentError, NoMarkerFoundError, PreprocessingError
from .grid import BoundingBox, Color, ColorMatchPolicy, DistanceMetric, PixelGrid, bounding_box

__all__ = [
    "BoundingBox",
    "Color",
    "ColorMatchPolicy",
    "DecodeError",
    "DistanceMetric",
    "EmptyContentError",
    "NoMarkerFoundError",
    "PixelGrid",
    "PreprocessingError",
    "bounding_box",
    "decode_image",
    "encode_image",
    "load_image",
    "save_image",
]
