"""PNG decoding and encoding between raw bytes and pixel grids."""
from __future__ import annotations

from pathlib import Path

import io
import logging

from PIL import Image, UnidentifiedImageError

from .errors import DecodeError
from .grid import PixelGrid

LOGGER = logging.getLogger(__name__)

SUPPORTED_FORMATS = frozenset({"PNG"})


def decode_image(data: bytes) -> PixelGrid:
    """Parse compressed image bytes into an RGBA grid."""
    if not data:
        raise DecodeError("empty input", size=0)
    try:
        with Image.open(io.BytesIO(data)) as image:
            if image.format not in SUPPORTED_FORMATS:
                raise DecodeError(f"unsupported format {image.format!r}", size=len(data))
            # load() is where truncated payloads surface
            image.load()
            rgba = image.convert("RGBA")
    except DecodeError:
        raise
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError, SyntaxError) as exc:
        raise DecodeError(str(exc) or exc.__class__.__name__, size=len(data)) from exc

    width, height = rgba.size
    raw = rgba.tobytes()
    try:
        grid = PixelGrid(width, height, raw)
    except ValueError as exc:
        raise DecodeError(str(exc), size=len(data)) from exc
    LOGGER.debug("Decoded %s bytes into %sx%s grid", len(data), width, height)
    return grid


def encode_image(grid: PixelGrid) -> bytes:
    """Serialise a grid to PNG bytes."""
    image = Image.frombytes("RGBA", grid.size, grid.data)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    payload = buffer.getvalue()
    LOGGER.debug("Encoded %sx%s grid into %s bytes", grid.width, grid.height, len(payload))
    return payload


def load_image(path: Path) -> PixelGrid:
    return decode_image(Path(path).read_bytes())


def save_image(grid: PixelGrid, path: Path) -> Path:
    target = Path(path)
    target.write_bytes(encode_image(grid))
    return target
