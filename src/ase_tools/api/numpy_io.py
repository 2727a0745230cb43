"""
Color resolution: turns cel payloads into float RGBA arrays.
"""

import logging
from typing import Optional

import numpy as np

from ase_tools.ase.chunks import OldPaletteChunk, PaletteChunk
from ase_tools.ase.document import AsepriteDocument
from ase_tools.constants import ColorDepth
from ase_tools.exceptions import FormatError

logger = logging.getLogger(__name__)

PALETTE_SIZE = 256


def decode_pixels(
    data: bytes,
    color_depth: ColorDepth,
    width: int,
    height: int,
    palette: Optional[np.ndarray] = None,
    transparent_index: int = 0,
) -> np.ndarray:
    """
    Decode cel pixels into a top-down ``(height, width, 4)`` float32 array.

    :param data: uncompressed pixel bytes, row-major and top-down.
    :param color_depth: 32 for RGBA, 16 for grayscale with alpha, 8 for
        indexed.
    :param palette: ``(256, 4)`` uint8 RGBA lookup table for indexed pixels.
        A gray ramp is used when it is missing.
    :param transparent_index: palette entry drawn as fully transparent.
    :raise FormatError: when ``data`` is too short for the given size.
    """
    color_depth = ColorDepth(color_depth)
    expected = width * height * color_depth.bytes_per_pixel
    if len(data) < expected:
        raise FormatError(
            "Pixel data too short: expected %d bytes, got %d" % (expected, len(data))
        )
    if len(data) > expected:
        logger.warning("Ignoring %d trailing pixel bytes" % (len(data) - expected))
        data = data[:expected]

    values = np.frombuffer(data, dtype=np.uint8)
    if color_depth == ColorDepth.RGBA:
        rgba = values.reshape((height, width, 4))
    elif color_depth == ColorDepth.GRAYSCALE:
        gray = values.reshape((height, width, 2))
        rgba = np.concatenate(
            (np.repeat(gray[:, :, 0:1], 3, axis=2), gray[:, :, 1:2]), axis=2
        )
    else:
        if palette is None:
            palette = gray_palette()
        index = values.reshape((height, width))
        rgba = palette[index].copy()
        rgba[index == transparent_index, 3] = 0
    return rgba.astype(np.float32) / 255.0


def gray_palette() -> np.ndarray:
    """Opaque gray ramp used when a document has no palette."""
    ramp = np.arange(PALETTE_SIZE, dtype=np.uint8)
    return np.stack(
        (ramp, ramp, ramp, np.full(PALETTE_SIZE, 255, dtype=np.uint8)), axis=1
    )


def build_palette(document: AsepriteDocument) -> np.ndarray:
    """
    Merge the palette chunks of a document into a ``(256, 4)`` uint8 table.

    Palette chunks are applied in document order. Old palette chunks are
    only used when the document has no new palette chunk.
    """
    palette = np.zeros((PALETTE_SIZE, 4), dtype=np.uint8)
    palette[:, 3] = 255
    chunks = document.get_chunks(PaletteChunk)
    if not chunks:
        chunks = document.get_chunks(OldPaletteChunk)
    for chunk in chunks:
        for index, red, green, blue, alpha in chunk.iter_colors():
            if index >= PALETTE_SIZE:
                logger.debug("Ignoring palette entry %d" % index)
                continue
            palette[index] = (red, green, blue, alpha)
    return palette

