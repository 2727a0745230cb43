"""
Little-endian builders for in-memory Aseprite test documents.
"""

import io
import logging
import zlib
from typing import Iterable, Optional, Sequence

import numpy as np

from ase_tools.ase.bin_utils import pack
from ase_tools.ase.document import AsepriteDocument
from ase_tools.ase.header import FileHeader
from ase_tools.constants import (
    BlendMode,
    CelType,
    ChunkType,
    ColorDepth,
    HeaderFlags,
    LayerFlags,
    LayerType,
)

logger = logging.getLogger(__name__)

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)


def solid(width: int, height: int, color: Sequence[int]) -> bytes:
    return bytes(color) * (width * height)


def pack_string(value: str) -> bytes:
    data = value.encode("utf-8")
    return pack("H", len(data)) + data


def pack_chunk(chunk_type: int, payload: bytes) -> bytes:
    return pack("IH", len(payload) + 6, chunk_type) + payload


def pack_layer(
    name: str = "Layer",
    child_level: int = 0,
    visible: bool = True,
    layer_type: int = LayerType.NORMAL,
    blend_mode: int = BlendMode.NORMAL,
    opacity: int = 255,
    tileset_index: Optional[int] = None,
    uuid: Optional[bytes] = None,
) -> bytes:
    flags = LayerFlags.EDITABLE | (LayerFlags.VISIBLE if visible else 0)
    payload = pack(
        "HHHHHHB3x", flags, layer_type, child_level, 0, 0, blend_mode, opacity
    )
    payload += pack_string(name)
    if layer_type == LayerType.TILEMAP:
        payload += pack("I", tileset_index or 0)
    if uuid is not None:
        payload += uuid
    return pack_chunk(ChunkType.LAYER, payload)


def pack_cel(
    layer_index: int,
    x: int = 0,
    y: int = 0,
    pixels: bytes = b"",
    width: int = 0,
    height: int = 0,
    opacity: int = 255,
    cel_type: int = CelType.RAW_IMAGE,
    link: int = 0,
    z_index: int = 0,
) -> bytes:
    payload = pack("HhhBHh5x", layer_index, x, y, opacity, cel_type, z_index)
    if cel_type == CelType.RAW_IMAGE:
        payload += pack("HH", width, height) + pixels
    elif cel_type == CelType.LINKED:
        payload += pack("H", link)
    elif cel_type == CelType.COMPRESSED_IMAGE:
        payload += pack("HH", width, height) + zlib.compress(pixels)
    elif cel_type == CelType.COMPRESSED_TILEMAP:
        payload += pack("HHH4I10x", width, height, 32, 0x1FFFFFFF, 0, 0, 0)
        payload += zlib.compress(pixels)
    return pack_chunk(ChunkType.CEL, payload)


def pack_tags(tags: Iterable[tuple]) -> bytes:
    """Pack (name, from_frame, to_frame, direction) tuples."""
    tags = list(tags)
    payload = pack("H8x", len(tags))
    for name, from_frame, to_frame, direction in tags:
        payload += pack("HHBH6x3Bx", from_frame, to_frame, direction, 0, 0, 0, 0)
        payload += pack_string(name)
    return pack_chunk(ChunkType.FRAME_TAGS, payload)


def pack_palette(colors: Sequence[Sequence[int]], first: int = 0) -> bytes:
    payload = pack("III8x", first + len(colors), first, first + len(colors) - 1)
    for red, green, blue, alpha in colors:
        payload += pack("H4B", 0, red, green, blue, alpha)
    return pack_chunk(ChunkType.PALETTE, payload)


def pack_old_palette(colors: Sequence[Sequence[int]], skip: int = 0, six_bit: bool = False) -> bytes:
    payload = pack("HBB", 1, skip, len(colors) % 256)
    for red, green, blue in colors:
        payload += pack("3B", red, green, blue)
    kind = ChunkType.OLD_PALETTE_64 if six_bit else ChunkType.OLD_PALETTE
    return pack_chunk(kind, payload)


def pack_frame(chunks: Sequence[bytes], duration: int = 100) -> bytes:
    body = b"".join(chunks)
    return (
        pack(
            "IHHH2xI",
            len(body) + 16,
            0xF1FA,
            min(len(chunks), 0xFFFF),
            duration,
            len(chunks),
        )
        + body
    )


def build_document(
    frames: Sequence[Sequence[bytes]],
    width: int = 4,
    height: int = 4,
    color_depth: int = ColorDepth.RGBA,
    flags: int = HeaderFlags.LAYER_OPACITY_VALID,
    transparent_index: int = 0,
    durations: Optional[Sequence[int]] = None,
) -> bytes:
    """Build a whole file from per-frame chunk lists."""
    if durations is None:
        durations = [100] * len(frames)
    body = b"".join(
        pack_frame(chunks, duration) for chunks, duration in zip(frames, durations)
    )
    header = FileHeader(
        file_size=len(body) + FileHeader.SIZE,
        frames=len(frames),
        width=width,
        height=height,
        color_depth=color_depth,
        flags=flags,
        transparent_index=transparent_index,
    )
    return header.tobytes() + body


def read_document(data: bytes, **kwargs) -> AsepriteDocument:
    with io.BytesIO(data) as f:
        return AsepriteDocument.read(f, **kwargs)


def rgba(color: Sequence[int]) -> np.ndarray:
    return np.array(color, dtype=np.float32) / 255.0
