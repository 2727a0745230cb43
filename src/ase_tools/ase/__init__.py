"""
Low-level API that translates binary data to Python structure.

All the data structure in this subpackage inherits from one of the object
defined in :py:mod:`ase_tools.ase.base` module.
"""

# Main document class
from .document import AsepriteDocument as AsepriteDocument
from .document import Frame as Frame

# Chunk structures
from .chunks import (
    CelChunk as CelChunk,
    FrameTag as FrameTag,
    FrameTagsChunk as FrameTagsChunk,
    LayerChunk as LayerChunk,
    OldPaletteChunk as OldPaletteChunk,
    PaletteChunk as PaletteChunk,
    RawChunk as RawChunk,
)
from .header import FileHeader as FileHeader
from .header import FrameHeader as FrameHeader

__all__ = [
    "AsepriteDocument",
    "Frame",
    "FileHeader",
    "FrameHeader",
    "LayerChunk",
    "CelChunk",
    "FrameTag",
    "FrameTagsChunk",
    "PaletteChunk",
    "OldPaletteChunk",
    "RawChunk",
]
