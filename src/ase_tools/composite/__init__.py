"""
Composite module for layer rendering and blending.

This subpackage turns decoded frames into pixels:

- :py:mod:`~ase_tools.composite.raster`: cel clipping and placement
- :py:mod:`~ase_tools.composite.blend`: blend mode functions
- :py:mod:`~ase_tools.composite.composite`: per-frame compositor
- :py:mod:`~ase_tools.composite.atlas`: sprite atlas packing

Example::

    from ase_tools.composite import build_atlas, composite_frame

    image = composite_frame(document, 0).topil()
    atlas = build_atlas(document, columns=4)
"""

from .atlas import Atlas, Rect, build_atlas
from .blend import BLEND_FUNC, blend
from .composite import Compositor, FrameBatch, composite_frame, composite_frames
from .raster import CelRegion, clip_cel, rasterize_cel

__all__ = [
    "Atlas",
    "BLEND_FUNC",
    "CelRegion",
    "Compositor",
    "FrameBatch",
    "Rect",
    "blend",
    "build_atlas",
    "clip_cel",
    "composite_frame",
    "composite_frames",
    "rasterize_cel",
]
