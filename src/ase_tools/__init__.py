"""
ase-tools: Python package for reading Aseprite sprite files.

This package decodes ``.ase`` / ``.aseprite`` documents, composites their
layers frame by frame, and packs the frames into a sprite atlas.

Basic usage::

    from ase_tools import AsepriteImage

    # Open and read an Aseprite file
    sprite = AsepriteImage.open('example.aseprite')

    # Composite the first frame
    sprite.composite(0).save('frame0.png')

    # Pack every frame into one atlas
    atlas = sprite.atlas()
    atlas.topil().save('atlas.png')

    # Animation clips
    for tag in sprite.animations():
        print(tag.name, tag.from_frame, tag.to_frame, tag.direction)

Architecture:

- :py:mod:`ase_tools.ase`: Low-level binary structure parsing
- :py:mod:`ase_tools.api`: High-level user-facing API (primary interface)
- :py:mod:`ase_tools.composite`: Cel rasterization, blending and atlas packing
"""

from ase_tools.api.ase_image import AsepriteImage
from ase_tools.version import __version__

__all__ = ["AsepriteImage", "__version__"]
