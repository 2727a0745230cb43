"""
Aseprite image module.

This module provides the main :py:class:`AsepriteImage` class, the primary
entry point for users of ase-tools. It wraps the low-level
:py:class:`~ase_tools.ase.document.AsepriteDocument` and exposes the layer
tree, frame compositing, atlas packing and animation tags.

Key functionality:

- **Opening files**: :py:meth:`AsepriteImage.open`
- **Layer access**: :py:attr:`AsepriteImage.layers`, a
  :py:class:`~ase_tools.api.layers.LayerTree`
- **Compositing**: :py:meth:`~AsepriteImage.composite` for one frame,
  :py:meth:`~AsepriteImage.composite_frames` for many in parallel
- **Atlas**: :py:meth:`~AsepriteImage.atlas`
- **Animations**: :py:meth:`~AsepriteImage.animations`

Example usage::

    from ase_tools import AsepriteImage

    sprite = AsepriteImage.open('character.aseprite')
    print(f"Size: {sprite.width}x{sprite.height}, {len(sprite)} frames")

    for layer in sprite.layers:
        print(layer.name, sprite.layers.is_visible(layer))

    sprite.composite(0).save('frame0.png')

    atlas = sprite.atlas(columns=8)
    atlas.topil().save('atlas.png')
"""

import logging
import os
from typing import Any, BinaryIO, Iterable, Optional, Union

import numpy as np
from PIL import Image

from ase_tools.api import numpy_io
from ase_tools.api.layers import LayerTree
from ase_tools.ase.chunks import FrameTag
from ase_tools.ase.document import AsepriteDocument
from ase_tools.ase.header import FileHeader
from ase_tools.composite.atlas import Atlas, build_atlas
from ase_tools.composite.composite import FrameBatch, composite_frame, composite_frames
from ase_tools.constants import ColorDepth

logger = logging.getLogger(__name__)


class AsepriteImage(object):
    """
    Aseprite sprite document.

    The low-level data structure is accessible at
    :py:attr:`AsepriteImage._record`.

    :param data: decoded document.
    :param scan_first: see :py:class:`~ase_tools.api.layers.LayerTree`.
    """

    def __init__(self, data: AsepriteDocument, scan_first: bool = True):
        if not isinstance(data, AsepriteDocument):
            raise TypeError(
                f"Expected AsepriteDocument instance, got {type(data).__name__}"
            )
        self._record = data
        self._layers = LayerTree(data.layers, scan_first=scan_first)

    @classmethod
    def open(
        cls,
        fp: Union[BinaryIO, str, bytes, os.PathLike],
        strict: bool = True,
        scan_first: bool = True,
    ) -> "AsepriteImage":
        """
        Open an Aseprite document.

        :param fp: filename or file-like object.
        :param strict: reject chunks whose payload is not consumed exactly.
        :param scan_first: see :py:class:`~ase_tools.api.layers.LayerTree`.
        :return: A :py:class:`~ase_tools.api.ase_image.AsepriteImage` object.
        :raise FormatError: when the file is not a valid Aseprite document.
        """
        if isinstance(fp, (str, bytes, os.PathLike)):
            with open(fp, "rb") as f:
                return cls(AsepriteDocument.read(f, strict=strict), scan_first)
        return cls(AsepriteDocument.read(fp, strict=strict), scan_first)

    @property
    def header(self) -> FileHeader:
        return self._record.header

    @property
    def width(self) -> int:
        """Canvas width."""
        return self._record.header.width

    @property
    def height(self) -> int:
        """Canvas height."""
        return self._record.header.height

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) tuple."""
        return self.width, self.height

    @property
    def color_depth(self) -> ColorDepth:
        return self._record.header.color_depth

    @property
    def layers(self) -> LayerTree:
        """Flattened layer list with parent and visibility resolution."""
        return self._layers

    @property
    def durations(self) -> list[int]:
        """Frame durations in milliseconds."""
        return [frame.duration for frame in self._record.frames]

    def palette(self) -> np.ndarray:
        """Merged ``(256, 4)`` uint8 palette."""
        return numpy_io.build_palette(self._record)

    def __len__(self) -> int:
        return len(self._record.frames)

    def numpy(self, index: int = 0, **kwargs: Any) -> np.ndarray:
        """
        Composite a frame and return a top-down ``(height, width, 4)`` float
        array in [0, 1].
        """
        return self._composite(index, **kwargs).finalize()

    def composite(self, index: int = 0, **kwargs: Any) -> Image.Image:
        """
        Composite a frame.

        :param index: frame index.
        :param normal_opacity: apply opacity to Normal layers too.
        :param strict_blend: raise for unknown blend modes.
        :return: :py:class:`PIL.Image` in RGBA mode.
        :raise LayerIndexError: when a cel refers to a missing layer.
        """
        return self._composite(index, **kwargs).topil()

    def composite_frames(
        self,
        indices: Optional[Iterable[int]] = None,
        workers: Optional[int] = None,
        **kwargs: Any,
    ) -> FrameBatch:
        """
        Composite frames in parallel, see
        :py:func:`~ase_tools.composite.composite.composite_frames`.
        """
        return composite_frames(
            self._record,
            indices,
            workers,
            scan_first=self._layers.scan_first,
            **kwargs,
        )

    def images(self, workers: Optional[int] = None, **kwargs: Any) -> list:
        """
        Composite every frame.

        :return: list of :py:class:`PIL.Image`, None for frames that failed.
        """
        batch = self.composite_frames(workers=workers, **kwargs)
        return [image.topil() if image is not None else None for image in batch.images]

    def atlas(
        self, columns: Optional[int] = None, workers: Optional[int] = None, **kwargs: Any
    ) -> Atlas:
        """
        Pack every frame into one image, see
        :py:func:`~ase_tools.composite.atlas.build_atlas`.
        """
        return build_atlas(
            self._record,
            columns=columns,
            workers=workers,
            scan_first=self._layers.scan_first,
            **kwargs,
        )

    def animations(self) -> list[FrameTag]:
        """Frame tags of the document in document order."""
        return self._record.frame_tags()

    def _composite(self, index: int, **kwargs: Any) -> Any:
        return composite_frame(self._record, index, self._layers, **kwargs)

    def __repr__(self) -> str:
        return "%s(size=%dx%d depth=%s frames=%d layers=%d)" % (
            self.__class__.__name__,
            self.width,
            self.height,
            self.color_depth.name,
            len(self),
            len(self._layers),
        )

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        p.text(self.__repr__())
        if cycle:
            return
        with p.indent(2):
            for index, layer in enumerate(self._layers):
                p.break_()
                p.text("[%d] " % index)
                p.text("  " * layer.child_level)
                if not self._layers.is_visible(layer):
                    p.text("(hidden) ")
                p.text(
                    "%s %r %s opacity=%d"
                    % (
                        getattr(layer.layer_type, "name", layer.layer_type),
                        layer.name,
                        getattr(layer.blend_mode, "name", layer.blend_mode),
                        layer.opacity,
                    )
                )
            for tag in self.animations():
                p.break_()
                p.text(
                    "tag %r frames %d-%d %s"
                    % (
                        tag.name,
                        tag.from_frame,
                        tag.to_frame,
                        getattr(tag.direction, "name", tag.direction),
                    )
                )
