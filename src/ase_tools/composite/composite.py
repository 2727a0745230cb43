"""Frame compositing: layer resolution, rasterization and blending."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, Optional

import numpy as np
from attrs import define, field

from ase_tools.api import numpy_io
from ase_tools.api.buffer import ImageBuffer
from ase_tools.api.layers import LayerTree
from ase_tools.ase.chunks import CelChunk
from ase_tools.ase.document import AsepriteDocument
from ase_tools.composite.blend import blend
from ase_tools.composite.raster import rasterize_cel
from ase_tools.constants import BlendMode, ColorDepth
from ase_tools.exceptions import AsepriteError, FormatError

logger = logging.getLogger(__name__)


class Compositor(object):
    """Composite context for one frame.

    Example::

        compositor = Compositor(document, LayerTree(document.layers))
        for cel in sorted(frame.cels, key=lambda cel: cel.layer_index):
            compositor.apply(cel)
        image = compositor.finish()

    :param document: decoded document, only read.
    :param layer_tree: :py:class:`~ase_tools.api.layers.LayerTree` over the
        document layers. Built when omitted.
    :param palette: ``(256, 4)`` lookup table for indexed documents. Built
        when omitted.
    :param normal_opacity: apply layer and cel opacity to Normal layers too.
        Normal layers composite at full strength otherwise.
    :param strict_blend: raise for unknown blend modes.
    """

    def __init__(
        self,
        document: AsepriteDocument,
        layer_tree: Optional[LayerTree] = None,
        palette: Optional[np.ndarray] = None,
        normal_opacity: bool = False,
        strict_blend: bool = False,
    ):
        self._document = document
        self._layer_tree = (
            layer_tree if layer_tree is not None else LayerTree(document.layers)
        )
        if palette is None and document.header.color_depth == ColorDepth.INDEXED:
            palette = numpy_io.build_palette(document)
        self._palette = palette
        self._normal_opacity = normal_opacity
        self._strict_blend = strict_blend
        self._canvas = ImageBuffer.new(self.width, self.height)

    @property
    def width(self) -> int:
        return self._document.header.width

    @property
    def height(self) -> int:
        return self._document.header.height

    def apply(self, cel: CelChunk) -> None:
        layer = self._layer_tree[cel.layer_index]
        logger.debug("Compositing cel of layer %d %r" % (cel.layer_index, layer.name))

        if layer.is_group:
            logger.debug("Ignore group %r" % layer.name)
            return
        if not self._layer_tree.is_visible(layer):
            logger.debug("Ignore hidden %r" % layer.name)
            return

        cel = self._resolve_link(cel)
        if cel.is_tilemap:
            logger.warning("Tilemap cel of layer %r is not supported" % layer.name)
            return

        pixels = numpy_io.decode_pixels(
            cel.data,
            self._document.header.color_depth,
            cel.width,
            cel.height,
            palette=self._palette,
            transparent_index=self._document.header.transparent_index,
        )
        source = rasterize_cel(pixels, cel.x, cel.y, self.width, self.height)

        if layer.blend_mode == BlendMode.NORMAL and not self._normal_opacity:
            opacity = 1.0
        else:
            opacity = min(layer.opacity, cel.opacity) / 255.0
        self._canvas = ImageBuffer(
            blend(
                self._canvas.data,
                source.data,
                layer.blend_mode,
                opacity,
                strict=self._strict_blend,
            )
        )

    def finish(self) -> ImageBuffer:
        return self._canvas

    def _resolve_link(self, cel: CelChunk) -> CelChunk:
        """Follow linked cels to the cel holding the pixels."""
        seen = set()
        while cel.is_linked:
            if cel.link in seen:
                raise FormatError("Circular cel link to frame %d" % cel.link)
            seen.add(cel.link)
            if not 0 <= cel.link < len(self._document.frames):
                raise FormatError("Cel links to missing frame %d" % cel.link)
            frame = self._document.frames[cel.link]
            target = [c for c in frame.cels if c.layer_index == cel.layer_index]
            if not target:
                raise FormatError(
                    "Frame %d has no cel for layer %d" % (cel.link, cel.layer_index)
                )
            cel = target[0]
        return cel


def composite_frame(
    document: AsepriteDocument,
    index: int,
    layer_tree: Optional[LayerTree] = None,
    palette: Optional[np.ndarray] = None,
    scan_first: bool = True,
    **kwargs,
) -> ImageBuffer:
    """
    Composite one frame into a canvas-sized buffer.

    Cels are applied in ascending layer index; cels of the same layer keep
    their stream order.

    :param document: decoded document.
    :param index: frame index.
    :param scan_first: see :py:class:`~ase_tools.api.layers.LayerTree`,
        used when ``layer_tree`` is omitted.
    :return: :py:class:`~ase_tools.api.buffer.ImageBuffer`.
    :raise LayerIndexError: when a cel refers to a missing layer.
    """
    frame = document.frames[index]
    if layer_tree is None:
        layer_tree = LayerTree(document.layers, scan_first=scan_first)
    compositor = Compositor(document, layer_tree, palette, **kwargs)
    for cel in sorted(frame.cels, key=lambda cel: cel.layer_index):
        compositor.apply(cel)
    return compositor.finish()


@define(frozen=True)
class FrameBatch(object):
    """
    Result of compositing several frames.

    .. py:attribute:: images

        One entry per requested frame, in frame order: an
        :py:class:`~ase_tools.api.buffer.ImageBuffer`, or None on failure.

    .. py:attribute:: failures

        Mapping of failed frame index to the error raised.
    """

    images: list = field(factory=list)
    failures: dict = field(factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


def composite_frames(
    document: AsepriteDocument,
    indices: Optional[Iterable[int]] = None,
    workers: Optional[int] = None,
    scan_first: bool = True,
    **kwargs,
) -> FrameBatch:
    """
    Composite frames in parallel.

    The document is only read, every frame owns its buffer. A frame that
    fails is logged and reported in :py:attr:`FrameBatch.failures` while the
    other frames are still returned.

    :param indices: frame indices, all frames when omitted.
    :param workers: maximum number of worker threads.
    :param scan_first: see :py:class:`~ase_tools.api.layers.LayerTree`.
    :return: :py:class:`FrameBatch`.
    """
    if indices is None:
        indices = range(len(document.frames))
    indices = list(indices)
    layer_tree = LayerTree(document.layers, scan_first=scan_first)
    palette = None
    if document.header.color_depth == ColorDepth.INDEXED:
        palette = numpy_io.build_palette(document)

    results: dict = {}
    failures: dict = {}
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(
                composite_frame, document, index, layer_tree, palette, **kwargs
            ): index
            for index in indices
        }
        for future in as_completed(futures):
            index = futures[future]
            try:
                results[index] = future.result()
            except AsepriteError as e:
                logger.error("Failed to composite frame %d: %s" % (index, e))
                failures[index] = e

    return FrameBatch([results.get(index) for index in indices], failures)
