"""
Cel rasterization.

A cel is a block of pixels positioned relative to the canvas origin, possibly
hanging over any edge. :py:func:`clip_cel` computes the part that lands on
the canvas and :py:func:`rasterize_cel` draws that part into a canvas-sized
:py:class:`~ase_tools.api.buffer.ImageBuffer`.

Cel pixels are top-down while the buffer is bottom-up, so rows are reversed
while copying and the placement row is counted from the bottom.
"""

import logging

import numpy as np
from attrs import define

from ase_tools.api.buffer import ImageBuffer

logger = logging.getLogger(__name__)


@define(frozen=True)
class CelRegion(object):
    """
    Visible part of a cel.

    .. py:attribute:: x

        Canvas column of the cel's left edge, may be negative.

    .. py:attribute:: y

        Canvas row of the cel's top edge, may be negative.

    .. py:attribute:: offset_x

        Columns skipped at the left of the source.

    .. py:attribute:: offset_y

        Rows skipped at the top of the source.

    .. py:attribute:: width

        Clipped width, 0 when the cel is off canvas.

    .. py:attribute:: height

        Clipped height, 0 when the cel is off canvas.
    """

    x: int
    y: int
    offset_x: int
    offset_y: int
    width: int
    height: int

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def placement(self, canvas_height: int) -> tuple[int, int]:
        """Column and bottom-up row where the clipped block is written."""
        return (
            self.x + self.offset_x,
            canvas_height - (self.y + self.offset_y) - self.height,
        )


def clip_cel(
    x: int, y: int, width: int, height: int, canvas_width: int, canvas_height: int
) -> CelRegion:
    """Clip a cel rectangle against the canvas bounds on all four sides."""
    offset_x = max(0, -x)
    offset_y = max(0, -y)
    clipped_width = max(0, min(x + width, canvas_width) - (x + offset_x))
    clipped_height = max(0, min(y + height, canvas_height) - (y + offset_y))
    if clipped_width == 0 or clipped_height == 0:
        clipped_width = clipped_height = 0
    return CelRegion(x, y, offset_x, offset_y, clipped_width, clipped_height)


def rasterize_cel(
    pixels: np.ndarray, x: int, y: int, canvas_width: int, canvas_height: int
) -> ImageBuffer:
    """
    Draw cel pixels into a transparent canvas-sized buffer.

    :param pixels: top-down ``(height, width, 4)`` RGBA array.
    :param x: cel column relative to the canvas origin.
    :param y: cel row relative to the canvas origin, counted from the top.
    :return: :py:class:`~ase_tools.api.buffer.ImageBuffer`.
    """
    buffer = ImageBuffer.new(canvas_width, canvas_height)
    region = clip_cel(
        x, y, pixels.shape[1], pixels.shape[0], canvas_width, canvas_height
    )
    if region.is_empty:
        logger.debug("Cel at (%d, %d) is off canvas" % (x, y))
        return buffer

    block = pixels[
        region.offset_y : region.offset_y + region.height,
        region.offset_x : region.offset_x + region.width,
    ][::-1]
    column, row = region.placement(canvas_height)
    buffer.set_pixel_block(column, row, region.width, region.height, block)
    return buffer
