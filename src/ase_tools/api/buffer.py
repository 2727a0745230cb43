"""
Image buffer module.

:py:class:`ImageBuffer` is the pixel host the compositor draws into. Pixels
are float32 RGBA values in [0, 1] stored with **bottom-up** rows: row 0 of
the array is the bottom row of the picture. :py:meth:`ImageBuffer.finalize`
flips the rows back to the usual top-down order for output.
"""

import logging
from typing import Any

import numpy as np
from PIL import Image

from ase_tools.api import pil_io

logger = logging.getLogger(__name__)


class ImageBuffer(object):
    """
    Canvas-sized RGBA accumulator with bottom-up rows.

    Example::

        buffer = ImageBuffer.new(4, 4)
        buffer.set_pixel_block(0, 0, 2, 2, np.ones((2, 2, 4)))
        array = buffer.finalize()  # top-down, the block is at the bottom left
    """

    def __init__(self, data: np.ndarray):
        if data.ndim != 3 or data.shape[2] != 4:
            raise ValueError("Expected (height, width, 4) array, got %r" % (data.shape,))
        self._data = data

    @classmethod
    def new(cls, width: int, height: int) -> "ImageBuffer":
        """Create a fully transparent buffer."""
        return cls(np.zeros((height, width, 4), dtype=np.float32))

    @property
    def width(self) -> int:
        return self._data.shape[1]

    @property
    def height(self) -> int:
        return self._data.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) tuple."""
        return self.width, self.height

    @property
    def data(self) -> np.ndarray:
        """Underlying bottom-up array."""
        return self._data

    def set_pixel_block(
        self, x: int, y: int, width: int, height: int, colors: Any
    ) -> None:
        """
        Write a block of pixels.

        :param x: left column.
        :param y: bottom row of the block, counted from the bottom.
        :param width: block width.
        :param height: block height.
        :param colors: RGBA values, either ``(height, width, 4)`` or flat, in
            bottom-up row order.
        """
        if width <= 0 or height <= 0:
            return
        if x < 0 or y < 0 or x + width > self.width or y + height > self.height:
            raise ValueError(
                "Block (%d, %d, %d, %d) exceeds buffer size %r"
                % (x, y, width, height, self.size)
            )
        block = np.asarray(colors, dtype=np.float32).reshape((height, width, 4))
        self._data[y : y + height, x : x + width, :] = block

    def copy(self) -> "ImageBuffer":
        return self.__class__(self._data.copy())

    def finalize(self) -> np.ndarray:
        """Top-down copy of the pixels."""
        return np.flipud(self._data).copy()

    def topil(self) -> Image.Image:
        """Convert the pixels to a PIL Image in RGBA mode."""
        return pil_io.convert_array_to_pil(self.finalize())

    def __repr__(self) -> str:
        return "%s(width=%d, height=%d)" % (
            self.__class__.__name__,
            self.width,
            self.height,
        )
