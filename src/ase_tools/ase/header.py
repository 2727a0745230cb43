"""
File and frame header structures.
"""

import logging
from typing import Any, BinaryIO, TypeVar

from attrs import astuple, define, field

from ase_tools.ase.base import BaseElement
from ase_tools.ase.bin_utils import read_fmt, write_fmt
from ase_tools.constants import ColorDepth, HeaderFlags
from ase_tools.exceptions import FormatError
from ase_tools.validators import in_, range_

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="FileHeader")
T_FrameHeader = TypeVar("T_FrameHeader", bound="FrameHeader")

FILE_MAGIC = 0xA5E0
FRAME_MAGIC = 0xF1FA


@define(frozen=True)
class FileHeader(BaseElement):
    """
    Header section of the Aseprite file, a fixed 128-byte block.

    Example::

        from ase_tools.ase.header import FileHeader
        from ase_tools.constants import ColorDepth

        header = FileHeader(frames=4, width=32, height=32,
                            color_depth=ColorDepth.RGBA)

    .. py:attribute:: file_size

        Size of the whole file in bytes.

    .. py:attribute:: magic

        Magic number: always equal to ``0xA5E0``.

    .. py:attribute:: frames

        Number of frames.

    .. py:attribute:: width

        Canvas width in pixels.

    .. py:attribute:: height

        Canvas height in pixels.

    .. py:attribute:: color_depth

        Bits per pixel. See :py:class:`~ase_tools.constants.ColorDepth`.

    .. py:attribute:: flags

        See :py:class:`~ase_tools.constants.HeaderFlags`.

    .. py:attribute:: speed

        Milliseconds between frames, deprecated in favor of frame durations.

    .. py:attribute:: transparent_index

        Palette entry that represents transparent color in indexed sprites.

    .. py:attribute:: colors

        Number of colors, 0 means 256 for old sprites.
    """

    _FORMAT = "IHHHHHIH8xB3xHBBhhHH84x"
    SIZE = 128

    file_size: int = 0
    magic: int = field(default=FILE_MAGIC, repr=False)
    frames: int = field(default=1, validator=range_(0, 0xFFFF))
    width: int = field(default=64, validator=range_(1, 0xFFFF))
    height: int = field(default=64, validator=range_(1, 0xFFFF))
    color_depth: ColorDepth = field(
        default=ColorDepth.RGBA, converter=ColorDepth, validator=in_(ColorDepth)
    )
    flags: HeaderFlags = field(
        default=HeaderFlags.LAYER_OPACITY_VALID, converter=HeaderFlags
    )
    speed: int = 100
    transparent_index: int = 0
    colors: int = 0
    pixel_width: int = 1
    pixel_height: int = 1
    grid_x: int = 0
    grid_y: int = 0
    grid_width: int = 16
    grid_height: int = 16

    @magic.validator
    def _validate_magic(self, attribute: Any, value: int) -> None:
        if value != FILE_MAGIC:
            raise FormatError(
                "This is not an Aseprite file: magic 0x%04X, expected 0x%04X"
                % (value, FILE_MAGIC)
            )

    @property
    def layer_opacity_valid(self) -> bool:
        return bool(self.flags & HeaderFlags.LAYER_OPACITY_VALID)

    @classmethod
    def read(cls: type[T], fp: BinaryIO, **kwargs: Any) -> T:
        values = read_fmt(cls._FORMAT, fp)
        try:
            return cls(*values)
        except FormatError:
            raise
        except ValueError as e:
            raise FormatError("Invalid file header: %s" % e) from e

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        return write_fmt(fp, self._FORMAT, *astuple(self))


@define(frozen=True)
class FrameHeader(BaseElement):
    """
    16-byte header in front of each frame.

    .. py:attribute:: length

        Bytes in this frame, including this header.

    .. py:attribute:: magic

        Magic number: always equal to ``0xF1FA``.

    .. py:attribute:: old_chunks

        Old field for the number of chunks, ``0xFFFF`` when there are more.

    .. py:attribute:: duration

        Frame duration in milliseconds.

    .. py:attribute:: new_chunks

        Number of chunks, 0 in files that only use the old field.
    """

    _FORMAT = "IHHH2xI"
    SIZE = 16

    length: int = 16
    magic: int = field(default=FRAME_MAGIC, repr=False)
    old_chunks: int = 0
    duration: int = 100
    new_chunks: int = 0

    @magic.validator
    def _validate_magic(self, attribute: Any, value: int) -> None:
        if value != FRAME_MAGIC:
            raise FormatError(
                "Invalid frame magic 0x%04X, expected 0x%04X" % (value, FRAME_MAGIC)
            )

    @property
    def chunk_count(self) -> int:
        """Number of chunks in the frame."""
        return self.new_chunks if self.new_chunks else self.old_chunks

    @classmethod
    def read(cls: type[T_FrameHeader], fp: BinaryIO, **kwargs: Any) -> T_FrameHeader:
        self = cls(*read_fmt(cls._FORMAT, fp))
        if self.length < cls.SIZE:
            raise FormatError("Invalid frame length: %d" % self.length)
        return self

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        return write_fmt(fp, self._FORMAT, *astuple(self))
