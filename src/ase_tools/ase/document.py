"""
Aseprite document structure module.

This module contains the :py:class:`AsepriteDocument` class that represents
the low-level binary structure of an ``.ase`` / ``.aseprite`` file: a fixed
header followed by frames, each frame a bounded run of chunks.
"""

import io
import logging
from typing import Any, BinaryIO, Iterator, Optional, TypeVar

from attrs import define, field

from .base import BaseElement
from .bin_utils import is_readable, read_bytes
from .chunks import CelChunk, FrameTag, FrameTagsChunk, LayerChunk, read_chunk
from .header import FileHeader, FrameHeader

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="AsepriteDocument")
T_Frame = TypeVar("T_Frame", bound="Frame")


@define(frozen=True)
class Frame(BaseElement):
    """
    One animation frame.

    .. py:attribute:: header

        See :py:class:`~ase_tools.ase.header.FrameHeader`.

    .. py:attribute:: chunks

        Tuple of decoded chunks in stream order.
    """

    header: FrameHeader = field(factory=FrameHeader)
    chunks: tuple = field(factory=tuple, converter=tuple)

    @property
    def duration(self) -> int:
        """Frame duration in milliseconds."""
        return self.header.duration

    @property
    def cels(self) -> list:
        """Cel chunks of this frame in stream order."""
        return self.get_chunks(CelChunk)

    def get_chunks(self, kind: Any) -> list:
        """
        Chunks of the given kind.

        :param kind: chunk class, or a chunk type code.
        """
        if isinstance(kind, type):
            return [chunk for chunk in self.chunks if isinstance(chunk, kind)]
        return [chunk for chunk in self.chunks if chunk.chunk_type == kind]

    @classmethod
    def read(
        cls: type[T_Frame],
        fp: BinaryIO,
        header: Optional[FileHeader] = None,
        strict: bool = True,
        **kwargs: Any,
    ) -> T_Frame:
        frame_header = FrameHeader.read(fp)
        body = read_bytes(fp, frame_header.length - FrameHeader.SIZE)
        chunks = []
        with io.BytesIO(body) as f:
            while len(chunks) < frame_header.chunk_count and is_readable(f):
                chunks.append(read_chunk(f, header=header, strict=strict))
            leftover = len(body) - f.tell()

        if len(chunks) != frame_header.chunk_count:
            logger.warning(
                "Frame declares %d chunks, found %d"
                % (frame_header.chunk_count, len(chunks))
            )
        if leftover:
            logger.warning("Frame has %d trailing bytes" % leftover)
        return cls(frame_header, chunks)


@define(frozen=True, repr=False)
class AsepriteDocument(BaseElement):
    """
    Low-level Aseprite file structure that resembles the specification_.

    .. _specification: https://github.com/aseprite/aseprite/blob/main/docs/ase-file-specs.md

    Example::

        from ase_tools.ase import AsepriteDocument

        with open(input_file, 'rb') as f:
            document = AsepriteDocument.read(f)

        for frame in document.frames:
            print(frame.duration, len(frame.cels))

    .. py:attribute:: header

        See :py:class:`~ase_tools.ase.header.FileHeader`.

    .. py:attribute:: frames

        Tuple of :py:class:`Frame`.
    """

    header: FileHeader = field(factory=FileHeader)
    frames: tuple = field(factory=tuple, converter=tuple)

    @classmethod
    def read(
        cls: type[T], fp: BinaryIO, strict: bool = True, **kwargs: Any
    ) -> T:
        """
        Decode a whole document.

        :param fp: binary file-like object.
        :param strict: reject chunks whose payload is not consumed exactly.
        :raise FormatError: on truncated data or magic mismatches.
        """
        header = FileHeader.read(fp)
        logger.debug("read %s" % header)
        frames = []
        while is_readable(fp):
            frames.append(Frame.read(fp, header=header, strict=strict))
            logger.debug("read frame %d" % (len(frames) - 1))
        if len(frames) != header.frames:
            logger.warning(
                "Header declares %d frames, found %d" % (header.frames, len(frames))
            )
        return cls(header, frames)

    def __len__(self) -> int:
        return len(self.frames)

    def __repr__(self) -> str:
        return "%s(width=%d, height=%d, color_depth=%s, frames=%d)" % (
            self.__class__.__name__,
            self.header.width,
            self.header.height,
            self.header.color_depth.name,
            len(self.frames),
        )

    def iter_chunks(self, kind: Any = None) -> Iterator[Any]:
        """Iterate over chunks across frames in document order."""
        for frame in self.frames:
            chunks = frame.chunks if kind is None else frame.get_chunks(kind)
            for chunk in chunks:
                yield chunk

    def get_chunks(self, kind: Any) -> list:
        """
        Chunks of the given kind across all frames in document order.

        :param kind: chunk class, or a chunk type code.
        """
        return list(self.iter_chunks(kind))

    @property
    def layers(self) -> list[LayerChunk]:
        """Flattened layer list; positions are layer indices."""
        return self.get_chunks(LayerChunk)

    def frame_tags(self) -> list[FrameTag]:
        """All frame tags of all tag chunks, in document order."""
        return [tag for chunk in self.iter_chunks(FrameTagsChunk) for tag in chunk]
