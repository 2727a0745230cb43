"""
Chunk structures.

A frame is a run of self-describing chunks. Each chunk starts with its total
size (DWORD, header included) and a type code (WORD), followed by a payload
of ``size - 6`` bytes. The payload is decoded by the class registered in
:py:data:`TYPES` for the type code; unknown codes are kept as
:py:class:`RawChunk` so the stream stays synchronized.

Decoded variants:

- :py:class:`LayerChunk`: one entry of the document-wide layer list
- :py:class:`CelChunk`: pixels of one layer in one frame
- :py:class:`FrameTagsChunk`: animation clips
- :py:class:`PaletteChunk`, :py:class:`OldPaletteChunk`: indexed colors

Every decoded chunk carries a ``chunk_type`` attribute, so filtering by type
works the same way for decoded and raw chunks.
"""

import io
import logging
import zlib
from typing import Any, BinaryIO, Iterator, Optional, TypeVar, Union

from attrs import define, field

from ase_tools.ase.base import BaseElement
from ase_tools.ase.bin_utils import (
    read_bytes,
    read_fmt,
    read_string,
    trimmed_repr,
)
from ase_tools.ase.header import FileHeader
from ase_tools.constants import (
    AnimationDirection,
    BlendMode,
    CelType,
    ChunkType,
    HeaderFlags,
    LayerFlags,
    LayerType,
)
from ase_tools.exceptions import FormatError
from ase_tools.registry import new_registry
from ase_tools.validators import range_

logger = logging.getLogger(__name__)

TYPES, register = new_registry(attribute="chunk_type")

CHUNK_HEADER_SIZE = 6

T_LayerChunk = TypeVar("T_LayerChunk", bound="LayerChunk")
T_CelChunk = TypeVar("T_CelChunk", bound="CelChunk")
T_FrameTag = TypeVar("T_FrameTag", bound="FrameTag")
T_FrameTagsChunk = TypeVar("T_FrameTagsChunk", bound="FrameTagsChunk")
T_PaletteEntry = TypeVar("T_PaletteEntry", bound="PaletteEntry")
T_PaletteChunk = TypeVar("T_PaletteChunk", bound="PaletteChunk")
T_OldPaletteChunk = TypeVar("T_OldPaletteChunk", bound="OldPaletteChunk")


def _maybe_enum(enum_type: Any) -> Any:
    """Converter that keeps unknown codes as plain ints."""

    def converter(value: Any) -> Any:
        try:
            return enum_type(value)
        except ValueError:
            return int(value)

    return converter


def read_chunk(
    fp: BinaryIO, header: Optional[FileHeader] = None, strict: bool = True
) -> Any:
    """
    Read one chunk at the current position.

    :param fp: file-like object positioned at a chunk boundary.
    :param header: file header; some payloads depend on its flags.
    :param strict: raise :py:exc:`~ase_tools.exceptions.FormatError` when the
        payload decoder does not consume the declared size exactly.
    :return: decoded chunk, or :py:class:`RawChunk` for unknown types.
    """
    size, code = read_fmt("IH", fp)
    if size < CHUNK_HEADER_SIZE:
        raise FormatError("Invalid chunk size %d for type 0x%04X" % (size, code))
    payload = read_bytes(fp, size - CHUNK_HEADER_SIZE)

    try:
        code = ChunkType(code)
    except ValueError:
        logger.info("Unknown chunk type: 0x%04X, %s" % (code, trimmed_repr(payload)))

    kls = TYPES.get(code)
    if kls is None:
        logger.debug("Keep raw chunk 0x%04X (%d bytes)" % (code, len(payload)))
        return RawChunk(code, payload)

    with io.BytesIO(payload) as f:
        try:
            chunk = kls.read(f, header=header)
        except FormatError as e:
            raise FormatError("Failed to read chunk %r: %s" % (code, e)) from e
        except (ValueError, zlib.error) as e:
            raise FormatError("Failed to read chunk %r: %s" % (code, e)) from e
        leftover = len(payload) - f.tell()

    if leftover:
        message = "Chunk %r left %d of %d payload bytes unread" % (
            code,
            leftover,
            len(payload),
        )
        if strict:
            raise FormatError(message)
        logger.warning(message)
    logger.debug("read %s" % chunk.__class__.__name__)
    return chunk


@define(frozen=True)
class RawChunk(BaseElement):
    """
    Chunk that is not decoded: color profile, user data, slices, etc.

    .. py:attribute:: chunk_type

        Type code, :py:class:`~ase_tools.constants.ChunkType` when known.

    .. py:attribute:: data

        Payload bytes.
    """

    chunk_type: Union[ChunkType, int] = 0
    data: bytes = field(default=b"", repr=trimmed_repr)


@register(ChunkType.LAYER)
@define(frozen=True)
class LayerChunk(BaseElement):
    """
    Layer chunk. Layers appear once per document, in the first frame, in
    depth-first pre-order; their position in that list is the layer index.

    .. py:attribute:: flags

        See :py:class:`~ase_tools.constants.LayerFlags`.

    .. py:attribute:: layer_type

        See :py:class:`~ase_tools.constants.LayerType`.

    .. py:attribute:: child_level

        Depth in the layer tree, 0 for top level layers.

    .. py:attribute:: blend_mode

        See :py:class:`~ase_tools.constants.BlendMode`. Unknown codes stay
        plain ints.

    .. py:attribute:: opacity

        Opacity in [0, 255]. Always 255 when the file header does not mark
        layer opacity as valid.

    .. py:attribute:: name

        Layer name.

    .. py:attribute:: tileset_index

        Tileset of a tilemap layer, otherwise None.

    .. py:attribute:: uuid

        16-byte layer UUID when the file header says layers carry one.
    """

    flags: LayerFlags = field(
        default=LayerFlags.VISIBLE | LayerFlags.EDITABLE, converter=LayerFlags
    )
    layer_type: LayerType = field(default=LayerType.NORMAL, converter=LayerType)
    child_level: int = 0
    default_width: int = 0
    default_height: int = 0
    blend_mode: Union[BlendMode, int] = field(
        default=BlendMode.NORMAL, converter=_maybe_enum(BlendMode)
    )
    opacity: int = field(default=255, validator=range_(0, 255))
    name: str = ""
    tileset_index: Optional[int] = None
    uuid: Optional[bytes] = field(default=None, repr=False)

    @property
    def visible(self) -> bool:
        return bool(self.flags & LayerFlags.VISIBLE)

    @property
    def is_group(self) -> bool:
        return self.layer_type == LayerType.GROUP

    @classmethod
    def read(
        cls: type[T_LayerChunk],
        fp: BinaryIO,
        header: Optional[FileHeader] = None,
        **kwargs: Any,
    ) -> T_LayerChunk:
        (
            flags,
            layer_type,
            child_level,
            default_width,
            default_height,
            blend_mode,
            opacity,
        ) = read_fmt("HHHHHHB3x", fp)
        name = read_string(fp)
        tileset_index = None
        if layer_type == LayerType.TILEMAP:
            tileset_index = read_fmt("I", fp)[0]
        uuid = None
        if header is not None:
            if header.flags & HeaderFlags.LAYER_UUID:
                uuid = read_bytes(fp, 16)
            if not header.layer_opacity_valid:
                opacity = 255
        return cls(
            flags,
            layer_type,
            child_level,
            default_width,
            default_height,
            blend_mode,
            opacity,
            name,
            tileset_index,
            uuid,
        )


@register(ChunkType.CEL)
@define(frozen=True)
class CelChunk(BaseElement):
    """
    Cel chunk: the content of one layer in one frame.

    .. py:attribute:: layer_index

        Index into the document-wide layer list.

    .. py:attribute:: x

        Horizontal position relative to the canvas origin, may be negative.

    .. py:attribute:: y

        Vertical position relative to the canvas origin, may be negative.

    .. py:attribute:: opacity

        Cel opacity in [0, 255].

    .. py:attribute:: cel_type

        See :py:class:`~ase_tools.constants.CelType`.

    .. py:attribute:: z_index

        Ordering offset relative to the layer; not used for compositing.

    .. py:attribute:: width

        Width in pixels, or in tiles for tilemaps.

    .. py:attribute:: height

        Height in pixels, or in tiles for tilemaps.

    .. py:attribute:: data

        Uncompressed pixels, row-major and top-down, or tile data.

    .. py:attribute:: link

        Frame position of the cel this one links to, for linked cels.
    """

    layer_index: int = 0
    x: int = 0
    y: int = 0
    opacity: int = field(default=255, validator=range_(0, 255))
    cel_type: Union[CelType, int] = field(
        default=CelType.RAW_IMAGE, converter=_maybe_enum(CelType)
    )
    z_index: int = 0
    width: int = 0
    height: int = 0
    data: bytes = field(default=b"", repr=trimmed_repr)
    link: Optional[int] = None

    @property
    def is_linked(self) -> bool:
        return self.cel_type == CelType.LINKED

    @property
    def is_tilemap(self) -> bool:
        return self.cel_type == CelType.COMPRESSED_TILEMAP

    @classmethod
    def read(cls: type[T_CelChunk], fp: BinaryIO, **kwargs: Any) -> T_CelChunk:
        layer_index, x, y, opacity, cel_type, z_index = read_fmt("HhhBHh5x", fp)
        width = height = 0
        data = b""
        link = None
        if cel_type == CelType.RAW_IMAGE:
            width, height = read_fmt("HH", fp)
            data = fp.read()
        elif cel_type == CelType.LINKED:
            link = read_fmt("H", fp)[0]
        elif cel_type == CelType.COMPRESSED_IMAGE:
            width, height = read_fmt("HH", fp)
            data = zlib.decompress(fp.read())
        elif cel_type == CelType.COMPRESSED_TILEMAP:
            # Tile size and bitmasks are not needed as tilemaps are not drawn.
            width, height = read_fmt("HH", fp)
            read_fmt("H4I10x", fp)
            data = zlib.decompress(fp.read())
        else:
            raise FormatError("Unknown cel type: %d" % cel_type)
        return cls(layer_index, x, y, opacity, cel_type, z_index, width, height, data, link)


@define(frozen=True)
class FrameTag(BaseElement):
    """
    Named frame range.

    .. py:attribute:: from_frame

        First frame of the range.

    .. py:attribute:: to_frame

        Last frame of the range, inclusive.

    .. py:attribute:: direction

        See :py:class:`~ase_tools.constants.AnimationDirection`.

    .. py:attribute:: repeat

        Number of repetitions, 0 means infinite.

    .. py:attribute:: color

        Deprecated tag color as an (r, g, b) tuple.

    .. py:attribute:: name

        Tag name.
    """

    from_frame: int = 0
    to_frame: int = 0
    direction: Union[AnimationDirection, int] = field(
        default=AnimationDirection.FORWARD, converter=_maybe_enum(AnimationDirection)
    )
    repeat: int = 0
    color: tuple = field(default=(0, 0, 0), converter=tuple)
    name: str = ""

    @classmethod
    def read(cls: type[T_FrameTag], fp: BinaryIO, **kwargs: Any) -> T_FrameTag:
        from_frame, to_frame, direction, repeat, red, green, blue = read_fmt(
            "HHBH6x3Bx", fp
        )
        name = read_string(fp)
        return cls(from_frame, to_frame, direction, repeat, (red, green, blue), name)


@register(ChunkType.FRAME_TAGS)
@define(frozen=True)
class FrameTagsChunk(BaseElement):
    """
    Frame tags chunk.

    .. py:attribute:: tags

        Tuple of :py:class:`FrameTag`.
    """

    tags: tuple = field(factory=tuple, converter=tuple)

    @classmethod
    def read(
        cls: type[T_FrameTagsChunk], fp: BinaryIO, **kwargs: Any
    ) -> T_FrameTagsChunk:
        count = read_fmt("H8x", fp)[0]
        return cls([FrameTag.read(fp) for _ in range(count)])

    def __iter__(self) -> Iterator[FrameTag]:
        return iter(self.tags)

    def __len__(self) -> int:
        return len(self.tags)


@define(frozen=True)
class PaletteEntry(BaseElement):
    """
    Palette color.
    """

    red: int = 0
    green: int = 0
    blue: int = 0
    alpha: int = 255
    name: Optional[str] = None

    @classmethod
    def read(cls: type[T_PaletteEntry], fp: BinaryIO, **kwargs: Any) -> T_PaletteEntry:
        flags, red, green, blue, alpha = read_fmt("H4B", fp)
        name = read_string(fp) if flags & 1 else None
        return cls(red, green, blue, alpha, name)


@register(ChunkType.PALETTE)
@define(frozen=True)
class PaletteChunk(BaseElement):
    """
    Palette chunk, replaces entries ``first`` to ``last`` of the palette.

    .. py:attribute:: size

        New palette size.

    .. py:attribute:: first

        First color index to change.

    .. py:attribute:: entries

        Tuple of :py:class:`PaletteEntry`.
    """

    size: int = 0
    first: int = 0
    entries: tuple = field(factory=tuple, converter=tuple)

    @property
    def last(self) -> int:
        return self.first + len(self.entries) - 1

    @classmethod
    def read(cls: type[T_PaletteChunk], fp: BinaryIO, **kwargs: Any) -> T_PaletteChunk:
        size, first, last = read_fmt("III8x", fp)
        if last < first:
            raise FormatError("Invalid palette range: %d to %d" % (first, last))
        entries = [PaletteEntry.read(fp) for _ in range(last - first + 1)]
        return cls(size, first, entries)

    def iter_colors(self) -> Iterator[tuple[int, int, int, int, int]]:
        """Yield (index, red, green, blue, alpha) tuples."""
        for index, entry in enumerate(self.entries, self.first):
            yield index, entry.red, entry.green, entry.blue, entry.alpha


@register(ChunkType.OLD_PALETTE)
@define(frozen=True)
class OldPaletteChunk(BaseElement):
    """
    Palette chunk of old files, made of packets of (skip, colors).

    .. py:attribute:: packets

        Tuple of ``(entries_to_skip, ((r, g, b), ...))`` pairs.
    """

    _MAXIMUM = 255

    packets: tuple = field(factory=tuple, converter=tuple)

    @classmethod
    def read(
        cls: type[T_OldPaletteChunk], fp: BinaryIO, **kwargs: Any
    ) -> T_OldPaletteChunk:
        packets = []
        for _ in range(read_fmt("H", fp)[0]):
            skip, count = read_fmt("BB", fp)
            count = count or 256
            colors = tuple(read_fmt("3B", fp) for _ in range(count))
            packets.append((skip, colors))
        return cls(packets)

    def iter_colors(self) -> Iterator[tuple[int, int, int, int, int]]:
        """Yield (index, red, green, blue, alpha) tuples scaled to [0, 255]."""
        index = 0
        for skip, colors in self.packets:
            index += skip
            for red, green, blue in colors:
                yield (
                    index,
                    red * 255 // self._MAXIMUM,
                    green * 255 // self._MAXIMUM,
                    blue * 255 // self._MAXIMUM,
                    255,
                )
                index += 1


@register(ChunkType.OLD_PALETTE_64)
@define(frozen=True)
class OldPalette64Chunk(OldPaletteChunk):
    """
    Old palette chunk with color components in [0, 63].
    """

    _MAXIMUM = 63
