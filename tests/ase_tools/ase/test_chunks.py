import io
import logging
import zlib

import pytest

from ase_tools.ase.bin_utils import pack
from ase_tools.ase.chunks import (
    TYPES,
    CelChunk,
    FrameTagsChunk,
    LayerChunk,
    OldPalette64Chunk,
    OldPaletteChunk,
    PaletteChunk,
    RawChunk,
    read_chunk,
)
from ase_tools.ase.header import FileHeader
from ase_tools.constants import (
    AnimationDirection,
    BlendMode,
    CelType,
    ChunkType,
    HeaderFlags,
    LayerType,
)
from ase_tools.exceptions import FormatError

from ..utils import (
    pack_cel,
    pack_chunk,
    pack_layer,
    pack_old_palette,
    pack_palette,
    pack_tags,
    solid,
)

logger = logging.getLogger(__name__)


def read(data: bytes, **kwargs):
    with io.BytesIO(data) as f:
        chunk = read_chunk(f, **kwargs)
        assert f.read() == b""
    return chunk


def test_registry() -> None:
    assert TYPES[ChunkType.LAYER] is LayerChunk
    assert TYPES[ChunkType.CEL] is CelChunk
    assert TYPES[ChunkType.OLD_PALETTE_64] is OldPalette64Chunk
    assert LayerChunk.chunk_type == ChunkType.LAYER
    assert OldPaletteChunk.chunk_type == ChunkType.OLD_PALETTE


def test_layer_chunk() -> None:
    chunk = read(
        pack_layer(
            "Body",
            child_level=2,
            visible=False,
            blend_mode=BlendMode.SCREEN,
            opacity=128,
        ),
        header=FileHeader(),
    )
    assert isinstance(chunk, LayerChunk)
    assert chunk.name == "Body"
    assert chunk.child_level == 2
    assert not chunk.visible
    assert not chunk.is_group
    assert chunk.blend_mode == BlendMode.SCREEN
    assert chunk.opacity == 128
    assert chunk.tileset_index is None


def test_layer_chunk_group_and_tilemap() -> None:
    assert read(pack_layer(layer_type=LayerType.GROUP)).is_group
    chunk = read(pack_layer(layer_type=LayerType.TILEMAP, tileset_index=7))
    assert chunk.layer_type == LayerType.TILEMAP
    assert chunk.tileset_index == 7


def test_layer_chunk_opacity_invalid() -> None:
    chunk = read(pack_layer(opacity=10), header=FileHeader(flags=0))
    assert chunk.opacity == 255


def test_layer_chunk_uuid() -> None:
    uuid = bytes(range(16))
    header = FileHeader(flags=HeaderFlags.LAYER_OPACITY_VALID | HeaderFlags.LAYER_UUID)
    chunk = read(pack_layer(uuid=uuid), header=header)
    assert chunk.uuid == uuid


def test_layer_chunk_unknown_blend_mode() -> None:
    chunk = read(pack_layer(blend_mode=99))
    assert chunk.blend_mode == 99
    assert not isinstance(chunk.blend_mode, BlendMode)


def test_cel_chunk_raw() -> None:
    pixels = solid(2, 3, (1, 2, 3, 4))
    chunk = read(pack_cel(1, x=-2, y=5, pixels=pixels, width=2, height=3, opacity=77))
    assert isinstance(chunk, CelChunk)
    assert (chunk.layer_index, chunk.x, chunk.y) == (1, -2, 5)
    assert (chunk.width, chunk.height) == (2, 3)
    assert chunk.opacity == 77
    assert chunk.cel_type == CelType.RAW_IMAGE
    assert chunk.data == pixels


def test_cel_chunk_compressed() -> None:
    pixels = solid(4, 4, (9, 8, 7, 255))
    chunk = read(
        pack_cel(0, pixels=pixels, width=4, height=4, cel_type=CelType.COMPRESSED_IMAGE)
    )
    assert chunk.cel_type == CelType.COMPRESSED_IMAGE
    assert chunk.data == pixels


def test_cel_chunk_linked() -> None:
    chunk = read(pack_cel(2, cel_type=CelType.LINKED, link=3))
    assert chunk.is_linked
    assert chunk.link == 3
    assert chunk.data == b""


def test_cel_chunk_tilemap() -> None:
    chunk = read(
        pack_cel(0, pixels=bytes(16), width=2, height=2,
                 cel_type=CelType.COMPRESSED_TILEMAP)
    )
    assert chunk.is_tilemap
    assert chunk.data == bytes(16)


def test_cel_chunk_bad_zlib() -> None:
    payload = pack("HhhBHh5x", 0, 0, 0, 255, CelType.COMPRESSED_IMAGE, 0)
    payload += pack("HH", 1, 1) + b"not zlib"
    with pytest.raises(FormatError):
        read(pack_chunk(ChunkType.CEL, payload))


def test_frame_tags_chunk() -> None:
    chunk = read(
        pack_tags([("walk", 0, 3, AnimationDirection.FORWARD), ("jump", 4, 6, 2)])
    )
    assert isinstance(chunk, FrameTagsChunk)
    assert len(chunk) == 2
    walk, jump = chunk
    assert (walk.name, walk.from_frame, walk.to_frame) == ("walk", 0, 3)
    assert jump.direction == AnimationDirection.PING_PONG


def test_palette_chunk() -> None:
    chunk = read(pack_palette([(1, 2, 3, 255), (4, 5, 6, 0)], first=3))
    assert isinstance(chunk, PaletteChunk)
    assert chunk.last == 4
    assert list(chunk.iter_colors()) == [(3, 1, 2, 3, 255), (4, 4, 5, 6, 0)]


def test_palette_chunk_named_entry() -> None:
    payload = pack("III8x", 1, 0, 0) + pack("H4B", 1, 10, 20, 30, 255)
    payload += pack("H", 3) + b"red"
    chunk = read(pack_chunk(ChunkType.PALETTE, payload))
    assert chunk.entries[0].name == "red"


def test_old_palette_chunks() -> None:
    chunk = read(pack_old_palette([(255, 0, 10)], skip=2))
    assert list(chunk.iter_colors()) == [(2, 255, 0, 10, 255)]

    chunk = read(pack_old_palette([(63, 0, 21)], six_bit=True))
    assert isinstance(chunk, OldPalette64Chunk)
    assert list(chunk.iter_colors()) == [(0, 255, 0, 85, 255)]


def test_unknown_chunk_is_raw() -> None:
    chunk = read(pack_chunk(0x1234, b"abcdef"))
    assert isinstance(chunk, RawChunk)
    assert chunk.chunk_type == 0x1234
    assert chunk.data == b"abcdef"


def test_known_undecoded_chunk_is_raw() -> None:
    chunk = read(pack_chunk(ChunkType.USER_DATA, b"\x00\x00\x00\x00"))
    assert isinstance(chunk, RawChunk)
    assert chunk.chunk_type == ChunkType.USER_DATA


def test_chunk_size_too_small() -> None:
    with pytest.raises(FormatError):
        read(pack("IH", 4, ChunkType.LAYER))


def test_chunk_payload_truncated() -> None:
    with pytest.raises(FormatError):
        read(pack("IH", 100, ChunkType.LAYER) + b"\x00" * 10)


def test_chunk_decoder_overrun() -> None:
    # Layer name length points past the payload.
    payload = pack("HHHHHHB3x", 1, 0, 0, 0, 0, 0, 255) + pack("H", 50) + b"abc"
    with pytest.raises(FormatError):
        read(pack_chunk(ChunkType.LAYER, payload))


def test_chunk_leftover_bytes() -> None:
    data = pack_chunk(ChunkType.FRAME_TAGS, pack("H8x", 0) + b"\x00\x00")
    with pytest.raises(FormatError):
        read(data)

    chunk = read(data, strict=False)
    assert len(chunk) == 0


def test_chunk_keeps_stream_position() -> None:
    data = pack_chunk(0x7777, b"xyz") + pack_layer("Next")
    with io.BytesIO(data) as f:
        assert isinstance(read_chunk(f), RawChunk)
        assert read_chunk(f).name == "Next"
