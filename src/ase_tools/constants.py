"""
Various constants for ase_tools
"""
from enum import IntEnum, IntFlag


class ChunkType(IntEnum):
    """
    Chunk type codes.

    Only layers, cels, frame tags and palettes are decoded; every other chunk
    is kept as raw bytes.
    """

    OLD_PALETTE = 0x0004
    OLD_PALETTE_64 = 0x0011
    LAYER = 0x2004
    CEL = 0x2005
    CEL_EXTRA = 0x2006
    COLOR_PROFILE = 0x2007
    EXTERNAL_FILES = 0x2008
    MASK = 0x2016
    PATH = 0x2017
    FRAME_TAGS = 0x2018
    PALETTE = 0x2019
    USER_DATA = 0x2020
    SLICE = 0x2022
    TILESET = 0x2023


class ColorDepth(IntEnum):
    """
    Color depth in bits per pixel.
    """

    INDEXED = 8
    GRAYSCALE = 16
    RGBA = 32

    @property
    def bytes_per_pixel(self) -> int:
        return self.value // 8


class HeaderFlags(IntFlag):
    """
    File header flags.
    """

    LAYER_OPACITY_VALID = 1
    GROUP_BLEND_VALID = 2
    LAYER_UUID = 4


class LayerFlags(IntFlag):
    """
    Layer flags.
    """

    VISIBLE = 1
    EDITABLE = 2
    LOCK_MOVEMENT = 4
    BACKGROUND = 8
    PREFER_LINKED_CELS = 16
    COLLAPSED = 32
    REFERENCE = 64


class LayerType(IntEnum):
    """
    Layer type.
    """

    NORMAL = 0
    GROUP = 1
    TILEMAP = 2


class BlendMode(IntEnum):
    """
    Blend modes.
    """

    NORMAL = 0
    MULTIPLY = 1
    SCREEN = 2
    OVERLAY = 3
    DARKEN = 4
    LIGHTEN = 5
    COLOR_DODGE = 6
    COLOR_BURN = 7
    HARD_LIGHT = 8
    SOFT_LIGHT = 9
    DIFFERENCE = 10
    EXCLUSION = 11
    HUE = 12
    SATURATION = 13
    COLOR = 14
    LUMINOSITY = 15
    ADDITION = 16
    SUBTRACT = 17
    DIVIDE = 18


class CelType(IntEnum):
    """
    Cel payload type.
    """

    RAW_IMAGE = 0
    LINKED = 1
    COMPRESSED_IMAGE = 2
    COMPRESSED_TILEMAP = 3


class AnimationDirection(IntEnum):
    """
    Playback direction of a frame tag.
    """

    FORWARD = 0
    REVERSE = 1
    PING_PONG = 2
    PING_PONG_REVERSE = 3
