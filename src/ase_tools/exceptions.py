"""
Exceptions raised by ase-tools.
"""


class AsepriteError(Exception):
    """Base class of the errors raised while reading or compositing."""


class FormatError(AsepriteError, ValueError):
    """
    Malformed or truncated data: short reads, declared lengths that overrun
    the stream, magic number mismatches, or chunk payloads that are not
    consumed exactly.
    """


class LayerIndexError(AsepriteError, IndexError):
    """A cel refers to a layer index outside the layer list."""


class UnsupportedModeError(AsepriteError, ValueError):
    """Unknown blend mode code, raised only when blending strictly."""
