"""
Binary processing utilities.

Aseprite files are little endian. Every reader here takes a file-like object
positioned at the data to read and leaves it right after the consumed bytes,
so the read position is threaded explicitly through each decode step.
"""

import logging
import struct
from typing import Any, BinaryIO

from ase_tools.exceptions import FormatError

logger = logging.getLogger(__name__)


def unpack(fmt: str, data: bytes) -> tuple:
    fmt = str("<" + fmt)
    return struct.unpack(fmt, data)


def pack(fmt: str, *args: Any) -> bytes:
    fmt = str("<" + fmt)
    return struct.pack(fmt, *args)


def read_fmt(fmt: str, fp: BinaryIO) -> tuple:
    """
    Reads data from ``fp`` according to ``fmt``.

    :raise FormatError: when the stream ends before ``fmt`` is satisfied.
    """
    fmt = str("<" + fmt)
    fmt_size = struct.calcsize(fmt)
    data = fp.read(fmt_size)
    if len(data) != fmt_size:
        raise FormatError(
            "Unexpected end of data: expected %d bytes, got %d" % (fmt_size, len(data))
        )
    return struct.unpack(fmt, data)


def write_fmt(fp: BinaryIO, fmt: str, *args: Any) -> int:
    """
    Writes data to ``fp`` according to ``fmt``.
    """
    fmt = str("<" + fmt)
    fmt_size = struct.calcsize(fmt)
    written = fp.write(struct.pack(fmt, *args))
    assert written == fmt_size, (written, fmt_size)
    return written


def read_bytes(fp: BinaryIO, length: int) -> bytes:
    """
    Reads exactly ``length`` bytes.

    :raise FormatError: when the stream holds fewer bytes.
    """
    if length < 0:
        raise FormatError("Negative length: %d" % length)
    data = fp.read(length)
    if len(data) != length:
        raise FormatError(
            "Unexpected end of data: expected %d bytes, got %d" % (length, len(data))
        )
    return data


def write_bytes(fp: BinaryIO, data: bytes) -> int:
    """
    Write bytes to the file object.
    """
    written = fp.write(data)
    assert written == len(data), (written, len(data))
    return written


def read_string(fp: BinaryIO, encoding: str = "utf-8") -> str:
    """
    Reads a STRING: a WORD byte length followed by the encoded characters.
    """
    length = read_fmt("H", fp)[0]
    return read_bytes(fp, length).decode(encoding, "replace")


def is_readable(fp: BinaryIO, size: int = 1) -> bool:
    """
    Check if the file-like object has ``size`` more bytes to read.

    :param fp: file-like object
    :param size: byte size
    :return: bool
    """
    read_size = len(fp.read(size))
    fp.seek(-read_size, 1)
    return read_size == size


def trimmed_repr(data: Any, trim_length: int = 16) -> str:
    if isinstance(data, bytes):
        if len(data) > trim_length:
            return repr(
                data[:trim_length] + b" ... =" + str(len(data)).encode("ascii")
            )
    return repr(data)
