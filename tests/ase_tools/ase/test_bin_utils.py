import io

import pytest

from ase_tools.ase.bin_utils import (
    is_readable,
    pack,
    read_bytes,
    read_fmt,
    read_string,
    trimmed_repr,
    write_bytes,
    write_fmt,
)
from ase_tools.exceptions import FormatError


def test_read_fmt_little_endian() -> None:
    with io.BytesIO(b"\x01\x00\x02\x00\x00\x00\xff") as f:
        assert read_fmt("HIb", f) == (1, 2, -1)
        assert not is_readable(f)


def test_read_fmt_short() -> None:
    with io.BytesIO(b"\x01\x00") as f:
        with pytest.raises(FormatError):
            read_fmt("I", f)


@pytest.mark.parametrize("length", [4, -1])
def test_read_bytes_error(length: int) -> None:
    with io.BytesIO(b"abc") as f:
        with pytest.raises(FormatError):
            read_bytes(f, length)


def test_read_string() -> None:
    data = pack("H", 5) + "héll".encode("utf-8")
    with io.BytesIO(data + b"rest") as f:
        assert read_string(f) == "héll"
        assert f.read() == b"rest"


def test_read_string_truncated() -> None:
    with io.BytesIO(pack("H", 10) + b"abc") as f:
        with pytest.raises(FormatError):
            read_string(f)


def test_is_readable_keeps_position() -> None:
    with io.BytesIO(b"abcd") as f:
        f.seek(2)
        assert is_readable(f, 2)
        assert not is_readable(f, 3)
        assert f.tell() == 2


def test_write() -> None:
    with io.BytesIO() as f:
        assert write_fmt(f, "Hh", 1, -1) == 4
        assert write_bytes(f, b"xy") == 2
        assert f.getvalue() == b"\x01\x00\xff\xffxy"


def test_trimmed_repr() -> None:
    assert trimmed_repr(b"ab") == repr(b"ab")
    assert trimmed_repr(bytes(32)).endswith("=32'")
    assert trimmed_repr(3) == "3"
