import logging

import numpy as np
import pytest
from PIL import Image

from ase_tools.api.buffer import ImageBuffer
from ase_tools.api.pil_io import convert_array_to_pil, convert_pil_to_array

logger = logging.getLogger(__name__)


def test_new_is_transparent() -> None:
    buffer = ImageBuffer.new(3, 2)
    assert buffer.size == (3, 2)
    assert buffer.data.shape == (2, 3, 4)
    assert not buffer.data.any()


def test_set_pixel_block_bottom_up() -> None:
    buffer = ImageBuffer.new(2, 2)
    buffer.set_pixel_block(1, 0, 1, 1, [1.0, 0.0, 0.0, 1.0])
    array = buffer.finalize()
    # Row 0 of the buffer is the bottom row of the picture.
    assert np.allclose(array[1, 1], (1, 0, 0, 1))
    assert not array[0].any()


def test_set_pixel_block_empty() -> None:
    buffer = ImageBuffer.new(2, 2)
    buffer.set_pixel_block(5, 5, 0, 0, [])
    assert not buffer.data.any()


def test_set_pixel_block_out_of_bounds() -> None:
    buffer = ImageBuffer.new(2, 2)
    with pytest.raises(ValueError):
        buffer.set_pixel_block(1, 1, 2, 2, np.ones((2, 2, 4)))


def test_finalize_is_a_copy() -> None:
    buffer = ImageBuffer.new(1, 1)
    array = buffer.finalize()
    array[:] = 1.0
    assert not buffer.data.any()


def test_invalid_shape() -> None:
    with pytest.raises(ValueError):
        ImageBuffer(np.zeros((2, 2, 3), dtype=np.float32))


def test_topil() -> None:
    buffer = ImageBuffer.new(2, 1)
    buffer.set_pixel_block(0, 0, 2, 1, [[[0.0, 0.5, 1.0, 1.0], [0, 0, 0, 0]]])
    image = buffer.topil()
    assert isinstance(image, Image.Image)
    assert image.mode == "RGBA"
    assert image.size == (2, 1)
    assert image.getpixel((0, 0)) == (0, 128, 255, 255)


def test_pil_array_roundtrip() -> None:
    array = np.zeros((2, 3, 4), dtype=np.float32)
    array[0, 1] = (1.0, 0.0, 0.0, 1.0)
    result = convert_pil_to_array(convert_array_to_pil(array))
    assert np.allclose(result, array)


def test_convert_pil_to_array_mode() -> None:
    array = convert_pil_to_array(Image.new("RGB", (2, 2), (255, 0, 0)))
    assert array.shape == (2, 2, 4)
    assert np.allclose(array[0, 0], (1, 0, 0, 1))
