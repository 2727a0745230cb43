"""
PIL IO module.
"""

import logging

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


def convert_array_to_pil(array: np.ndarray) -> Image.Image:
    """Convert a top-down float RGBA array in [0, 1] to a PIL Image."""
    if array.ndim != 3 or array.shape[2] != 4:
        raise ValueError("Expected (height, width, 4) array, got %r" % (array.shape,))
    values = np.clip(np.round(array * 255.0), 0, 255).astype(np.uint8)
    return Image.fromarray(values)


def convert_pil_to_array(image: Image.Image) -> np.ndarray:
    """Convert a PIL Image to a top-down float RGBA array in [0, 1]."""
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return np.asarray(image, dtype=np.float32) / 255.0
