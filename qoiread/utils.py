import numpy as np
from PIL import Image

from .image import QOIImage


def to_array(image: QOIImage) -> np.ndarray:
    """Copy the pixel buffer into a (height, width, channels) uint8 array."""
    return np.frombuffer(image.data, dtype=np.uint8).copy().reshape(
        image.height, image.width, image.channels
    )


def to_pil(image: QOIImage) -> Image.Image:
    mode = "RGBA" if image.channels == 4 else "RGB"
    return Image.frombytes(mode, (image.width, image.height), image.data)
