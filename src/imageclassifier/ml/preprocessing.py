"""Image preprocessing: decoding and conversion to the network's input tensor."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from PIL import Image

if TYPE_CHECKING:
    from pathlib import Path

    from numpy.typing import NDArray


def decode_image(path: Path) -> Image.Image:
    """Decode an image file into an RGB PIL image.

    Raises:
        FileNotFoundError: If the file does not exist.
        PIL.UnidentifiedImageError: If the file is not a readable image.
    """
    with Image.open(path) as img:
        img.load()
        return img.convert("RGB")


def network_structure(image_size: int) -> tuple[int, int, int, int]:
    """Return the NHWC input shape for a single square RGB image."""
    return (1, image_size, image_size, 3)


def get_pixels(
    image: Image.Image,
    image_size: int = 224,
    image_mean: float = 117.0,
    image_std: float = 1.0,
) -> NDArray[np.float32]:
    """Resize an image and normalize it into a flat float32 pixel array.

    Args:
        image: Image of any size and mode.
        image_size: Side of the square network input.
        image_mean: Value subtracted from every channel.
        image_std: Divisor applied after the mean is subtracted.

    Returns:
        Flat array of ``image_size * image_size * 3`` values in RGB order,
        row-major.
    """
    rgb = image.convert("RGB")
    if rgb.size != (image_size, image_size):
        rgb = rgb.resize((image_size, image_size), Image.Resampling.BILINEAR)
    arr = np.asarray(rgb, dtype=np.float32)
    return ((arr - image_mean) / image_std).reshape(-1)
