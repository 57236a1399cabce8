import sys
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

# Add src/ to sys.path so the tests also run from a plain checkout
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))


@pytest.fixture
def gradient_image():
    """A 12x16 image with a smooth red/green gradient and a constant blue channel."""
    height, width = 12, 16
    ys, xs = np.mgrid[0:height, 0:width]
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[..., 0] = (xs * 255 // (width - 1)).astype(np.uint8)
    image[..., 1] = (ys * 255 // (height - 1)).astype(np.uint8)
    image[..., 2] = 64
    return image


@pytest.fixture
def warm_image():
    """A 12x16 image of random warm colors."""
    rng = np.random.default_rng(1)
    image = np.empty((12, 16, 3), dtype=np.uint8)
    image[..., 0] = rng.integers(180, 256, size=(12, 16))
    image[..., 1] = rng.integers(60, 140, size=(12, 16))
    image[..., 2] = rng.integers(0, 40, size=(12, 16))
    return image


@pytest.fixture
def write_png(tmp_path):
    """Save an array as a PNG in tmp_path and return its path."""
    def write(name, array):
        path = tmp_path / name
        Image.fromarray(array).save(path)
        return path
    return write
