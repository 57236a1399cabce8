import numpy as np
from PIL import Image
from typing import Optional, Tuple

from rich.console import Console


class ColorMorphError(Exception):
    """Base class for errors surfaced to the command line."""


class ImageLoadError(ColorMorphError):
    pass


class ImageSaveError(ColorMorphError):
    pass


RESAMPLING = {
    'nearest': Image.Resampling.NEAREST,
    'smooth': Image.Resampling.BILINEAR,
}


def load_image(path: str) -> np.ndarray:
    """Decode an image file into an (H, W, 3) uint8 RGB array."""
    try:
        with Image.open(path) as img:
            return np.array(img.convert('RGB'), dtype=np.uint8)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageLoadError(f"Could not load image {path}: {e}") from e


def resize_image(image: np.ndarray, width: int, height: int, filter_kind: str = 'smooth') -> np.ndarray:
    """
    Resize an RGB array to exactly width x height.

    Args:
        image: (H, W, 3) uint8 array
        width: Output width in pixels
        height: Output height in pixels
        filter_kind: 'nearest' keeps the original palette, 'smooth' interpolates
    """
    if filter_kind not in RESAMPLING:
        raise ValueError(f"Unknown filter kind: {filter_kind!r} (expected one of {sorted(RESAMPLING)})")
    resized = Image.fromarray(image).resize((width, height), RESAMPLING[filter_kind])
    return np.array(resized, dtype=np.uint8)


def load_image_pair(
    source_path: str,
    target_path: str,
    palette: bool = False,
    console: Optional[Console] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Load source and target, resizing the target to the source dimensions.

    When a console is given, image sizes and the resize step are reported on it.
    """
    source = load_image(source_path)
    target = load_image(target_path)

    height, width = source.shape[:2]
    if console is not None:
        console.print(f"source image: {width}x{height}", highlight=False)
        console.print(f"target image: {target.shape[1]}x{target.shape[0]}", highlight=False)

    if target.shape[:2] != source.shape[:2]:
        if console is not None:
            console.print("resizing target...")
        target = resize_image(target, width, height, 'nearest' if palette else 'smooth')

    return source, target


def save_image(image: np.ndarray, path: str):
    """Save an RGB array; the format is chosen from the file extension."""
    try:
        Image.fromarray(image).save(path)
    except (OSError, ValueError) as e:
        raise ImageSaveError(f"Could not save image {path}: {e}") from e
