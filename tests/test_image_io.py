import numpy as np
import pytest
from rich.console import Console

from colormorph.image_io import (
    ImageLoadError,
    ImageSaveError,
    ColorMorphError,
    load_image,
    load_image_pair,
    resize_image,
    save_image,
)


def test_load_converts_to_rgb(tmp_path):
    from PIL import Image
    path = tmp_path / "gray.png"
    Image.new('L', (5, 4), color=77).save(path)

    image = load_image(str(path))

    assert image.shape == (4, 5, 3)
    assert image.dtype == np.uint8
    assert np.all(image == 77)


def test_load_missing_file_names_the_path(tmp_path):
    missing = tmp_path / "nope.png"
    with pytest.raises(ImageLoadError, match="nope.png"):
        load_image(str(missing))


def test_load_garbage_file(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"definitely not an image")
    with pytest.raises(ColorMorphError, match="broken.png"):
        load_image(str(path))


def test_pair_resizes_target_to_source(write_png, gradient_image, warm_image):
    source_path = write_png("source.png", gradient_image)
    target_path = write_png("target.png", np.repeat(np.repeat(warm_image, 2, axis=0), 3, axis=1))

    source, target = load_image_pair(str(source_path), str(target_path))

    assert source.shape == target.shape == gradient_image.shape


def test_pair_keeps_equal_sized_target(write_png, gradient_image, warm_image):
    source, target = load_image_pair(str(write_png("s.png", gradient_image)),
                                     str(write_png("t.png", warm_image)))
    np.testing.assert_array_equal(target, warm_image)


def test_pair_reports_sizes_when_given_console(write_png, gradient_image):
    console = Console(record=True, width=120)
    small = gradient_image[::2, ::2].copy()

    load_image_pair(str(write_png("s.png", gradient_image)), str(write_png("t.png", small)),
                    console=console)

    text = console.export_text()
    assert "source image: 16x12" in text
    assert "target image: 8x6" in text
    assert "resizing target..." in text


def test_nearest_resize_keeps_palette():
    palette = np.array([[[255, 0, 0], [0, 0, 255]],
                        [[0, 255, 0], [255, 255, 255]]], dtype=np.uint8)

    resized = resize_image(palette, 7, 5, 'nearest')

    assert resized.shape == (5, 7, 3)
    colors = {tuple(c) for c in resized.reshape(-1, 3).tolist()}
    assert colors <= {tuple(c) for c in palette.reshape(-1, 3).tolist()}


def test_smooth_resize_blends_colors():
    image = np.array([[[0, 0, 0], [255, 255, 255]]], dtype=np.uint8)

    resized = resize_image(image, 8, 1, 'smooth')

    assert resized.shape == (1, 8, 3)
    assert len({tuple(c) for c in resized.reshape(-1, 3).tolist()}) > 2


def test_resize_rejects_unknown_filter(gradient_image):
    with pytest.raises(ValueError):
        resize_image(gradient_image, 4, 4, 'lanczos')


def test_save_round_trip(tmp_path, gradient_image):
    path = tmp_path / "out.png"
    save_image(gradient_image, str(path))
    np.testing.assert_array_equal(load_image(str(path)), gradient_image)


def test_save_unknown_extension(tmp_path, gradient_image):
    with pytest.raises(ImageSaveError, match="out.notaformat"):
        save_image(gradient_image, str(tmp_path / "out.notaformat"))


def test_save_into_missing_directory(tmp_path, gradient_image):
    with pytest.raises(ImageSaveError):
        save_image(gradient_image, str(tmp_path / "missing" / "out.png"))


def test_load_oversized_image_names_the_path(monkeypatch, write_png):
    from PIL import Image
    path = write_png("huge.png", np.zeros((64, 64, 3), dtype=np.uint8))
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)

    with pytest.raises(ImageLoadError, match="huge.png"):
        load_image(str(path))
