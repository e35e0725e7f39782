import io

import pytest
from PIL import Image

from otofind_ui.core.image_io import (
    EXIF_ORIENTATION_TAG,
    ImageDecodeError,
    load_image,
    normalize_orientation,
    read_orientation,
)


def _jpeg_with_orientation(orientation):
    img = Image.new("RGB", (40, 30), (10, 20, 30))
    exif = Image.Exif()
    exif[EXIF_ORIENTATION_TAG] = orientation
    buf = io.BytesIO()
    img.save(buf, format="JPEG", exif=exif)
    return buf.getvalue()


def test_load_image_from_path(eardrum_png):
    img = load_image(eardrum_png)
    assert img.size == (64, 48)


def test_load_image_from_bytes(eardrum_png):
    img = load_image(eardrum_png.read_bytes())
    assert img.size == (64, 48)


def test_load_image_rejects_garbage():
    with pytest.raises(ImageDecodeError):
        load_image(b"definitely not an image")


def test_load_image_missing_file(tmp_path):
    with pytest.raises(ImageDecodeError):
        load_image(tmp_path / "missing.jpg")


def test_read_orientation_from_exif():
    img = load_image(_jpeg_with_orientation(6))
    assert read_orientation(img) == 6


def test_read_orientation_defaults_to_upright(eardrum_image):
    assert read_orientation(eardrum_image) == 1


def test_read_orientation_ignores_invalid_value():
    img = load_image(_jpeg_with_orientation(42))
    assert read_orientation(img) == 1


@pytest.mark.parametrize(
    "orientation, size",
    [(1, (64, 48)), (2, (64, 48)), (3, (64, 48)), (4, (64, 48)),
     (5, (48, 64)), (6, (48, 64)), (7, (48, 64)), (8, (48, 64))],
)
def test_normalize_orientation_sizes(eardrum_image, orientation, size):
    assert normalize_orientation(eardrum_image, orientation).size == size


def test_normalize_orientation_upright_is_identity(eardrum_image):
    assert normalize_orientation(eardrum_image, 1) is eardrum_image


def test_rotate_270_moves_top_row_to_right_column(eardrum_image):
    # orientation 6: camera held rotated, image must turn 90 degrees clockwise
    out = normalize_orientation(eardrum_image, 6)
    width, _ = out.size
    assert out.getpixel((width - 1, 0)) == (255, 255, 255)
    assert out.getpixel((0, 0)) == (180, 90, 80)


def test_flip_left_right(eardrum_image):
    out = normalize_orientation(eardrum_image, 2)
    assert out.getpixel((63, 0)) == (255, 255, 255)
    assert out.getpixel((0, 0)) == (180, 90, 80)


@pytest.mark.parametrize("orientation", [0, 9, None])
def test_normalize_orientation_rejects_invalid(eardrum_image, orientation):
    with pytest.raises(ValueError):
        normalize_orientation(eardrum_image, orientation)
