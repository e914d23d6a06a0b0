import struct

import numpy as np
import pytest
from PIL import Image

from qoiread import OutOfRange, Pixel, decode, qoi_to_png, to_array, to_pil


def make_image(width, height, channels=4, fill=(10, 20, 30, 40)):
    """Literal first pixel followed by a short run covering the rest (up to 33 pixels)."""
    data = b"qoif" + struct.pack(">IIBB", width, height, channels, 0)
    data += bytes([0xFF, *fill])
    if width * height > 1:
        data += bytes([0x40 | (width * height - 2)])
    return decode(data)


@pytest.fixture
def rgba():
    return make_image(1, 1)


def test_get_in_bounds(rgba):
    assert rgba.get(0, 0) == Pixel(10, 20, 30, 40)


@pytest.mark.parametrize("x, y", [(1, 0), (0, 1), (-1, 0), (0, -1), (5, 5)])
def test_get_out_of_range(rgba, x, y):
    with pytest.raises(OutOfRange):
        rgba.get(x, y)


def test_out_of_range_is_an_index_error(rgba):
    with pytest.raises(IndexError):
        rgba.get(1, 0)


def test_set_writes_every_channel():
    image = make_image(2, 2)
    image.set(1, 0, Pixel(1, 2, 3, 4))

    assert image.get(1, 0) == Pixel(1, 2, 3, 4)
    assert image.data[4:8] == bytes([1, 2, 3, 4])
    # neighbours untouched
    assert image.get(0, 0) == Pixel(10, 20, 30, 40)
    assert image.get(0, 1) == Pixel(10, 20, 30, 40)


def test_set_accepts_plain_tuples():
    image = make_image(2, 1)
    image.set(0, 0, (9, 8, 7, 6))
    assert image.get(0, 0) == Pixel(9, 8, 7, 6)


def test_set_on_rgb_image_discards_alpha():
    image = make_image(2, 1, channels=3)
    image.set(1, 0, Pixel(1, 2, 3, 4))

    assert image.data == bytes([10, 20, 30, 1, 2, 3])
    assert image.get(1, 0) == Pixel(1, 2, 3, 255)


@pytest.mark.parametrize("x, y", [(2, 0), (0, 1), (-1, 0)])
def test_set_out_of_range_leaves_image_untouched(x, y):
    image = make_image(2, 1)
    before = image.data

    with pytest.raises(OutOfRange):
        image.set(x, y, Pixel(1, 2, 3, 4))
    assert image.data == before


def test_set_rejects_non_byte_values():
    image = make_image(1, 1)

    with pytest.raises(ValueError):
        image.set(0, 0, (1, 2, 300, 4))
    assert image.get(0, 0) == Pixel(10, 20, 30, 40)


def test_set_rejects_non_int_values():
    image = make_image(1, 1)

    with pytest.raises(TypeError):
        image.set(0, 0, (1, 2, 3.5, 4))
    assert image.get(0, 0) == Pixel(10, 20, 30, 40)


def test_header_accessors_are_read_only(rgba):
    with pytest.raises(AttributeError):
        rgba.width = 5


def test_data_is_a_snapshot(rgba):
    snapshot = rgba.data
    rgba.set(0, 0, Pixel(0, 0, 0, 0))

    assert snapshot == bytes([10, 20, 30, 40])
    assert rgba.data == bytes([0, 0, 0, 0])


def test_pixel_defaults_to_opaque():
    assert Pixel(1, 2, 3) == Pixel(1, 2, 3, 255)


def test_pixel_combined_value():
    p = Pixel(0x11, 0x22, 0x33, 0x44)

    assert p.value == 0x44332211
    assert Pixel.from_value(0x44332211) == p


def test_pixel_color_hash():
    assert Pixel(10, 20, 30, 40).color_hash() == 10 ^ 20 ^ 30 ^ 40
    assert Pixel(0, 0, 0, 255).color_hash() % 64 == 63


def test_to_array_layout():
    image = make_image(3, 2)
    image.set(2, 1, Pixel(1, 2, 3, 4))
    arr = to_array(image)

    assert arr.shape == (2, 3, 4)
    assert arr.dtype == np.uint8
    assert arr[1, 2].tolist() == [1, 2, 3, 4]
    assert arr[0, 0].tolist() == [10, 20, 30, 40]


def test_to_pil_modes():
    assert to_pil(make_image(2, 2)).mode == "RGBA"

    img = to_pil(make_image(4, 3, channels=3))
    assert img.mode == "RGB"
    assert img.size == (4, 3)
    assert img.getpixel((3, 2)) == (10, 20, 30)


def test_qoi_to_png(tmp_path):
    qoi_path = tmp_path / "run.qoi"
    png_path = tmp_path / "run.png"
    qoi_path.write_bytes(
        b"qoif" + struct.pack(">IIBB", 40, 1, 4, 0) + bytes([0xFF, 1, 2, 3, 4, 0x60, 6])
    )

    qoi_to_png(qoi_path, png_path)

    with Image.open(png_path) as img:
        assert img.size == (40, 1)
        assert img.mode == "RGBA"
        assert img.getpixel((39, 0)) == (1, 2, 3, 4)
