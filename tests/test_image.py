import numpy as np
import pytest

from slabmc.export.image import encode_ppm, save_image, tint_rgb, write_ppm

TINT = (0.0, 0.77, 0.80)


def test_ppm_header_and_size():
    pixels = np.zeros((2, 3))
    data = encode_ppm(pixels, TINT)
    header = b"P6\n3 2\n255\n"
    assert data.startswith(header)
    assert len(data) == len(header) + 2 * 3 * 3


def test_ppm_bytes_are_floor_of_tinted_clamped_pixel():
    pixels = np.array([[1.0, 0.5], [2.0, -1.0]])
    data = encode_ppm(pixels, TINT)
    body = data[len(b"P6\n2 2\n255\n"):]
    triplets = [tuple(body[i:i + 3]) for i in range(0, len(body), 3)]
    assert triplets[0] == (0, 196, 204)     # floor(255·0.77)=196, floor(255·0.8)=204
    assert triplets[1] == (0, 98, 102)
    assert triplets[2] == (0, 196, 204)     # >1 截断为 1
    assert triplets[3] == (0, 0, 0)         # <0 截断为 0


def test_white_tint_full_scale():
    rgb = tint_rgb(np.ones((1, 1)), (1.0, 1.0, 1.0))
    assert rgb.dtype == np.uint8
    assert rgb[0, 0].tolist() == [255, 255, 255]


def test_pixels_must_be_2d():
    with pytest.raises(ValueError):
        encode_ppm(np.zeros(4), TINT)


def test_write_ppm(tmp_path):
    path = write_ppm(tmp_path / "out.ppm", np.full((4, 4), 0.25), TINT)
    raw = path.read_bytes()
    assert raw == encode_ppm(np.full((4, 4), 0.25), TINT)


def test_save_image_dispatches_on_suffix(tmp_path):
    pixels = np.linspace(0.0, 1.0, 64).reshape(8, 8)
    ppm = save_image(tmp_path / "a.ppm", pixels, TINT)
    png = save_image(tmp_path / "a.png", pixels, TINT)
    assert ppm.read_bytes().startswith(b"P6\n8 8\n255\n")
    assert png.read_bytes().startswith(b"\x89PNG")
