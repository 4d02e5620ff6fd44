"""Tests for photo normalisation helpers."""

from __future__ import annotations

from io import BytesIO

from PIL import Image

from mylook.imgproc.normalize import (
    ImageNormalizer,
    bytes_to_data_url,
    data_url_to_bytes,
    guess_extension,
)


def _png_bytes(width: int, height: int) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (width, height), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_resize_caps_longest_side() -> None:
    normalizer = ImageNormalizer(max_side=1200, quality=82)

    resized = normalizer.resize(_png_bytes(2400, 1200))

    with Image.open(BytesIO(resized)) as img:
        assert img.format == "JPEG"
        assert img.size == (1200, 600)


def test_small_images_are_not_upscaled() -> None:
    resized = ImageNormalizer(max_side=1200).resize(_png_bytes(300, 200))

    with Image.open(BytesIO(resized)) as img:
        assert img.size == (300, 200)


def test_resize_data_url_returns_original_for_undecodable_image() -> None:
    original = bytes_to_data_url(b"not an image", "image/png")

    assert ImageNormalizer().resize_data_url(original) == original


def test_resize_data_url_produces_jpeg_data_url() -> None:
    resized = ImageNormalizer(max_side=100).resize_data_url(bytes_to_data_url(_png_bytes(400, 400), "image/png"))

    data, mime = data_url_to_bytes(resized)
    assert mime == "image/jpeg"
    with Image.open(BytesIO(data)) as img:
        assert img.size == (100, 100)


def test_guess_extension() -> None:
    assert guess_extension("data:image/png;base64,AAAA") == "png"
    assert guess_extension("data:image/webp;base64,AAAA") == "webp"
    assert guess_extension("data:image/heic;base64,AAAA") == "jpg"
