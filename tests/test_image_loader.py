from io import BytesIO
from unittest import mock

import numpy as np
import pytest
import requests
from PIL import Image

from emotionapi.infrastructure.image_loader import ImageLoader


def encode(image: Image.Image, fmt: str = "PNG", **kwargs) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format=fmt, **kwargs)
    return buffer.getvalue()


@pytest.fixture
def loader():
    return ImageLoader()


def test_png_is_decoded_as_bgr(loader):
    data = encode(Image.new("RGB", (4, 2), color=(255, 0, 0)))

    image = loader.load_from_bytes(data)

    assert image.shape == (2, 4, 3)
    assert image.dtype == np.uint8
    assert tuple(image[0, 0]) == (0, 0, 255)


def test_grayscale_is_converted_to_three_channels(loader):
    data = encode(Image.new("L", (3, 3), color=128))

    image = loader.load_from_bytes(data)

    assert image.shape == (3, 3, 3)


def test_exif_orientation_is_applied(loader):
    exif = Image.Exif()
    exif[0x0112] = 6  # Rotate 90 degrees clockwise
    data = encode(Image.new("RGB", (8, 4)), "JPEG", exif=exif)

    image = loader.load_from_bytes(data)

    assert image.shape[:2] == (8, 4)


def test_garbage_bytes_return_none(loader):
    assert loader.load_from_bytes(b"definitely not an image") is None


def test_empty_bytes_return_none(loader):
    assert loader.load_from_bytes(b"") is None


def test_oversized_bytes_return_none(loader):
    loader.config.MAX_IMAGE_SIZE = 10
    data = encode(Image.new("RGB", (4, 4)))

    assert loader.load_from_bytes(data) is None


def streamed_response(headers, body=b""):
    response = mock.Mock()
    response.headers = headers
    response.iter_content.return_value = [body[i:i + 16] for i in range(0, len(body), 16)]
    return response


def test_load_from_url(loader):
    response = streamed_response({"Content-Type": "image/png"}, encode(Image.new("RGB", (5, 5))))

    with mock.patch.object(loader.session, "get", return_value=response) as get:
        image = loader.load_from_url("http://example.com/face.png")

    assert image.shape == (5, 5, 3)
    get.assert_called_once_with("http://example.com/face.png", timeout=30, stream=True)
    response.close.assert_called_once()


def test_load_from_url_rejects_large_content_length(loader):
    response = streamed_response({
        "Content-Type": "image/png",
        "Content-Length": str(loader.config.MAX_IMAGE_SIZE + 1),
    })

    with mock.patch.object(loader.session, "get", return_value=response):
        assert loader.load_from_url("http://example.com/huge.png") is None

    # Rejected from the headers alone, body never read
    response.iter_content.assert_not_called()
    response.close.assert_called_once()


def test_load_from_url_malformed_content_length(loader):
    response = streamed_response({"Content-Type": "image/png", "Content-Length": "abc"})

    with mock.patch.object(loader.session, "get", return_value=response):
        assert loader.load_from_url("http://example.com/face.png") is None

    response.close.assert_called_once()


def test_load_from_url_stops_reading_oversized_body(loader):
    loader.config.MAX_IMAGE_SIZE = 40
    response = streamed_response({"Content-Type": "image/png"}, b"x" * 200)

    with mock.patch.object(loader.session, "get", return_value=response):
        assert loader.load_from_url("http://example.com/chunked.png") is None

    response.close.assert_called_once()


def test_load_from_url_download_error(loader):
    with mock.patch.object(loader.session, "get", side_effect=requests.ConnectionError("offline")):
        assert loader.load_from_url("http://example.com/face.png") is None
