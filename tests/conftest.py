"""
Pytest configuration and shared fixtures for AI Image Studio tests.

This module provides shared test fixtures used across multiple test modules:
encoded sample images and a mocked HTTP session for the generation service.
"""

import base64
from io import BytesIO
from unittest.mock import Mock

import numpy as np
import pytest
from PIL import Image

from AIS_Libs.config import ServiceConfig


def encode(image, image_format="PNG", **kwargs):
    """Encode a PIL Image to bytes."""
    buffer = BytesIO()
    image.save(buffer, format=image_format, **kwargs)
    return buffer.getvalue()


def gradient_image(width, height):
    """
    Build an RGB image whose pixels are distinct enough to check geometry.

    Red grows left to right, green grows top to bottom, blue is constant.
    """
    xs = np.linspace(0, 255, width, dtype=np.float32)
    ys = np.linspace(0, 255, height, dtype=np.float32)
    red = np.tile(xs, (height, 1))
    green = np.tile(ys[:, None], (1, width))
    blue = np.full((height, width), 64, dtype=np.float32)
    data = np.stack([red, green, blue], axis=-1).round().astype(np.uint8)
    return Image.fromarray(data)


@pytest.fixture
def make_image_bytes():
    """
    Provide a factory for encoded sample images.

    Returns:
        Callable (size, color=None, image_format="PNG") -> bytes. When color is
        None a gradient is used.
    """
    def factory(size, color=None, image_format="PNG"):
        if color is None:
            image = gradient_image(*size)
        else:
            mode = "RGBA" if len(color) == 4 else "RGB"
            image = Image.new(mode, size, color)
        return encode(image, image_format)

    return factory


@pytest.fixture
def service_config():
    """Provide a ServiceConfig with a dummy API key."""
    return ServiceConfig(api_key="test-key")


@pytest.fixture
def fake_http_session():
    """
    Provide a mock requests.Session whose predict call returns one red JPEG.

    The JPEG bytes are exposed as `session.image_bytes`.
    """
    image_bytes = encode(Image.new("RGB", (64, 64), (220, 30, 30)), "JPEG", quality=95)
    response = Mock()
    response.status_code = 200
    response.json.return_value = {
        "predictions": [
            {
                "bytesBase64Encoded": base64.b64encode(image_bytes).decode("ascii"),
                "mimeType": "image/jpeg",
            }
        ]
    }
    session = Mock()
    session.post.return_value = response
    session.image_bytes = image_bytes
    return session


@pytest.fixture
def make_gradient():
    """Provide the gradient_image factory as a fixture."""
    return gradient_image


@pytest.fixture
def encode_image_bytes():
    """Provide the encode helper as a fixture."""
    return encode
