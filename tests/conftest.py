import base64

import cv2
import numpy as np
import pytest

from inkflow.models.core_models import Bitmap, Placement


def make_bitmap(pixels):
    pixels = np.ascontiguousarray(pixels, dtype=np.uint8)
    pixels.setflags(write=False)
    return Bitmap(pixels=pixels, source="test")


def png_data_uri(rgb):
    ok, encoded = cv2.imencode(".png", cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR))
    assert ok
    return "data:image/png;base64," + base64.b64encode(encoded.tobytes()).decode()


@pytest.fixture
def gray_background():
    # 800×600 uniform gray photo
    return make_bitmap(np.full((600, 800, 3), 200, dtype=np.uint8))


@pytest.fixture
def black_overlay():
    # 200×100 solid black "ink"
    return make_bitmap(np.zeros((100, 200, 3), dtype=np.uint8))


@pytest.fixture
def half_ink_overlay():
    # 200×100, left half black ink, right half white paper
    pixels = np.full((100, 200, 3), 255, dtype=np.uint8)
    pixels[:, :100] = 0
    return make_bitmap(pixels)


@pytest.fixture
def centered_placement():
    return Placement(x=0.5, y=0.5, scale=1.0, rotation=0.0)


@pytest.fixture
def photo_uri():
    # Small gradient photo as a PNG data URI
    photo = np.zeros((60, 80, 3), dtype=np.uint8)
    photo[..., 0] = np.linspace(0, 255, 80, dtype=np.uint8)
    photo[..., 1] = 180
    return png_data_uri(photo)


@pytest.fixture
def signature_uri():
    ink = np.full((20, 40, 3), 255, dtype=np.uint8)
    ink[5:15, 5:35] = 0
    return png_data_uri(ink)


@pytest.fixture
def bitmap_factory():
    return make_bitmap


@pytest.fixture
def data_uri_factory():
    return png_data_uri
