import numpy as np
import pytest

from inkflow.models import Bitmap, Placement


@pytest.fixture
def valid_placement():
    return Placement(x=0.25, y=0.75, scale=0.5, rotation=0.3)


@pytest.fixture
def small_bitmap():
    return Bitmap(pixels=np.zeros((3, 5, 3), dtype=np.uint8), source="test")
