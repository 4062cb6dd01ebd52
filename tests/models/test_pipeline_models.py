import numpy as np
import pytest
from pydantic import ValidationError

from inkflow.models import CompositeSurface, ExportResult, Placement


def test_composite_surface_holds_pixels():
    surface = CompositeSurface(
        pixels=np.zeros((4, 6, 3), dtype=np.uint8), width=6, height=4
    )
    assert surface.pixels.shape == (4, 6, 3)
    assert surface.placement == Placement()


def test_composite_surface_requires_positive_size():
    with pytest.raises(ValidationError):
        CompositeSurface(pixels=np.zeros((1, 1, 3)), width=0, height=1)


def test_export_result_defaults():
    result = ExportResult(jpeg_bytes=b"\xff\xd8", filename="a.jpg")
    assert result.file_path == ""
