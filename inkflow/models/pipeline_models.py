"""Models for the outputs of the compositing pipeline.

These models carry the results of rendering and exporting, keeping the
rasterizer, the exporter and the UI decoupled from each other.
"""

import numpy as np
from pydantic import BaseModel, Field

from inkflow.models.core_models import Placement


class CompositeSurface(BaseModel):
    """Flattened raster produced by one render.

    Attributes:
        pixels: ``H x W x 3`` RGB uint8 buffer.
        width: Surface width in pixels.
        height: Surface height in pixels.
        placement: Placement the overlay was drawn with.
    """

    pixels: np.ndarray = Field(..., description="Rendered RGB pixels")
    width: int = Field(..., ge=1, description="Surface width in pixels")
    height: int = Field(..., ge=1, description="Surface height in pixels")
    placement: Placement = Field(
        default_factory=Placement, description="Placement used for this render"
    )

    class Config:
        arbitrary_types_allowed = True


class ExportResult(BaseModel):
    """Encoded export of a composite surface.

    Attributes:
        jpeg_bytes: Encoded JPEG data.
        filename: Suggested download name.
        file_path: Path of the file written for download, empty if none.
    """

    jpeg_bytes: bytes = Field(..., description="Encoded JPEG data")
    filename: str = Field(..., description="Suggested download file name")
    file_path: str = Field("", description="Path of the written file")
