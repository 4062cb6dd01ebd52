"""Core domain models for signature compositing."""

from enum import Enum, IntEnum

import numpy as np
from pydantic import BaseModel, Field


class CalligraphyStyle(str, Enum):
    """Calligraphy styles offered by the signature generator.

    The member value is a stable tag suitable for UI state; ``label`` is the
    human-readable name that is shown to the user and sent to the model.
    """

    RUNNING_SCRIPT = "running_script"
    CURSIVE = "cursive"
    REGULAR = "regular"
    CLERICAL = "clerical"
    ARTISTIC = "artistic"

    @property
    def label(self) -> str:
        return _STYLE_LABELS[self]

    @classmethod
    def choices(cls) -> list[tuple[str, str]]:
        """Return ``(label, value)`` pairs in declaration order."""
        return [(style.label, style.value) for style in cls]


_STYLE_LABELS = {
    CalligraphyStyle.RUNNING_SCRIPT: "行书 (Running)",
    CalligraphyStyle.CURSIVE: "草书 (Cursive)",
    CalligraphyStyle.REGULAR: "楷书 (Regular)",
    CalligraphyStyle.CLERICAL: "隶书 (Clerical)",
    CalligraphyStyle.ARTISTIC: "现代艺术 (Artistic)",
}


class AppStep(IntEnum):
    """Steps of the upload -> design -> composite workflow."""

    UPLOAD_PHOTO = 0
    GENERATE_SIGNATURE = 1
    COMPOSITE_AND_SAVE = 2


class Bitmap(BaseModel):
    """Decoded raster image ready to be drawn.

    Pixels are stored as an ``H x W x 3`` RGB ``uint8`` array whose write flag
    is cleared, so a bitmap can be shared with the rasterizer without copying.

    Attributes:
        pixels: RGB image data.
        source: Short description of where the image came from (for logs).
    """

    pixels: np.ndarray = Field(..., description="RGB uint8 pixel data")
    source: str = Field("", description="Origin of the decoded image")

    class Config:
        arbitrary_types_allowed = True

    @property
    def natural_width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def natural_height(self) -> int:
        return int(self.pixels.shape[0])


class Placement(BaseModel):
    """Position, scale and rotation of the overlay on the surface.

    Position is stored as a fraction of the surface size rather than in
    pixels, so the same placement stays valid when the surface is rendered
    at a different (downscaled) resolution.

    Attributes:
        x: Horizontal centre of the overlay as a fraction of surface width.
        y: Vertical centre of the overlay as a fraction of surface height.
        scale: Multiplier applied to the overlay's natural pixel size.
        rotation: Clockwise rotation about the overlay centre, in radians.
    """

    x: float = Field(0.5, description="Centre x as a fraction of surface width")
    y: float = Field(0.5, description="Centre y as a fraction of surface height")
    scale: float = Field(0.4, ge=0.0, description="Overlay scale factor")
    rotation: float = Field(0.0, description="Clockwise rotation in radians")

    def apply_delta(
        self,
        dx_px: float,
        dy_px: float,
        surface_width_px: float,
        surface_height_px: float,
    ) -> "Placement":
        """Move the overlay by a pixel delta measured on the surface.

        Args:
            dx_px: Horizontal movement in pixels.
            dy_px: Vertical movement in pixels.
            surface_width_px: Width the delta was measured against.
            surface_height_px: Height the delta was measured against.

        Returns:
            A new Placement with the updated position; scale and rotation
            are carried over unchanged.

        Raises:
            ValueError: If either surface dimension is not positive.
        """
        if surface_width_px <= 0 or surface_height_px <= 0:
            raise ValueError(
                f"Surface size must be positive, got "
                f"{surface_width_px}x{surface_height_px}"
            )
        return self.model_copy(
            update={
                "x": self.x + dx_px / surface_width_px,
                "y": self.y + dy_px / surface_height_px,
            }
        )

    def with_scale(self, scale: float) -> "Placement":
        # Rebuilt rather than copied so the scale bound is validated
        return Placement(x=self.x, y=self.y, scale=scale, rotation=self.rotation)

    def with_rotation(self, rotation: float) -> "Placement":
        return self.model_copy(update={"rotation": float(rotation)})


class GestureSession(BaseModel):
    """State of the single pointer drag currently in progress."""

    active: bool = False
    pointer_id: int | None = None
    last_x: float = 0.0
    last_y: float = 0.0


class GeneratedSignature(BaseModel):
    """A calligraphy image returned by the signature generator.

    Attributes:
        id: Unique identifier of this generation.
        url: Image resource, normally a ``data:`` URI.
        name: The text that was written.
        style: Calligraphy style that was requested.
    """

    id: str = Field(..., description="Unique generation identifier")
    url: str = Field(..., min_length=1, description="Image URI")
    name: str = Field(..., description="Name written in the signature")
    style: CalligraphyStyle = Field(..., description="Requested style")
