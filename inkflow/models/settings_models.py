"""Parameter models for application configuration.

This module defines Pydantic models that hold every configurable value used
by the compositor, the exporter and the signature generator. Defaults match
the behaviour of the hosted application; the models can be overridden in
tests or when embedding the core in another front end.
"""

from pydantic import BaseModel, Field

from inkflow.models.core_models import Placement


class CompositeParams(BaseModel):
    """Configuration for rasterizing and exporting the composite.

    Attributes:
        max_dimension: Longest allowed surface side in pixels (default 2048).
        jpeg_quality: Export quality in the 0-1 range (default 0.9).
        initial_placement: Placement used for a freshly loaded overlay.
    """

    max_dimension: int = Field(
        2048, ge=1, description="Maximum surface width or height in pixels"
    )
    jpeg_quality: float = Field(
        0.9, gt=0.0, le=1.0, description="JPEG export quality (0-1]"
    )
    initial_placement: Placement = Field(
        default_factory=Placement, description="Placement for a new overlay"
    )


class GenerationParams(BaseModel):
    """Configuration for the remote signature generator.

    Attributes:
        model: Gemini model name; must be able to return inline image data.
        timeout_ms: Request timeout in milliseconds (default 90 s).
        sample_photo_url: Address used by the "random sample photo" button.
    """

    model: str = Field("gemini-2.5-flash-image", description="Gemini model name")
    timeout_ms: int = Field(
        90_000, ge=1_000, description="Request timeout in milliseconds"
    )
    sample_photo_url: str = Field(
        "https://picsum.photos/800/600", description="Sample photo address"
    )


class InkflowSettings(BaseModel):
    """User settings persisted in the browser's local storage.

    Only these two strings are stored. ``base_url`` is optional and points
    the client at an alternate endpoint (for example a proxy) when the
    default Google endpoint is unreachable.

    Attributes:
        api_key: Gemini API credential.
        base_url: Alternate endpoint base address, empty for the default.
    """

    api_key: str = Field("", description="Gemini API key")
    base_url: str = Field("", description="Alternate API base address")

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key.strip())


class AppParameters(BaseModel):
    """Complete configuration for the application.

    Attributes:
        composite: Rasterizer and exporter parameters.
        generation: Signature generator parameters.
    """

    composite: CompositeParams = Field(
        default_factory=CompositeParams, description="Compositing parameters"
    )
    generation: GenerationParams = Field(
        default_factory=GenerationParams, description="Generation parameters"
    )
