"""Domain models for the InkFlow application.

This module provides a centralized location for all data models used by the
compositor and the signature generator. It includes:

- Core domain models (Bitmap, Placement, GestureSession, CalligraphyStyle)
- Pipeline outputs (CompositeSurface, ExportResult)
- Configuration parameters and persisted user settings

All models are built using Pydantic for data validation, ensuring type
safety and clear interfaces between components.
"""

# Re-export core models
from inkflow.models.core_models import (
    AppStep,
    Bitmap,
    CalligraphyStyle,
    GeneratedSignature,
    GestureSession,
    Placement,
)

# Re-export pipeline models
from inkflow.models.pipeline_models import CompositeSurface, ExportResult

# Re-export setting models
from inkflow.models.settings_models import (
    AppParameters,
    CompositeParams,
    GenerationParams,
    InkflowSettings,
)
