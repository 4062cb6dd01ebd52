"""Export of the composite surface as a downloadable JPEG."""

import logging
import time

import cv2

from inkflow.errors import InkflowError
from inkflow.file_manager import SessionFileManager
from inkflow.models.pipeline_models import CompositeSurface, ExportResult

logger = logging.getLogger(__name__)

DEFAULT_JPEG_QUALITY = 0.9
EXPORT_PREFIX = "inkflow-signature"


def encode_jpeg(surface: CompositeSurface, quality: float = DEFAULT_JPEG_QUALITY) -> bytes:
    """Encode a rendered surface as JPEG.

    Args:
        surface: Surface to encode.
        quality: Quality in the (0, 1] range, as for a canvas export.

    Returns:
        JPEG-encoded bytes.

    Raises:
        ValueError: If quality is outside (0, 1].
        InkflowError: If OpenCV fails to encode the image.
    """
    if not 0.0 < quality <= 1.0:
        raise ValueError(f"JPEG quality must be in (0, 1], got {quality}")

    # Convert RGB→BGR for OpenCV
    bgr = cv2.cvtColor(surface.pixels, cv2.COLOR_RGB2BGR)
    ok, encoded = cv2.imencode(
        ".jpg", bgr, [cv2.IMWRITE_JPEG_QUALITY, int(round(quality * 100))]
    )
    if not ok:
        raise InkflowError("JPEG encoding failed")
    return encoded.tobytes()


def export_filename(timestamp_ms: int | None = None) -> str:
    """Build the timestamped download name for an export."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{EXPORT_PREFIX}-{timestamp_ms}.jpg"


def export_surface(
    surface: CompositeSurface,
    file_manager: SessionFileManager | None = None,
    quality: float = DEFAULT_JPEG_QUALITY,
) -> ExportResult:
    """Encode a surface and optionally write it out for download.

    Args:
        surface: Surface to export.
        file_manager: Session file manager; when given, the JPEG replaces the
            session's previous export on disk.
        quality: JPEG quality in the (0, 1] range.

    Returns:
        ExportResult with the encoded bytes, file name and written path.
    """
    jpeg_bytes = encode_jpeg(surface, quality)
    filename = export_filename()

    file_path = ""
    if file_manager is not None:
        file_path = file_manager.write_file("export", jpeg_bytes, filename)

    logger.info(
        f"Exported {surface.width}x{surface.height} composite "
        f"({len(jpeg_bytes)} bytes) as {filename}"
    )
    return ExportResult(jpeg_bytes=jpeg_bytes, filename=filename, file_path=file_path)
