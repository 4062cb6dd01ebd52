"""Image loading for the compositing surface.

This module resolves image sources (local paths, ``file://`` URLs, ``data:``
URIs and remote ``http(s)`` URLs) into decoded RGB bitmaps. Decoding is done
with OpenCV; both sources of a composite are decoded concurrently and the
load only succeeds when both are ready.
"""

import asyncio
import base64
import binascii
import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

import cv2
import numpy as np
import requests

from inkflow.errors import ImageDecodeError
from inkflow.models.core_models import Bitmap

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SEC = 30


def read_source_bytes(uri: str) -> bytes:
    """Read the raw encoded bytes behind an image source.

    Args:
        uri: Local path, ``file://`` URL, ``data:`` URI or ``http(s)`` URL.

    Returns:
        The encoded image bytes.

    Raises:
        ImageDecodeError: If the source is empty, unreadable or unreachable.
    """
    if not uri:
        raise ImageDecodeError("No image source given")

    if uri.startswith("data:"):
        return _read_data_uri(uri)

    parsed = urlparse(uri)
    if parsed.scheme in ("http", "https"):
        try:
            response = requests.get(uri, timeout=REQUEST_TIMEOUT_SEC)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ImageDecodeError(f"Could not fetch {uri}: {e}") from e
        return response.content

    path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(uri)
    try:
        return path.read_bytes()
    except OSError as e:
        raise ImageDecodeError(f"Could not read {path}: {e}") from e


def _read_data_uri(uri: str) -> bytes:
    header, sep, payload = uri.partition(",")
    if not sep:
        raise ImageDecodeError("Malformed data URI")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageDecodeError(f"Invalid base64 payload: {e}") from e
    return unquote(payload).encode("latin-1")


def decode_image_bytes(data: bytes) -> np.ndarray:
    """Decode encoded image bytes into an RGB uint8 array.

    Grayscale images are expanded to three channels, 16-bit images are
    reduced to 8 bits, and an alpha channel is flattened onto white so that
    transparent regions stay neutral under the multiply blend. Opaque images
    are returned upright according to their EXIF orientation tag.

    Args:
        data: Encoded image (PNG, JPEG, WebP, ...).

    Returns:
        ``H x W x 3`` RGB uint8 array.

    Raises:
        ImageDecodeError: If the bytes are not a decodable image.
    """
    if not data:
        raise ImageDecodeError("Image data is empty")

    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
    if image is None:
        raise ImageDecodeError("Unsupported or corrupt image data")

    if image.ndim == 3 and image.shape[2] == 4:
        if image.dtype == np.uint16:
            image = (image >> 8).astype(np.uint8)
        elif image.dtype != np.uint8:
            raise ImageDecodeError(f"Unsupported pixel type {image.dtype}")
        return _flatten_alpha_on_white(image)

    # IMREAD_COLOR honours the EXIF orientation tag and yields 8-bit BGR
    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if image is None:
        raise ImageDecodeError("Unsupported or corrupt image data")

    # Convert BGR→RGB to match the rest of the pipeline
    return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)


def _flatten_alpha_on_white(bgra: np.ndarray) -> np.ndarray:
    rgb = cv2.cvtColor(bgra, cv2.COLOR_BGRA2RGB).astype(np.float32)
    alpha = bgra[..., 3:4].astype(np.float32) / 255.0
    flattened = rgb * alpha + 255.0 * (1.0 - alpha)
    return np.clip(np.rint(flattened), 0, 255).astype(np.uint8)


def load_bitmap(uri: str) -> Bitmap:
    """Read and decode a single image source into a Bitmap.

    Args:
        uri: Image source, see read_source_bytes.

    Returns:
        Bitmap with read-only pixels.

    Raises:
        ImageDecodeError: If the source cannot be read or decoded.
    """
    pixels = decode_image_bytes(read_source_bytes(uri))
    pixels.setflags(write=False)
    return Bitmap(pixels=pixels, source=describe_source(uri))


async def load_bitmaps(background_uri: str, overlay_uri: str) -> tuple[Bitmap, Bitmap]:
    """Decode the background and overlay sources concurrently.

    Args:
        background_uri: Source of the photo.
        overlay_uri: Source of the signature image.

    Returns:
        Tuple of (background, overlay) bitmaps.

    Raises:
        ImageDecodeError: If either source fails; no partial result is kept.
    """
    background, overlay = await asyncio.gather(
        asyncio.to_thread(load_bitmap, background_uri),
        asyncio.to_thread(load_bitmap, overlay_uri),
    )
    logger.info(
        f"Loaded background {background.natural_width}x{background.natural_height} "
        f"and overlay {overlay.natural_width}x{overlay.natural_height}"
    )
    return background, overlay


def describe_source(uri: str) -> str:
    """Return a short, log-friendly description of an image source."""
    if uri.startswith("data:"):
        return uri.split(",", 1)[0]
    return uri
