"""Rasterization of the photo and signature into a single surface.

The background is scaled to fill the surface, then the overlay is warped
into place with an affine transform that pivots on the overlay's own centre
and combined with a multiply blend. Multiply keeps black ink and makes white
paper vanish, so generated signatures do not need an alpha channel.
"""

import logging
import math

import cv2
import numpy as np

from inkflow.models.core_models import Bitmap, Placement
from inkflow.models.pipeline_models import CompositeSurface

logger = logging.getLogger(__name__)

MAX_SURFACE_DIMENSION = 2048

# Overlay sizes below this many pixels are treated as not drawn at all
DEGENERATE_SIZE_PX = 1e-6


def compute_surface_size(
    width: int, height: int, max_dimension: int = MAX_SURFACE_DIMENSION
) -> tuple[int, int]:
    """Compute the surface size for a background of the given size.

    Sizes within the bound are kept as-is. Otherwise the longer side becomes
    exactly ``max_dimension`` and the other side follows the aspect ratio.

    Args:
        width: Natural background width in pixels.
        height: Natural background height in pixels.
        max_dimension: Largest allowed width or height.

    Returns:
        ``(surface_width, surface_height)`` in pixels.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid background size {width}x{height}")

    if width <= max_dimension and height <= max_dimension:
        return width, height

    ratio = width / height
    if width > height:
        return max_dimension, max(1, round(max_dimension / ratio))
    return max(1, round(max_dimension * ratio)), max_dimension


def overlay_transform(
    overlay_width: int,
    overlay_height: int,
    placement: Placement,
    surface_width: int,
    surface_height: int,
) -> np.ndarray:
    """Build the 2x3 matrix mapping overlay pixels onto the surface.

    The transform is translate(centre) . rotate . scale . translate(-half
    size), expressed in pixel-index coordinates where an index addresses the
    centre of its pixel.

    Args:
        overlay_width: Natural overlay width in pixels.
        overlay_height: Natural overlay height in pixels.
        placement: Overlay placement.
        surface_width: Surface width in pixels.
        surface_height: Surface height in pixels.

    Returns:
        2x3 float64 affine matrix suitable for ``cv2.warpAffine``.
    """
    s = placement.scale
    cos_t = math.cos(placement.rotation)
    sin_t = math.sin(placement.rotation)

    # Pixel centres sit at index + 0.5 in continuous surface coordinates
    cx = overlay_width / 2 - 0.5
    cy = overlay_height / 2 - 0.5
    px = placement.x * surface_width - 0.5
    py = placement.y * surface_height - 0.5

    return np.array(
        [
            [s * cos_t, -s * sin_t, px - s * cos_t * cx + s * sin_t * cy],
            [s * sin_t, s * cos_t, py - s * sin_t * cx - s * cos_t * cy],
        ],
        dtype=np.float64,
    )


def multiply_blend(base: np.ndarray, layer: np.ndarray) -> np.ndarray:
    """Blend two RGB uint8 images channel-wise with the multiply rule.

    Returns ``round(base * layer / 255)``; a white layer pixel leaves the base
    unchanged and a black layer pixel produces black.
    """
    product = base.astype(np.uint32) * layer.astype(np.uint32)
    return ((product + 127) // 255).astype(np.uint8)


def draw_overlay(
    surface: np.ndarray, overlay: Bitmap, placement: Placement
) -> np.ndarray:
    """Multiply-blend the placed overlay onto a surface.

    Args:
        surface: RGB uint8 surface the overlay is drawn on.
        overlay: Overlay bitmap.
        placement: Position, scale and rotation of the overlay.

    Returns:
        New RGB uint8 array with the overlay applied. When the overlay's
        rendered size is degenerate the surface is returned unchanged.
    """
    rendered_w = overlay.natural_width * placement.scale
    rendered_h = overlay.natural_height * placement.scale
    if rendered_w < DEGENERATE_SIZE_PX or rendered_h < DEGENERATE_SIZE_PX:
        logger.debug("Overlay has degenerate size, skipping draw")
        return surface

    height, width = surface.shape[:2]
    matrix = overlay_transform(
        overlay.natural_width, overlay.natural_height, placement, width, height
    )

    # White outside the overlay is the identity for multiply
    layer = cv2.warpAffine(
        np.ascontiguousarray(overlay.pixels),
        matrix,
        (width, height),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=(255, 255, 255),
    )
    return multiply_blend(surface, layer)


def render_composite(
    background: Bitmap,
    overlay: Bitmap,
    placement: Placement,
    max_dimension: int = MAX_SURFACE_DIMENSION,
) -> CompositeSurface:
    """Render the background and overlay into a flattened surface.

    Args:
        background: Photo bitmap defining the surface size.
        overlay: Signature bitmap.
        placement: Overlay placement.
        max_dimension: Longest allowed surface side in pixels.

    Returns:
        CompositeSurface holding the rendered pixels.
    """
    width, height = compute_surface_size(
        background.natural_width, background.natural_height, max_dimension
    )

    if (width, height) == (background.natural_width, background.natural_height):
        base = np.array(background.pixels, copy=True)
    else:
        shrinking = width < background.natural_width
        interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR
        base = cv2.resize(
            np.ascontiguousarray(background.pixels),
            (width, height),
            interpolation=interpolation,
        )

    pixels = draw_overlay(base, overlay, placement)
    return CompositeSurface(
        pixels=pixels, width=width, height=height, placement=placement
    )
