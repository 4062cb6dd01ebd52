"""The compositing surface: bitmaps, placement, gestures and the last render.

A Composer is the single owner of everything the surface needs. All
mutations go through it and each one re-renders the whole surface, so the
surface always reflects the latest completed state and export never sees a
stale or partial image.
"""

import logging

from inkflow.compositing import render_composite
from inkflow.errors import ImageDecodeError, SurfaceNotReadyError
from inkflow.export import export_surface
from inkflow.file_manager import SessionFileManager
from inkflow.gesture import GestureController
from inkflow.image_loading import load_bitmaps
from inkflow.models.core_models import Bitmap, Placement
from inkflow.models.pipeline_models import CompositeSurface, ExportResult
from inkflow.models.settings_models import CompositeParams

logger = logging.getLogger(__name__)

# Pointer id used for drags synthesized from single clicks
CLICK_POINTER_ID = 1


class Composer:
    """Owns the state of one compositing surface.

    Attributes:
        params: Rasterizer and exporter configuration.
        background: Decoded photo, or None before a successful load.
        overlay: Decoded signature, or None before a successful load.
        placement: Current overlay placement.
        gesture: Drag state machine feeding placement updates.
        surface: Last completed render, or None.
        is_loading: True while a load is in flight; export and drags are
            refused meanwhile.
    """

    def __init__(self, params: CompositeParams | None = None):
        self.params = params or CompositeParams()
        self.background: Bitmap | None = None
        self.overlay: Bitmap | None = None
        self.placement = self.params.initial_placement
        self.gesture = GestureController()
        self.surface: CompositeSurface | None = None
        self.is_loading = False
        self._load_generation = 0

    @property
    def is_ready(self) -> bool:
        return not self.is_loading and self.surface is not None

    async def load(self, background_uri: str, overlay_uri: str) -> CompositeSurface | None:
        """Decode both sources and render the first composite.

        The previous bitmaps and surface are dropped as soon as the load
        starts. If a newer load or a teardown happens while this one is
        suspended, its result is discarded.

        Args:
            background_uri: Source of the photo.
            overlay_uri: Source of the signature image.

        Returns:
            The rendered surface, or None when the result was discarded.

        Raises:
            ImageDecodeError: If either source of the current load fails.
                No surface is left behind.
        """
        self._load_generation += 1
        generation = self._load_generation

        self.gesture.cancel()
        self.background = None
        self.overlay = None
        self.surface = None
        self.placement = self.params.initial_placement
        self.is_loading = True

        try:
            background, overlay = await load_bitmaps(background_uri, overlay_uri)
        except ImageDecodeError as e:
            if generation != self._load_generation:
                logger.info(f"Ignoring failure of a superseded image load: {e}")
                return None
            raise
        finally:
            if generation == self._load_generation:
                self.is_loading = False

        if generation != self._load_generation:
            logger.info("Discarding result of a superseded image load")
            return None

        self.background = background
        self.overlay = overlay
        return self.render()

    def render(self) -> CompositeSurface:
        """Re-render the full surface from the current state."""
        if self.background is None or self.overlay is None:
            raise SurfaceNotReadyError("Images have not been loaded")

        self.surface = render_composite(
            self.background,
            self.overlay,
            self.placement,
            self.params.max_dimension,
        )
        return self.surface

    def set_placement(self, placement: Placement) -> CompositeSurface:
        self.placement = placement
        return self.render()

    def set_scale(self, scale: float) -> CompositeSurface:
        return self.set_placement(self.placement.with_scale(scale))

    def set_rotation(self, rotation: float) -> CompositeSurface:
        return self.set_placement(self.placement.with_rotation(rotation))

    def pointer_down(self, pointer_id: int, x: float, y: float) -> None:
        self._require_ready()
        self.gesture.pointer_down(pointer_id, x, y)

    def pointer_move(
        self,
        pointer_id: int,
        x: float,
        y: float,
        display_width: float | None = None,
        display_height: float | None = None,
    ) -> CompositeSurface | None:
        """Feed a pointer move to the active drag.

        Args:
            pointer_id: Identity of the pointer that moved.
            x: Pointer x in display coordinates.
            y: Pointer y in display coordinates.
            display_width: Width of the displayed surface; defaults to the
                surface's pixel width.
            display_height: Height of the displayed surface; defaults to the
                surface's pixel height.

        Returns:
            The re-rendered surface, or None when the move was ignored.
        """
        if self.is_loading or self.surface is None:
            return None

        delta = self.gesture.pointer_move(pointer_id, x, y)
        if delta is None:
            return None

        dx, dy = delta
        self.placement = self.placement.apply_delta(
            dx,
            dy,
            display_width or self.surface.width,
            display_height or self.surface.height,
        )
        return self.render()

    def pointer_up(self, pointer_id: int) -> None:
        self.gesture.pointer_up(pointer_id)

    def pointer_leave(self, pointer_id: int) -> None:
        self.gesture.pointer_leave(pointer_id)

    def drag_to(self, x: float, y: float) -> CompositeSurface:
        """Drag the overlay centre to a point on the surface.

        Runs a complete down / move / up gesture starting at the overlay's
        current centre, so a single click on the displayed image moves the
        signature there through the same incremental path as a real drag.

        Args:
            x: Target x in surface pixels.
            y: Target y in surface pixels.

        Returns:
            The re-rendered surface.
        """
        self._require_ready()
        start_x = self.placement.x * self.surface.width
        start_y = self.placement.y * self.surface.height

        self.pointer_down(CLICK_POINTER_ID, start_x, start_y)
        try:
            self.pointer_move(CLICK_POINTER_ID, x, y)
        finally:
            self.pointer_up(CLICK_POINTER_ID)
        return self.surface

    def export(self, file_manager: SessionFileManager | None = None) -> ExportResult:
        """Export the last completed render as JPEG.

        Raises:
            SurfaceNotReadyError: If a load is in flight or nothing has been
                rendered yet.
        """
        self._require_ready()
        return export_surface(self.surface, file_manager, self.params.jpeg_quality)

    def teardown(self) -> None:
        """Drop all state; any load still in flight will be discarded."""
        self._load_generation += 1
        self.gesture.cancel()
        self.background = None
        self.overlay = None
        self.surface = None
        self.is_loading = False

    def _require_ready(self) -> None:
        if self.is_loading:
            raise SurfaceNotReadyError("Images are still loading")
        if self.surface is None:
            raise SurfaceNotReadyError("Nothing has been rendered yet")
