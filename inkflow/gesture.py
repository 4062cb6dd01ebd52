"""Single-pointer drag handling for the compositing surface.

The controller is a two-state machine (idle / dragging). It does not touch
the placement itself; it reports incremental pointer deltas that the caller
feeds to ``Placement.apply_delta``.
"""

from inkflow.models.core_models import GestureSession


class GestureController:
    """Turns one continuous pointer drag into incremental deltas.

    Only one drag is tracked. The pointer that started it owns the session
    (pointer capture); events from any other pointer are ignored until the
    drag ends. A new pointer-down while dragging replaces the session.
    """

    def __init__(self):
        self.session = GestureSession()

    @property
    def is_dragging(self) -> bool:
        return self.session.active

    def pointer_down(self, pointer_id: int, x: float, y: float) -> None:
        """Start a drag anchored at the given client coordinates."""
        self.session = GestureSession(
            active=True, pointer_id=pointer_id, last_x=float(x), last_y=float(y)
        )

    def pointer_move(
        self, pointer_id: int, x: float, y: float
    ) -> tuple[float, float] | None:
        """Advance the drag to new client coordinates.

        Args:
            pointer_id: Identity of the pointer that moved.
            x: New client x coordinate.
            y: New client y coordinate.

        Returns:
            The ``(dx, dy)`` movement since the previous event, or None when
            no drag is active or the pointer is not the captured one.
        """
        session = self.session
        if not session.active or pointer_id != session.pointer_id:
            return None

        dx = float(x) - session.last_x
        dy = float(y) - session.last_y
        session.last_x = float(x)
        session.last_y = float(y)
        return dx, dy

    def pointer_up(self, pointer_id: int) -> None:
        """End the drag and release pointer capture."""
        if self.session.active and pointer_id == self.session.pointer_id:
            self.session = GestureSession()

    # Leaving the surface ends the drag exactly like releasing the pointer
    pointer_leave = pointer_up

    def cancel(self) -> None:
        self.session = GestureSession()
