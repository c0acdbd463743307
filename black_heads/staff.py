"""Staff and ledger geometry.

Pitch positions are measured in pitch steps (half an interline) from the
middle staff line, growing downwards: on a 5-line staff the lines sit at
pitch positions -4, -2, 0, 2 and 4. Ledgers extend this range above
(negative indices, -1 being the closest to the staff) and below (positive
indices).

``StaffGeometry`` and ``SystemGeometry`` describe what head validation
needs from the staff retrieval step. ``StaffInfo`` is the reference
implementation built from staff line ordinates.
"""

from typing import Protocol

import numpy as np
from pydantic import BaseModel, Field

from black_heads.models.core_models import Point


def ledger_pitch_position(index: int, line_count: int = 5) -> float:
    """Return the pitch position of the ledger with the given index.

    Args:
        index: Ledger index, negative above the staff, positive below.
        line_count: Number of lines of the staff.

    Returns:
        The ledger pitch position, e.g. -6 or 6 for the first ledgers of
        a 5-line staff.
    """
    edge = line_count - 1
    if index > 0:
        return float(edge + 2 * index)
    return float(-edge + 2 * index)


class IndexedLedger(BaseModel):
    """A ledger with its index relative to the staff."""

    index: int = Field(..., description="Ledger index, negative above the staff")
    y: float = Field(..., description="Ledger ordinate in pixels")
    left: int = Field(..., description="Left abscissa in pixels")
    right: int = Field(..., description="Right abscissa in pixels")


class NotePosition(BaseModel):
    """Position of a point relative to a staff."""

    pitch_position: float = Field(..., description="Continuous pitch position")
    ledger: IndexedLedger | None = Field(None, description="Nearby ledger, if any")

    def __str__(self) -> str:
        ledger = "none" if self.ledger is None else str(self.ledger.index)
        return f"pitch:{self.pitch_position:.2f} ledger:{ledger}"


class StaffGeometry(Protocol):
    def note_position(self, point: Point) -> NotePosition: ...

    def dmz_end(self) -> int: ...

    def line_count(self) -> int: ...


class SystemGeometry(Protocol):
    def staff_at(self, point: Point) -> StaffGeometry: ...


class StaffInfo(BaseModel):
    """Staff described by its line ordinates and ledgers.

    Attributes:
        id: Staff identifier within the sheet.
        lines: Ordinates of the staff lines, top to bottom.
        left: Left abscissa of the staff.
        right: Right abscissa of the staff.
        dmz_end_x: End abscissa of the staff header (clef, key, time).
        ledgers: Ledgers found around the staff.
    """

    id: int = Field(..., ge=1, description="Staff identifier")
    lines: list[float] = Field(..., min_length=2, description="Line ordinates")
    left: int = Field(0, description="Left abscissa")
    right: int = Field(..., description="Right abscissa")
    dmz_end_x: int = Field(0, description="End of the staff header")
    ledgers: list[IndexedLedger] = Field(default_factory=list, description="Ledgers")

    @property
    def top(self) -> float:
        return self.lines[0]

    @property
    def bottom(self) -> float:
        return self.lines[-1]

    @property
    def interline(self) -> float:
        return (self.bottom - self.top) / (len(self.lines) - 1)

    def line_count(self) -> int:
        return len(self.lines)

    def dmz_end(self) -> int:
        return self.dmz_end_x

    def ledger_pitch_position(self, index: int) -> float:
        return ledger_pitch_position(index, self.line_count())

    def pitch_position(self, point: Point) -> float:
        """Compute the continuous pitch position of a point.

        Within the staff the position is interpolated between lines;
        beyond the outer lines it is extrapolated using the mean interline.
        """
        edge = self.line_count() - 1
        pitches = [-edge + 2 * i for i in range(self.line_count())]
        step = self.interline / 2
        if point.y < self.top:
            return pitches[0] - (self.top - point.y) / step
        if point.y > self.bottom:
            return pitches[-1] + (point.y - self.bottom) / step
        return float(np.interp(point.y, self.lines, pitches))

    def note_position(self, point: Point) -> NotePosition:
        """Compute the pitch position of a point and its nearby ledger.

        A ledger is looked up only when the point lies beyond the outer
        staff lines, among the ledgers on that side which horizontally
        cover the point.
        """
        pitch = self.pitch_position(point)
        ledger = None
        if abs(pitch) > self.line_count() - 1:
            side = 1 if pitch > 0 else -1
            candidates = [
                led
                for led in self.ledgers
                if led.index * side > 0 and led.left <= point.x <= led.right
            ]
            if candidates:
                ledger = min(
                    candidates,
                    key=lambda led: abs(pitch - self.ledger_pitch_position(led.index)),
                )
        return NotePosition(pitch_position=pitch, ledger=ledger)

    def distance_to(self, point: Point) -> float:
        """Vertical distance from a point to the staff, 0 when inside."""
        if point.y < self.top:
            return self.top - point.y
        if point.y > self.bottom:
            return point.y - self.bottom
        return 0.0
