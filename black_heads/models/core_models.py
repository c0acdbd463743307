"""Core domain models for black-head building.

Coordinates follow the usual image conventions with (0, 0) at the top-left
corner of the sheet. Runs are vertical: each run is a contiguous span of
foreground pixels within one column.
"""

from enum import Enum

import cv2
import numpy as np
from pydantic import BaseModel, Field


class Shape(str, Enum):
    """Shape tags assigned to spots and interpretations."""

    BEAM_SPOT = "beam_spot"
    BEAM = "beam"
    HEAD_SPOT = "head_spot"
    NOTEHEAD_BLACK = "notehead_black"


class Point(BaseModel):
    """A location in the sheet coordinate frame."""

    x: float = Field(..., description="Abscissa in pixels")
    y: float = Field(..., description="Ordinate in pixels")


class BoundingBox(BaseModel):
    """Axis-aligned bounding box in pixels.

    Attributes:
        x: Left edge position in pixels.
        y: Top edge position in pixels.
        w: Width in pixels (positive integer).
        h: Height in pixels (positive integer).
    """

    x: int = Field(..., description="Left edge position in pixels")
    y: int = Field(..., description="Top edge position in pixels")
    w: int = Field(..., ge=1, description="Width in pixels")
    h: int = Field(..., ge=1, description="Height in pixels")

    @property
    def cx(self) -> float:
        """Horizontal center coordinate of the box."""
        return self.x + self.w / 2

    @property
    def cy(self) -> float:
        """Vertical center coordinate of the box."""
        return self.y + self.h / 2

    @property
    def right(self) -> int:
        """Abscissa just past the right edge."""
        return self.x + self.w

    @property
    def bottom(self) -> int:
        """Ordinate just past the bottom edge."""
        return self.y + self.h

    def translate(self, dx: int, dy: int) -> "BoundingBox":
        return self.model_copy(update={"x": self.x + dx, "y": self.y + dy})

    @classmethod
    def union(cls, boxes) -> "BoundingBox":
        """Smallest box containing all the provided boxes.

        Args:
            boxes: Non-empty iterable of BoundingBox instances.

        Returns:
            The union bounding box.

        Raises:
            ValueError: If ``boxes`` is empty.
        """
        boxes = list(boxes)
        if not boxes:
            raise ValueError("Cannot compute the union of no boxes")
        left = min(b.x for b in boxes)
        top = min(b.y for b in boxes)
        right = max(b.right for b in boxes)
        bottom = max(b.bottom for b in boxes)
        return cls(x=left, y=top, w=right - left, h=bottom - top)


class Run(BaseModel):
    """A vertical span of foreground pixels within one column."""

    start: int = Field(..., description="Ordinate of the first pixel")
    length: int = Field(..., ge=1, description="Number of pixels")

    @property
    def stop(self) -> int:
        """Ordinate of the last pixel (inclusive)."""
        return self.start + self.length - 1

    def overlaps(self, other: "Run") -> bool:
        return self.start <= other.stop and self.stop >= other.start


class Section(BaseModel):
    """Atomic run-segment: runs in consecutive columns starting at ``x``.

    A section belongs to exactly one run domain, identified by ``domain``,
    where it is known by its ``id``.
    """

    domain: str = Field("", description="Name of the owning run domain")
    id: int = Field(0, description="Identifier within the domain")
    x: int = Field(..., description="Abscissa of the first run")
    runs: list[Run] = Field(..., min_length=1, description="Runs, one per column")

    @property
    def key(self) -> tuple[str, int]:
        return self.domain, self.id

    @property
    def last_x(self) -> int:
        return self.x + len(self.runs) - 1

    @property
    def weight(self) -> int:
        return sum(run.length for run in self.runs)

    @property
    def bounds(self) -> BoundingBox:
        top = min(run.start for run in self.runs)
        bottom = max(run.stop for run in self.runs)
        return BoundingBox(x=self.x, y=top, w=len(self.runs), h=bottom - top + 1)

    def run_keys(self):
        """Yield the absolute geometry ``(x, start, length)`` of each run."""
        for i, run in enumerate(self.runs):
            yield self.x + i, run.start, run.length

    def translated(self, dx: int, dy: int) -> "Section":
        runs = [Run(start=run.start + dy, length=run.length) for run in self.runs]
        return self.model_copy(update={"x": self.x + dx, "runs": runs})


class Interpretation(BaseModel):
    """A recognized interpretation attached to a spot (e.g. a beam)."""

    shape: Shape = Field(..., description="Interpreted shape")
    grade: float = Field(..., ge=0.0, le=1.0, description="Interpretation grade")

    def is_good(self, good_grade: float) -> bool:
        return self.grade >= good_grade


class Spot(BaseModel):
    """A connected foreground region made of atomic run-segments.

    Spots are created by region extraction, may be mutated in place by
    later stages (shape tag, VIP flag, interpretations) and receive a
    stable ``id`` once registered in a SpotRegistry.

    Attributes:
        id: Registry identifier, None until registered.
        sections: The run-segments owned by this spot.
        shape: Current shape tag.
        vip: Debug flag; decisions about VIP spots are logged verbosely.
        interpretations: Interpretations already attached to the spot.
    """

    id: int | None = Field(None, description="Registry identifier")
    sections: list[Section] = Field(default_factory=list, description="Owned sections")
    shape: Shape = Field(Shape.BEAM_SPOT, description="Shape tag")
    vip: bool = Field(False, description="Verbose debug flag")
    interpretations: list[Interpretation] = Field(
        default_factory=list, description="Attached interpretations"
    )

    def __str__(self) -> str:
        return f"Spot#{self.id} {self.shape.value} weight:{self.weight}"

    @property
    def weight(self) -> int:
        """Number of foreground pixels."""
        return sum(section.weight for section in self.sections)

    @property
    def bounds(self) -> BoundingBox:
        return BoundingBox.union(section.bounds for section in self.sections)

    @property
    def footprint(self) -> tuple[tuple[int, int, int], ...]:
        """Hashable key of the absolute run geometry, whatever the domain."""
        return tuple(sorted(key for s in self.sections for key in s.run_keys()))

    @property
    def centroid(self) -> Point:
        box = self.bounds
        m = self.moments()
        return Point(x=box.x + m["m10"] / m["m00"], y=box.y + m["m01"] / m["m00"])

    @property
    def inverted_slope(self) -> float:
        """Slope dx/dy of the best-fit line, 0 for a vertical axis.

        Returns ``inf`` when the spot is a single row of pixels.
        """
        m = self.moments()
        if m["mu02"] == 0:
            return float("inf")
        return m["mu11"] / m["mu02"]

    def moments(self) -> dict:
        return cv2.moments(self.image(), binaryImage=True)

    def image(self) -> np.ndarray:
        """Render the spot into a uint8 array sized to its bounds.

        Returns:
            2D array where spot pixels are 255 and background is 0.
        """
        box = self.bounds
        img = np.zeros((box.h, box.w), dtype=np.uint8)
        for section in self.sections:
            for x, start, length in section.run_keys():
                img[start - box.y : start - box.y + length, x - box.x] = 255
        return img


class HeadImpacts(BaseModel):
    """Individual grades supporting a black-head interpretation."""

    shape: float = Field(..., ge=0.0, le=1.0, description="Shape grade")
    pitch: float = Field(..., ge=0.0, le=1.0, description="Pitch grade")

    def compute_grade(self, shape_weight: float = 1.0, pitch_weight: float = 1.0) -> float:
        """Fuse the impacts as a weighted product.

        With unit weights this is the plain product ``shape * pitch``.
        """
        return (self.shape**shape_weight) * (self.pitch**pitch_weight)

    def __str__(self) -> str:
        return f"shape:{self.shape:.3f} pitch:{self.pitch:.3f}"


class HeadCandidate(Interpretation):
    """A validated black-head interpretation.

    Attributes:
        impacts: Shape and pitch grades.
        pitch: Integral pitch step assigned to the head.
        bounds: Head template bounds centered on the spot centroid.
        spot_id: Registry identifier of the source spot.
        weight: Pixel weight of the source spot.
    """

    shape: Shape = Field(Shape.NOTEHEAD_BLACK, description="Interpreted shape")
    impacts: HeadImpacts = Field(..., description="Supporting grades")
    pitch: int = Field(..., description="Integral pitch step")
    bounds: BoundingBox = Field(..., description="Anchor bounding box")
    spot_id: int | None = Field(None, description="Source spot identifier")
    weight: int = Field(0, ge=0, description="Source spot weight")


class RasterWindow(BaseModel):
    """Binary pixel grid located at an absolute origin.

    Attributes:
        pixels: 2D uint8 array, 255 for foreground and 0 for background.
        x: Absolute abscissa of the top-left pixel.
        y: Absolute ordinate of the top-left pixel.
    """

    pixels: np.ndarray = Field(..., description="Binary pixel grid")
    x: int = Field(0, description="Absolute abscissa of the grid origin")
    y: int = Field(0, description="Absolute ordinate of the grid origin")

    class Config:
        arbitrary_types_allowed = True

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def bounds(self) -> BoundingBox:
        return BoundingBox(x=self.x, y=self.y, w=self.width, h=self.height)

    @property
    def weight(self) -> int:
        return int(np.count_nonzero(self.pixels))

    def clone(self) -> "RasterWindow":
        return RasterWindow(pixels=self.pixels.copy(), x=self.x, y=self.y)
