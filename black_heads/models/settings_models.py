"""Parameter models for black-head building.

Tunables are expressed in scale-normalized units (fractions of the staff
interline, or of the squared interline for areas) so that the same
settings apply to any scan resolution. A ``Scale`` converts them once per
system into the frozen pixel-level ``HeadParameters`` block used by every
stage.
"""

from pydantic import BaseModel, Field


class Scale(BaseModel):
    """Sheet scale, driven by the interline (distance between staff lines).

    Attributes:
        interline: Vertical distance between two staff lines, in pixels.
    """

    interline: int = Field(..., ge=2, description="Staff interline in pixels")

    def to_pixels(self, fraction: float) -> int:
        """Convert an interline fraction to a rounded pixel count."""
        return int(round(fraction * self.interline))

    def to_pixels_double(self, fraction: float) -> float:
        """Convert an interline fraction to a pixel distance."""
        return fraction * self.interline

    def area_to_pixels(self, fraction: float) -> int:
        """Convert a squared-interline fraction to a rounded pixel area."""
        return int(round(fraction * self.interline * self.interline))

    def pixels_to_area_frac(self, pixels: float) -> float:
        """Convert a pixel area back to a squared-interline fraction."""
        return pixels / (self.interline * self.interline)


class HeadConstants(BaseModel):
    """Scale-normalized constants for black-head building.

    Attributes:
        min_head_weight: Minimum weight for a black head (area fraction).
        typical_head_weight: Typical weight for a black head (area fraction).
        circle_diameter: Diameter of the disk used to close heads (fraction).
        min_mean_width: Minimum mean width for a black head (fraction).
        max_spot_width: Maximum width for a multi-head spot (fraction).
        max_slope_for_direct_split: Maximum vertical slope for a direct split.
        max_pitch_offset: Maximum offset from a round pitch.
        max_ledger_pitch_gap: Maximum pitch distance to a supporting ledger.
        head_template_width: Width of the canonical head template (fraction).
        head_template_height: Height of the canonical head template (fraction).
        print_parameters: Log the pixel parameters of the first system.
        print_watch: Log stage timings at INFO level.
    """

    min_head_weight: float = Field(
        0.75, gt=0.0, description="Minimum weight for a black head"
    )
    typical_head_weight: float = Field(
        1.33, gt=0.0, description="Typical weight for a black head"
    )
    circle_diameter: float = Field(
        0.75, ge=0.0, description="Diameter of circle used to close note heads"
    )
    min_mean_width: float = Field(
        1.0, ge=0.0, description="Minimum mean width for a black head"
    )
    max_spot_width: float = Field(
        4.0, gt=0.0, description="Maximum width for a multi-head spot"
    )
    max_slope_for_direct_split: float = Field(
        0.2, ge=0.0, description="Maximum vertical slope to use a direct split"
    )
    max_pitch_offset: float = Field(
        0.25, gt=0.0, description="Maximum offset from round pitch"
    )
    max_ledger_pitch_gap: float = Field(
        1.5, ge=0.0, description="Maximum pitch distance between head and ledger"
    )
    head_template_width: float = Field(
        1.2, gt=0.0, description="Width of the black head template"
    )
    head_template_height: float = Field(
        1.0, gt=0.0, description="Height of the black head template"
    )
    print_parameters: bool = Field(False, description="Print the pixel parameters")
    print_watch: bool = Field(False, description="Print the stage timings")


class GradeSettings(BaseModel):
    """Fusion of shape and pitch impacts into a composite grade.

    The composite grade is ``shape ** shape_weight * pitch ** pitch_weight``.

    Attributes:
        shape_weight: Exponent applied to the shape impact.
        pitch_weight: Exponent applied to the pitch impact.
        min_grade: Minimum composite grade to accept a head.
        good_grade: Minimum grade for an interpretation to be deemed good.
    """

    shape_weight: float = Field(1.0, gt=0.0, description="Shape impact exponent")
    pitch_weight: float = Field(1.0, gt=0.0, description="Pitch impact exponent")
    min_grade: float = Field(
        0.35, ge=0.0, le=1.0, description="Minimum grade to accept a head"
    )
    good_grade: float = Field(
        0.5, ge=0.0, le=1.0, description="Minimum grade for a good interpretation"
    )


class HeadParameters(BaseModel):
    """Pre-scaled constants, computed once per system.

    Attributes:
        interline: Staff interline in pixels.
        circle_diameter: Closing disk diameter in pixels.
        min_head_weight: Minimum head weight in pixels.
        typical_weight: Typical head weight in pixels.
        min_mean_width: Minimum mean width in pixels.
        max_spot_width: Maximum multi-head spot width in pixels.
        max_slope_for_direct_split: Maximum inverted slope for a direct split.
        max_pitch_offset: Maximum offset from round pitch.
        max_ledger_pitch_gap: Maximum pitch distance to a supporting ledger.
        head_width: Head template width in pixels.
        head_height: Head template height in pixels.
    """

    interline: int
    circle_diameter: float
    min_head_weight: int
    typical_weight: int = Field(..., ge=1)
    min_mean_width: int
    max_spot_width: int
    max_slope_for_direct_split: float
    max_pitch_offset: float
    max_ledger_pitch_gap: float
    head_width: int = Field(..., ge=1)
    head_height: int = Field(..., ge=1)

    class Config:
        frozen = True

    @classmethod
    def from_scale(cls, scale: Scale, constants: HeadConstants) -> "HeadParameters":
        return cls(
            interline=scale.interline,
            circle_diameter=scale.to_pixels_double(constants.circle_diameter),
            min_head_weight=scale.area_to_pixels(constants.min_head_weight),
            typical_weight=scale.area_to_pixels(constants.typical_head_weight),
            min_mean_width=scale.to_pixels(constants.min_mean_width),
            max_spot_width=scale.to_pixels(constants.max_spot_width),
            max_slope_for_direct_split=constants.max_slope_for_direct_split,
            max_pitch_offset=constants.max_pitch_offset,
            max_ledger_pitch_gap=constants.max_ledger_pitch_gap,
            head_width=scale.to_pixels(constants.head_template_width),
            head_height=scale.to_pixels(constants.head_template_height),
        )


class BuilderSettings(BaseModel):
    """Complete configuration of the black-head builder.

    Attributes:
        constants: Scale-normalized constants.
        grades: Composite grade settings.
    """

    constants: HeadConstants = Field(
        default_factory=HeadConstants, description="Scale-normalized constants"
    )
    grades: GradeSettings = Field(
        default_factory=GradeSettings, description="Grade fusion settings"
    )
