"""Canonical black-head template.

The template gives the standard dimensions of a black note head at the
sheet scale. It anchors the bounds of every validated head and provides
the reference mask used by the template classifier.
"""

from enum import Enum

import cv2
import numpy as np
from pydantic import BaseModel, Field

from black_heads.models.core_models import BoundingBox
from black_heads.models.settings_models import HeadParameters


class Anchor(str, Enum):
    """Reference point of a template."""

    CENTER = "center"
    TOP_LEFT = "top_left"


class HeadTemplate(BaseModel):
    """Filled ellipse sized to a black note head.

    Attributes:
        width: Template width in pixels.
        height: Template height in pixels.
        mask: 2D uint8 array, 255 inside the head and 0 outside.
    """

    width: int = Field(..., ge=1, description="Template width in pixels")
    height: int = Field(..., ge=1, description="Template height in pixels")
    mask: np.ndarray = Field(..., description="Template mask")

    class Config:
        arbitrary_types_allowed = True

    @classmethod
    def from_parameters(cls, params: HeadParameters) -> "HeadTemplate":
        width, height = params.head_width, params.head_height
        mask = np.zeros((height, width), dtype=np.uint8)
        axes = (max(1, (width - 1) // 2), max(1, (height - 1) // 2))
        cv2.ellipse(mask, (width // 2, height // 2), axes, 0, 0, 360, 255, -1)
        return cls(width=width, height=height, mask=mask)

    def get_bounds_at(self, x: float, y: float, anchor: Anchor = Anchor.CENTER) -> BoundingBox:
        """Template bounds when its anchor is located at (x, y)."""
        if anchor == Anchor.CENTER:
            left = int(round(x - self.width / 2))
            top = int(round(y - self.height / 2))
        else:
            left, top = int(round(x)), int(round(y))
        return BoundingBox(x=left, y=top, w=self.width, h=self.height)
