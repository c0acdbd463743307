"""Splitting of spots that may gather several black heads.

The rough number of heads in a spot is its weight divided by the typical
head weight. A spot with two or more heads is split, and each resulting
part is split again until it holds a single head.

Two split methods are available:

- Direct split, for a spot which is roughly a vertical stack of heads
  (small axis slope): horizontal cut rows at evenly spaced ordinates.
- Watershed split, for any other geometry: cuts along the boundaries of
  a watershed over the distance-to-background map.

A split is described by ``Cut`` instances, applied to a copy of the spot
raster, so each level of the recursion can be checked on its own.
"""

import logging

import numpy as np
from pydantic import BaseModel, Field

from black_heads.image_processing import render_spot
from black_heads.models.core_models import RasterWindow, Spot
from black_heads.models.settings_models import HeadParameters
from black_heads.runs import extract_spots
from black_heads.watershed import watershed_boundaries

logger = logging.getLogger(__name__)


class Cut(BaseModel):
    """A set of raster pixels to turn into background.

    Attributes:
        kind: "row" for a direct-split line, "boundary" for watershed lines.
        xs: Local abscissae of the pixels.
        ys: Local ordinates of the pixels.
    """

    kind: str = Field(..., description="Cut kind")
    xs: np.ndarray = Field(..., description="Local abscissae")
    ys: np.ndarray = Field(..., description="Local ordinates")

    class Config:
        arbitrary_types_allowed = True

    @classmethod
    def row(cls, y: int, width: int) -> "Cut":
        return cls(kind="row", xs=np.arange(width), ys=np.full(width, y))

    @classmethod
    def boundary(cls, mask: np.ndarray) -> "Cut":
        ys, xs = np.nonzero(mask)
        return cls(kind="boundary", xs=xs, ys=ys)


class SplitPlan(BaseModel):
    """How to split one spot.

    Attributes:
        method: "direct" or "watershed".
        cuts: The cuts to apply to the spot raster.
        count: Expected number of parts.
    """

    method: str = Field(..., description="Split method")
    cuts: list[Cut] = Field(default_factory=list, description="Cuts to apply")
    count: int = Field(..., ge=2, description="Expected number of parts")


def apply_cuts(raster: RasterWindow, cuts: list[Cut]) -> RasterWindow:
    """Return a copy of the raster with all cut pixels set to background."""
    carved = raster.clone()
    for cut in cuts:
        carved.pixels[cut.ys, cut.xs] = 0
    return carved


class SpotSplitter:
    """Recursive splitter of multi-head spots.

    Attributes:
        params: Pixel-level parameters.
    """

    def __init__(self, params: HeadParameters):
        self.params = params

    def head_count(self, spot: Spot) -> int:
        """Rough number of heads in a spot, based on its weight."""
        return int(round(spot.weight / self.params.typical_weight))

    def plan_direct_split(self, spot: Spot) -> SplitPlan | None:
        """Plan evenly spaced cut rows for a vertical stack of heads.

        Returns:
            The plan, or None if the spot is too slanted or too small for
            at least two bands.
        """
        slope = spot.inverted_slope
        if abs(slope) > self.params.max_slope_for_direct_split:
            return None

        box = spot.bounds
        weight_count = spot.weight / self.params.typical_weight
        height_count = box.h / self.params.interline
        mean_count = (weight_count + height_count) / 2
        logger.debug(
            f"Split for {spot} vSlope:{slope:.2f} weight:{weight_count:.2f}"
            f" height:{height_count:.2f} mean:{mean_count:.2f}"
        )

        count = int(round(mean_count))
        if count < 2:
            return None

        height = box.h / count
        cuts = [
            Cut.row(min(box.h - 1, int(round(i * height))), box.w)
            for i in range(1, count)
        ]
        return SplitPlan(method="direct", cuts=cuts, count=count)

    def plan_watershed_split(self, raster: RasterWindow) -> SplitPlan | None:
        """Plan cuts along watershed boundaries.

        Returns:
            The plan, or None when no sensitivity yields several regions.
        """
        boundaries = watershed_boundaries(raster.pixels)
        if boundaries is None:
            return None
        return SplitPlan(method="watershed", cuts=[Cut.boundary(boundaries)], count=2)

    def plan_split(self, spot: Spot, raster: RasterWindow) -> SplitPlan | None:
        """Choose the split method for a spot, direct split first."""
        if spot.vip:
            logger.info(f"VIP split {spot}")
        plan = self.plan_direct_split(spot)
        if plan is None:
            plan = self.plan_watershed_split(raster)
        return plan

    def split_spot(self, spot: Spot) -> list[Spot]:
        """Split a (large) spot recursively into single-head parts.

        Parts are scratch spots, not registered anywhere. A spot which
        cannot be split is returned whole.

        Args:
            spot: The spot to split.

        Returns:
            The terminal parts.
        """
        raster = render_spot(spot)
        plan = self.plan_split(spot, raster)
        if plan is None:
            logger.debug(f"Could not split {spot}")
            return [spot]

        parts = extract_spots(apply_cuts(raster, plan.cuts))
        if len(parts) < 2:
            logger.debug(f"No {plan.method} split for {spot}")
            return [spot]

        good_parts: list[Spot] = []
        for part in parts:
            if spot.vip:
                part.vip = True
            if self.head_count(part) >= 2:
                good_parts.extend(self.split_spot(part))
            else:
                good_parts.append(part)
        return good_parts
