"""Regeneration of split parts into the system split domain.

Parts produced by splitting live in scratch domains, each one in its own
raster. They are composited into one shared raster, and extracted once
in the split domain of the system, so that the final spots have
consistent absolute coordinates and never share a section.
"""

import logging

from black_heads.errors import StructuralError
from black_heads.image_processing import blank_raster, inject_raster, render_spot
from black_heads.models.core_models import BoundingBox, Shape, Spot
from black_heads.runs import check_exclusive_ownership, extract_spots
from black_heads.sheet import SystemInfo

logger = logging.getLogger(__name__)


class RegionMerger:
    """Rebuild split parts as registered spots of one system.

    Attributes:
        system: The system receiving the parts.
    """

    def __init__(self, system: SystemInfo):
        self.system = system

    def regenerate(self, parts: list[Spot], vip: bool = False) -> list[Spot]:
        """Rebuild temporary parts into the system split domain.

        Args:
            parts: The temporary parts, in absolute coordinates.
            vip: Whether the parts come from a VIP spot.

        Returns:
            The new parts, with the same pixels, registered and tagged as
            head spots.

        Raises:
            StructuralError: If the parts overlap, or if the rebuilt regions
                             share a section.
        """
        if not parts:
            return []

        buffer = blank_raster(BoundingBox.union(part.bounds for part in parts))
        for part in parts:
            inject_raster(buffer, render_spot(part))

        weight = sum(part.weight for part in parts)
        if weight != buffer.weight:
            raise StructuralError(
                f"Parts weigh {weight} for {buffer.weight} composited pixels"
            )

        domain = self.system.split_domain
        regions = extract_spots(buffer, domain)
        check_exclusive_ownership(regions)

        kept: list[Spot] = []
        for spot in self.system.register_spots(regions, domain):
            spot.shape = Shape.HEAD_SPOT
            if vip:
                spot.vip = True
            kept.append(spot)

        logger.debug(f"S#{self.system.id} regenerated {len(parts)} parts into {len(kept)}")
        return kept
