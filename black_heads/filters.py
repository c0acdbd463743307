"""Selection of the spots that may contain black heads.

A spot is suitable when all of the following hold:

1. its shape is a generic beam spot or a beam,
2. it is heavy enough for a head,
3. it is not wider than a multi-head spot may be,
4. it lies after the header area of its staff,
5. it carries no good beam interpretation,
6. it is not as thin as a barline.

Filtering is read-only: rejected spots are only logged.
"""

import logging

from black_heads.errors import CollaboratorError
from black_heads.models.core_models import Shape, Spot
from black_heads.models.settings_models import GradeSettings, HeadParameters
from black_heads.sheet import SystemInfo
from black_heads.staff import StaffGeometry

logger = logging.getLogger(__name__)

SPOT_SHAPES = frozenset({Shape.BEAM_SPOT, Shape.BEAM})


class CandidateFilter:
    """Filter the spot pool of one system.

    Attributes:
        system: The system whose spots are browsed.
        params: Pixel-level parameters.
        grades: Grade settings, for the good-beam test.
    """

    def __init__(self, system: SystemInfo, params: HeadParameters, grades: GradeSettings):
        self.system = system
        self.params = params
        self.grades = grades

    def get_suitable_spots(self) -> list[Spot]:
        """Retrieve the suitable spots, in pool order."""
        return [spot for spot in list(self.system.spots) if self.is_suitable(spot)]

    def is_suitable(self, spot: Spot) -> bool:
        """Check whether a spot may be made of black heads.

        Raises:
            CollaboratorError: If the staff lookup fails.
        """
        if spot.vip:
            logger.info(f"VIP is_suitable for {spot}")

        if spot.shape not in SPOT_SHAPES:
            return False

        if spot.weight < self.params.min_head_weight:
            self._reject(spot, f"too light {spot.weight} vs {self.params.min_head_weight}")
            return False

        box = spot.bounds
        if box.w > self.params.max_spot_width:
            self._reject(spot, f"too wide {box.w} vs {self.params.max_spot_width}")
            return False

        # Notes cannot be too close to staff left side
        staff = self._staff_at(spot)
        if box.x < staff.dmz_end():
            self._reject(spot, f"too close to staff left side, x:{box.x}")
            return False

        for inter in spot.interpretations:
            if inter.shape == Shape.BEAM and inter.is_good(self.grades.good_grade):
                self._reject(spot, f"good beam grade:{inter.grade:.3f}")
                return False

        # Mean width is measured on the bounds
        if box.w < self.params.min_mean_width:
            self._reject(spot, f"too narrow {box.w} vs {self.params.min_mean_width}")
            return False

        return True

    def _staff_at(self, spot: Spot) -> StaffGeometry:
        try:
            return self.system.staff_at(spot.centroid)
        except Exception as e:
            raise CollaboratorError(f"Staff lookup failed for {spot}: {e}") from e

    @staticmethod
    def _reject(spot: Spot, reason: str) -> None:
        if spot.vip:
            logger.info(f"{spot} {reason}")
        else:
            logger.debug(f"{spot} {reason}")
