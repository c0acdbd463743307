"""Re-extraction of head-scale spots out of beam-scale spots.

Spots were first extracted with a structuring element suited to beams.
Closing each of them with a disk sized to a head diameter fills the small
gaps a black head may show, so that extraction yields head-scale spots.
"""

import logging

from black_heads.image_processing import close_raster, disk_element, render_spot
from black_heads.models.core_models import Shape, Spot
from black_heads.models.settings_models import HeadParameters
from black_heads.runs import extract_spots
from black_heads.sheet import SystemInfo

logger = logging.getLogger(__name__)


class HeadReconstructor:
    """Build head-scale spots for one system.

    Attributes:
        system: The system being processed.
        element: Disk structuring element, computed once.
    """

    def __init__(self, system: SystemInfo, params: HeadParameters):
        self.system = system
        self.element = disk_element(params.circle_diameter)
        logger.debug(
            f"S#{system.id} heads retrieval, radius: {(params.circle_diameter - 1) / 2:.2f}"
        )

    def get_head_spots(self, beam_spots: list[Spot]) -> list[Spot]:
        """Extract head-oriented spots out of the provided beam spots.

        Each new spot is registered in the system. When its footprint is
        already known, the existing spot is reused instead.

        Args:
            beam_spots: The suitable beam-oriented spots.

        Returns:
            The head-oriented spots, tagged as head spots.
        """
        head_spots: list[Spot] = []
        domain = self.system.head_domain

        for spot in beam_spots:
            if spot.vip:
                logger.info(f"VIP get_head_spots {spot}")

            closed = close_raster(render_spot(spot), self.element)
            regions = extract_spots(closed, domain)

            for region in self.system.register_spots(regions, domain):
                region.shape = Shape.HEAD_SPOT
                if spot.vip:
                    region.vip = True
                head_spots.append(region)

        return head_spots
