"""Sheet and system containers.

A ``Sheet`` owns the scale, the spot registry shared by all its systems,
and the "spot" run domain of the spots found on the page. Each
``SystemInfo`` owns its staves, its pool of spots, its own "head" and
"split" run domains, and the graph receiving its head interpretations.
"""

import logging
from typing import Protocol

from black_heads.models.core_models import Interpretation, Point, Spot
from black_heads.models.settings_models import Scale
from black_heads.registry import SpotRegistry
from black_heads.runs import RunDomain
from black_heads.staff import StaffInfo

logger = logging.getLogger(__name__)


class InterpretationSink(Protocol):
    def add_vertex(self, inter: Interpretation) -> None: ...


class HeadGraph:
    """In-memory interpretation graph of a system."""

    def __init__(self):
        self.vertices: list[Interpretation] = []

    def __len__(self) -> int:
        return len(self.vertices)

    def add_vertex(self, inter: Interpretation) -> None:
        self.vertices.append(inter)


class SystemInfo:
    """A system of staves with its spots and interpretations.

    Attributes:
        id: System identifier, starting at 1.
        scale: Sheet scale.
        staves: Staves of the system, top to bottom.
        registry: Spot registry shared with the other systems of the sheet.
        spots: Ordered pool of the system spots.
        head_domain: Run domain for head-scale spots.
        split_domain: Run domain for spots produced by splitting.
        sig: Graph receiving the validated interpretations.
    """

    def __init__(
        self,
        id: int,
        scale: Scale,
        staves: list[StaffInfo],
        registry: SpotRegistry | None = None,
        sig: InterpretationSink | None = None,
    ):
        self.id = id
        self.scale = scale
        self.staves = staves
        self.registry = registry if registry is not None else SpotRegistry()
        self.spots: list[Spot] = []
        self._spot_ids: set[int] = set()
        self.head_domain = RunDomain(f"S{id}-head")
        self.split_domain = RunDomain(f"S{id}-split")
        self.sig = sig if sig is not None else HeadGraph()

    def __repr__(self) -> str:
        return f"SystemInfo#{self.id}"

    def staff_at(self, point: Point) -> StaffInfo:
        """Return the staff containing the point, or the closest one.

        Raises:
            ValueError: If the system has no staff.
        """
        if not self.staves:
            raise ValueError(f"System#{self.id} has no staff")
        return min(self.staves, key=lambda staff: staff.distance_to(point))

    def add_spot(self, spot: Spot) -> Spot:
        """Register a spot and add it to the system pool.

        Returns:
            The registered spot, which is an existing spot when one with
            the same footprint was already known.
        """
        kept = self.registry.register(spot)
        if kept.id not in self._spot_ids:
            self._spot_ids.add(kept.id)
            self.spots.append(kept)
        return kept

    def register_spots(self, spots: list[Spot], domain: RunDomain) -> list[Spot]:
        """Register freshly extracted spots, dropping duplicate sections.

        Args:
            spots: Spots whose sections were created in ``domain``.
            domain: The run domain of these sections.

        Returns:
            The registered spots, in the same order.
        """
        kept: list[Spot] = []
        for spot in spots:
            registered = self.add_spot(spot)
            if registered is not spot:
                logger.debug(f"Reuse old {registered}")
                # Sections of the new spot would duplicate the old ones
                domain.discard(spot.sections)
            kept.append(registered)
        return kept


class Sheet:
    """A sheet, made of systems sharing one spot registry.

    Attributes:
        scale: Sheet scale.
        registry: Spot registry shared by all systems.
        spot_domain: Run domain of the spots retrieved from the page.
        systems: Systems of the sheet, top to bottom.
    """

    def __init__(self, scale: Scale):
        self.scale = scale
        self.registry = SpotRegistry()
        self.spot_domain = RunDomain("spot")
        self.systems: list[SystemInfo] = []

    def add_system(self, staves: list[StaffInfo], spots=()) -> SystemInfo:
        """Create a new system holding the provided staves and spots."""
        system = SystemInfo(len(self.systems) + 1, self.scale, staves, self.registry)
        for spot in spots:
            system.add_spot(spot)
        self.systems.append(system)
        return system
