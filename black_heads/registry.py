"""Sheet-level spot registry.

Spots live in an arena indexed by stable integer identifiers. A second
index maps each spot footprint (its absolute run geometry) to the
identifier of the spot that first claimed it, so that a region rebuilt
from another raster reuses the existing spot instead of duplicating it.

The footprint check and the insertion happen under one lock, which keeps
registration atomic when several systems are processed concurrently.
"""

import itertools
import logging
import threading

from black_heads.models.core_models import Spot

logger = logging.getLogger(__name__)


class SpotRegistry:
    """Arena of spots with reuse by footprint."""

    def __init__(self):
        self._spots: dict[int, Spot] = {}
        self._by_footprint: dict[tuple, int] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._spots)

    def __iter__(self):
        return iter(list(self._spots.values()))

    def __contains__(self, spot_id: int) -> bool:
        return spot_id in self._spots

    def get(self, spot_id: int) -> Spot:
        return self._spots[spot_id]

    def lookup(self, spot: Spot) -> Spot | None:
        """Return the registered spot with the same footprint, if any."""
        with self._lock:
            spot_id = self._by_footprint.get(spot.footprint)
            return None if spot_id is None else self._spots[spot_id]

    def register(self, spot: Spot) -> Spot:
        """Insert a spot unless an equal footprint is already registered.

        Args:
            spot: The candidate spot. It receives an id when inserted.

        Returns:
            The registered spot: either ``spot`` itself, or the existing
            spot with the same footprint.
        """
        key = spot.footprint
        with self._lock:
            existing_id = self._by_footprint.get(key)
            if existing_id is not None:
                existing = self._spots[existing_id]
                if existing is not spot:
                    logger.debug(f"Reuse {existing} for footprint of new spot")
                return existing

            spot.id = next(self._ids)
            self._spots[spot.id] = spot
            self._by_footprint[key] = spot.id
            return spot
