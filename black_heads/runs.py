"""Region extraction out of binary raster windows.

Extraction goes through three levels, all built on vertical runs:

1. The runs table: for each column, the spans of foreground pixels.
2. Sections (atomic run-segments): runs in consecutive columns that
   continue each other one-to-one. Any junction, where a run touches
   several runs of the previous column or the reverse, starts a new
   section.
3. Spots: sections grouped by 4-connected component of the raster,
   as labelled by OpenCV. Overlapping runs in adjacent columns are
   4-connected, so a spot is also a maximal set of linked sections.

Sections are registered in a ``RunDomain`` after translation to the
absolute frame of the sheet. Scratch extractions use a throw-away domain.
"""

import itertools
import logging

import cv2
import numpy as np

from black_heads.errors import StructuralError
from black_heads.models.core_models import BoundingBox, RasterWindow, Run, Section, Spot

logger = logging.getLogger(__name__)


class RunDomain:
    """Named collection of sections, the owner of their identifiers.

    Each system owns its own "head" and "split" domains so that concurrent
    systems never share a domain.

    Attributes:
        name: Domain name, recorded in every section it owns.
    """

    def __init__(self, name: str):
        self.name = name
        self._sections: dict[int, Section] = {}
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._sections)

    def __contains__(self, section: Section) -> bool:
        return section.domain == self.name and section.id in self._sections

    @property
    def sections(self) -> list[Section]:
        return list(self._sections.values())

    def add(self, section: Section) -> Section:
        """Register a section, returning it stamped with domain and id."""
        section = section.model_copy(update={"domain": self.name, "id": next(self._ids)})
        self._sections[section.id] = section
        return section

    def discard(self, sections) -> None:
        """Invalidate sections that are not going to be used."""
        for section in sections:
            if section.domain == self.name:
                self._sections.pop(section.id, None)


def build_runs_table(pixels: np.ndarray) -> list[list[Run]]:
    """Compute the vertical runs of each column.

    Args:
        pixels: 2D array, non-zero values being foreground.

    Returns:
        One list of runs per column, sorted by ordinate.
    """
    height, width = pixels.shape
    padded = np.zeros((height + 2, width), dtype=np.int8)
    padded[1:-1] = pixels > 0
    edges = np.diff(padded, axis=0)

    table: list[list[Run]] = []
    for x in range(width):
        starts = np.flatnonzero(edges[:, x] == 1)
        stops = np.flatnonzero(edges[:, x] == -1)
        table.append(
            [Run(start=int(s), length=int(e - s)) for s, e in zip(starts, stops)]
        )
    return table


def build_sections(table: list[list[Run]]) -> list[Section]:
    """Group runs into sections.

    Args:
        table: Runs table, as returned by ``build_runs_table``.

    Returns:
        Sections in local coordinates, ordered by their first column.
    """
    starts: list[int] = []
    members: list[list[Run]] = []

    prev_runs: list[Run] = []
    prev_owners: list[int] = []
    for x, runs in enumerate(table):
        overlaps = [[j for j, p in enumerate(prev_runs) if p.overlaps(r)] for r in runs]
        forward = [0] * len(prev_runs)
        for found in overlaps:
            for j in found:
                forward[j] += 1

        owners: list[int] = []
        for run, found in zip(runs, overlaps):
            if len(found) == 1 and forward[found[0]] == 1:
                idx = prev_owners[found[0]]
                members[idx].append(run)
            else:
                # Junction: start a new section
                idx = len(members)
                starts.append(x)
                members.append([run])
            owners.append(idx)

        prev_runs, prev_owners = runs, owners

    return [Section(x=x, runs=runs) for x, runs in zip(starts, members)]


def group_sections(pixels: np.ndarray, sections: list[Section]) -> list[list[Section]]:
    """Group sections by 4-connected component of the raster.

    Args:
        pixels: 2D array, non-zero values being foreground.
        sections: Sections built from the same raster, in local coordinates.

    Returns:
        One group per component, ordered by the leftmost section.
    """
    _, labels = cv2.connectedComponents((pixels > 0).astype(np.uint8), connectivity=4)

    groups: dict[int, list[Section]] = {}
    for section in sections:
        first = section.runs[0]
        groups.setdefault(int(labels[first.start, section.x]), []).append(section)
    return list(groups.values())


def extract_spots(raster: RasterWindow, domain: RunDomain | None = None) -> list[Spot]:
    """Retrieve all spots contained in a raster window.

    Args:
        raster: The populated raster, located at its absolute origin.
        domain: Target run domain for the new sections. A scratch domain
               is used when None.

    Returns:
        Spots in absolute coordinates, ordered by their leftmost section.

    Raises:
        StructuralError: If a spot's absolute bounds disagree with its
                         local bounds translated by the raster origin.
    """
    if domain is None:
        domain = RunDomain("scratch")

    table = build_runs_table(raster.pixels)
    local_sections = build_sections(table)

    spots: list[Spot] = []
    for local in group_sections(raster.pixels, local_sections):
        local_box = BoundingBox.union(s.bounds for s in local)
        sections = [domain.add(s.translated(raster.x, raster.y)) for s in local]
        spot = Spot(sections=sections)

        if spot.bounds != local_box.translate(raster.x, raster.y):
            raise StructuralError(
                f"Spot bounds {spot.bounds} inconsistent with raster origin "
                f"({raster.x},{raster.y})"
            )
        spots.append(spot)

    logger.debug(f"Extracted {len(spots)} spots into domain {domain.name}")
    return spots


def check_exclusive_ownership(spots: list[Spot]) -> None:
    """Verify that no section is owned by more than one spot.

    Raises:
        StructuralError: If a section is claimed twice.
    """
    seen: set[tuple[str, int]] = set()
    for spot in spots:
        for section in spot.sections:
            if section.key in seen:
                raise StructuralError(
                    f"Section {section.key} claimed by several regions"
                )
            seen.add(section.key)
