import numpy as np
import pytest

from black_heads.errors import StructuralError
from black_heads.models.core_models import BoundingBox, RasterWindow, Run, Spot
from black_heads.runs import (
    RunDomain,
    build_runs_table,
    build_sections,
    check_exclusive_ownership,
    extract_spots,
    group_sections,
)


def _raster(rows, x=0, y=0):
    return RasterWindow(pixels=np.array(rows, dtype=np.uint8) * 255, x=x, y=y)


def test_runs_table():
    table = build_runs_table(np.array([[1, 0], [1, 1], [0, 1], [1, 0]]))
    assert table[0] == [Run(start=0, length=2), Run(start=3, length=1)]
    assert table[1] == [Run(start=1, length=2)]


def test_sections_continue_one_to_one():
    table = build_runs_table(np.array([[1, 1, 1], [1, 1, 1]]))
    sections = build_sections(table)
    assert len(sections) == 1
    assert sections[0].weight == 6


def test_junction_starts_new_sections():
    # Vertical bar with two branches on its right
    rows = np.zeros((5, 2), dtype=np.uint8)
    rows[:, 0] = 1
    rows[0, 1] = 1
    rows[4, 1] = 1
    sections = build_sections(build_runs_table(rows))
    assert len(sections) == 3

    groups = group_sections(rows, sections)
    assert len(groups) == 1
    assert len(groups[0]) == 3


def test_diagonal_pixels_are_separate_groups():
    rows = np.array([[1, 0], [0, 1]], dtype=np.uint8)
    groups = group_sections(rows, build_sections(build_runs_table(rows)))
    assert len(groups) == 2


def test_gap_splits_groups():
    rows = np.array([[1, 0, 1]], dtype=np.uint8)
    groups = group_sections(rows, build_sections(build_runs_table(rows)))
    assert sorted(len(group) for group in groups) == [1, 1]


def test_extract_separate_spots():
    spots = extract_spots(_raster([[1, 1, 0, 0], [1, 1, 0, 1], [0, 0, 0, 1]]))
    assert [s.weight for s in spots] == [4, 2]
    assert spots[0].bounds == BoundingBox(x=0, y=0, w=2, h=2)
    assert spots[1].bounds == BoundingBox(x=3, y=1, w=1, h=2)


def test_diagonal_pixels_are_not_connected():
    spots = extract_spots(_raster([[1, 0], [0, 1]]))
    assert len(spots) == 2


def test_extract_translates_to_raster_origin():
    domain = RunDomain("head")
    spots = extract_spots(_raster([[1, 1], [1, 0]], x=10, y=20), domain)
    assert len(spots) == 1
    spot = spots[0]
    assert spot.bounds == BoundingBox(x=10, y=20, w=2, h=2)
    assert all(section.domain == "head" for section in spot.sections)
    assert all(section in domain for section in spot.sections)
    assert len(domain) == len(spot.sections)


def test_domain_ids_and_discard():
    domain = RunDomain("split")
    spots = extract_spots(_raster([[1, 0, 1]]), domain)
    ids = [section.id for spot in spots for section in spot.sections]
    assert ids == [1, 2]

    domain.discard(spots[0].sections)
    assert len(domain) == 1
    assert spots[0].sections[0] not in domain


def test_exclusive_ownership():
    spots = extract_spots(_raster([[1, 0, 1]]), RunDomain("d"))
    check_exclusive_ownership(spots)

    thief = Spot(sections=[spots[0].sections[0]])
    with pytest.raises(StructuralError):
        check_exclusive_ownership(spots + [thief])
