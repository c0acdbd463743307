import pytest

from black_heads.models.core_models import Interpretation, Point, Shape
from black_heads.sheet import HeadGraph, Sheet, SystemInfo
from black_heads.staff import StaffInfo

from helpers import filled, spot_from


def _staff(id, top):
    return StaffInfo(id=id, lines=[top + 10 * i for i in range(5)], right=400)


def test_staff_at_picks_closest(scale):
    system = SystemInfo(1, scale, [_staff(1, 100), _staff(2, 200)])
    assert system.staff_at(Point(x=0, y=120)).id == 1
    assert system.staff_at(Point(x=0, y=165)).id == 1
    assert system.staff_at(Point(x=0, y=175)).id == 2


def test_staff_at_without_staff(scale):
    with pytest.raises(ValueError):
        SystemInfo(1, scale, []).staff_at(Point(x=0, y=0))


def test_domains_are_per_system(scale):
    sheet = Sheet(scale)
    first = sheet.add_system([_staff(1, 100)])
    second = sheet.add_system([_staff(2, 200)])
    assert (first.id, second.id) == (1, 2)
    assert first.head_domain is not second.head_domain
    assert first.split_domain.name != second.split_domain.name
    assert first.registry is second.registry is sheet.registry


def test_add_spot_once(system):
    spot = spot_from(filled(3, 3))
    assert system.add_spot(spot) is spot
    assert system.add_spot(spot) is spot
    assert system.spots == [spot]
    assert spot.id == 1


def test_head_graph():
    graph = HeadGraph()
    graph.add_vertex(Interpretation(shape=Shape.NOTEHEAD_BLACK, grade=0.7))
    assert len(graph) == 1
