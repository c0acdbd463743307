from concurrent.futures import ThreadPoolExecutor

from black_heads.registry import SpotRegistry
from black_heads.runs import RunDomain

from helpers import filled, spot_from


def test_register_assigns_ids():
    registry = SpotRegistry()
    first = registry.register(spot_from(filled(3, 3)))
    second = registry.register(spot_from(filled(3, 3), x=10))
    assert (first.id, second.id) == (1, 2)
    assert len(registry) == 2
    assert 2 in registry
    assert registry.get(1) is first


def test_same_footprint_is_reused():
    registry = SpotRegistry()
    spot = registry.register(spot_from(filled(4, 2), x=5, y=5, domain=RunDomain("spot")))
    twin = spot_from(filled(4, 2), x=5, y=5, domain=RunDomain("head"))

    assert registry.lookup(twin) is spot
    assert registry.register(twin) is spot
    assert twin.id is None
    assert len(registry) == 1


def test_lookup_unknown():
    registry = SpotRegistry()
    assert registry.lookup(spot_from(filled(2, 2))) is None


def test_iteration_order():
    registry = SpotRegistry()
    spots = [registry.register(spot_from(filled(2, 2), x=3 * i)) for i in range(3)]
    assert list(registry) == spots


def test_concurrent_twins_share_one_id():
    registry = SpotRegistry()
    twins = [spot_from(filled(4, 2), x=5, y=5) for _ in range(50)]

    with ThreadPoolExecutor(max_workers=8) as executor:
        kept = list(executor.map(registry.register, twins))

    assert all(spot is kept[0] for spot in kept)
    assert {spot.id for spot in kept} == {1}
    assert len(registry) == 1
