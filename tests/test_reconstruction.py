from black_heads.models.core_models import Shape
from black_heads.reconstruction import HeadReconstructor

from helpers import filled, spot_from


def test_unchanged_spot_is_reused(system, params):
    spot = system.add_spot(spot_from(filled(11, 12), x=100, y=115))
    heads = HeadReconstructor(system, params).get_head_spots([spot])

    assert heads == [spot]
    assert heads[0] is spot
    assert spot.shape == Shape.HEAD_SPOT
    assert len(system.spots) == 1
    # Duplicate sections were dropped from the head domain
    assert len(system.head_domain) == 0


def test_closing_fills_head(system, params):
    pixels = filled(12, 12)
    pixels[6, 6] = 0
    spot = system.add_spot(spot_from(pixels, x=100, y=114))
    spot.vip = True

    heads = HeadReconstructor(system, params).get_head_spots([spot])
    assert len(heads) == 1
    head = heads[0]
    assert head is not spot
    assert head.weight == 144
    assert head.id is not None
    assert head.shape == Shape.HEAD_SPOT
    assert head.vip
    assert all(s.domain == system.head_domain.name for s in head.sections)
    assert system.spots == [spot, head]
    assert spot.shape == Shape.BEAM_SPOT


def test_no_beam_spot(system, params):
    assert HeadReconstructor(system, params).get_head_spots([]) == []
