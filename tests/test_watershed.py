import numpy as np

from black_heads.models.core_models import RasterWindow
from black_heads.runs import extract_spots
from black_heads.watershed import (
    DistanceWatershed,
    chamfer_distance,
    region_boundaries,
    watershed_boundaries,
)

from helpers import filled


def test_chamfer_distance_of_bar():
    dists = chamfer_distance(filled(5, 20))
    assert dists.dtype == np.int32
    # Border pixels are next to the background outside the raster
    assert dists[0, 10] == 3
    assert dists[2, 10] == 9
    assert dists[:, 10].tolist() == [3, 6, 9, 6, 3]


def test_chamfer_distance_background_is_zero():
    pixels = filled(5, 5)
    pixels[2, 2] = 0
    assert chamfer_distance(pixels)[2, 2] == 0


def test_region_boundaries_separate_touching_labels():
    labels = np.array([[1, 1, 2, 2]])
    mask = labels > 0
    cut = region_boundaries(labels, mask)
    assert cut.tolist() == [[False, False, True, False]]


def test_single_blob_is_not_split():
    instance = DistanceWatershed(chamfer_distance(filled(10, 10)))
    boundaries = instance.process(1)
    assert instance.region_count == 1
    assert not boundaries.any()
    assert watershed_boundaries(filled(10, 10)) is None


def test_stuck_discs_are_split(stuck_discs):
    boundaries = watershed_boundaries(stuck_discs)
    assert boundaries is not None
    assert boundaries.any()

    carved = stuck_discs.copy()
    carved[boundaries] = 0
    parts = extract_spots(RasterWindow(pixels=carved))
    assert len(parts) >= 2
    assert sum(p.weight for p in parts) == np.count_nonzero(stuck_discs) - int(boundaries.sum())
