"""Watershed segmentation of binary rasters over a chamfer distance map.

The distance of each foreground pixel to the background forms a relief
whose basins (seen upside down) are the cores of the blobs stuck together
in the raster. Markers are the regional maxima of the relief whose
height above their surroundings reaches the sensitivity ``step``: a large
step keeps only marked peaks, a step of 1 keeps every peak.
"""

import logging

import cv2
import numpy as np
from skimage.measure import label
from skimage.morphology import h_maxima
from skimage.segmentation import watershed

logger = logging.getLogger(__name__)

# Scale of the 3x3 chamfer mask, so that distances are integral
CHAMFER_SCALE = 3

# Steps browsed by the sensitivity search, coarse to fine
MAX_STEP = 10


def chamfer_distance(pixels: np.ndarray) -> np.ndarray:
    """Compute the distance of each foreground pixel to the background.

    Pixels outside the raster count as background.

    Args:
        pixels: 2D array, non-zero values being foreground.

    Returns:
        int32 array of the same shape, in chamfer units (about 3 per pixel
        along axes and 4 along diagonals), 0 on background.
    """
    padded = cv2.copyMakeBorder(
        (pixels > 0).astype(np.uint8), 1, 1, 1, 1, cv2.BORDER_CONSTANT, value=0
    )
    dists = cv2.distanceTransform(padded, cv2.DIST_L2, cv2.DIST_MASK_3)
    return np.rint(dists[1:-1, 1:-1] * CHAMFER_SCALE).astype(np.int32)


def region_boundaries(labels: np.ndarray, mask: np.ndarray) -> np.ndarray:
    """Foreground pixels to clear so that labeled regions get disjoint.

    These are the watershed lines, plus any pixel 4-adjacent to a region
    with a lower label.

    Args:
        labels: Region labels, 0 for lines and background.
        mask: Foreground mask.

    Returns:
        Boolean array of the pixels to clear.
    """
    height, width = labels.shape
    cut = mask & (labels == 0)
    padded = np.pad(labels, 1)
    for dy, dx in ((-1, 0), (1, 0), (0, -1), (0, 1)):
        neighbour = padded[1 + dy : 1 + dy + height, 1 + dx : 1 + dx + width]
        cut |= (labels > 0) & (neighbour > 0) & (neighbour < labels)
    return cut


class DistanceWatershed:
    """Watershed over a distance map, at a chosen sensitivity.

    Attributes:
        dists: Chamfer distance map.
        mask: Foreground mask.
        region_count: Number of regions found by the last ``process`` call.
    """

    def __init__(self, dists: np.ndarray):
        self.dists = dists
        self.mask = dists > 0
        self.region_count = 0

    def markers(self, step: int) -> np.ndarray:
        maxima = h_maxima(self.dists, step).astype(bool) & self.mask
        return label(maxima, connectivity=2)

    def process(self, step: int) -> np.ndarray:
        """Segment the map at the given sensitivity step.

        Args:
            step: Minimum height of a maximum to seed its own region.

        Returns:
            Boolean array of the boundary pixels between regions, all False
            when a single region is found.
        """
        markers = self.markers(step)
        self.region_count = int(markers.max())
        if self.region_count <= 1:
            return np.zeros(self.dists.shape, dtype=bool)

        labels = watershed(-self.dists, markers, mask=self.mask, watershed_line=True)
        return region_boundaries(labels, self.mask)


def watershed_boundaries(pixels: np.ndarray, max_step: int = MAX_STEP) -> np.ndarray | None:
    """Try to split a raster into at least 2 regions.

    Steps are tried from ``max_step`` down to 1, stopping at the first one
    which yields more than one region.

    Args:
        pixels: 2D array, non-zero values being foreground.
        max_step: Coarsest sensitivity step.

    Returns:
        Boolean array of the boundary pixels, or None if even the finest
        step leaves a single region.
    """
    instance = DistanceWatershed(chamfer_distance(pixels))
    for step in range(max_step, 0, -1):
        boundaries = instance.process(step)
        logger.debug(f"watershed step:{step} count:{instance.region_count}")
        if instance.region_count > 1:
            return boundaries
    return None
