"""Raster window operations for black-head building.

This module provides the pixel-level helpers shared by the stages:
binarizing a page, rendering a spot into its own raster window, closing
a raster with a disk-shaped structuring element, and compositing several
windows into one shared buffer. Rasters are uint8 arrays where foreground
pixels are 255 and background pixels are 0.
"""

import math

import cv2
import numpy as np

from black_heads.models.core_models import BoundingBox, RasterWindow, Spot


def binarize(image: np.ndarray, threshold_value: int) -> np.ndarray:
    """Convert a page image to a binary mask using inverted thresholding.

    Args:
        image: Grayscale (2D) or BGR (3-channel) page image.
        threshold_value: Grayscale threshold value (0-255). Pixels darker
                        than this become foreground (255) in the output.

    Returns:
        Binary image as a 2D uint8 NumPy array where ink is 255 and
        paper is 0.
    """
    gray = image if image.ndim == 2 else cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    _, binary = cv2.threshold(gray, threshold_value, 255, cv2.THRESH_BINARY_INV)
    return binary


def render_spot(spot: Spot) -> RasterWindow:
    """Render a spot into an isolated raster located at its bounds."""
    box = spot.bounds
    return RasterWindow(pixels=spot.image(), x=box.x, y=box.y)


def blank_raster(box: BoundingBox) -> RasterWindow:
    """Allocate an all-background raster covering ``box``."""
    return RasterWindow(pixels=np.zeros((box.h, box.w), dtype=np.uint8), x=box.x, y=box.y)


def disk_element(diameter: float) -> np.ndarray:
    """Build a disk structuring element for the given diameter.

    The disk radius is ``(diameter - 1) / 2``, so a diameter of 1 or less
    yields the single-pixel identity element.

    Args:
        diameter: Disk diameter in pixels.

    Returns:
        Square uint8 kernel with odd side, usable by OpenCV morphology.
    """
    radius = max(0.0, (diameter - 1) / 2)
    half = int(math.ceil(radius))
    side = 2 * half + 1
    return cv2.getStructuringElement(cv2.MORPH_ELLIPSE, (side, side))


def close_raster(raster: RasterWindow, element: np.ndarray) -> RasterWindow:
    """Apply a morphological closing, returning a new raster window.

    Pixels outside the raster count as background, so the closed spot
    never grows beyond its convex hull.
    """
    my, mx = element.shape[0] // 2, element.shape[1] // 2
    padded = cv2.copyMakeBorder(raster.pixels, my, my, mx, mx, cv2.BORDER_CONSTANT, value=0)
    closed = cv2.morphologyEx(padded, cv2.MORPH_CLOSE, element)
    return RasterWindow(
        pixels=closed[my : my + raster.height, mx : mx + raster.width].copy(),
        x=raster.x,
        y=raster.y,
    )


def inject_raster(target: RasterWindow, source: RasterWindow) -> None:
    """Copy the foreground of ``source`` into ``target`` at its offset.

    Args:
        target: Shared raster, modified in place.
        source: Raster to inject; must lie within ``target``'s bounds.

    Raises:
        ValueError: If ``source`` does not fit inside ``target``.
    """
    dx = source.x - target.x
    dy = source.y - target.y
    if (
        dx < 0
        or dy < 0
        or dx + source.width > target.width
        or dy + source.height > target.height
    ):
        raise ValueError(
            f"Raster at ({source.x},{source.y}) does not fit into target "
            f"at ({target.x},{target.y}) {target.width}x{target.height}"
        )
    window = target.pixels[dy : dy + source.height, dx : dx + source.width]
    np.maximum(window, source.pixels, out=window)
