"""
Visualization functions for black-head building.

This module gathers the debug views of the pipeline: spots colored by
shape, head candidates with their pitch over the page, staff lines with
their ledgers, and the distribution of the candidate grades.
"""

import cv2
import numpy as np
from collections.abc import Sequence
from matplotlib.figure import Figure

from black_heads.models.core_models import HeadCandidate, Shape, Spot
from black_heads.staff import StaffInfo

SHAPE_COLORS = {
    Shape.BEAM_SPOT: (160, 160, 160),
    Shape.BEAM: (0, 0, 255),
    Shape.HEAD_SPOT: (255, 165, 0),
    Shape.NOTEHEAD_BLACK: (0, 160, 0),
}


def create_binary_visualization(binary_mask: np.ndarray | None) -> np.ndarray | None:
    """Convert a binary mask to RGB format for display.

    Args:
        binary_mask: 2D binary image array, or None.

    Returns:
        3-channel RGB version of the binary mask, or None if input is None.
    """
    if binary_mask is None:
        return None
    return cv2.cvtColor(binary_mask, cv2.COLOR_GRAY2RGB)


def create_spot_visualization(
    image_shape: tuple[int, int], spots: Sequence[Spot]
) -> np.ndarray | None:
    """Paint spots with one color per shape on a white canvas.

    Args:
        image_shape: Canvas dimensions as (height, width) in pixels.
        spots: Spots to paint, in absolute coordinates.

    Returns:
        RGB image as H×W×3 uint8 array, or None if there is no spot.
    """
    if not spots:
        return None

    h, w = image_shape
    canvas = np.full((h, w, 3), 255, np.uint8)
    for spot in spots:
        color = SHAPE_COLORS[spot.shape]
        for section in spot.sections:
            for x, start, length in section.run_keys():
                if 0 <= x < w:
                    canvas[max(0, start) : min(h, start + length), x] = color
    return canvas


def create_head_visualization(
    image: np.ndarray | None,
    candidates: Sequence[HeadCandidate],
    staves: Sequence[StaffInfo] = (),
) -> np.ndarray | None:
    """Overlay head candidates and staff lines on a page image.

    Candidate bounds are drawn as green rectangles labelled with their
    pitch, staff lines in red and ledgers in blue.

    Args:
        image: Page image, grayscale or RGB, or None.
        candidates: Head candidates to draw.
        staves: Staves to draw.

    Returns:
        RGB overlay image, or None if image is None.
    """
    if image is None:
        return None

    viz = cv2.cvtColor(image, cv2.COLOR_GRAY2RGB) if image.ndim == 2 else image.copy()

    for staff in staves:
        for ly in staff.lines:
            cv2.line(viz, (staff.left, int(ly)), (staff.right, int(ly)), (255, 0, 0), 1)
        for ledger in staff.ledgers:
            y = int(ledger.y)
            cv2.line(viz, (ledger.left, y), (ledger.right, y), (0, 0, 255), 1)

    for candidate in candidates:
        box = candidate.bounds
        cv2.rectangle(viz, (box.x, box.y), (box.right, box.bottom), (0, 160, 0), 1)
        cv2.putText(
            viz,
            str(candidate.pitch),
            (box.x, box.y - 2),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.3,
            (0, 160, 0),
            1,
        )
    return viz


def create_grade_histogram(
    candidates: Sequence[HeadCandidate],
    *,
    bins: int = 20,
    min_grade: float | None = None,
    dpi: int = 100,
) -> Figure:
    """Plot the distribution of candidate grades and impacts.

    Args:
        candidates: Head candidates to summarize.
        bins: Number of histogram bins over [0, 1].
        min_grade: Acceptance threshold to mark with a vertical line.
        dpi: Figure resolution.

    Returns:
        Matplotlib Figure with one histogram per grade kind, or a figure
        with a "No head candidates" message if candidates is empty.
    """
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    if not candidates:
        fig, ax = plt.subplots(figsize=(6, 2), dpi=dpi)
        ax.text(
            0.5, 0.5, "No head candidates", ha="center", va="center", transform=ax.transAxes
        )
        ax.axis("off")
        return fig

    series = {
        "grade": [c.grade for c in candidates],
        "shape": [c.impacts.shape for c in candidates],
        "pitch": [c.impacts.pitch for c in candidates],
    }
    fig, axes = plt.subplots(1, len(series), figsize=(4 * len(series), 3), dpi=dpi)
    for ax, (name, values) in zip(axes, series.items()):
        ax.hist(values, bins=bins, range=(0.0, 1.0), color="tab:green", edgecolor="black")
        ax.set_title(name, fontsize=10)
        ax.set_xlim(0.0, 1.0)
        if name == "grade" and min_grade is not None:
            ax.axvline(min_grade, color="red", linewidth=1)

    fig.tight_layout()
    return fig
