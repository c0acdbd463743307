"""
Pipeline processing functions for black-head building on a whole sheet.

This module retrieves the spots of a page image, dispatches them to the
systems of the sheet, and runs the black-head builder on every system.
Systems are independent: a system whose collaborators fail is recorded
as a failure while the other systems are still processed.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from black_heads.builder import BlackHeadsBuilder
from black_heads.classifier import ShapeClassifier
from black_heads.errors import CollaboratorError, StructuralError
from black_heads.image_processing import binarize
from black_heads.models.core_models import RasterWindow, Shape, Spot
from black_heads.models.pipeline_models import HeadsResult, SheetResult
from black_heads.models.settings_models import BuilderSettings
from black_heads.runs import extract_spots
from black_heads.sheet import Sheet, SystemInfo

logger = logging.getLogger(__name__)


def retrieve_page_spots(image: np.ndarray, threshold_value: int, sheet: Sheet) -> list[Spot]:
    """Binarize a page image and extract its spots in the sheet spot domain.

    Args:
        image: Grayscale or BGR page image.
        threshold_value: Binarization threshold (0-255).
        sheet: The sheet owning the spot domain.

    Returns:
        Unregistered spots, tagged as generic beam spots.
    """
    binary = binarize(image, threshold_value)
    spots = extract_spots(RasterWindow(pixels=binary), sheet.spot_domain)
    for spot in spots:
        spot.shape = Shape.BEAM_SPOT
    logger.info(f"Page spots: {len(spots)}")
    return spots


def dispatch_spots(sheet: Sheet, spots: list[Spot]) -> None:
    """Add each spot to the system of its closest staff.

    Raises:
        ValueError: If the sheet has no staff at all.
    """
    if not any(system.staves for system in sheet.systems):
        raise ValueError("Sheet has no staff to dispatch spots to")

    for spot in spots:
        centroid = spot.centroid
        system = min(
            (system for system in sheet.systems if system.staves),
            key=lambda s: s.staff_at(centroid).distance_to(centroid),
        )
        system.add_spot(spot)


def build_system_heads(
    system: SystemInfo,
    classifier: ShapeClassifier,
    settings: BuilderSettings | None = None,
) -> HeadsResult:
    """Build the black heads of one system.

    Args:
        system: The system to process.
        classifier: Shape classifier.
        settings: Builder configuration.

    Returns:
        HeadsResult of the system.
    """
    builder = BlackHeadsBuilder(system, classifier, settings)
    return builder.build_black_heads()


def build_sheet_heads(
    sheet: Sheet,
    classifier: ShapeClassifier,
    settings: BuilderSettings | None = None,
    max_workers: int = 1,
) -> SheetResult:
    """Build the black heads of every system of a sheet.

    Args:
        sheet: The sheet to process.
        classifier: Shape classifier shared by all systems.
        settings: Builder configuration.
        max_workers: Number of systems processed concurrently.

    Returns:
        SheetResult with per-system results and failures.

    Raises:
        StructuralError: On an inconsistent spot or run geometry, which
                         aborts the whole sheet.
    """
    result = SheetResult()

    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                (system, executor.submit(build_system_heads, system, classifier, settings))
                for system in sheet.systems
            ]
            for system, future in futures:
                _collect(result, system, future.result)
    else:
        for system in sheet.systems:
            _collect(result, system, lambda: build_system_heads(system, classifier, settings))

    logger.info(
        f"Sheet black heads: {len(result.candidates)} in {len(result.systems)} systems,"
        f" {len(result.failures)} failed"
    )
    return result


def _collect(result: SheetResult, system: SystemInfo, outcome) -> None:
    try:
        result.systems[system.id] = outcome()
    except StructuralError:
        logger.error(f"Structural error in S#{system.id}, aborting sheet")
        raise
    except CollaboratorError as e:
        logger.error(f"Error in S#{system.id} black heads: {str(e)}")
        result.failures[system.id] = str(e)
