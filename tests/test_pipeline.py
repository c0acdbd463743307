import numpy as np
import cv2
import pytest

import black_heads.pipeline as pipeline
from black_heads.errors import StructuralError
from black_heads.models.core_models import Shape
from black_heads.models.pipeline_models import HeadsResult, SheetResult
from black_heads.pipeline import (
    build_sheet_heads,
    build_system_heads,
    dispatch_spots,
    retrieve_page_spots,
)
from black_heads.sheet import Sheet
from black_heads.staff import StaffInfo

from helpers import FixedClassifier, FlakyClassifier, filled, spot_from


def _staff(top):
    return StaffInfo(id=1, lines=[top + 10 * i for i in range(5)], right=400, dmz_end_x=50)


@pytest.fixture
def page():
    # White page with one black 11x11 head on each staff middle line
    img = np.full((400, 400), 255, dtype=np.uint8)
    cv2.rectangle(img, (100, 115), (110, 125), 0, -1)
    cv2.rectangle(img, (150, 315), (160, 325), 0, -1)
    return img


@pytest.fixture
def sheet(scale):
    sheet = Sheet(scale)
    sheet.add_system([_staff(100)])
    sheet.add_system([_staff(300)])
    return sheet


def test_retrieve_page_spots(sheet, page):
    spots = retrieve_page_spots(page, 128, sheet)
    assert [s.weight for s in spots] == [121, 121]
    assert all(s.shape == Shape.BEAM_SPOT for s in spots)
    assert all(sec.domain == "spot" for s in spots for sec in s.sections)


def test_dispatch_spots(sheet, page):
    dispatch_spots(sheet, retrieve_page_spots(page, 128, sheet))
    assert [len(system.spots) for system in sheet.systems] == [1, 1]
    assert sheet.systems[1].spots[0].bounds.y == 315


def test_dispatch_without_staff(scale):
    sheet = Sheet(scale)
    sheet.add_system([])
    with pytest.raises(ValueError):
        dispatch_spots(sheet, [spot_from(filled(3, 3))])


def test_build_system_heads(sheet, page):
    dispatch_spots(sheet, retrieve_page_spots(page, 128, sheet))
    result = build_system_heads(sheet.systems[0], FixedClassifier(90))
    assert isinstance(result, HeadsResult)
    assert [c.pitch for c in result.candidates] == [0]


@pytest.mark.parametrize("max_workers", [1, 2])
def test_build_sheet_heads(sheet, page, max_workers):
    dispatch_spots(sheet, retrieve_page_spots(page, 128, sheet))
    result = build_sheet_heads(sheet, FixedClassifier(90), max_workers=max_workers)
    assert isinstance(result, SheetResult)
    assert sorted(result.systems) == [1, 2]
    assert result.failures == {}
    assert [c.pitch for c in result.candidates] == [0, 0]
    assert result.candidates[1].bounds.x == 149


def test_failing_system_is_isolated(sheet, page, scale):
    dispatch_spots(sheet, retrieve_page_spots(page, 128, sheet))
    # A system without staff cannot locate its spots
    broken = sheet.add_system([], spots=[spot_from(filled(11, 11), x=200, y=200)])

    result = build_sheet_heads(sheet, FixedClassifier(90))
    assert sorted(result.systems) == [1, 2]
    assert list(result.failures) == [broken.id]
    assert len(result.candidates) == 2


def test_classifier_failure_records_no_head(scale):
    img = np.full((200, 400), 255, dtype=np.uint8)
    cv2.rectangle(img, (100, 115), (110, 125), 0, -1)
    cv2.rectangle(img, (200, 115), (210, 125), 0, -1)
    sheet = Sheet(scale)
    system = sheet.add_system([_staff(100)])
    dispatch_spots(sheet, retrieve_page_spots(img, 128, sheet))

    result = build_sheet_heads(sheet, FlakyClassifier(90, fail_after=1))
    assert list(result.failures) == [system.id]
    assert len(system.sig) == 0
    assert all(spot.shape != Shape.NOTEHEAD_BLACK for spot in system.spots)


def test_structural_error_aborts_sheet(sheet, monkeypatch):
    def broken(system, classifier, settings=None):
        raise StructuralError("shared section")

    monkeypatch.setattr(pipeline, "build_system_heads", broken)
    with pytest.raises(StructuralError):
        build_sheet_heads(sheet, FixedClassifier(90))
