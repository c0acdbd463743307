import numpy as np

from black_heads.models.core_models import RasterWindow
from black_heads.runs import extract_spots
from black_heads.staff import NotePosition


class FixedClassifier:
    """Shape classifier returning the same grade for every spot."""

    def __init__(self, grade):
        self.grade = grade
        self.calls = 0

    def evaluate(self, spot, shape):
        self.calls += 1
        return self.grade


class FailingClassifier:
    def evaluate(self, spot, shape):
        raise RuntimeError("classifier offline")


class FlakyClassifier:
    """Shape classifier that goes offline after a number of calls."""

    def __init__(self, grade, fail_after):
        self.grade = grade
        self.fail_after = fail_after
        self.calls = 0

    def evaluate(self, spot, shape):
        self.calls += 1
        if self.calls > self.fail_after:
            raise RuntimeError("classifier offline")
        return self.grade


class FixedStaff:
    """Staff geometry answering one note position for every point."""

    def __init__(self, pitch_position, ledger=None, lines=5):
        self.position = NotePosition(pitch_position=pitch_position, ledger=ledger)
        self.lines = lines

    def note_position(self, point):
        return self.position

    def dmz_end(self):
        return 0

    def line_count(self):
        return self.lines


class FixedSystem:
    def __init__(self, staff):
        self.staff = staff

    def staff_at(self, point):
        return self.staff


def spot_from(pixels, x=0, y=0, domain=None):
    """Extract the single spot drawn in ``pixels`` at origin (x, y)."""
    raster = RasterWindow(pixels=(np.asarray(pixels) > 0).astype(np.uint8) * 255, x=x, y=y)
    spots = extract_spots(raster, domain)
    assert len(spots) == 1
    return spots[0]


def filled(h, w):
    return np.full((h, w), 255, dtype=np.uint8)
