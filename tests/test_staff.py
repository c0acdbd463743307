import pytest

from black_heads.models.core_models import Point
from black_heads.staff import IndexedLedger, StaffInfo, ledger_pitch_position


@pytest.mark.parametrize(
    "index, line_count, expected",
    [(1, 5, 6.0), (-1, 5, -6.0), (2, 5, 8.0), (-3, 5, -10.0), (1, 3, 4.0)],
)
def test_ledger_pitch_position(index, line_count, expected):
    assert ledger_pitch_position(index, line_count) == expected


def test_staff_properties(staff):
    assert staff.line_count() == 5
    assert staff.interline == pytest.approx(10.0)
    assert staff.dmz_end() == 50
    assert staff.ledger_pitch_position(-1) == -6.0


@pytest.mark.parametrize(
    "y, expected",
    [(120, 0.0), (100, -4.0), (105, -3.0), (137.5, 3.5), (150, 6.0), (90, -6.0)],
)
def test_pitch_position(staff, y, expected):
    assert staff.pitch_position(Point(x=200, y=y)) == pytest.approx(expected)


def test_note_position_finds_covering_ledger():
    staff = StaffInfo(
        id=1,
        lines=[100, 110, 120, 130, 140],
        right=400,
        ledgers=[
            IndexedLedger(index=1, y=150, left=90, right=130),
            IndexedLedger(index=2, y=160, left=90, right=130),
            IndexedLedger(index=-1, y=90, left=90, right=130),
        ],
    )
    position = staff.note_position(Point(x=110, y=161))
    assert position.ledger.index == 2
    assert position.pitch_position == pytest.approx(8.2)

    assert staff.note_position(Point(x=110, y=150)).ledger.index == 1
    assert staff.note_position(Point(x=200, y=150)).ledger is None
    assert staff.note_position(Point(x=110, y=120)).ledger is None


def test_note_position_str(staff):
    assert str(staff.note_position(Point(x=0, y=120))) == "pitch:0.00 ledger:none"


def test_distance_to(staff):
    assert staff.distance_to(Point(x=0, y=120)) == 0.0
    assert staff.distance_to(Point(x=0, y=90)) == pytest.approx(10.0)
    assert staff.distance_to(Point(x=0, y=145)) == pytest.approx(5.0)
